from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from .models import Order, OrderItem


class OrderRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Order]:
        ...

    def list_for_account(self, account_id: int) -> Iterable[Order]:
        ...

    def create(self, **data) -> Order:
        ...

    def update(self, order: Order, **data) -> Order:
        ...


class OrderItemRepositoryProtocol(Protocol):
    def create(self, **data) -> OrderItem:
        ...
