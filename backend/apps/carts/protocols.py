from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Protocol, TYPE_CHECKING

from .models import Cart, CartItem

if TYPE_CHECKING:
    from apps.carts.dtos import CartDTO, LineItemDTO
    from apps.catalog.dtos import ProductSnapshot
    from apps.orders.dtos import OrderDTO


class CartRepositoryProtocol(Protocol):
    def list(self, **filters) -> Iterable[Cart]:
        ...

    def get(self, **filters) -> Optional[Cart]:
        ...

    def get_for_update(self, owner_key: str) -> Optional[Cart]:
        ...

    def create_for_owner(self, owner_key: str) -> Cart:
        ...

    def update(self, cart: Cart, **data) -> Cart:
        ...

    def delete(self, cart: Cart) -> None:
        ...


class CartItemRepositoryProtocol(Protocol):
    def list_for_cart(self, cart: Cart) -> List[CartItem]:
        ...

    def get_for_cart_product(self, cart: Cart, product_id: str) -> Optional[CartItem]:
        ...

    def create(self, **data) -> CartItem:
        ...

    def update(self, item: CartItem, **data) -> CartItem:
        ...

    def delete(self, item: CartItem) -> None:
        ...

    def delete_for_cart(self, cart: Cart) -> None:
        ...


class ProductSnapshotProviderProtocol(Protocol):
    def get_snapshot(self, product_id: str) -> Optional["ProductSnapshot"]:
        ...


class OrderPlacerProtocol(Protocol):
    def place_order(
        self,
        *,
        account_id: int,
        owner_key: str,
        items: List["LineItemDTO"],
        total_price: Decimal,
    ) -> "OrderDTO":
        ...


class CartMapperProtocol(Protocol):
    def to_dto(self, cart: Cart, items: Optional[Iterable[CartItem]] = None) -> "CartDTO":
        ...

    def many_to_dto(self, carts: Iterable[Cart]) -> List["CartDTO"]:
        ...
