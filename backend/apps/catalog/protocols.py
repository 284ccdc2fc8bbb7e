from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

from .models import Product


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Product]:
        ...

    def list(self, **filters) -> Iterable[Product]:
        ...

    def search(self, query: str) -> Iterable[Product]:
        ...

    def create(self, **data) -> Product:
        ...


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...
