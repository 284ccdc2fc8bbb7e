from __future__ import annotations

from apps.catalog.container import build_product_service
from apps.orders.container import build_order_service

from .mappers import CartItemMapper, CartMapper
from .repositories import CartItemRepository, CartRepository
from .services import CartService


def build_cart_service() -> CartService:
    return CartService(
        carts=CartRepository(),
        cart_items=CartItemRepository(),
        # Snapshots always come from the database, never the product cache
        products=build_product_service(disable_cache=True),
        orders=build_order_service(),
        cart_mapper=CartMapper(CartItemMapper()),
    )
