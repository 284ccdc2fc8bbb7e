from __future__ import annotations

from .mappers import OrderMapper
from .repositories import OrderItemRepository, OrderRepository
from .services import OrderService


def build_order_service() -> OrderService:
    return OrderService(
        orders=OrderRepository(),
        order_items=OrderItemRepository(),
        mapper=OrderMapper(),
    )
