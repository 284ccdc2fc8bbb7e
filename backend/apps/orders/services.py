from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Type

from django.db import transaction
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.api.utils import ServiceError
from apps.common import get_logger
from .commands import OrderStatusCommand
from .dtos import OrderDTO
from .mappers import OrderMapper
from .protocols import OrderItemRepositoryProtocol, OrderRepositoryProtocol

logger = get_logger(__name__).bind(component="orders", layer="service")


class OrderService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        order_items: OrderItemRepositoryProtocol,
        mapper: Optional[OrderMapper] = None,
    ):
        self.orders = orders
        self.order_items = order_items
        self.mapper = mapper or OrderMapper()
        self.logger = logger.bind(service="OrderService")

    def place_order(
        self,
        *,
        account_id: int,
        owner_key: str,
        items: List[Any],
        total_price: Decimal,
    ) -> OrderDTO:
        """Persist a pending order whose lines copy ``items`` one to one.

        Joins the caller's transaction when there is one, so a cart checkout
        either creates the order and empties the cart or does neither.
        """
        with transaction.atomic():
            order = self.orders.create(
                account_id=account_id,
                owner_key=owner_key,
                total_price=total_price,
            )
            created = [
                self.order_items.create(
                    order=order,
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image=item.image,
                    position=index,
                )
                for index, item in enumerate(items)
            ]
        self.logger.info(
            "Order placed",
            order_id=order.id,
            account_id=account_id,
            lines=len(created),
            total_price=str(total_price),
        )
        return self.mapper.to_dto(order, created)

    def list_orders_paginated(
        self,
        request,
        *,
        account_id: int,
        paginator_class: Optional[Type[PageNumberPagination]] = None,
        serializer_class=None,
        view=None,
    ):
        paginator = (paginator_class or PageNumberPagination)()
        queryset = self.orders.list_for_account(account_id)
        page = paginator.paginate_queryset(queryset, request, view=view)
        data_source = page if page is not None else queryset
        dtos = self.mapper.many_to_dto(data_source)
        if serializer_class is None:
            from .serializers import OrderReadSerializer  # Avoid circular import

            serializer_class = OrderReadSerializer
        serializer = serializer_class(dtos, many=True)
        self.logger.debug("Listed order history", account_id=account_id, count=len(dtos))
        if page is None:
            return Response(serializer.data)
        return paginator.get_paginated_response(serializer.data)

    def get_order_with_access(
        self, order_id: int, actor_id: Optional[int], is_privileged: bool
    ) -> Tuple[Optional[OrderDTO], Optional[ServiceError]]:
        order = self.orders.get(id=order_id)
        if not order:
            self.logger.info("Order not found", order_id=order_id)
            return None, ("NOT_FOUND", "Order not found", {"id": str(order_id)})
        if not is_privileged and order.account_id != actor_id:
            # Other accounts' orders look the same as missing ones
            self.logger.warning(
                "Order access denied", order_id=order_id, actor_id=actor_id
            )
            return None, ("NOT_FOUND", "Order not found", {"id": str(order_id)})
        return self.mapper.to_dto(order), None

    def update_status(
        self, order_id: int, payload: Dict[str, Any]
    ) -> Tuple[Optional[OrderDTO], Optional[ServiceError]]:
        command = OrderStatusCommand.from_raw(order_id, payload)
        if command is None:
            self.logger.info("Rejected order status", order_id=order_id, payload=payload)
            return None, (
                "VALIDATION_ERROR",
                "status must be one of: " + ", ".join(OrderStatusCommand.allowed()),
                {"status": (payload or {}).get("status")},
            )
        order = self.orders.get(id=order_id)
        if not order:
            return None, ("NOT_FOUND", "Order not found", {"id": str(order_id)})
        previous = order.status
        order = self.orders.update(order, status=command.status)
        self.logger.info(
            "Order status changed",
            order_id=order_id,
            previous=previous,
            status=command.status,
        )
        return self.mapper.to_dto(order), None
