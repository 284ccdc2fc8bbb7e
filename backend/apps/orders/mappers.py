from typing import Iterable, List, Optional

from .dtos import OrderDTO, OrderItemDTO
from .models import Order, OrderItem


class OrderMapper:
    @staticmethod
    def item_to_dto(item: OrderItem) -> OrderItemDTO:
        return OrderItemDTO(
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            image=item.image,
        )

    def to_dto(self, order: Order, items: Optional[Iterable[OrderItem]] = None) -> OrderDTO:
        if items is None:
            items = order.items.all()
        return OrderDTO(
            id=order.id,
            account_id=order.account_id,
            owner_key=order.owner_key,
            status=order.status,
            total_price=order.total_price,
            created_at=order.created_at,
            items=[self.item_to_dto(i) for i in items],
        )

    def many_to_dto(self, orders: Iterable[Order]) -> List[OrderDTO]:
        return [self.to_dto(o) for o in orders]
