from typing import Iterable, List, Optional

from .dtos import CartDTO, LineItemDTO
from .models import Cart, CartItem


class CartItemMapper:
    @staticmethod
    def to_dto(item: CartItem) -> LineItemDTO:
        return LineItemDTO(
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            image=item.image,
        )

    def many_to_dto(self, items: Iterable[CartItem]) -> List[LineItemDTO]:
        return [self.to_dto(i) for i in items]


class CartMapper:
    def __init__(self, item_mapper: Optional[CartItemMapper] = None) -> None:
        self.item_mapper = item_mapper or CartItemMapper()

    def to_dto(self, cart: Cart, items: Optional[Iterable[CartItem]] = None) -> CartDTO:
        if items is None:
            items = cart.items.all()
        return CartDTO(
            owner_key=cart.owner_key,
            items=self.item_mapper.many_to_dto(items),
            total_price=cart.total_price,
        )

    def many_to_dto(self, carts: Iterable[Cart]) -> List[CartDTO]:
        return [self.to_dto(c) for c in carts]
