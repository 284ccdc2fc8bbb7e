from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass
class LineItemDTO:
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class CartDTO:
    owner_key: str
    items: List[LineItemDTO] = field(default_factory=list)
    total_price: Decimal = Decimal("0.00")
