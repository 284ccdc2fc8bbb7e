from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class ProductDTO:
    id: str
    name: str
    price: Decimal
    description: str
    image: str
    stock: int


@dataclass(frozen=True)
class ProductSnapshot:
    """Attributes copied onto a cart line when the product is added."""

    product_id: str
    name: str
    price: Decimal
    image: Optional[str] = None
