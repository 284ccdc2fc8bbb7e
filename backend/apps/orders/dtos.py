from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class OrderItemDTO:
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image: Optional[str] = None


@dataclass
class OrderDTO:
    id: int
    account_id: int
    owner_key: str
    status: str
    total_price: Decimal
    created_at: Optional[datetime] = None
    items: List[OrderItemDTO] = field(default_factory=list)
