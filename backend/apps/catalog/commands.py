from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict


@dataclass
class ProductCreateCommand:
    name: str
    price: Decimal
    description: str
    image: str
    stock: int = 0

    @staticmethod
    def from_raw(payload: Dict[str, Any]):
        data = dict(payload or {})
        # ids are server-assigned
        data.pop("id", None)
        try:
            price = Decimal(str(data.get("price", "0")))
        except (InvalidOperation, ValueError):
            price = Decimal("0")
        try:
            stock = max(int(data.get("stock", 0)), 0)
        except (TypeError, ValueError):
            stock = 0
        return ProductCreateCommand(
            name=str(data.get("name", "")).strip(),
            price=price,
            description=str(data.get("description", "")).strip(),
            image=str(data.get("image", "")).strip(),
            stock=stock,
        )
