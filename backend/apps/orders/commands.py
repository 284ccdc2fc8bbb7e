from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import Order


@dataclass
class OrderStatusCommand:
    order_id: int
    status: str

    @staticmethod
    def allowed() -> List[str]:
        return list(Order.Status.values)

    @staticmethod
    def from_raw(order_id: int, payload: Dict[str, Any]) -> Optional["OrderStatusCommand"]:
        raw = (payload or {}).get("status")
        if not isinstance(raw, str):
            return None
        value = raw.strip().lower()
        if value not in Order.Status.values:
            return None
        return OrderStatusCommand(order_id=order_id, status=value)
