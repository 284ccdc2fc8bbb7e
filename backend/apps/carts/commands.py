from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apps.common.keys import is_valid_product_id, normalize_product_id


def _parse_quantity(raw: Any, default: int) -> Optional[int]:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@dataclass
class AddItemCommand:
    owner_key: str
    product_id: str
    quantity: int

    @staticmethod
    def from_raw(owner_key: str, payload: Dict[str, Any]) -> Optional["AddItemCommand"]:
        """None when the payload has no usable product id or positive quantity."""
        if not isinstance(payload, dict):
            return None
        pid = payload.get("productId") or payload.get("product_id")
        if not is_valid_product_id(pid):
            return None
        qty = _parse_quantity(payload.get("quantity"), default=1)
        if qty is None or qty <= 0:
            return None
        return AddItemCommand(
            owner_key=owner_key, product_id=normalize_product_id(pid), quantity=qty
        )


@dataclass
class UpdateQuantityCommand:
    owner_key: str
    product_id: str
    # <= 0 means remove the line
    quantity: int

    @staticmethod
    def from_raw(
        owner_key: str, product_id: str, payload: Dict[str, Any]
    ) -> Optional["UpdateQuantityCommand"]:
        if not isinstance(payload, dict):
            return None
        qty = _parse_quantity(payload.get("quantity"), default=None)
        if qty is None:
            return None
        return UpdateQuantityCommand(
            owner_key=owner_key,
            product_id=normalize_product_id(product_id),
            quantity=qty,
        )


@dataclass
class RemoveItemsCommand:
    owner_key: str
    product_ids: List[str] = field(default_factory=list)

    @staticmethod
    def from_raw(owner_key: str, payload: Dict[str, Any]) -> "RemoveItemsCommand":
        raw_ids = (payload or {}).get("productIds") or []
        ids: List[str] = []
        for raw in raw_ids:
            if not is_valid_product_id(raw):
                continue
            pid = normalize_product_id(raw)
            if pid not in ids:
                ids.append(pid)
        return RemoveItemsCommand(owner_key=owner_key, product_ids=ids)
