"""Client-side cart values and the local copy of the server's cart arithmetic.

Local mutations return new ``Cart`` objects; the instance held by the store
is only ever replaced, never edited in place.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    # JSON numbers arrive as floats; go through str to keep 4.5 as 4.5
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


@dataclass(frozen=True)
class ProductSnapshot:
    name: str
    price: Decimal
    image: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        return cls(
            product_id=str(data["productId"]),
            name=str(data.get("name") or ""),
            price=to_decimal(data.get("price")),
            quantity=int(data["quantity"]),
            image=data.get("image"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "image": self.image,
        }


def line_total(items: List[LineItem]) -> Decimal:
    return sum((item.subtotal for item in items), ZERO)


@dataclass(frozen=True)
class Cart:
    owner_key: Optional[str] = None
    items: List[LineItem] = field(default_factory=list)
    total_price: Decimal = ZERO
    # True while the value comes from local arithmetic the server has not confirmed
    provisional: bool = False

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    @classmethod
    def empty(cls, owner_key: Optional[str] = None) -> "Cart":
        return cls(owner_key=owner_key)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], provisional: Optional[bool] = None) -> "Cart":
        """Build from the wire/cache shape ``{ownerKey, items, totalPrice}``."""
        return cls(
            owner_key=data.get("ownerKey"),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
            total_price=to_decimal(data.get("totalPrice")),
            provisional=bool(data.get("provisional", False)) if provisional is None else provisional,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ownerKey": self.owner_key,
            "items": [i.to_dict() for i in self.items],
            "totalPrice": str(self.total_price),
            "provisional": self.provisional,
        }

    def with_added(self, product_id: str, quantity: int, snapshot: Optional[ProductSnapshot]) -> "Cart":
        """Merge into an existing line at its snapshot price, else append ``snapshot``.

        Returns ``self`` unchanged when the product is new and no snapshot is
        available to price it.
        """
        existing = self.find(product_id)
        if existing:
            items = [
                replace(i, quantity=i.quantity + quantity) if i.product_id == product_id else i
                for i in self.items
            ]
            total = self.total_price + existing.price * quantity
        elif snapshot is not None:
            line = LineItem(product_id, snapshot.name, to_decimal(snapshot.price), quantity, snapshot.image)
            items = self.items + [line]
            total = self.total_price + line.subtotal
        else:
            return self
        return replace(self, items=items, total_price=total, provisional=True)

    def without(self, product_ids: List[str]) -> "Cart":
        removed = [i for i in self.items if i.product_id in product_ids]
        items = [i for i in self.items if i.product_id not in product_ids]
        total = self.total_price - line_total(removed)
        return replace(self, items=items, total_price=total, provisional=True)

    def with_quantity(self, product_id: str, quantity: int) -> "Cart":
        if quantity <= 0:
            items = [i for i in self.items if i.product_id != product_id]
        else:
            items = [replace(i, quantity=quantity) if i.product_id == product_id else i for i in self.items]
        # Recomputed from scratch, as the server does
        return replace(self, items=items, total_price=line_total(items), provisional=True)

    def cleared(self) -> "Cart":
        return replace(self, items=[], total_price=ZERO, provisional=True)


@dataclass(frozen=True)
class Order:
    id: int
    status: str
    total_price: Decimal
    items: List[LineItem] = field(default_factory=list)
    owner_key: Optional[str] = None
    account_id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=int(data["id"]),
            status=str(data.get("status") or ""),
            total_price=to_decimal(data.get("totalPrice")),
            items=[LineItem.from_dict(i) for i in data.get("items") or []],
            owner_key=data.get("ownerKey"),
            account_id=data.get("accountId"),
            created_at=data.get("createdAt"),
        )
