import json

from apps.common import get_logger
from .models import Cart
from .storage import LocalStorage

logger = get_logger(__name__).bind(component="cartclient", layer="cache")

CART_CACHE_KEY = "localCart"


class CartCache:
    """Best-effort local copy of the last known cart.

    Missing or unreadable entries load as an empty cart; nothing here raises.
    """

    def __init__(self, storage: LocalStorage, key: str = CART_CACHE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Cart:
        raw = self.storage.get(self.key)
        if not raw:
            logger.debug("No cached cart")
            return Cart.empty()
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("cached cart is not an object")
            return Cart.from_dict(data)
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            logger.warning("Discarding corrupt cached cart", error=str(exc))
            return Cart.empty()

    def save(self, cart: Cart) -> None:
        self.storage.set(self.key, json.dumps(cart.to_dict()))
        logger.debug("Cart cached", owner_key=cart.owner_key, items=len(cart.items), provisional=cart.provisional)

    def clear(self) -> None:
        self.storage.remove(self.key)
