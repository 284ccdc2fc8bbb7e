from django.contrib.auth import get_user_model

from apps.common.keys import account_id_from_key
from apps.common.repository import GenericRepository
from .models import Cart, CartItem


class CartRepository(GenericRepository[Cart]):
    def __init__(self):
        super().__init__(Cart)

    def _base_queryset(self):
        return self.model.objects.prefetch_related("items")

    def list(self, **filters):
        return self._base_queryset().filter(**filters)

    def get(self, **filters):
        return self._base_queryset().filter(**filters).first()

    def get_for_update(self, owner_key: str):
        """Row-locked lookup; callers must be inside ``transaction.atomic``."""
        return self.model.objects.select_for_update().filter(owner_key=owner_key).first()

    def create_for_owner(self, owner_key: str) -> Cart:
        account_id = account_id_from_key(owner_key)
        if account_id is not None and not get_user_model().objects.filter(pk=account_id).exists():
            account_id = None
        # get_or_create absorbs a concurrent first add for the same key
        cart, _ = self.model.objects.get_or_create(
            owner_key=owner_key, defaults={"account_id": account_id}
        )
        return cart


class CartItemRepository(GenericRepository[CartItem]):
    def __init__(self):
        super().__init__(CartItem)

    def list_for_cart(self, cart: Cart):
        return list(self.model.objects.filter(cart=cart).order_by("position", "id"))

    def get_for_cart_product(self, cart: Cart, product_id: str):
        return self.model.objects.filter(cart=cart, product_id=product_id).first()

    def delete_for_cart(self, cart: Cart) -> None:
        self.model.objects.filter(cart=cart).delete()
