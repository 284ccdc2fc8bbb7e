from apps.common.repository import GenericRepository
from .models import Order, OrderItem


class OrderRepository(GenericRepository[Order]):
    def __init__(self):
        super().__init__(Order)

    def _base_queryset(self):
        return self.model.objects.prefetch_related("items")

    def get(self, **filters):
        return self._base_queryset().filter(**filters).first()

    def list_for_account(self, account_id: int):
        return self._base_queryset().filter(account_id=account_id).order_by("-created_at", "-id")


class OrderItemRepository(GenericRepository[OrderItem]):
    def __init__(self):
        super().__init__(OrderItem)
