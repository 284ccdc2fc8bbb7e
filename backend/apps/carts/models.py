from decimal import Decimal

from django.conf import settings
from django.db import models


class Cart(models.Model):
    """One cart per owner key; account carts also link to the user row."""

    owner_key = models.CharField(max_length=64, unique=True)
    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="carts",
    )
    total_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self):
        return f"Cart {self.owner_key}"


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    # Snapshot of the product at add time; not a foreign key
    product_id = models.CharField(max_length=24)
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()
    image = models.TextField(null=True, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        db_table = "cart_items"
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product_id"], name="cart_item_unique_product"
            ),
        ]

    def __str__(self):
        return f"{self.product_id} x{self.quantity}"
