import secrets

from django.db import models


def generate_product_id() -> str:
    """24-character lowercase hex, the opaque id format carts validate."""
    return secrets.token_hex(12)


class Product(models.Model):
    id = models.CharField(
        primary_key=True, max_length=24, default=generate_product_id, editable=False
    )
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.TextField(blank=True, default="")
    image = models.TextField(blank=True, default="")
    # Informative only; carts and checkout do not reserve stock
    stock = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return self.name
