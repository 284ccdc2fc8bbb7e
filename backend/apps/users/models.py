from django.contrib.auth.models import AbstractUser
from django.db import models

from apps.common.keys import account_key_for


class User(AbstractUser):
    # username, password, is_staff, is_superuser, ... inherited
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=50, blank=True, null=True)

    @property
    def cart_owner_key(self) -> str:
        """Owner key under which this account's cart is stored."""
        return account_key_for(self.pk)

    def __str__(self):
        return self.username
