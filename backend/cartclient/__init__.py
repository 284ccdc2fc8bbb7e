"""Async client-side cart for storefront UIs.

``build_cart_store()`` wires the pieces together; UI code holds the returned
``CartStore`` and its ``session``.
"""
from .container import build_cart_store
from .models import Cart, LineItem, Order, ProductSnapshot
from .reconcile import MergeResult
from .remote import (
    CartItemNotFound,
    CartNotFound,
    CartStoreError,
    CartStoreUnavailable,
    EmptyCart,
    InvalidCartRequest,
    Unauthenticated,
)
from .session import SessionState, SessionTransition
from .store import CartStore

__all__ = [
    "build_cart_store",
    "Cart",
    "CartItemNotFound",
    "CartNotFound",
    "CartStore",
    "CartStoreError",
    "CartStoreUnavailable",
    "EmptyCart",
    "InvalidCartRequest",
    "LineItem",
    "MergeResult",
    "Order",
    "ProductSnapshot",
    "SessionState",
    "SessionTransition",
    "Unauthenticated",
]
