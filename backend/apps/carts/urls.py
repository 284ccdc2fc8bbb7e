from django.urls import path

from .views import (
    CartBulkRemoveView,
    CartCheckoutView,
    CartClearView,
    CartDetailView,
    CartItemDetailView,
    CartItemsView,
    CartListView,
)

urlpatterns = [
    path("", CartListView.as_view(), name="api-carts-list"),
    path("<str:owner_key>/", CartDetailView.as_view(), name="api-carts-detail"),
    path("<str:owner_key>/items/", CartItemsView.as_view(), name="api-carts-items"),
    # Registered before the per-item route so "remove" is not read as a product id
    path(
        "<str:owner_key>/items/remove/",
        CartBulkRemoveView.as_view(),
        name="api-carts-items-remove",
    ),
    path(
        "<str:owner_key>/items/<str:product_id>/",
        CartItemDetailView.as_view(),
        name="api-carts-item-detail",
    ),
    path("<str:owner_key>/clear/", CartClearView.as_view(), name="api-carts-clear"),
    path(
        "<str:owner_key>/checkout/",
        CartCheckoutView.as_view(),
        name="api-carts-checkout",
    ),
]
