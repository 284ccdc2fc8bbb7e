from django.urls import path, include

urlpatterns = [
    path("products/", include("apps.catalog.urls")),
    path("carts/", include("apps.carts.urls")),
    path("orders/", include("apps.orders.urls")),
    path("auth/", include("apps.auth.urls")),
]
