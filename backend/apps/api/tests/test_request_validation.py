import types
from unittest.mock import patch

from rest_framework.test import APIRequestFactory

from apps.api.middleware import RequestValidationMiddleware
from apps.api.validation import validate_request_context
from apps.carts.views import (
    CartCheckoutView,
    CartDetailView,
    CartItemsView,
    CartListView,
)
from apps.catalog.views import ProductListView
from apps.orders.views import OrderDetailView, OrderStatusView

factory = APIRequestFactory()

ANON_KEY = "guest-1700000000000-0123456789ab"


def _user(user_id, staff=False):
    return types.SimpleNamespace(
        id=user_id, is_authenticated=True, is_staff=staff, is_superuser=False
    )


def test_anonymous_key_is_open_to_unauthenticated_callers():
    request = factory.get(f"/api/carts/{ANON_KEY}/")
    response = validate_request_context(request, CartDetailView, {"owner_key": ANON_KEY})
    assert response is None
    assert request.cart_owner_key == ANON_KEY
    assert request.validated_user_id is None


def test_malformed_owner_key_rejected():
    request = factory.get("/api/carts/not-a-key/")
    response = validate_request_context(request, CartDetailView, {"owner_key": "not-a-key"})
    assert response.status_code == 400
    assert response.data["error"]["details"] == {"ownerKey": "not-a-key"}


def test_account_key_requires_authentication():
    request = factory.post("/api/carts/42/items/", {}, format="json")
    response = validate_request_context(request, CartItemsView, {"owner_key": "42"})
    assert response.status_code == 401


def test_account_key_for_other_user_forbidden():
    request = factory.get("/api/carts/42/")
    request.user = _user(7)
    response = validate_request_context(request, CartDetailView, {"owner_key": "42"})
    assert response.status_code == 403


def test_account_key_for_self_allowed():
    request = factory.get("/api/carts/42/")
    request.user = _user(42)
    response = validate_request_context(request, CartDetailView, {"owner_key": "42"})
    assert response is None
    assert request.validated_user_id == 42
    assert request.cart_owner_account_id == 42


def test_staff_may_address_any_account_cart():
    request = factory.get("/api/carts/42/")
    request.user = _user(1, staff=True)
    response = validate_request_context(request, CartDetailView, {"owner_key": "42"})
    assert response is None
    assert request.is_privileged_user is True


def test_checkout_rejects_anonymous_key_as_unauthorized():
    request = factory.post(f"/api/carts/{ANON_KEY}/checkout/")
    response = validate_request_context(request, CartCheckoutView, {"owner_key": ANON_KEY})
    assert response.status_code == 401
    assert response.data["error"]["code"] == "UNAUTHORIZED"


def test_checkout_for_other_account_is_unauthorized():
    request = factory.post("/api/carts/42/checkout/")
    request.user = _user(7)
    response = validate_request_context(request, CartCheckoutView, {"owner_key": "42"})
    assert response.status_code == 401


def test_checkout_for_own_account_passes():
    request = factory.post("/api/carts/42/checkout/")
    request.user = _user(42)
    response = validate_request_context(request, CartCheckoutView, {"owner_key": "42"})
    assert response is None
    assert request.validated_user_id == 42


def test_cart_list_is_staff_only():
    request = factory.get("/api/carts/")
    request.user = _user(5)
    response = validate_request_context(request, CartListView, {})
    assert response.status_code == 403


def test_product_create_requires_staff():
    request = factory.post("/api/products/", {}, format="json")
    response = validate_request_context(request, ProductListView, {})
    assert response.status_code == 401


def test_order_status_requires_staff():
    request = factory.patch("/api/orders/3/status/", {"status": "paid"}, format="json")
    request.user = _user(5)
    response = validate_request_context(request, OrderStatusView, {"order_id": 3})
    assert response.status_code == 403


def test_order_detail_sets_order_id():
    request = factory.get("/api/orders/3/")
    request.user = _user(5)
    response = validate_request_context(request, OrderDetailView, {"order_id": "3"})
    assert response is None
    assert request.order_id == 3


def test_invalid_bearer_token_treated_as_anonymous():
    request = factory.get("/api/carts/42/", HTTP_AUTHORIZATION="Bearer not-a-token")
    response = validate_request_context(request, CartDetailView, {"owner_key": "42"})
    assert response.status_code == 401


def test_middleware_no_view_class_returns_none():
    middleware = RequestValidationMiddleware(lambda req: None)
    request = factory.get("/health/live")
    response = middleware.process_view(request, lambda req: req, [], {})
    assert response is None


def test_middleware_renders_blocked_response():
    middleware = RequestValidationMiddleware(lambda req: None)
    request = factory.get("/api/carts/bad/")
    view_func = CartDetailView.as_view()
    response = middleware.process_view(request, view_func, [], {"owner_key": "bad"})
    response.render()
    assert response.status_code == 400
    assert b"VALIDATION_ERROR" in response.content


def test_middleware_passes_through_when_valid():
    middleware = RequestValidationMiddleware(lambda req: None)
    request = factory.get(f"/api/carts/{ANON_KEY}/")
    with patch("apps.api.middleware.validate_request_context", return_value=None) as validate:
        response = middleware.process_view(
            request, CartDetailView.as_view(), [], {"owner_key": ANON_KEY}
        )
    assert response is None
    validate.assert_called_once()
