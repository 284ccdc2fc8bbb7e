from typing import Any, Dict, Optional

from django.http import HttpRequest
from rest_framework.exceptions import AuthenticationFailed as DRFAuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from apps.api.utils import error_response
from apps.common import get_logger
from apps.common.keys import (
    account_id_from_key,
    is_account_key,
    is_valid_owner_key,
)

logger = get_logger(__name__).bind(component="api", layer="validation")

_jwt_authenticator = JWTAuthentication()

# Views addressed by an owner key in the URL
CART_OWNER_VIEWS = (
    "CartDetailView",
    "CartItemsView",
    "CartItemDetailView",
    "CartBulkRemoveView",
    "CartClearView",
)


def _is_authenticated_user(request: HttpRequest) -> bool:
    user = getattr(request, "user", None)
    if user and getattr(user, "is_authenticated", False) and getattr(user, "id", None):
        return True

    # DRF authenticates later in the request lifecycle; this middleware runs
    # first, so bearer tokens are checked here directly.
    meta = getattr(request, "META", {}) or {}
    auth_header = meta.get("HTTP_AUTHORIZATION") if hasattr(meta, "get") else None
    if not auth_header:
        return False

    try:
        authenticated = _jwt_authenticator.authenticate(request)
    except (InvalidToken, DRFAuthenticationFailed) as exc:
        logger.warning("JWT authentication failed", detail=str(exc))
        return False

    if not authenticated:
        return False

    user, token = authenticated
    if not getattr(user, "is_authenticated", False) or not getattr(user, "id", None):
        return False

    request.user = user
    request.auth = token
    request.is_privileged_user = _is_privileged_user(user)
    logger.debug("Authenticated user from bearer token", user_id=user.id)
    return True


def _set_validated_user(request: HttpRequest, user_id: Optional[int]) -> None:
    request.validated_user_id = user_id
    request.is_privileged_user = _is_privileged_user(getattr(request, "user", None))


def _is_privileged_user(user: Any) -> bool:
    return bool(getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))


def _require_staff(request: HttpRequest, view_name: str, message: str) -> Any:
    if not _is_authenticated_user(request):
        logger.warning("Staff endpoint requires authentication", view=view_name)
        return error_response("UNAUTHORIZED", "Authentication required")
    _set_validated_user(request, int(request.user.id))
    if not _is_privileged_user(request.user):
        logger.warning(
            "Staff endpoint forbidden", view=view_name, user_id=request.user.id
        )
        return error_response("FORBIDDEN", message)
    return None


def _validate_owner_key(request: HttpRequest, view_name: str, owner_key: Any) -> Any:
    """Check the owner key shape and who may address it.

    Anonymous keys are bearer identifiers: holding one is enough. Account keys
    are only reachable by that account or by staff.
    """
    if not is_valid_owner_key(owner_key):
        logger.warning("Malformed owner key", view=view_name, owner_key=owner_key)
        return error_response(
            "VALIDATION_ERROR", "Invalid owner key", {"ownerKey": str(owner_key)}
        )
    request.cart_owner_key = owner_key
    authenticated = _is_authenticated_user(request)
    actor_id = int(request.user.id) if authenticated else None
    _set_validated_user(request, actor_id)
    if not is_account_key(owner_key):
        request.cart_owner_account_id = None
        return None
    target_id = account_id_from_key(owner_key)
    request.cart_owner_account_id = target_id
    if not authenticated:
        logger.warning(
            "Account cart requires authentication", view=view_name, owner_key=owner_key
        )
        return error_response("UNAUTHORIZED", "Authentication required")
    if actor_id != target_id and not _is_privileged_user(request.user):
        logger.warning(
            "Account cart access forbidden",
            view=view_name,
            actor_id=actor_id,
            owner_key=owner_key,
        )
        return error_response(
            "FORBIDDEN",
            "You do not have permission to access this cart",
            {"ownerKey": owner_key},
        )
    return None


def _validate_checkout(request: HttpRequest, owner_key: Any) -> Any:
    if not is_valid_owner_key(owner_key):
        logger.warning("Malformed owner key for checkout", owner_key=owner_key)
        return error_response(
            "VALIDATION_ERROR", "Invalid owner key", {"ownerKey": str(owner_key)}
        )
    request.cart_owner_key = owner_key
    if not is_account_key(owner_key):
        logger.warning("Checkout attempted with anonymous owner key", owner_key=owner_key)
        return error_response(
            "UNAUTHORIZED",
            "Checkout requires a signed-in account",
            {"ownerKey": owner_key},
        )
    if not _is_authenticated_user(request):
        logger.warning("Checkout requires authentication", owner_key=owner_key)
        return error_response("UNAUTHORIZED", "Authentication required")
    actor_id = int(request.user.id)
    _set_validated_user(request, actor_id)
    target_id = account_id_from_key(owner_key)
    request.cart_owner_account_id = target_id
    if actor_id != target_id and not _is_privileged_user(request.user):
        logger.warning(
            "Checkout for another account rejected",
            actor_id=actor_id,
            owner_key=owner_key,
        )
        return error_response(
            "UNAUTHORIZED",
            "Checkout is only allowed for the signed-in account",
            {"ownerKey": owner_key},
        )
    return None


def _parse_order_id(view_kwargs: Dict[str, Any], view_name: str) -> Any:
    raw = view_kwargs.get("order_id")
    try:
        return int(raw), None
    except (TypeError, ValueError):
        logger.warning("Invalid order id", view=view_name, value=raw)
        return None, error_response(
            "VALIDATION_ERROR", "Invalid order identifier", {"orderId": str(raw)}
        )


def validate_request_context(request: HttpRequest, view_class, view_kwargs) -> Any:
    """
    Performs request level validation for specific API views.
    Returns a DRF Response when validation fails; otherwise None and
    attaches validated data to the request instance.
    """
    view_name = getattr(view_class, "__name__", "")
    method = getattr(request, "method", None)

    logger.debug("Running request context validation", view=view_name, method=method)

    if view_name == "CartListView":
        if method == "GET":
            return _require_staff(
                request, view_name, "You do not have permission to list carts"
            )
    elif view_name in CART_OWNER_VIEWS:
        resp = _validate_owner_key(request, view_name, view_kwargs.get("owner_key"))
        if resp:
            return resp
        logger.debug(
            "Validated cart owner context",
            view=view_name,
            owner_key=request.cart_owner_key,
            actor_id=getattr(request, "validated_user_id", None),
        )
    elif view_name == "CartCheckoutView":
        if method == "POST":
            return _validate_checkout(request, view_kwargs.get("owner_key"))
    elif view_name == "ProductListView":
        if method == "POST":
            return _require_staff(
                request, view_name, "You do not have permission to manage products"
            )
    elif view_name in ("OrderListView", "OrderDetailView"):
        if not _is_authenticated_user(request):
            logger.warning("Order view requires authentication", view=view_name)
            return error_response("UNAUTHORIZED", "Authentication required")
        _set_validated_user(request, int(request.user.id))
        if view_name == "OrderDetailView":
            order_id, resp = _parse_order_id(view_kwargs, view_name)
            if resp:
                return resp
            request.order_id = order_id
    elif view_name == "OrderStatusView":
        order_id, resp = _parse_order_id(view_kwargs, view_name)
        if resp:
            return resp
        request.order_id = order_id
        return _require_staff(
            request, view_name, "You do not have permission to manage orders"
        )
    elif view_name in ("MeView", "LogoutView"):
        if not _is_authenticated_user(request):
            logger.warning("Session view requires authentication", view=view_name)
            return error_response("UNAUTHORIZED", "Authentication required")
        _set_validated_user(request, int(request.user.id))

    return None
