from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.schemas import ErrorResponseSerializer, paginated_response
from apps.common import get_logger
from apps.orders.serializers import OrderEnvelopeSerializer, OrderReadSerializer
from .container import build_cart_service
from .pagination import CartListPagination
from .serializers import (
    AddItemSerializer,
    CartReadSerializer,
    RemoveItemsSerializer,
    UpdateQuantitySerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="view")

OWNER_KEY_PARAM = OpenApiParameter(
    "owner_key",
    str,
    OpenApiParameter.PATH,
    description="Account id (digits) or anonymous id (guest-<epoch ms>-<12 hex>)",
)
PRODUCT_ID_PARAM = OpenApiParameter("product_id", str, OpenApiParameter.PATH)

CART_ERRORS = {
    400: OpenApiResponse(response=ErrorResponseSerializer),
    401: OpenApiResponse(response=ErrorResponseSerializer),
    403: OpenApiResponse(response=ErrorResponseSerializer),
    404: OpenApiResponse(response=ErrorResponseSerializer),
}


@extend_schema(tags=["Carts"])
class CartListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartListView")

    @extend_schema(
        summary="List carts (staff)",
        responses={
            200: paginated_response(CartReadSerializer),
            401: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        return self.service.list_carts_paginated(
            request,
            paginator_class=CartListPagination,
            serializer_class=CartReadSerializer,
            view=self,
        )


# Owner-key access rules are applied by RequestValidationMiddleware, so the
# views below accept anonymous callers.
@extend_schema(tags=["Carts"])
class CartDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartDetailView")

    @extend_schema(
        summary="Fetch cart",
        parameters=[OWNER_KEY_PARAM],
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def get(self, request, owner_key: str):
        dto = self.service.get_cart(owner_key)
        return Response(CartReadSerializer(dto).data)

    @extend_schema(
        summary="Discard cart",
        description="Deletes the cart for this owner key. Succeeds when no cart exists.",
        parameters=[OWNER_KEY_PARAM],
        responses={204: None, **CART_ERRORS},
    )
    def delete(self, request, owner_key: str):
        deleted = self.service.delete_cart(owner_key)
        self.log.info("Cart discard requested", owner_key=owner_key, deleted=deleted)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Carts"])
class CartItemsView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartItemsView")

    @extend_schema(
        summary="Add item",
        description=(
            "Creates the cart on first add. Adding a product already in the cart "
            "increases its quantity at the price captured when it was first added."
        ),
        parameters=[OWNER_KEY_PARAM],
        request=AddItemSerializer,
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def post(self, request, owner_key: str):
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = self.service.add_item(owner_key, dict(serializer.validated_data))
        return Response(CartReadSerializer(dto).data)


@extend_schema(tags=["Carts"])
class CartItemDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Update quantity",
        description="A quantity of zero or less removes the line.",
        parameters=[OWNER_KEY_PARAM, PRODUCT_ID_PARAM],
        request=UpdateQuantitySerializer,
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def patch(self, request, owner_key: str, product_id: str):
        serializer = UpdateQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = self.service.update_quantity(
            owner_key, product_id, dict(serializer.validated_data)
        )
        return Response(CartReadSerializer(dto).data)

    @extend_schema(
        summary="Remove item",
        parameters=[OWNER_KEY_PARAM, PRODUCT_ID_PARAM],
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def delete(self, request, owner_key: str, product_id: str):
        dto = self.service.remove_item(owner_key, product_id)
        return Response(CartReadSerializer(dto).data)


@extend_schema(tags=["Carts"])
class CartBulkRemoveView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartBulkRemoveView")

    @extend_schema(
        summary="Remove several items",
        parameters=[OWNER_KEY_PARAM],
        request=RemoveItemsSerializer,
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def post(self, request, owner_key: str):
        serializer = RemoveItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = self.service.remove_items(owner_key, dict(serializer.validated_data))
        return Response(CartReadSerializer(dto).data)


@extend_schema(tags=["Carts"])
class CartClearView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartClearView")

    @extend_schema(
        summary="Clear cart",
        parameters=[OWNER_KEY_PARAM],
        request=None,
        responses={200: CartReadSerializer, **CART_ERRORS},
    )
    def post(self, request, owner_key: str):
        dto = self.service.clear_cart(owner_key)
        return Response(CartReadSerializer(dto).data)


@extend_schema(tags=["Carts"])
class CartCheckoutView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="CartCheckoutView")

    @extend_schema(
        summary="Checkout",
        description=(
            "Converts the account's cart into a pending order and empties the cart. "
            "Anonymous owner keys are rejected with UNAUTHORIZED, empty carts with EMPTY_CART."
        ),
        parameters=[OWNER_KEY_PARAM],
        request=None,
        responses={
            201: OrderEnvelopeSerializer,
            401: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request, owner_key: str):
        order = self.service.checkout(
            owner_key,
            actor_id=getattr(request, "validated_user_id", None),
            is_privileged=bool(getattr(request, "is_privileged_user", False)),
        )
        self.log.info("Checkout via API", owner_key=owner_key, order_id=order.id)
        return Response(
            {"order": OrderReadSerializer(order).data},
            status=status.HTTP_201_CREATED,
        )
