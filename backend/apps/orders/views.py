from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.schemas import ErrorResponseSerializer, paginated_response
from apps.api.utils import service_error_response
from apps.common import get_logger
from .container import build_order_service
from .pagination import OrderHistoryPagination
from .serializers import OrderReadSerializer, OrderStatusSerializer

logger = get_logger(__name__).bind(component="orders", layer="view")


@extend_schema(tags=["Orders"])
class OrderListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_order_service()
    log = logger.bind(view="OrderListView")

    @extend_schema(
        summary="Order history",
        description="Orders placed by the authenticated account, newest first. Paginated via ?page and ?limit.",
        responses={
            200: paginated_response(OrderReadSerializer),
            401: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        account_id = getattr(request, "validated_user_id", None) or request.user.id
        return self.service.list_orders_paginated(
            request,
            account_id=int(account_id),
            paginator_class=OrderHistoryPagination,
            serializer_class=OrderReadSerializer,
            view=self,
        )


@extend_schema(tags=["Orders"])
class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_order_service()
    log = logger.bind(view="OrderDetailView")

    @extend_schema(
        summary="Get order",
        parameters=[OpenApiParameter("order_id", int, OpenApiParameter.PATH)],
        responses={
            200: OrderReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, order_id):
        dto, error = self.service.get_order_with_access(
            int(order_id),
            actor_id=getattr(request, "validated_user_id", None),
            is_privileged=bool(getattr(request, "is_privileged_user", False)),
        )
        if error:
            return service_error_response(error)
        return Response(OrderReadSerializer(dto).data)


@extend_schema(tags=["Orders"])
class OrderStatusView(APIView):
    # Staff check happens in RequestValidationMiddleware
    permission_classes = [IsAuthenticated]
    service = build_order_service()
    log = logger.bind(view="OrderStatusView")

    @extend_schema(
        summary="Change order status",
        parameters=[OpenApiParameter("order_id", int, OpenApiParameter.PATH)],
        request=OrderStatusSerializer,
        responses={
            200: OrderReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, order_id):
        dto, error = self.service.update_status(int(order_id), request.data)
        if error:
            return service_error_response(error)
        self.log.info(
            "Order status updated via API",
            order_id=dto.id,
            status=dto.status,
            actor_id=getattr(request, "validated_user_id", None),
        )
        return Response(OrderReadSerializer(dto).data)
