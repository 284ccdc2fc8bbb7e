from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.schemas import paginated_response, ErrorResponseSerializer
from apps.api.utils import error_response
from apps.common import get_logger
from .container import build_product_service
from .pagination import ProductListPagination
from .serializers import ProductReadSerializer, ProductWriteSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")


@extend_schema(tags=["Catalog"])
class ProductListView(APIView):
    # Staff-only writes are enforced by RequestValidationMiddleware
    permission_classes = [AllowAny]
    service = build_product_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="Supports pagination via ?page and ?limit, and a name filter via ?search.",
        parameters=[
            OpenApiParameter(
                name="search",
                description="Case-insensitive name filter",
                required=False,
                type=str,
            )
        ],
        responses={200: paginated_response(ProductReadSerializer)},
    )
    def get(self, request):
        search = request.query_params.get("search")
        self.log.debug("Handling product list request", search=search)
        return self.service.list_products_paginated(
            request,
            search=search,
            paginator_class=ProductListPagination,
            serializer_class=ProductReadSerializer,
            view=self,
        )

    @extend_schema(
        summary="Create product",
        request=ProductWriteSerializer,
        responses={
            201: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = self.service.create_product(serializer.validated_data)
        self.log.info("Product created via API", product_id=dto.id)
        return Response(ProductReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class ProductDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_product_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", str, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: str):
        dto = self.service.get_product(product_id)
        if not dto:
            return error_response("NOT_FOUND", "Product not found", {"id": product_id})
        return Response(ProductReadSerializer(dto).data)
