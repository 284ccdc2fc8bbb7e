from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.common import get_logger
from apps.common.keys import is_valid_product_id, normalize_product_id
from .commands import ProductCreateCommand
from .dtos import ProductSnapshot
from .mappers import ProductMapper
from .protocols import CacheBackendProtocol, ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        cache_backend: CacheBackendProtocol,
        disable_cache: bool = False,
    ):
        self.products = products
        self.cache = cache_backend
        self.disable_cache = disable_cache
        self.logger = logger.bind(service="ProductService")
        self._cache_prefix = "products"
        self._cache_version_key = f"{self._cache_prefix}:version"

    def _get_cache_version(self) -> int:
        return self.cache.get(self._cache_version_key) or 1

    def _bump_cache_version(self) -> None:
        version = self._get_cache_version() + 1
        # Version key never expires
        self.cache.set(self._cache_version_key, version, timeout=None)
        self.logger.debug("Bumped product cache version", new_version=version)

    def _detail_cache_key(self, product_id: str) -> str:
        return f"{self._cache_prefix}:v{self._get_cache_version()}:detail:{product_id}"

    def products_queryset(self, search: Optional[str] = None):
        self.logger.debug("Building product queryset", search=search)
        return self.products.search(search) if search else self.products.list()

    def list_products_paginated(
        self,
        request,
        *,
        search: Optional[str] = None,
        paginator_class: Optional[Type[PageNumberPagination]] = None,
        serializer_class=None,
        view=None,
    ):
        paginator = (paginator_class or PageNumberPagination)()
        queryset = self.products_queryset(search=search)
        page = paginator.paginate_queryset(queryset, request, view=view)
        data_source = page if page is not None else queryset
        dtos = ProductMapper.many_to_dto(data_source)
        if serializer_class is None:
            from .serializers import ProductReadSerializer  # Avoid circular import

            serializer_class = ProductReadSerializer
        serializer = serializer_class(dtos, many=True)
        if page is None:
            return Response(serializer.data)
        return paginator.get_paginated_response(serializer.data)

    def get_product(self, product_id: str):
        if not is_valid_product_id(product_id):
            self.logger.info("Rejected malformed product id", product_id=product_id)
            return None
        product_id = normalize_product_id(product_id)
        if not self.disable_cache:
            key = self._detail_cache_key(product_id)
            cached = self.cache.get(key)
            if cached is not None:
                self.logger.debug("Product detail cache hit", cache_key=key)
                return cached
        product = self.products.get(id=product_id)
        if not product:
            self.logger.info("Product not found", product_id=product_id)
            return None
        dto = ProductMapper.to_dto(product)
        if not self.disable_cache:
            self.cache.set(self._detail_cache_key(product_id), dto)
        return dto

    def get_snapshot(self, product_id: str) -> Optional[ProductSnapshot]:
        """Name/price/image copy used when a product is added to a cart.

        Always read from the database so a cart never snapshots a stale price.
        """
        if not is_valid_product_id(product_id):
            return None
        product = self.products.get(id=normalize_product_id(product_id))
        if not product:
            self.logger.info("Snapshot requested for missing product", product_id=product_id)
            return None
        return ProductMapper.to_snapshot(product)

    def create_product(self, data: Union[Dict[str, Any], ProductCreateCommand]):
        cmd = (
            data
            if isinstance(data, ProductCreateCommand)
            else ProductCreateCommand.from_raw(data)
        )
        self.logger.info("Creating product", name=cmd.name)
        product = self.products.create(
            name=cmd.name,
            price=cmd.price,
            description=cmd.description,
            image=cmd.image,
            stock=cmd.stock,
        )
        self._bump_cache_version()
        self.logger.info("Product created", product_id=product.id)
        return ProductMapper.to_dto(product)
