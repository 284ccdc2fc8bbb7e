import types
import unittest
from decimal import Decimal
from unittest.mock import Mock, patch

from rest_framework.response import Response
from rest_framework.test import APIRequestFactory, force_authenticate

from apps.api.validation import validate_request_context
from apps.catalog.dtos import ProductDTO
from apps.catalog.pagination import ProductListPagination
from apps.catalog.serializers import ProductReadSerializer
from apps.catalog.views import ProductDetailView, ProductListView

PRODUCT_ID = "0123456789abcdef01234567"


def make_product_dto(product_id=PRODUCT_ID, name="Widget"):
    return ProductDTO(
        id=product_id,
        name=name,
        price=Decimal("10.00"),
        description="A product",
        image="img",
        stock=3,
    )


class CatalogViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def dispatch(self, request, view_cls, **kwargs):
        pre_response = validate_request_context(request, view_cls, kwargs)
        if pre_response is not None:
            return pre_response
        view = view_cls.as_view()
        return view(request, **kwargs)

    def authenticate(self, request, user):
        request.user = user
        force_authenticate(request, user=user)

    def test_product_list_paginates_and_filters(self):
        service_mock = Mock()
        expected_response = Response({"results": []})
        service_mock.list_products_paginated.return_value = expected_response
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.get("/api/products/", {"limit": 1, "search": "wid"})
            response = self.dispatch(request, ProductListView)
        self.assertIs(response, expected_response)
        _, kwargs = service_mock.list_products_paginated.call_args
        self.assertEqual(kwargs["search"], "wid")
        self.assertIs(kwargs["paginator_class"], ProductListPagination)
        self.assertIs(kwargs["serializer_class"], ProductReadSerializer)

    def test_product_list_post_creates_product_for_staff(self):
        service_mock = Mock()
        service_mock.create_product.return_value = make_product_dto(name="Created")
        user = types.SimpleNamespace(
            id=1, is_authenticated=True, is_staff=True, is_superuser=False
        )
        payload = {"name": "Created", "price": "12.50", "stock": 2}
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post("/api/products/", payload, format="json")
            self.authenticate(request, user)
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["name"], "Created")
        args, _ = service_mock.create_product.call_args
        self.assertEqual(args[0]["price"], Decimal("12.50"))

    def test_product_list_post_forbidden_for_non_staff(self):
        service_mock = Mock()
        user = types.SimpleNamespace(
            id=50, is_authenticated=True, is_staff=False, is_superuser=False
        )
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post(
                "/api/products/", {"name": "X", "price": "1.00"}, format="json"
            )
            self.authenticate(request, user)
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 403)
        service_mock.create_product.assert_not_called()

    def test_product_list_post_requires_authentication(self):
        request = self.factory.post(
            "/api/products/", {"name": "X", "price": "1.00"}, format="json"
        )
        response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 401)

    def test_product_detail_get_not_found(self):
        service_mock = Mock()
        service_mock.get_product.return_value = None
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get(f"/api/products/{PRODUCT_ID}/")
            response = self.dispatch(request, ProductDetailView, product_id=PRODUCT_ID)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "NOT_FOUND")

    def test_product_detail_get_success(self):
        service_mock = Mock()
        service_mock.get_product.return_value = make_product_dto(name="LookUp")
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get(f"/api/products/{PRODUCT_ID}/")
            response = self.dispatch(request, ProductDetailView, product_id=PRODUCT_ID)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["name"], "LookUp")
        self.assertEqual(response.data["price"], Decimal("10.00"))
