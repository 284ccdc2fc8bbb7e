import types
import unittest
from decimal import Decimal
from unittest.mock import Mock, patch

from rest_framework.response import Response
from rest_framework.test import APIRequestFactory, force_authenticate

from apps.api.validation import validate_request_context
from apps.orders.dtos import OrderDTO, OrderItemDTO
from apps.orders.pagination import OrderHistoryPagination
from apps.orders.views import OrderDetailView, OrderListView, OrderStatusView


def make_user(user_id, staff=False):
    return types.SimpleNamespace(
        id=user_id, is_authenticated=True, is_staff=staff, is_superuser=False
    )


def make_order_dto(order_id=7, status="pending"):
    return OrderDTO(
        id=order_id,
        account_id=5,
        owner_key="5",
        status=status,
        total_price=Decimal("9.00"),
        items=[OrderItemDTO("0123456789abcdef01234567", "Mug", Decimal("4.50"), 2)],
    )


class OrderViewsUnitTests(unittest.TestCase):
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

    def test_history_scoped_to_caller(self):
        service_mock = Mock()
        expected = Response({"results": []})
        service_mock.list_orders_paginated.return_value = expected
        with patch.object(OrderListView, "service", service_mock):
            request = self.factory.get("/api/orders/")
            self.authenticate(request, make_user(5))
            response = self.dispatch(request, OrderListView)
        self.assertIs(response, expected)
        _, kwargs = service_mock.list_orders_paginated.call_args
        self.assertEqual(kwargs["account_id"], 5)
        self.assertIs(kwargs["paginator_class"], OrderHistoryPagination)

    def test_history_requires_authentication(self):
        service_mock = Mock()
        with patch.object(OrderListView, "service", service_mock):
            request = self.factory.get("/api/orders/")
            response = self.dispatch(request, OrderListView)
        self.assertEqual(response.status_code, 401)
        service_mock.list_orders_paginated.assert_not_called()

    def test_detail_returns_order(self):
        service_mock = Mock()
        service_mock.get_order_with_access.return_value = (make_order_dto(), None)
        with patch.object(OrderDetailView, "service", service_mock):
            request = self.factory.get("/api/orders/7/")
            self.authenticate(request, make_user(5))
            response = self.dispatch(request, OrderDetailView, order_id=7)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["ownerKey"], "5")
        self.assertEqual(response.data["items"][0]["quantity"], 2)
        service_mock.get_order_with_access.assert_called_once_with(
            7, actor_id=5, is_privileged=False
        )

    def test_detail_not_found(self):
        service_mock = Mock()
        service_mock.get_order_with_access.return_value = (
            None,
            ("NOT_FOUND", "Order not found", {"id": "7"}),
        )
        with patch.object(OrderDetailView, "service", service_mock):
            request = self.factory.get("/api/orders/7/")
            self.authenticate(request, make_user(6))
            response = self.dispatch(request, OrderDetailView, order_id=7)
        self.assertEqual(response.status_code, 404)

    def test_status_change_staff_only(self):
        service_mock = Mock()
        service_mock.update_status.return_value = (make_order_dto(status="paid"), None)
        with patch.object(OrderStatusView, "service", service_mock):
            request = self.factory.patch(
                "/api/orders/7/status/", {"status": "paid"}, format="json"
            )
            self.authenticate(request, make_user(5))
            forbidden = self.dispatch(request, OrderStatusView, order_id=7)

            request = self.factory.patch(
                "/api/orders/7/status/", {"status": "paid"}, format="json"
            )
            self.authenticate(request, make_user(1, staff=True))
            allowed = self.dispatch(request, OrderStatusView, order_id=7)
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(allowed.status_code, 200)
        self.assertEqual(allowed.data["status"], "paid")
        service_mock.update_status.assert_called_once_with(7, {"status": "paid"})

    def test_status_change_validation_error(self):
        service_mock = Mock()
        service_mock.update_status.return_value = (
            None,
            ("VALIDATION_ERROR", "status must be one of: pending", {"status": "lost"}),
        )
        with patch.object(OrderStatusView, "service", service_mock):
            request = self.factory.patch(
                "/api/orders/7/status/", {"status": "lost"}, format="json"
            )
            self.authenticate(request, make_user(1, staff=True))
            response = self.dispatch(request, OrderStatusView, order_id=7)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
