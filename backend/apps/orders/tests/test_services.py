import itertools
import unittest
from decimal import Decimal
from unittest.mock import patch

from apps.carts.dtos import LineItemDTO
from apps.orders.services import OrderService

PID = "0123456789abcdef01234567"


class DummyAtomic:
    def __call__(self, *args, **kwargs):
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class ItemSet(list):
    def all(self):
        return self


class StubOrder:
    def __init__(self, **data):
        self.status = "pending"
        self.created_at = None
        self.items = ItemSet()
        self.__dict__.update(data)


class StubOrderItem:
    def __init__(self, **data):
        self.__dict__.update(data)


class FakeOrderRepository:
    def __init__(self):
        self.orders = {}
        self._ids = itertools.count(1)

    def create(self, **data):
        order = StubOrder(id=next(self._ids), **data)
        self.orders[order.id] = order
        return order

    def get(self, **filters):
        return self.orders.get(filters.get("id"))

    def list_for_account(self, account_id):
        return [o for o in self.orders.values() if o.account_id == account_id]

    def update(self, order, **data):
        for key, value in data.items():
            setattr(order, key, value)
        return order


class FakeOrderItemRepository:
    def create(self, **data):
        item = StubOrderItem(**data)
        data["order"].items.append(item)
        return item


class OrderServiceUnitTests(unittest.TestCase):
    def setUp(self):
        self.orders = FakeOrderRepository()
        self.atomic_patcher = patch(
            "apps.orders.services.transaction.atomic", DummyAtomic()
        )
        self.atomic_patcher.start()
        self.service = OrderService(self.orders, FakeOrderItemRepository())

    def tearDown(self):
        self.atomic_patcher.stop()

    def _place(self, account_id=5):
        return self.service.place_order(
            account_id=account_id,
            owner_key=str(account_id),
            items=[
                LineItemDTO(PID, "Mug", Decimal("4.50"), 2, "mug.png"),
                LineItemDTO("f" * 24, "Tee", Decimal("12.00"), 1),
            ],
            total_price=Decimal("21.00"),
        )

    def test_place_order_copies_lines_in_order(self):
        dto = self._place()
        self.assertEqual(dto.status, "pending")
        self.assertEqual(dto.account_id, 5)
        self.assertEqual(dto.total_price, Decimal("21.00"))
        self.assertEqual([i.product_id for i in dto.items], [PID, "f" * 24])
        self.assertEqual(dto.items[0].image, "mug.png")
        positions = [i.position for i in self.orders.get(id=dto.id).items]
        self.assertEqual(positions, [0, 1])

    def test_owner_reads_own_order(self):
        placed = self._place()
        dto, error = self.service.get_order_with_access(placed.id, 5, False)
        self.assertIsNone(error)
        self.assertEqual(dto.id, placed.id)
        self.assertEqual(len(dto.items), 2)

    def test_other_account_sees_not_found(self):
        placed = self._place()
        dto, error = self.service.get_order_with_access(placed.id, 6, False)
        self.assertIsNone(dto)
        self.assertEqual(error[0], "NOT_FOUND")

    def test_staff_reads_any_order(self):
        placed = self._place()
        dto, error = self.service.get_order_with_access(placed.id, 1, True)
        self.assertIsNone(error)
        self.assertEqual(dto.account_id, 5)

    def test_missing_order(self):
        dto, error = self.service.get_order_with_access(99, 5, False)
        self.assertIsNone(dto)
        self.assertEqual(error[0], "NOT_FOUND")

    def test_update_status(self):
        placed = self._place()
        dto, error = self.service.update_status(placed.id, {"status": " Shipped "})
        self.assertIsNone(error)
        self.assertEqual(dto.status, "shipped")

    def test_update_status_rejects_unknown_value(self):
        placed = self._place()
        dto, error = self.service.update_status(placed.id, {"status": "lost"})
        self.assertIsNone(dto)
        self.assertEqual(error[0], "VALIDATION_ERROR")
        self.assertEqual(self.orders.get(id=placed.id).status, "pending")

    def test_update_status_missing_order(self):
        dto, error = self.service.update_status(42, {"status": "paid"})
        self.assertIsNone(dto)
        self.assertEqual(error[0], "NOT_FOUND")
