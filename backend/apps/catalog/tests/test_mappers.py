import types
import unittest
from decimal import Decimal

from apps.catalog.mappers import ProductMapper


def make_product(product_id="a" * 24, name="Lamp", price=Decimal("19.99"), image=""):
    return types.SimpleNamespace(
        id=product_id,
        name=name,
        price=price,
        description="Desk lamp",
        image=image,
        stock=4,
    )


class ProductMapperTests(unittest.TestCase):
    def test_to_dto_copies_fields(self):
        dto = ProductMapper.to_dto(make_product(image="lamp.png"))
        self.assertEqual(dto.id, "a" * 24)
        self.assertEqual(dto.price, Decimal("19.99"))
        self.assertEqual(dto.stock, 4)
        self.assertEqual(dto.image, "lamp.png")

    def test_many_to_dto_keeps_order(self):
        dtos = ProductMapper.many_to_dto(
            [make_product("a" * 24, "A"), make_product("b" * 24, "B")]
        )
        self.assertEqual([d.name for d in dtos], ["A", "B"])

    def test_snapshot_blank_image_becomes_none(self):
        snap = ProductMapper.to_snapshot(make_product())
        self.assertEqual(snap.product_id, "a" * 24)
        self.assertEqual(snap.name, "Lamp")
        self.assertIsNone(snap.image)
