from decimal import Decimal

from cartclient.models import Cart, LineItem, Order, ProductSnapshot, line_total

P1 = "aaaaaaaaaaaaaaaaaaaaaaaa"
P2 = "bbbbbbbbbbbbbbbbbbbbbbbb"
MUG = ProductSnapshot("Mug", Decimal("4.50"), "mug.png")
TEE = ProductSnapshot("Tee", Decimal("12.00"))


def assert_consistent(cart: Cart):
    assert cart.total_price == line_total(cart.items)


def test_add_appends_snapshot_line():
    cart = Cart.empty("k").with_added(P1, 2, MUG)
    assert cart.items == [LineItem(P1, "Mug", Decimal("4.50"), 2, "mug.png")]
    assert cart.total_price == Decimal("9.00")
    assert cart.provisional
    assert cart.count == 2


def test_add_existing_merges_at_line_price():
    cart = Cart.empty("k").with_added(P1, 1, MUG)
    cart = cart.with_added(P1, 2, ProductSnapshot("Mug", Decimal("99.00")))
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.total_price == Decimal("13.50")


def test_add_new_product_without_snapshot_is_a_no_op():
    cart = Cart.empty("k")
    assert cart.with_added(P1, 1, None) is cart


def test_local_arithmetic_keeps_total_consistent():
    cart = Cart.empty("k")
    for step in (
        lambda c: c.with_added(P1, 3, MUG),
        lambda c: c.with_added(P2, 1, TEE),
        lambda c: c.with_quantity(P1, 1),
        lambda c: c.with_added(P1, 4, MUG),
        lambda c: c.without([P2]),
        lambda c: c.with_quantity(P1, 0),
    ):
        cart = step(cart)
        assert_consistent(cart)
    assert cart.items == []


def test_quantity_floor_removes_line():
    base = Cart.empty("k").with_added(P1, 2, MUG)
    assert base.with_quantity(P1, 0).find(P1) is None
    assert base.with_quantity(P1, -1).find(P1) is None


def test_cleared():
    cart = Cart.empty("k").with_added(P1, 2, MUG).cleared()
    assert cart.items == []
    assert cart.total_price == Decimal("0.00")


def test_dict_round_trip_keeps_provisional_flag():
    cart = Cart.empty("k").with_added(P1, 2, MUG)
    restored = Cart.from_dict(cart.to_dict())
    assert restored == cart


def test_wire_numbers_become_decimals():
    cart = Cart.from_dict(
        {
            "ownerKey": "5",
            "items": [{"productId": P1, "name": "Mug", "price": 4.5, "quantity": 2}],
            "totalPrice": 9.0,
        },
        provisional=False,
    )
    assert cart.items[0].price == Decimal("4.50")
    assert cart.total_price == Decimal("9")
    assert not cart.provisional


def test_order_from_dict():
    order = Order.from_dict(
        {
            "id": 3,
            "status": "pending",
            "totalPrice": 9.0,
            "ownerKey": "5",
            "accountId": 5,
            "items": [{"productId": P1, "name": "Mug", "price": 4.5, "quantity": 2}],
        }
    )
    assert order.id == 3
    assert order.items[0].quantity == 2
    assert order.total_price == Decimal("9")
