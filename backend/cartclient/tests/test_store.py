import unittest
from decimal import Decimal

from cartclient.cache import CartCache
from cartclient.models import Cart, ProductSnapshot, line_total
from cartclient.remote import CartItemNotFound, CartNotFound, EmptyCart, Unauthenticated
from cartclient.session import SessionState
from cartclient.storage import MemoryStorage
from cartclient.store import CartStore
from cartclient.tests.fakes import P1, P2, P3, FakeCartServer

MUG = ProductSnapshot("Mug", Decimal("4.50"), "mug.png")
TEE = ProductSnapshot("Tee", Decimal("12.00"))


class CartStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeCartServer()
        self.storage = MemoryStorage()
        self.session = SessionState(self.storage)
        self.remote = self.server.client(token="token")
        self.store = CartStore(self.remote, self.storage, self.session)

    async def asyncTearDown(self):
        await self.remote.aclose()

    def assertConsistent(self):
        self.assertEqual(self.store.cart.total_price, line_total(self.store.cart.items))

    async def test_load_without_remote_cart_keeps_cache(self):
        owner = self.store.identity.resolve_owner_key()
        cached = Cart.empty(owner).with_added(P1, 1, MUG)
        self.store.cache.save(cached)
        cart = await self.store.load()
        self.assertEqual(cart, cached)
        self.assertFalse(self.store.is_loading)

    async def test_load_prefers_server(self):
        owner = self.store.identity.resolve_owner_key()
        self.store.cache.save(Cart.empty(owner).with_added(P1, 1, MUG))
        self.server.seed(owner, {P2: 2})
        cart = await self.store.load()
        self.assertEqual([i.product_id for i in cart.items], [P2])
        self.assertFalse(self.store.provisional)

    async def test_load_unreachable_uses_cache(self):
        owner = self.store.identity.resolve_owner_key()
        cached = Cart.empty(owner).with_added(P1, 3, MUG)
        self.store.cache.save(cached)
        self.server.down = True
        cart = await self.store.load()
        self.assertEqual(cart.count, 3)

    async def test_add_adopts_server_cart(self):
        seen = []
        self.store.subscribe(seen.append)
        cart = await self.store.add_to_cart(P1, 2, MUG)
        self.assertFalse(cart.provisional)
        self.assertEqual(self.store.cart_count, 2)
        self.assertEqual(seen[-1], cart)
        self.assertEqual(CartCache(self.storage).load(), cart)

    async def test_offline_add_is_provisional_until_next_fetch(self):
        await self.store.add_to_cart(P1, 1, MUG)
        self.server.down = True
        await self.store.add_to_cart(P1, 2, MUG)
        await self.store.add_to_cart(P2, 1, TEE)
        self.assertTrue(self.store.provisional)
        self.assertEqual(self.store.cart_count, 4)
        self.assertEqual(self.store.cart.total_price, Decimal("25.50"))
        self.assertConsistent()

        self.server.down = False
        cart = await self.store.refresh()
        self.assertFalse(cart.provisional)
        self.assertEqual(cart.count, 1)
        self.assertEqual(cart.total_price, Decimal("4.50"))

    async def test_invalid_product_id_stays_local(self):
        cart = await self.store.add_to_cart("not-a-product", 2, MUG)
        self.assertEqual(cart.count, 2)
        self.assertTrue(cart.provisional)
        self.assertEqual(self.server.calls, [])

    async def test_remove_missing_item_raises_and_keeps_cart(self):
        await self.store.add_to_cart(P1, 2, MUG)
        before = self.store.cart
        with self.assertRaises(CartItemNotFound):
            await self.store.remove_from_cart(P2)
        self.assertEqual(self.store.cart, before)

    async def test_remove_missing_item_offline_raises(self):
        await self.store.add_to_cart(P1, 2, MUG)
        self.server.down = True
        with self.assertRaises(CartNotFound):
            await self.store.remove_from_cart(P3)
        self.assertEqual(self.store.cart_count, 2)

    async def test_offline_mutations_match_upper_case_ids(self):
        await self.store.add_to_cart(P1, 1, MUG)
        self.server.down = True
        cart = await self.store.add_to_cart(P1.upper(), 1, MUG)
        self.assertEqual([(i.product_id, i.quantity) for i in cart.items], [(P1, 2)])
        cart = await self.store.update_quantity(P1.upper(), 5)
        self.assertEqual(cart.count, 5)
        cart = await self.store.remove_from_cart(P1.upper())
        self.assertEqual(cart.items, [])
        self.assertConsistent()

    async def test_refresh_without_remote_cart_keeps_offline_cart(self):
        self.server.down = True
        await self.store.add_to_cart(P1, 2, MUG)
        self.assertTrue(self.store.provisional)
        self.server.down = False
        cart = await self.store.refresh()
        self.assertEqual(cart.count, 2)
        self.assertEqual(cart.total_price, Decimal("9.00"))
        self.assertEqual(CartCache(self.storage).load(), cart)

    async def test_remove_and_update_quantity(self):
        await self.store.add_to_cart(P1, 2, MUG)
        await self.store.add_to_cart(P2, 1, TEE)
        cart = await self.store.update_quantity(P2, 3)
        self.assertEqual(cart.total_price, Decimal("45.00"))
        cart = await self.store.remove_from_cart(P1)
        self.assertEqual([i.product_id for i in cart.items], [P2])
        self.assertConsistent()

    async def test_quantity_floor(self):
        for quantity in (0, -1):
            await self.store.add_to_cart(P1, 2, MUG)
            cart = await self.store.update_quantity(P1, quantity)
            self.assertIsNone(cart.find(P1))
        self.server.down = True
        await self.store.add_to_cart(P1, 2, MUG)
        cart = await self.store.update_quantity(P1, 0)
        self.assertIsNone(cart.find(P1))
        self.assertConsistent()

    async def test_clear_without_remote_cart(self):
        cart = await self.store.clear_cart()
        self.assertEqual(cart.items, [])
        self.assertFalse(cart.provisional)

    async def test_checkout_empties_cart(self):
        await self.session.login("5", access_token="token")
        await self.store.add_to_cart(P1, 2, MUG)
        await self.store.add_to_cart(P3, 1, ProductSnapshot("Cap", Decimal("7.25")))
        before = self.store.cart
        order = await self.store.checkout()
        self.assertEqual(
            [(i.product_id, i.quantity) for i in order.items],
            [(i.product_id, i.quantity) for i in before.items],
        )
        self.assertEqual(self.store.cart.items, [])
        self.assertEqual(self.store.cart.total_price, Decimal("0.00"))

    async def test_checkout_guard_anonymous(self):
        await self.store.add_to_cart(P1, 1, MUG)
        before = self.store.cart
        with self.assertRaises(Unauthenticated):
            await self.store.checkout()
        self.assertEqual(self.store.cart, before)
        self.assertFalse([c for c in self.server.calls if "checkout" in c])

    async def test_checkout_guard_empty(self):
        await self.session.login("5", access_token="token")
        with self.assertRaises(EmptyCart):
            await self.store.checkout()
        self.assertEqual(self.server.orders, [])

    async def test_login_merges_exactly_once(self):
        await self.store.add_to_cart(P1, 2, MUG)
        await self.store.add_to_cart(P2, 1, TEE)
        anonymous = self.store.cart.owner_key
        await self.session.login("5", access_token="token")
        await self.session.login("5", access_token="token")
        self.assertEqual(self.server.quantities("5"), {P1: 2, P2: 1})
        self.assertEqual(self.store.cart.owner_key, "5")
        self.assertEqual(self.store.cart_count, 3)
        self.assertNotIn(anonymous, self.server.carts)
        self.assertIsNone(self.store.pending_merge)

    async def test_partial_merge_exposed_and_retried(self):
        await self.store.add_to_cart(P1, 2, MUG)
        await self.store.add_to_cart(P2, 1, TEE)
        self.server.adds_before_outage = 1
        await self.session.login("5", access_token="token")
        self.assertIsNotNone(self.store.pending_merge)
        self.assertEqual(self.store.pending_merge.pending, [P2])

        self.server.adds_before_outage = None
        result = await self.store.retry_merge()
        self.assertEqual(result.status, "merged")
        self.assertIsNone(self.store.pending_merge)
        self.assertEqual(self.server.quantities("5"), {P1: 2, P2: 1})

    async def test_logout_resets_to_fresh_anonymous_cart(self):
        await self.session.login("5", access_token="token")
        await self.store.add_to_cart(P1, 1, MUG)
        await self.session.logout()
        self.assertNotEqual(self.store.cart.owner_key, "5")
        self.assertEqual(self.store.cart.items, [])
        self.assertIsNone(self.session.access_token)
