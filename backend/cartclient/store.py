"""The one cart object a UI session talks to.

Server responses always replace local state. When the server cannot be
reached, the same arithmetic runs locally and the result is flagged
``provisional`` until the next successful round trip.
"""
from typing import Awaitable, Callable, List, Optional

from apps.common import get_logger
from apps.common.keys import (
    is_account_key,
    is_valid_owner_key,
    is_valid_product_id,
    normalize_product_id,
)
from .cache import CartCache
from .identity import IdentityResolver
from .models import Cart, Order, ProductSnapshot
from .reconcile import MergeResult, Reconciler
from .remote import (
    CartItemNotFound,
    CartNotFound,
    CartStoreClient,
    CartStoreError,
    Unauthenticated,
)
from .session import SessionState, SessionTransition
from .storage import LocalStorage

logger = get_logger(__name__).bind(component="cartclient", layer="store")

Listener = Callable[[Cart], None]


def _product_key(product_id):
    # Server lines carry lower-case ids
    return normalize_product_id(product_id) if isinstance(product_id, str) else product_id


class CartStore:
    def __init__(
        self,
        remote: CartStoreClient,
        storage: LocalStorage,
        session: SessionState,
        *,
        cache: Optional[CartCache] = None,
        identity: Optional[IdentityResolver] = None,
        reconciler: Optional[Reconciler] = None,
    ):
        self.remote = remote
        self.session = session
        self.cache = cache or CartCache(storage)
        self.identity = identity or IdentityResolver(storage, session)
        self.reconciler = reconciler or Reconciler(remote, self.cache, self.identity, storage)
        self.is_loading = False
        self.pending_merge: Optional[MergeResult] = None
        self._cart = Cart.empty()
        self._listeners: List[Listener] = []
        self.logger = logger.bind(service="CartStore")
        session.subscribe(self._on_session_change)

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def cart_count(self) -> int:
        return self._cart.count

    @property
    def provisional(self) -> bool:
        return self._cart.provisional

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_cart(self, cart: Cart) -> None:
        self._cart = cart
        self.cache.save(cart)
        for listener in list(self._listeners):
            listener(cart)

    def _current(self, owner_key: str) -> Cart:
        if self._cart.owner_key == owner_key:
            return self._cart
        return Cart.empty(owner_key)

    async def load(self) -> Cart:
        """Initial fetch. The cached cart stands in until the server answers."""
        self.is_loading = True
        try:
            owner_key = self.identity.resolve_owner_key()
            cached = self.cache.load()
            self._cart = cached if cached.owner_key == owner_key else Cart.empty(owner_key)
            if not is_valid_owner_key(owner_key):
                self.logger.warning("Malformed owner key, using cache only", owner_key=owner_key)
                return self._cart
            try:
                self._set_cart(await self.remote.fetch_cart(owner_key))
            except CartNotFound:
                self.logger.debug("No remote cart yet", owner_key=owner_key)
            except CartStoreError as exc:
                self.logger.warning("Initial cart fetch failed, using cache", owner_key=owner_key, error=str(exc))
            return self._cart
        finally:
            self.is_loading = False

    async def refresh(self) -> Cart:
        owner_key = self.identity.resolve_owner_key()
        try:
            cart = await self.remote.fetch_cart(owner_key)
        except CartNotFound:
            # Nothing stored remotely yet; keep what this owner built locally
            self.logger.debug("No remote cart on refresh, keeping local", owner_key=owner_key)
            cart = self._current(owner_key)
        self._set_cart(cart)
        return cart

    async def _mutate(
        self,
        operation: str,
        owner_key: str,
        valid: bool,
        remote_call: Callable[[], Awaitable[Cart]],
        local_change: Callable[[Cart], Cart],
        semantic_errors: tuple = (),
    ) -> Cart:
        if not valid:
            self.logger.info("Invalid input, applying locally only", operation=operation, owner_key=owner_key)
            self._set_cart(local_change(self._current(owner_key)))
            return self._cart
        try:
            cart = await remote_call()
        except semantic_errors:
            raise
        except CartStoreError as exc:
            self.logger.warning(
                "Remote cart call failed, applying locally",
                operation=operation,
                owner_key=owner_key,
                status=exc.status,
                error=str(exc),
            )
            cart = local_change(self._current(owner_key))
        self._set_cart(cart)
        return cart

    async def add_to_cart(self, product_id: str, quantity: int = 1, snapshot: Optional[ProductSnapshot] = None) -> Cart:
        product_id = _product_key(product_id)
        owner_key = self.identity.resolve_owner_key()
        valid = is_valid_owner_key(owner_key) and is_valid_product_id(product_id) and quantity > 0

        def local_change(cart: Cart) -> Cart:
            if quantity <= 0:
                return cart
            updated = cart.with_added(product_id, quantity, snapshot)
            if updated is cart:
                self.logger.warning("No snapshot to price new line locally", product_id=product_id)
            return updated

        return await self._mutate(
            "add",
            owner_key,
            valid,
            lambda: self.remote.add_item(owner_key, product_id, quantity),
            local_change,
        )

    async def remove_from_cart(self, product_id: str) -> Cart:
        product_id = _product_key(product_id)
        owner_key = self.identity.resolve_owner_key()

        def local_change(cart: Cart) -> Cart:
            if cart.find(product_id) is None:
                raise CartItemNotFound("Item is not in the cart", code="NOT_FOUND", details={"productId": product_id})
            return cart.without([product_id])

        return await self._mutate(
            "remove",
            owner_key,
            is_valid_owner_key(owner_key) and is_valid_product_id(product_id),
            lambda: self.remote.remove_item(owner_key, product_id),
            local_change,
            semantic_errors=(CartNotFound,),
        )

    async def update_quantity(self, product_id: str, quantity: int) -> Cart:
        product_id = _product_key(product_id)
        owner_key = self.identity.resolve_owner_key()

        def local_change(cart: Cart) -> Cart:
            if cart.find(product_id) is None:
                raise CartItemNotFound("Item is not in the cart", code="NOT_FOUND", details={"productId": product_id})
            return cart.with_quantity(product_id, quantity)

        return await self._mutate(
            "update",
            owner_key,
            is_valid_owner_key(owner_key) and is_valid_product_id(product_id),
            lambda: self.remote.update_quantity(owner_key, product_id, quantity),
            local_change,
            semantic_errors=(CartNotFound,),
        )

    async def clear_cart(self) -> Cart:
        owner_key = self.identity.resolve_owner_key()

        async def remote_clear() -> Cart:
            try:
                return await self.remote.clear(owner_key)
            except CartNotFound:
                # Nothing stored remotely; empty is already the server's view
                return Cart.empty(owner_key)

        return await self._mutate(
            "clear",
            owner_key,
            is_valid_owner_key(owner_key),
            remote_clear,
            lambda cart: cart.cleared(),
        )

    async def checkout(self) -> Order:
        """Place an order from the account cart.

        Raises ``Unauthenticated``, ``EmptyCart`` or ``CartStoreUnavailable``
        with the cart left as it was.
        """
        owner_key = self.identity.resolve_owner_key()
        if not is_account_key(owner_key):
            self.logger.info("Checkout refused for anonymous cart", owner_key=owner_key)
            raise Unauthenticated("Checkout requires a signed-in account", code="UNAUTHORIZED")
        order = await self.remote.checkout(owner_key)
        self._set_cart(Cart.empty(owner_key))
        self.logger.info("Checkout completed", owner_key=owner_key, order_id=order.id, lines=len(order.items))
        return order

    async def retry_merge(self) -> Optional[MergeResult]:
        if self.pending_merge is None:
            return None
        return await self._merge(self.pending_merge.account_id)

    async def _merge(self, account_id: str) -> MergeResult:
        result = await self.reconciler.merge_on_login(account_id)
        if result.is_partial:
            self.pending_merge = result
            self.logger.warning("Cart merge incomplete", account_id=account_id, pending=len(result.pending))
        else:
            self.pending_merge = None
        if result.cart is not None:
            self._set_cart(result.cart)
        else:
            await self.load()
        return result

    async def _on_session_change(self, transition: SessionTransition) -> None:
        if transition.became_authenticated:
            await self._merge(transition.current)
        elif transition.logged_out:
            self.pending_merge = None
            self.cache.clear()
            self._set_cart(Cart.empty(self.identity.resolve_owner_key()))
        elif transition.switched_account:
            self.pending_merge = None
            await self.load()
