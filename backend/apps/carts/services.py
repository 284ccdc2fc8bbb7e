from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Type

from django.db import transaction
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.api.exceptions import (
    ApplicationError,
    AuthenticationRequired,
    InvalidInput,
    ResourceNotFound,
)
from apps.common import get_logger
from apps.common.keys import (
    account_id_from_key,
    is_account_key,
    is_valid_product_id,
    normalize_product_id,
)
from .commands import AddItemCommand, RemoveItemsCommand, UpdateQuantityCommand
from .dtos import CartDTO
from .mappers import CartMapper
from .models import Cart
from .protocols import (
    CartItemRepositoryProtocol,
    CartRepositoryProtocol,
    OrderPlacerProtocol,
    ProductSnapshotProviderProtocol,
)

logger = get_logger(__name__).bind(component="carts", layer="service")

ZERO = Decimal("0.00")


class CartNotFoundError(ResourceNotFound):
    default_message = "Cart not found"


class CartItemNotFoundError(ResourceNotFound):
    default_message = "Item is not in the cart"


class ProductUnavailableError(ResourceNotFound):
    default_message = "Product not found"


class EmptyCartError(ApplicationError):
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class CheckoutNotAllowedError(AuthenticationRequired):
    default_message = "Checkout requires a signed-in account"


def line_total(items: Iterable[Any]) -> Decimal:
    return sum((item.price * item.quantity for item in items), ZERO)


class CartService:
    """Owner-keyed cart operations.

    Every mutation runs in one transaction holding the cart row lock and
    leaves ``total_price`` equal to the sum of ``price * quantity`` over the
    cart's lines.
    """

    def __init__(
        self,
        carts: CartRepositoryProtocol,
        cart_items: CartItemRepositoryProtocol,
        products: ProductSnapshotProviderProtocol,
        orders: OrderPlacerProtocol,
        cart_mapper: Optional[CartMapper] = None,
    ):
        self.carts = carts
        self.cart_items = cart_items
        self.products = products
        self.orders = orders
        self.cart_mapper = cart_mapper or CartMapper()
        self.logger = logger.bind(service="CartService")

    def _to_dto(self, cart: Cart) -> CartDTO:
        return self.cart_mapper.to_dto(cart, self.cart_items.list_for_cart(cart))

    def _require_cart(self, owner_key: str, *, for_update: bool = False) -> Cart:
        cart = (
            self.carts.get_for_update(owner_key)
            if for_update
            else self.carts.get(owner_key=owner_key)
        )
        if not cart:
            self.logger.info("Cart not found", owner_key=owner_key)
            raise CartNotFoundError(details={"ownerKey": owner_key})
        return cart

    def _require_line(self, cart: Cart, product_id: str):
        line = None
        if is_valid_product_id(product_id):
            line = self.cart_items.get_for_cart_product(
                cart, normalize_product_id(product_id)
            )
        if not line:
            self.logger.info(
                "Cart line not found", owner_key=cart.owner_key, product_id=product_id
            )
            raise CartItemNotFoundError(
                details={"ownerKey": cart.owner_key, "productId": product_id}
            )
        return line

    def _recompute_total(self, cart: Cart) -> Cart:
        total = line_total(self.cart_items.list_for_cart(cart))
        return self.carts.update(cart, total_price=total)

    def get_cart(self, owner_key: str) -> CartDTO:
        self.logger.debug("Fetching cart", owner_key=owner_key)
        return self._to_dto(self._require_cart(owner_key))

    def list_carts_paginated(
        self,
        request,
        *,
        paginator_class: Optional[Type[PageNumberPagination]] = None,
        serializer_class=None,
        view=None,
    ):
        paginator = (paginator_class or PageNumberPagination)()
        queryset = self.carts.list()
        page = paginator.paginate_queryset(queryset, request, view=view)
        data_source = page if page is not None else queryset
        dtos = self.cart_mapper.many_to_dto(data_source)
        if serializer_class is None:
            from .serializers import CartReadSerializer  # Avoid circular import

            serializer_class = CartReadSerializer
        serializer = serializer_class(dtos, many=True)
        if page is None:
            return Response(serializer.data)
        return paginator.get_paginated_response(serializer.data)

    def add_item(self, owner_key: str, payload: Dict[str, Any]) -> CartDTO:
        """Upsert a line; the cart is created on the first add for a key.

        An existing line keeps its snapshot price, so the total grows by
        ``snapshot price * quantity`` rather than by the current catalogue price.
        """
        command = AddItemCommand.from_raw(owner_key, payload)
        if command is None:
            self.logger.info("Rejected add-item payload", owner_key=owner_key)
            raise InvalidInput(
                "productId must be a 24-character hex id and quantity a positive integer",
                details={
                    "productId": (payload or {}).get("productId"),
                    "quantity": (payload or {}).get("quantity"),
                },
            )
        with transaction.atomic():
            cart = self.carts.get_for_update(owner_key)
            line = (
                self.cart_items.get_for_cart_product(cart, command.product_id)
                if cart
                else None
            )
            if line:
                self.cart_items.update(line, quantity=line.quantity + command.quantity)
                increment = line.price * command.quantity
                merged = True
            else:
                snapshot = self.products.get_snapshot(command.product_id)
                if snapshot is None:
                    self.logger.info(
                        "Add rejected for unknown product",
                        owner_key=owner_key,
                        product_id=command.product_id,
                    )
                    raise ProductUnavailableError(
                        details={"productId": command.product_id}
                    )
                if cart is None:
                    cart = self.carts.create_for_owner(owner_key)
                    self.logger.info("Cart created on first add", owner_key=owner_key)
                position = len(self.cart_items.list_for_cart(cart))
                self.cart_items.create(
                    cart=cart,
                    product_id=snapshot.product_id,
                    name=snapshot.name,
                    price=snapshot.price,
                    quantity=command.quantity,
                    image=snapshot.image,
                    position=position,
                )
                increment = snapshot.price * command.quantity
                merged = False
            cart = self.carts.update(cart, total_price=cart.total_price + increment)
            dto = self._to_dto(cart)
        self.logger.info(
            "Item added to cart",
            owner_key=owner_key,
            product_id=command.product_id,
            quantity=command.quantity,
            merged=merged,
            total_price=str(dto.total_price),
        )
        return dto

    def remove_item(self, owner_key: str, product_id: str) -> CartDTO:
        with transaction.atomic():
            cart = self._require_cart(owner_key, for_update=True)
            line = self._require_line(cart, product_id)
            contribution = line.price * line.quantity
            self.cart_items.delete(line)
            cart = self.carts.update(cart, total_price=cart.total_price - contribution)
            dto = self._to_dto(cart)
        self.logger.info(
            "Item removed from cart",
            owner_key=owner_key,
            product_id=product_id,
            total_price=str(dto.total_price),
        )
        return dto

    def remove_items(self, owner_key: str, payload: Dict[str, Any]) -> CartDTO:
        """Drop several lines at once; ids that are not in the cart are ignored."""
        command = RemoveItemsCommand.from_raw(owner_key, payload)
        removed = 0
        with transaction.atomic():
            cart = self._require_cart(owner_key, for_update=True)
            for pid in command.product_ids:
                line = self.cart_items.get_for_cart_product(cart, pid)
                if line:
                    self.cart_items.delete(line)
                    removed += 1
            cart = self._recompute_total(cart)
            dto = self._to_dto(cart)
        self.logger.info(
            "Bulk removal applied",
            owner_key=owner_key,
            requested=len(command.product_ids),
            removed=removed,
        )
        return dto

    def update_quantity(
        self, owner_key: str, product_id: str, payload: Dict[str, Any]
    ) -> CartDTO:
        command = UpdateQuantityCommand.from_raw(owner_key, product_id, payload)
        if command is None:
            raise InvalidInput(
                "quantity must be an integer",
                details={"quantity": (payload or {}).get("quantity")},
            )
        with transaction.atomic():
            cart = self._require_cart(owner_key, for_update=True)
            line = self._require_line(cart, product_id)
            if command.quantity <= 0:
                self.cart_items.delete(line)
            else:
                self.cart_items.update(line, quantity=command.quantity)
            # Recomputed from scratch to avoid drift
            cart = self._recompute_total(cart)
            dto = self._to_dto(cart)
        self.logger.info(
            "Cart quantity updated",
            owner_key=owner_key,
            product_id=command.product_id,
            quantity=command.quantity,
            removed=command.quantity <= 0,
        )
        return dto

    def clear_cart(self, owner_key: str) -> CartDTO:
        with transaction.atomic():
            cart = self._require_cart(owner_key, for_update=True)
            self.cart_items.delete_for_cart(cart)
            cart = self.carts.update(cart, total_price=ZERO)
            dto = self._to_dto(cart)
        self.logger.info("Cart cleared", owner_key=owner_key)
        return dto

    def delete_cart(self, owner_key: str) -> bool:
        """Discard the cart for ``owner_key``. Missing carts are not an error."""
        cart = self.carts.get(owner_key=owner_key)
        if not cart:
            self.logger.debug("Cart delete skipped: no cart", owner_key=owner_key)
            return False
        self.carts.delete(cart)
        self.logger.info("Cart deleted", owner_key=owner_key)
        return True

    def checkout(
        self, owner_key: str, *, actor_id: Optional[int], is_privileged: bool = False
    ):
        if not is_account_key(owner_key):
            self.logger.warning("Checkout rejected for anonymous key", owner_key=owner_key)
            raise CheckoutNotAllowedError(details={"ownerKey": owner_key})
        account_id = account_id_from_key(owner_key)
        if actor_id is None or (actor_id != account_id and not is_privileged):
            self.logger.warning(
                "Checkout rejected for mismatched account",
                owner_key=owner_key,
                actor_id=actor_id,
            )
            raise CheckoutNotAllowedError(details={"ownerKey": owner_key})
        with transaction.atomic():
            cart = self.carts.get_for_update(owner_key)
            lines = self.cart_items.list_for_cart(cart) if cart else []
            if not lines:
                self.logger.info("Checkout rejected: empty cart", owner_key=owner_key)
                raise EmptyCartError(details={"ownerKey": owner_key})
            if cart.account_id is None:
                raise CheckoutNotAllowedError(
                    "No account exists for this owner key",
                    details={"ownerKey": owner_key},
                )
            order = self.orders.place_order(
                account_id=cart.account_id,
                owner_key=owner_key,
                items=self.cart_mapper.item_mapper.many_to_dto(lines),
                total_price=line_total(lines),
            )
            self.cart_items.delete_for_cart(cart)
            self.carts.update(cart, total_price=ZERO)
        self.logger.info(
            "Checkout completed",
            owner_key=owner_key,
            order_id=order.id,
            lines=len(order.items),
        )
        return order
