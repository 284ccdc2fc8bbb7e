"""Async HTTP client for the ``/api/carts/`` endpoints.

Server error envelopes are mapped onto the exception classes below so the
store can tell semantic failures from transport ones.
"""
from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from apps.common import get_logger
from .models import Cart, Order

logger = get_logger(__name__).bind(component="cartclient", layer="remote")


class CartStoreError(Exception):
    def __init__(self, message: str = "", *, code: Optional[str] = None, status: Optional[int] = None, details: Any = None):
        super().__init__(message or code or self.__class__.__name__)
        self.message = message
        self.code = code
        self.status = status
        self.details = details


class CartNotFound(CartStoreError):
    pass


class CartItemNotFound(CartNotFound):
    pass


class Unauthenticated(CartStoreError):
    pass


class EmptyCart(CartStoreError):
    pass


class InvalidCartRequest(CartStoreError):
    pass


class CartStoreUnavailable(CartStoreError):
    """Transport failure, 5xx, or a response the client cannot interpret."""


def _error_from_response(response: httpx.Response) -> CartStoreError:
    try:
        body = response.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    error = error if isinstance(error, dict) else {}
    code = error.get("code")
    message = error.get("message") or response.reason_phrase
    details = error.get("details")
    status = response.status_code
    kwargs = {"code": code, "status": status, "details": details}
    if status == 404:
        if isinstance(details, dict) and "productId" in details:
            return CartItemNotFound(message, **kwargs)
        return CartNotFound(message, **kwargs)
    if status in (401, 403):
        return Unauthenticated(message, **kwargs)
    if status == 409 and code == "EMPTY_CART":
        return EmptyCart(message, **kwargs)
    if status == 400:
        return InvalidCartRequest(message, **kwargs)
    return CartStoreUnavailable(message, **kwargs)


class CartStoreClient:
    def __init__(
        self,
        base_url: str,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # No timeout unless configured: a hung call stays pending
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._token_provider = token_provider
        self.logger = logger.bind(client="CartStoreClient")

    async def __aenter__(self) -> "CartStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        try:
            response = await self._http.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            self.logger.warning("Cart store unreachable", method=method, path=path, error=str(exc))
            raise CartStoreUnavailable(str(exc)) from exc
        if response.is_success:
            return response
        error = _error_from_response(response)
        self.logger.info(
            "Cart store rejected request",
            method=method,
            path=path,
            status=response.status_code,
            code=error.code,
        )
        raise error

    async def _cart(self, method: str, path: str, json: Any = None) -> Cart:
        response = await self._request(method, path, json=json)
        try:
            return Cart.from_dict(response.json(), provisional=False)
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            raise CartStoreUnavailable(f"Unexpected cart payload: {exc}") from exc

    async def fetch_cart(self, owner_key: str) -> Cart:
        return await self._cart("GET", f"carts/{owner_key}/")

    async def add_item(self, owner_key: str, product_id: str, quantity: int) -> Cart:
        return await self._cart(
            "POST", f"carts/{owner_key}/items/", json={"productId": product_id, "quantity": quantity}
        )

    async def remove_item(self, owner_key: str, product_id: str) -> Cart:
        return await self._cart("DELETE", f"carts/{owner_key}/items/{product_id}/")

    async def remove_items(self, owner_key: str, product_ids: Iterable[str]) -> Cart:
        return await self._cart(
            "POST", f"carts/{owner_key}/items/remove/", json={"productIds": list(product_ids)}
        )

    async def update_quantity(self, owner_key: str, product_id: str, quantity: int) -> Cart:
        return await self._cart(
            "PATCH", f"carts/{owner_key}/items/{product_id}/", json={"quantity": quantity}
        )

    async def clear(self, owner_key: str) -> Cart:
        return await self._cart("POST", f"carts/{owner_key}/clear/")

    async def delete_cart(self, owner_key: str) -> None:
        await self._request("DELETE", f"carts/{owner_key}/")

    async def checkout(self, owner_key: str) -> Order:
        response = await self._request("POST", f"carts/{owner_key}/checkout/")
        try:
            return Order.from_dict(response.json()["order"])
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            raise CartStoreUnavailable(f"Unexpected order payload: {exc}") from exc
