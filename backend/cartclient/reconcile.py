"""Folding an anonymous cart into the account cart after sign-in.

Lines are replayed one at a time through ``add_item`` so quantities add up
on the server. Progress is written to local storage after every applied
line; an interrupted merge resumes from there without re-adding lines.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from apps.common import get_logger
from apps.common.keys import is_valid_product_id
from .cache import CartCache
from .identity import IdentityResolver
from .models import Cart
from .remote import (
    CartNotFound,
    CartStoreClient,
    CartStoreError,
    CartStoreUnavailable,
    Unauthenticated,
)
from .storage import LocalStorage

logger = get_logger(__name__).bind(component="cartclient", layer="reconcile")

MERGE_PROGRESS_KEY = "cartMergeProgress"

MERGED = "merged"
ADOPTED = "adopted"
PARTIAL = "partial"


@dataclass
class MergeProgress:
    anonymous_id: str
    account_id: str
    items: List[Tuple[str, int]]
    applied: List[str] = field(default_factory=list)

    @property
    def pending(self) -> List[Tuple[str, int]]:
        return [(pid, qty) for pid, qty in self.items if pid not in self.applied]

    def to_json(self) -> str:
        return json.dumps(
            {
                "anonymousId": self.anonymous_id,
                "accountId": self.account_id,
                "items": [{"productId": pid, "quantity": qty} for pid, qty in self.items],
                "applied": self.applied,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "MergeProgress":
        data: Dict[str, Any] = json.loads(raw)
        return cls(
            anonymous_id=str(data["anonymousId"]),
            account_id=str(data["accountId"]),
            items=[(str(i["productId"]), int(i["quantity"])) for i in data["items"]],
            applied=[str(pid) for pid in data.get("applied", [])],
        )


@dataclass
class MergeResult:
    status: str
    account_id: str
    cart: Optional[Cart] = None
    applied: List[str] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return self.status == PARTIAL


class Reconciler:
    def __init__(
        self,
        remote: CartStoreClient,
        cache: CartCache,
        identity: IdentityResolver,
        storage: LocalStorage,
    ):
        self.remote = remote
        self.cache = cache
        self.identity = identity
        self.storage = storage
        self.logger = logger.bind(service="Reconciler")

    def _load_progress(self, anonymous_id: Optional[str], account_id: str) -> Optional[MergeProgress]:
        raw = self.storage.get(MERGE_PROGRESS_KEY)
        if not raw:
            return None
        try:
            progress = MergeProgress.from_json(raw)
        except (ValueError, KeyError, TypeError) as exc:
            self.logger.warning("Dropping unreadable merge marker", error=str(exc))
            self.storage.remove(MERGE_PROGRESS_KEY)
            return None
        if progress.anonymous_id != anonymous_id or progress.account_id != account_id:
            self.logger.info(
                "Ignoring merge marker for another session",
                marker_account=progress.account_id,
                account_id=account_id,
            )
            self.storage.remove(MERGE_PROGRESS_KEY)
            return None
        return progress

    def _start_progress(self, anonymous_id: str, account_id: str) -> MergeProgress:
        cached = self.cache.load()
        items: List[Tuple[str, int]] = []
        if cached.owner_key == anonymous_id:
            for line in cached.items:
                if is_valid_product_id(line.product_id) and line.quantity > 0:
                    items.append((line.product_id, line.quantity))
                else:
                    self.logger.warning("Skipping unmergeable line", product_id=line.product_id)
        return MergeProgress(anonymous_id=anonymous_id, account_id=account_id, items=items)

    async def merge_on_login(self, account_id: Any) -> MergeResult:
        """Move the anonymous cart's lines into ``account_id``'s cart.

        Never raises: failures come back as a ``partial`` result and are
        logged.
        """
        account_key = str(account_id)
        anonymous_id = self.identity.anonymous_id()
        progress = self._load_progress(anonymous_id, account_key)
        if progress is None and anonymous_id:
            progress = self._start_progress(anonymous_id, account_key)
        resumed = bool(progress and progress.applied)
        self.logger.info(
            "Merge started",
            account_id=account_key,
            anonymous_id=anonymous_id,
            lines=len(progress.items) if progress else 0,
            resumed=resumed,
        )

        if progress and progress.pending:
            self.storage.set(MERGE_PROGRESS_KEY, progress.to_json())
            for product_id, quantity in progress.pending:
                try:
                    await self.remote.add_item(account_key, product_id, quantity)
                except (CartStoreUnavailable, Unauthenticated) as exc:
                    self.logger.warning(
                        "Merge interrupted",
                        account_id=account_key,
                        product_id=product_id,
                        applied=len(progress.applied),
                        error=str(exc),
                    )
                    return MergeResult(
                        status=PARTIAL,
                        account_id=account_key,
                        applied=list(progress.applied),
                        pending=[pid for pid, _ in progress.pending],
                        error=str(exc),
                    )
                except CartStoreError as exc:
                    # The server refused this line for good (e.g. product gone)
                    self.logger.warning(
                        "Merge line rejected", product_id=product_id, code=exc.code, error=str(exc)
                    )
                progress.applied.append(product_id)
                self.storage.set(MERGE_PROGRESS_KEY, progress.to_json())

        try:
            cart = await self.remote.fetch_cart(account_key)
        except CartNotFound:
            cart = Cart.empty(account_key)
        except CartStoreError as exc:
            self.logger.warning("Merged cart fetch failed", account_id=account_key, error=str(exc))
            return MergeResult(
                status=PARTIAL,
                account_id=account_key,
                applied=list(progress.applied) if progress else [],
                error=str(exc),
            )
        self.cache.save(cart)
        self.storage.remove(MERGE_PROGRESS_KEY)

        if anonymous_id:
            try:
                await self.remote.delete_cart(anonymous_id)
            except CartStoreError as exc:
                self.logger.warning("Anonymous cart delete failed", owner_key=anonymous_id, error=str(exc))
            self.identity.forget_anonymous_id()

        status = MERGED if progress and progress.items else ADOPTED
        self.logger.info("Merge finished", account_id=account_key, status=status, items=len(cart.items))
        return MergeResult(
            status=status,
            account_id=account_key,
            cart=cart,
            applied=list(progress.applied) if progress else [],
        )
