import secrets
import time
from typing import Callable, Optional

from apps.common import get_logger
from apps.common.keys import ANONYMOUS_PREFIX
from .session import SessionState
from .storage import LocalStorage

logger = get_logger(__name__).bind(component="cartclient", layer="identity")

ANONYMOUS_ID_KEY = "guestId"


def new_anonymous_id(now: Optional[Callable[[], float]] = None) -> str:
    millis = int((now or time.time)() * 1000)
    return f"{ANONYMOUS_PREFIX}-{millis}-{secrets.token_hex(6)}"


class IdentityResolver:
    """Picks the owner key for cart calls: the signed-in account, else the anonymous id."""

    def __init__(self, storage: LocalStorage, session: SessionState, clock: Optional[Callable[[], float]] = None):
        self.storage = storage
        self.session = session
        self.clock = clock

    def resolve_owner_key(self) -> str:
        account_id = self.session.current_account_id
        if account_id:
            return account_id
        anonymous = self.anonymous_id()
        if anonymous:
            return anonymous
        anonymous = new_anonymous_id(self.clock)
        self.storage.set(ANONYMOUS_ID_KEY, anonymous)
        logger.info("Generated anonymous owner key", owner_key=anonymous)
        return anonymous

    def anonymous_id(self) -> Optional[str]:
        return self.storage.get(ANONYMOUS_ID_KEY) or None

    def forget_anonymous_id(self) -> None:
        self.storage.remove(ANONYMOUS_ID_KEY)
        logger.debug("Anonymous owner key forgotten")
