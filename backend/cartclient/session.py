import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union

from apps.common import get_logger
from .storage import LocalStorage

logger = get_logger(__name__).bind(component="cartclient", layer="session")

USER_ID_KEY = "userId"

Listener = Callable[["SessionTransition"], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class SessionTransition:
    previous: Optional[str]
    current: Optional[str]

    @property
    def became_authenticated(self) -> bool:
        return self.previous is None and self.current is not None

    @property
    def logged_out(self) -> bool:
        return self.previous is not None and self.current is None

    @property
    def switched_account(self) -> bool:
        return None not in (self.previous, self.current) and self.previous != self.current


class SessionState:
    """Current account id plus a change event for interested parties.

    The id survives restarts through ``userId`` in local storage. The access
    token is held in memory only; issuing it is the login endpoint's job.
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.access_token: Optional[str] = None
        self._listeners: List[Listener] = []
        self.logger = logger.bind(service="SessionState")

    @property
    def current_account_id(self) -> Optional[str]:
        return self.storage.get(USER_ID_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.current_account_id is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def login(self, account_id: Any, access_token: Optional[str] = None) -> Optional[SessionTransition]:
        self.access_token = access_token
        return await self._change(str(account_id))

    async def logout(self) -> Optional[SessionTransition]:
        self.access_token = None
        return await self._change(None)

    async def _change(self, account_id: Optional[str]) -> Optional[SessionTransition]:
        previous = self.current_account_id
        if previous == account_id:
            return None
        if account_id is None:
            self.storage.remove(USER_ID_KEY)
        else:
            self.storage.set(USER_ID_KEY, account_id)
        transition = SessionTransition(previous=previous, current=account_id)
        self.logger.info("Session changed", previous=previous, current=account_id)
        for listener in list(self._listeners):
            result = listener(transition)
            if inspect.isawaitable(result):
                await result
        return transition
