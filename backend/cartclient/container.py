from typing import Optional

import httpx

from apps.common.logger import configure_logging
from .config import CartClientSettings
from .remote import CartStoreClient
from .session import SessionState
from .storage import FileStorage, LocalStorage, MemoryStorage
from .store import CartStore


def build_storage(settings: CartClientSettings) -> LocalStorage:
    if settings.storage_dir is None:
        return MemoryStorage()
    return FileStorage(settings.storage_dir)


def build_cart_store(
    settings: Optional[CartClientSettings] = None,
    *,
    storage: Optional[LocalStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CartStore:
    settings = settings or CartClientSettings.from_env()
    configure_logging(settings.log_level)
    storage = storage or build_storage(settings)
    session = SessionState(storage)
    remote = CartStoreClient(
        settings.base_url,
        token_provider=lambda: session.access_token,
        timeout=settings.timeout,
        transport=transport,
    )
    return CartStore(remote, storage, session)
