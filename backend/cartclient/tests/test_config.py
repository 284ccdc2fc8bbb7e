import tempfile
import unittest
from pathlib import Path

import httpx

from cartclient.config import CartClientSettings
from cartclient.container import build_cart_store
from cartclient.storage import FileStorage, MemoryStorage
from cartclient.tests.fakes import P1, FakeCartServer


def test_defaults_have_no_timeout(monkeypatch):
    for name in ("CARTCLIENT_BASE_URL", "CARTCLIENT_STORAGE_DIR", "CARTCLIENT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    settings = CartClientSettings.from_env()
    assert settings.timeout is None
    assert settings.storage_dir is None
    assert settings.base_url == "http://localhost:8000/api/"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CARTCLIENT_BASE_URL", "https://shop.example/api/")
    monkeypatch.setenv("CARTCLIENT_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("CARTCLIENT_TIMEOUT", "2.5")
    settings = CartClientSettings.from_env()
    assert settings.base_url == "https://shop.example/api/"
    assert settings.storage_dir == Path(tmp_path)
    assert settings.timeout == 2.5


class BuildCartStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_wires_session_token_into_requests(self):
        server = FakeCartServer()
        store = build_cart_store(
            CartClientSettings(base_url="http://testserver/api/"),
            transport=httpx.MockTransport(server.handle),
        )
        self.assertIsInstance(store.cache.storage, MemoryStorage)
        await store.session.login("5", access_token="abc")
        await store.add_to_cart(P1, 1)
        await store.checkout()
        self.assertEqual(len(server.orders), 1)
        await store.remote.aclose()

    async def test_file_storage_when_directory_configured(self):
        with tempfile.TemporaryDirectory() as directory:
            store = build_cart_store(CartClientSettings(storage_dir=Path(directory)))
            self.assertIsInstance(store.cache.storage, FileStorage)
            await store.remote.aclose()
