"""Persistent key/value storage for the client.

Values are strings, the same contract as browser ``localStorage``; callers
serialise structured data themselves.
"""
import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from apps.common import get_logger

logger = get_logger(__name__).bind(component="cartclient", layer="storage")


class LocalStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """All keys live in one JSON object at ``<directory>/storage.json``."""

    FILENAME = "storage.json"

    def __init__(self, directory: Union[str, Path]):
        self.path = Path(directory) / self.FILENAME
        self._data = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable storage file, starting empty", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file is not an object, starting empty", path=str(self.path))
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._data), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()
