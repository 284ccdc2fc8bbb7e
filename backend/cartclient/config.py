import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
# Same lookup order as the Django settings: repository root first, then backend/
_ROOT_ENV = PACKAGE_DIR.parent.parent / ".env"
_LOCAL_ENV = PACKAGE_DIR.parent / ".env"


def _load_env() -> None:
    if _ROOT_ENV.exists():
        load_dotenv(_ROOT_ENV)
    elif _LOCAL_ENV.exists():
        load_dotenv(_LOCAL_ENV)


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    # Unset, empty or "none" means wait indefinitely
    if raw is None or raw.strip() == "" or raw.strip().lower() == "none":
        return None
    return float(raw)


@dataclass(frozen=True)
class CartClientSettings:
    base_url: str = "http://localhost:8000/api/"
    storage_dir: Optional[Path] = None
    timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "CartClientSettings":
        _load_env()
        storage_dir = os.getenv("CARTCLIENT_STORAGE_DIR")
        return cls(
            base_url=os.getenv("CARTCLIENT_BASE_URL", cls.base_url),
            storage_dir=Path(storage_dir) if storage_dir else None,
            timeout=_parse_timeout(os.getenv("CARTCLIENT_TIMEOUT")),
            log_level=os.getenv("CARTCLIENT_LOG_LEVEL", cls.log_level),
        )
