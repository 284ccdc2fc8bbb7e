"""Owner-key and product-id formats shared by the server and ``cartclient``.

An owner key is either an account key (the user's primary key in decimal) or
an anonymous key generated on the client: ``guest-<epoch ms>-<12 hex>``.
Product ids are opaque 24-character hex strings.
"""
import re
from typing import Any, Optional

ANONYMOUS_PREFIX = "guest"

ACCOUNT_KEY_RE = re.compile(r"^[1-9][0-9]{0,18}$")
ANONYMOUS_KEY_RE = re.compile(r"^guest-[0-9]{10,16}-[0-9a-f]{12}$")
PRODUCT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

OWNER_KEY_PATTERN = r"[0-9A-Za-z-]{1,64}"
PRODUCT_ID_PATTERN = r"[0-9A-Za-z]{1,64}"


def is_account_key(value: Any) -> bool:
    return isinstance(value, str) and bool(ACCOUNT_KEY_RE.match(value))


def is_anonymous_key(value: Any) -> bool:
    return isinstance(value, str) and bool(ANONYMOUS_KEY_RE.match(value))


def is_valid_owner_key(value: Any) -> bool:
    return is_account_key(value) or is_anonymous_key(value)


def is_valid_product_id(value: Any) -> bool:
    return isinstance(value, str) and bool(PRODUCT_ID_RE.match(value))


def account_key_for(user_id: Any) -> str:
    return str(int(user_id))


def account_id_from_key(owner_key: str) -> Optional[int]:
    return int(owner_key) if is_account_key(owner_key) else None


def normalize_product_id(value: str) -> str:
    return value.lower()
