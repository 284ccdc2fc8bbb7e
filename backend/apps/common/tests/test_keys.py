import pytest

from apps.common import keys


@pytest.mark.parametrize("value", ["1", "42", "123456789"])
def test_account_keys(value):
    assert keys.is_account_key(value)
    assert keys.is_valid_owner_key(value)
    assert keys.account_id_from_key(value) == int(value)


@pytest.mark.parametrize("value", ["0", "007", "-1", "4 2", "", None, 42])
def test_not_account_keys(value):
    assert not keys.is_account_key(value)


def test_anonymous_key_shape():
    assert keys.is_anonymous_key("guest-1700000000000-0123456789ab")
    assert not keys.is_anonymous_key("guest-1700000000000-0123456789AB")
    assert not keys.is_anonymous_key("guest-abc-0123456789ab")
    assert not keys.is_anonymous_key("guest-1700000000000-0123")
    assert keys.account_id_from_key("guest-1700000000000-0123456789ab") is None


def test_product_ids():
    assert keys.is_valid_product_id("0123456789abcdef01234567")
    assert keys.is_valid_product_id("0123456789ABCDEF01234567")
    assert not keys.is_valid_product_id("0123456789abcdef0123456")
    assert not keys.is_valid_product_id("zz23456789abcdef01234567")
    assert keys.normalize_product_id("ABCDEF0123456789ABCDEF01") == "abcdef0123456789abcdef01"


def test_account_key_for_user_id():
    assert keys.account_key_for(7) == "7"
    assert keys.account_key_for("12") == "12"
