# tests/test_phone.py
import pytest

from app.services import coerce_bool, normalize_phone


@pytest.mark.parametrize("raw", ["9876543210", "919876543210", "+919876543210", "+91 98765-43210", "(98765) 43210"])
def test_equivalent_forms_share_canonical_value(raw):
    assert normalize_phone(raw) == "+919876543210"


def test_long_numbers_keep_last_ten_digits():
    assert normalize_phone("0 98765 43210") == "+919876543210"
    assert normalize_phone("0044 98765 43210") == "+919876543210"


def test_short_numbers_get_country_code():
    assert normalize_phone("12345") == "+9112345"


def test_ten_digits_starting_with_country_code():
    assert normalize_phone("9123456789") == "+919123456789"


@pytest.mark.parametrize("raw", ["", "   ", "n/a", None])
def test_no_digits_normalizes_to_empty(raw):
    assert normalize_phone(raw) == ""


@pytest.mark.parametrize("raw", [
    "9876543210", "919876543210", "+919876543210", "12345", "+1 555 123 4567",
    "0 98765 43210", "9123456789", "91234", "+91", "abc", "", "9198765432101",
])
def test_normalization_is_idempotent(raw):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once


def test_coerce_bool():
    assert coerce_bool(True) is True
    assert coerce_bool("true") is True
    assert coerce_bool("TRUE ") is True
    assert coerce_bool("yes") is False
    assert coerce_bool("1") is False
    assert coerce_bool(None) is False
    assert coerce_bool(False) is False
