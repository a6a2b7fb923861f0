"""Unit tests for accounts/regions.py -- area code validation."""

import pytest

from accounts.regions import normalize_area
from core.errors import InvalidInput


@pytest.mark.parametrize(
    ("code", "expected"),
    [("ID", "ID"), ("us", "US"), (" de ", "DE"), ("US-CA", "US-CA"), ("id-jk", "ID-JK")],
)
def test_known_codes(code: str, expected: str) -> None:
    assert normalize_area(code) == expected


@pytest.mark.parametrize("code", ["ZZ", "XX-YY", "US-ZZ", "Indonesia", "", "   "])
def test_unknown_codes(code: str) -> None:
    with pytest.raises(InvalidInput):
        normalize_area(code)
