"""Unit tests for override and flag value normalization."""

import pytest

from freezeloader.parsing import normalize_override, parse_flag


def test_normalize_override_treats_blank_values_as_absent() -> None:
    """Unset, empty and whitespace-only overrides should normalize to `None`."""

    assert normalize_override(None) is None
    assert normalize_override("") is None
    assert normalize_override("   ") is None


def test_normalize_override_strips_usable_values() -> None:
    """Usable overrides should be stripped and converted to text."""

    assert normalize_override("  /opt/home  ") == "/opt/home"
    assert normalize_override(42) == "42"


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("TrUe", True),
        ("  ON ", True),
        ("YeS", True),
        ("1", True),
        ("FALSE", False),
        (" oFf ", False),
        ("nO", False),
        ("0", False),
        (True, True),
        (False, False),
    ],
)
def test_parse_flag_accepts_mixed_case_tokens(token: object, expected: bool) -> None:
    """Flag parser should accept the documented tokens in any case."""

    assert parse_flag(token) is expected


@pytest.mark.parametrize("token", [None, "", "maybe", "2"])
def test_parse_flag_rejects_unknown_tokens(token: object) -> None:
    """Unknown or blank tokens should parse to `None`."""

    assert parse_flag(token) is None
