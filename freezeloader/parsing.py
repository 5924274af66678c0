"""Value normalization shared by the config loader, launcher overrides and CLI."""

from __future__ import annotations

_FLAG_TOKENS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def normalize_override(value: object) -> str | None:
    """Return `value` as a stripped string, or `None` when it is unset or blank.

    Environment overrides such as `PYTHONHOME=""` count as absent, so callers
    only ever see a usable value or `None`.
    """

    if value is None:
        return None
    return str(value).strip() or None


def parse_flag(value: object) -> bool | None:
    """Parse a config flag from a boolean or a token like `yes`/`off`.

    Returns `None` when the value is not a recognized flag.
    """

    if isinstance(value, bool):
        return value
    token = normalize_override(value)
    if token is None:
        return None
    return _FLAG_TOKENS.get(token.lower())
