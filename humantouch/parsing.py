"""Value parsers shared by the YAML config loader and CLI option handling."""

from __future__ import annotations

from typing import Sequence

_BOOLEAN_TOKENS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def strip_to_none(value: object) -> str | None:
    """Return `value` as stripped text, or `None` when it is missing or blank."""

    text = "" if value is None else str(value).strip()
    return text or None


def parse_permissive_boolean(value: object) -> bool | None:
    """Map a boolean or a yes/no style token to a bool; unknown tokens give `None`."""

    if isinstance(value, bool):
        return value
    token = strip_to_none(value)
    return None if token is None else _BOOLEAN_TOKENS.get(token.lower())


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or numeric text token.

    Raises:
        ValueError: If the value is not an integer greater than zero.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = strip_to_none(value)
        if normalized is None or not normalized.isdigit():
            raise ValueError(f"`{field_name}` must be a positive integer.")
        parsed = int(normalized)
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_string_list(value: object, field_name: str) -> tuple[str, ...]:
    """Parse a list of non-empty strings from a sequence or comma-separated text.

    Blank items are dropped; order and duplicates are preserved.

    Raises:
        ValueError: If the value is neither text nor a sequence of scalar values.
    """

    if isinstance(value, str):
        items: Sequence[object] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError(f"`{field_name}` must be a list of strings.")

    parsed: list[str] = []
    for item in items:
        if isinstance(item, (dict, list, tuple)):
            raise ValueError(f"`{field_name}` must be a list of strings.")
        normalized = strip_to_none(item)
        if normalized is not None:
            parsed.append(normalized)
    return tuple(parsed)
