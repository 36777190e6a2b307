"""Normalization of externally supplied record identifiers."""

from __future__ import annotations

from typing import Any


def normalize_identifier(value: Any) -> int | None:
    """Return ``value`` as a store identifier or ``None`` when unresolvable.

    Positive integers and their decimal string forms are accepted. Booleans,
    blank strings and any other shape are rejected.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        candidate = value.strip()
        if not (candidate.isascii() and candidate.isdigit()):
            return None
        number = int(candidate)
        return number if number > 0 else None
    return None


__all__ = ["normalize_identifier"]
