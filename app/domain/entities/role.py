"""Domain entity representing an account role."""

from dataclasses import dataclass


@dataclass
class Role:
    """Role held by a user; ``alias`` is the stable lookup key (``admin``, ``member``)."""

    id: int | None
    name: str
    alias: str


__all__ = ["Role"]
