"""Ephemeral identity bound to a realtime connection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConnectionIdentity:
    """Verified identity of a realtime client, never persisted."""

    user_id: int
    role: str | None = None


__all__ = ["ConnectionIdentity"]
