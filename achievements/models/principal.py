from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated JWT.

    The store never authenticates anything itself; it only compares
    ``user_id`` for equality against record owners and the admin principal.
    """

    user_id: str
