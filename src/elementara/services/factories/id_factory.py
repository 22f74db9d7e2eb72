"""Utilities for creating deterministic instance identifiers."""
from __future__ import annotations

from typing import MutableSet

from elementara.core.rng import RNG

_MAX_ATTEMPTS = 1000


def make_instance_id(prefix: str, rng: RNG, issued: MutableSet[str] | None = None) -> str:
    """Generate a deterministic identifier using the provided RNG.

    When ``issued`` is given the id is guaranteed not to be in it and is
    recorded there, so damage animations can always target a single card.
    """
    for _ in range(_MAX_ATTEMPTS):
        candidate = f"{prefix}_{rng.randint(100000, 999999)}"
        if issued is None:
            return candidate
        if candidate not in issued:
            issued.add(candidate)
            return candidate
    raise RuntimeError(f"Could not issue a fresh '{prefix}' id after {_MAX_ATTEMPTS} attempts.")
