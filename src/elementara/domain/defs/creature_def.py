"""Creature template structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from elementara.core.types import Element


@dataclass(frozen=True, slots=True)
class CreatureDef:
    """Immutable catalog entry for one stage of an evolution line."""

    id: str
    name: str
    element: Element
    max_hp: int
    weakness: Element | None
    resistance: Element | None
    ability: str
    stage: int
    evolution_line: Tuple[str, ...]
    line_name: str = ""
