"""Game mode definition structures."""
from __future__ import annotations

from dataclasses import dataclass

EVOLUTION_MODE_ID = "set-3"
FULL_POWER_MODE_ID = "set-2"


@dataclass(frozen=True, slots=True)
class GameModeDef:
    """Fixed rules for a match: roster size, evolution and starting HP."""

    id: str
    name: str
    description: str
    player_creature_count: int
    evolution_turns_required: float
    allow_evolution: bool
    starting_hp: int

    @property
    def is_full_power(self) -> bool:
        # One printed stage-3 card per side, no evolution or tagging.
        return self.id == FULL_POWER_MODE_ID

    @property
    def is_evolution_clash(self) -> bool:
        return self.id == EVOLUTION_MODE_ID

    @property
    def uses_template_hp(self) -> bool:
        return self.is_full_power

    @property
    def allows_tagging(self) -> bool:
        return self.is_evolution_clash
