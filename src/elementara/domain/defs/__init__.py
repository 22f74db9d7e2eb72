"""Domain definition exports."""

from .creature_def import CreatureDef
from .game_mode_def import EVOLUTION_MODE_ID, FULL_POWER_MODE_ID, GameModeDef

__all__ = [
    "CreatureDef",
    "EVOLUTION_MODE_ID",
    "FULL_POWER_MODE_ID",
    "GameModeDef",
]
