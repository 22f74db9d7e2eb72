"""Repository exports."""

from .creatures_repo import CreaturesRepository, make_creature_id
from .game_modes_repo import GameModesRepository

__all__ = [
    "CreaturesRepository",
    "GameModesRepository",
    "make_creature_id",
]
