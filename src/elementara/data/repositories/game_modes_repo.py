"""Game modes repository."""
from __future__ import annotations

import math
from typing import Dict

from elementara.data.errors import DataValidationError
from elementara.data.repositories.base import RepositoryBase
from elementara.domain.defs import GameModeDef


class GameModesRepository(RepositoryBase[GameModeDef]):
    """Loads the fixed match modes from game_modes.json."""

    def __init__(self, base_path=None) -> None:
        super().__init__("game_modes.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, GameModeDef]:
        modes: Dict[str, GameModeDef] = {}
        for mode_id, payload in raw.items():
            context = f"game mode '{mode_id}'"
            mode_data = self._require_mapping(payload, context)
            self._assert_exact_fields(
                mode_data,
                {
                    "name",
                    "description",
                    "player_creature_count",
                    "evolution_turns_required",
                    "allow_evolution",
                    "starting_hp",
                },
                context,
            )
            count = self._require_int(mode_data["player_creature_count"], f"{context} player_creature_count")
            if count < 1:
                raise DataValidationError(f"{context} player_creature_count must be at least 1.")
            modes[mode_id] = GameModeDef(
                id=mode_id,
                name=self._require_str(mode_data["name"], f"{context} name"),
                description=self._require_str(mode_data["description"], f"{context} description"),
                player_creature_count=count,
                evolution_turns_required=self._parse_turns_required(
                    mode_data["evolution_turns_required"], context
                ),
                allow_evolution=self._require_bool(mode_data["allow_evolution"], f"{context} allow_evolution"),
                starting_hp=self._require_int(mode_data["starting_hp"], f"{context} starting_hp"),
            )
        return modes

    def _parse_turns_required(self, value: object, context: str) -> float:
        # null in JSON means the mode never allows a creature to evolve.
        if value is None:
            return math.inf
        turns = self._require_int(value, f"{context} evolution_turns_required")
        if turns < 0:
            raise DataValidationError(f"{context} evolution_turns_required must be non-negative.")
        return turns
