"""Deterministic HP scaling and post-battle healing helpers."""
from __future__ import annotations

import math

from elementara.domain.defs import CreatureDef, GameModeDef

# Endless mode is the only difficulty ruler. Each consecutive win adds a flat
# 10% to every opponent's max HP; the AI damage buff lives in domain.damage.
HP_BUFF_PER_WIN = 0.1

# Post-win recovery for the player's roster.
REVIVE_FRACTION = 0.5
HEAL_FLOOR_FRACTION = 0.75


def effective_max_hp(template: CreatureDef, mode: GameModeDef) -> int:
    """Starting max HP for a card: printed HP in Full Power, the mode baseline otherwise."""
    if mode.uses_template_hp:
        return template.max_hp
    return mode.starting_hp


def scale_opponent_hp(base_hp: int, win_count: int) -> int:
    wins = max(0, win_count)
    return math.floor(base_hp * (1 + wins * HP_BUFF_PER_WIN))


def recover_after_win(current_hp: int, max_hp: int) -> int:
    """Revive a knocked-out creature at half HP, or top up to 75% without ever reducing HP."""
    if current_hp <= 0:
        return math.floor(max_hp * REVIVE_FRACTION)
    healed = max(current_hp, math.floor(max_hp * HEAL_FLOOR_FRACTION))
    return min(healed, max_hp)
