"""Dice outcomes and the damage formula.

The formula is applied in a fixed order; the steps are not commutative
because the result is clamped only at the very end:

1. base damage from the die
2. attacker evolution buff (+10 at stage 2, +20 at stage 3)
3. AI difficulty buff, opponent attacks only (+difficulty - 1)
4. weakness (+10) or resistance (-10), skipped on a critical miss
5. defender evolution guard (-10 at stage 2, -20 at stage 3)
6. clamp to zero
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from elementara.core.types import Side
from elementara.domain.battle_models import CreatureInstance

HitKind = Literal["critical_miss", "normal_hit", "strong_hit", "critical_hit"]

CRITICAL_MISS_SELF_DAMAGE = 10
NORMAL_HIT_DAMAGE = 20
STRONG_HIT_DAMAGE = 30
CRITICAL_HIT_DAMAGE = 50
ELEMENT_MODIFIER = 10
STAGE_MODIFIER = {1: 0, 2: 10, 3: 20}
AFTERSHOCK_DAMAGE = 10


@dataclass(frozen=True, slots=True)
class RollOutcome:
    """What a die face does once the die lands."""

    value: int
    kind: HitKind
    base_damage: int

    @property
    def targets_self(self) -> bool:
        return self.kind == "critical_miss"

    @property
    def forfeits_next_turn(self) -> bool:
        return self.kind == "critical_hit"

    @property
    def label(self) -> str:
        return self.kind.replace("_", " ").title()


def resolve_roll(value: int) -> RollOutcome:
    if value == 1:
        return RollOutcome(value, "critical_miss", CRITICAL_MISS_SELF_DAMAGE)
    if value in (2, 3):
        return RollOutcome(value, "normal_hit", NORMAL_HIT_DAMAGE)
    if value in (4, 5):
        return RollOutcome(value, "strong_hit", STRONG_HIT_DAMAGE)
    if value == 6:
        return RollOutcome(value, "critical_hit", CRITICAL_HIT_DAMAGE)
    raise ValueError(f"Die value must be between 1 and 6, got {value}.")


@dataclass(frozen=True, slots=True)
class DamageBreakdown:
    base: int
    attacker_stage_bonus: int
    difficulty_bonus: int
    element_modifier: int
    defender_stage_guard: int
    final: int

    @property
    def is_weakness_hit(self) -> bool:
        return self.element_modifier > 0

    @property
    def is_resisted(self) -> bool:
        return self.element_modifier < 0


def difficulty_bonus(turn: Side, ai_difficulty: int) -> int:
    """Extra damage the AI adds to its own attacks. The player never gets it."""
    if turn != "opponent":
        return 0
    return ai_difficulty - 1


def compute_damage(
    attacker: CreatureInstance,
    defender: CreatureInstance,
    base_damage: int,
    *,
    is_critical_miss: bool = False,
    turn: Side = "player",
    ai_difficulty: int = 1,
) -> DamageBreakdown:
    damage = base_damage

    attacker_bonus = STAGE_MODIFIER.get(attacker.stage, 0)
    damage += attacker_bonus

    ai_bonus = difficulty_bonus(turn, ai_difficulty)
    damage += ai_bonus

    element_modifier = 0
    if not is_critical_miss:
        if defender.weakness is not None and defender.weakness == attacker.element:
            element_modifier = ELEMENT_MODIFIER
        elif defender.resistance is not None and defender.resistance == attacker.element:
            element_modifier = -ELEMENT_MODIFIER
    damage += element_modifier

    defender_guard = STAGE_MODIFIER.get(defender.stage, 0)
    damage -= defender_guard

    return DamageBreakdown(
        base=base_damage,
        attacker_stage_bonus=attacker_bonus,
        difficulty_bonus=ai_bonus,
        element_modifier=element_modifier,
        defender_stage_guard=defender_guard,
        final=max(0, damage),
    )
