"""Opponent turn policy."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from elementara.core.rng import RNG
from elementara.data.repositories import CreaturesRepository
from elementara.domain.battle_models import BattleState

logger = logging.getLogger(__name__)

OpponentActionType = Literal["evolve", "tag_out", "roll", "wait"]

TAG_OUT_WHEN_WEAK_CHANCE = 0.7


@dataclass(frozen=True, slots=True)
class OpponentDecision:
    action: OpponentActionType
    bench_instance_id: str | None = None


def is_opponent_turn_ready(state: BattleState) -> bool:
    """True when the opponent may act: its turn, nothing pending, nobody mid-roll."""
    return (
        state.phase == "inGame"
        and state.turn == "opponent"
        and not state.is_rolling
        and not state.is_game_over
        and not state.has_rolled_this_turn
        and state.replacement_phase_for_player is None
        and not state.is_tagging_out
    )


def decide_opponent_action(state: BattleState, creatures_repo: CreaturesRepository, rng: RNG) -> OpponentDecision:
    if not is_opponent_turn_ready(state):
        return OpponentDecision("wait")

    opponent_active = state.opponent.active_creature
    player_active = state.player.active_creature
    mode = state.selected_mode
    if opponent_active is None or player_active is None or mode is None:
        return OpponentDecision("wait")

    if mode.is_evolution_clash:
        if (
            mode.allow_evolution
            and creatures_repo.get_next_evolution(opponent_active) is not None
            and opponent_active.turns_survived >= mode.evolution_turns_required
        ):
            logger.info("Opponent attempts to evolve!")
            return OpponentDecision("evolve")

        living_bench = state.opponent.living_bench()
        is_weak = opponent_active.weakness is not None and opponent_active.weakness == player_active.element
        if is_weak and living_bench and rng.chance(TAG_OUT_WHEN_WEAK_CHANCE):
            logger.info("Opponent tags out to avoid weakness!")
            return OpponentDecision("tag_out", bench_instance_id=living_bench[0].instance_id)

    logger.info("Opponent rolls the dice.")
    return OpponentDecision("roll")
