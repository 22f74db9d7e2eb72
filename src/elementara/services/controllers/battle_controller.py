"""UI-agnostic battle controller that separates state progression from rendering."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal

from elementara.core.rng import RNG
from elementara.data.repositories import CreaturesRepository
from elementara.domain.battle_models import BattleState
from elementara.services.battle_service import (
    ActionRejectedEvent,
    BattleEvent,
    BattleService,
    PacingHintEvent,
)
from elementara.services.opponent_ai import decide_opponent_action, is_opponent_turn_ready
from elementara.services.setup_service import SetupResult, SetupService

logger = logging.getLogger(__name__)

BattleActionType = Literal["roll", "evolve", "tag_out", "start_tag_out", "cancel_tag_out", "replace"]


@dataclass(slots=True)
class BattleAction:
    """Represents a structured action decision from the player."""

    action_type: BattleActionType
    bench_instance_id: str | None = None
    die_value: int | None = None


class BattleController:
    """
    UI-agnostic controller and the only owner of the live ``BattleState``.

    Every transition goes through this object, which swaps in the state the
    services return. It does NOT handle rendering, input prompts or timers;
    pacing arrives as ``PacingHintEvent`` entries in the returned events.

    Responsibilities:
    - Hold the current state (single writer)
    - Forward setup and menu steps to SetupService
    - Apply player actions and the opponent policy through BattleService
    - Report which actions are available to the player
    """

    def __init__(
        self,
        battle_service: BattleService,
        setup_service: SetupService,
        *,
        creatures_repo: CreaturesRepository,
        rng: RNG,
        state: BattleState | None = None,
    ) -> None:
        self._service = battle_service
        self._setup = setup_service
        self._creatures_repo = creatures_repo
        self._rng = rng
        self._state = state if state is not None else setup_service.new_session()

    @property
    def state(self) -> BattleState:
        return self._state

    def _commit(self, result: SetupResult) -> List[BattleEvent]:
        self._state, events = result
        return events

    # -----------------------
    # Setup and menus
    # -----------------------
    def begin(self) -> List[BattleEvent]:
        return self._commit(self._setup.begin(self._state))

    def select_mode(self, mode_id: str) -> List[BattleEvent]:
        return self._commit(self._setup.select_mode(self._state, mode_id))

    def select_challenge(self, endless: bool) -> List[BattleEvent]:
        return self._commit(self._setup.select_challenge(self._state, endless))

    def proceed_from_instructions(self) -> List[BattleEvent]:
        return self._commit(self._setup.proceed_from_instructions(self._state))

    def select_element(self, element: str) -> List[BattleEvent]:
        return self._commit(self._setup.select_element(self._state, element))

    def select_creature(self, creature_id: str) -> List[BattleEvent]:
        return self._commit(self._setup.select_creature(self._state, creature_id))

    def remove_selected_creature(self, index: int) -> List[BattleEvent]:
        return self._commit(self._setup.remove_selected_creature(self._state, index))

    def confirm_roster(self) -> List[BattleEvent]:
        return self._commit(self._setup.confirm_roster(self._state))

    def select_full_power_creature(self, creature_id: str) -> List[BattleEvent]:
        return self._commit(self._setup.select_full_power_creature(self._state, creature_id))

    def resolve_coin_toss(self, heads: bool | None = None) -> List[BattleEvent]:
        return self._commit(self._setup.resolve_coin_toss(self._state, heads))

    def restart(self) -> List[BattleEvent]:
        return self._commit(self._setup.restart(self._state))

    def back_to_menu(self) -> List[BattleEvent]:
        return self._commit(self._setup.back_to_menu(self._state))

    def restart_current_mode(self) -> List[BattleEvent]:
        return self._commit(self._setup.restart_current_mode(self._state))

    # -----------------------
    # Turn queries
    # -----------------------
    def is_player_turn(self) -> bool:
        state = self._state
        return state.phase == "inGame" and not state.is_game_over and state.turn == "player"

    def is_opponent_turn(self) -> bool:
        """True when the opponent policy should run now."""
        return is_opponent_turn_ready(self._state)

    def get_available_actions(self) -> dict:
        """
        Return structured data about what the player may do right now.

        Returns a dict with:
        - can_roll: bool
        - can_evolve: bool
        - can_tag_out: bool
        - needs_replacement: bool
        - is_tagging_out: bool
        - living_bench: List[CreatureInstance]
        """
        state = self._state
        living_bench = state.player.living_bench()
        needs_replacement = state.replacement_phase_for_player == "player"
        player_turn_open = (
            self.is_player_turn()
            and not state.is_rolling
            and not state.has_rolled_this_turn
            and state.replacement_phase_for_player is None
        )
        tagging_allowed = state.selected_mode is not None and state.selected_mode.allows_tagging
        return {
            "can_roll": player_turn_open and not state.is_tagging_out,
            "can_evolve": player_turn_open and not state.is_tagging_out and self._service.can_evolve(state, "player"),
            "can_tag_out": player_turn_open and not state.is_tagging_out and tagging_allowed and bool(living_bench),
            "needs_replacement": needs_replacement,
            "is_tagging_out": state.is_tagging_out,
            "living_bench": living_bench,
        }

    # -----------------------
    # Actions
    # -----------------------
    def apply_player_action(self, action: BattleAction) -> List[BattleEvent]:
        """
        Apply a player action and return the resulting events.

        Illegal moves come back as ``ActionRejectedEvent``; a malformed action raises.
        """
        if action.action_type == "replace":
            if not action.bench_instance_id:
                raise ValueError("Replace action requires bench_instance_id.")
            return self._commit(
                self._service.handle_player_replacement_selection(self._state, action.bench_instance_id)
            )

        if action.action_type == "cancel_tag_out":
            return self._commit(self._service.cancel_tag_out(self._state))

        if action.action_type not in ("roll", "evolve", "tag_out", "start_tag_out"):
            raise ValueError(f"Unknown action type: {action.action_type}")

        if not self.is_player_turn():
            logger.info("Rejected %s: not the player's turn", action.action_type)
            return [ActionRejectedEvent(action=action.action_type, reason="not_your_turn")]

        if action.action_type == "roll":
            return self._commit(self._service.roll_dice(self._state, action.die_value))

        if action.action_type == "evolve":
            return self._commit(self._service.handle_evolution(self._state, "player"))

        if action.action_type == "start_tag_out":
            return self._commit(self._service.start_tag_out(self._state, "player"))

        if not action.bench_instance_id:
            raise ValueError("Tag out action requires bench_instance_id.")
        return self._commit(self._service.handle_tag_out(self._state, "player", action.bench_instance_id))

    def run_opponent_turn(self) -> List[BattleEvent]:
        """Let the opponent policy choose and apply one action."""
        decision = decide_opponent_action(self._state, self._creatures_repo, self._rng)
        if decision.action == "wait":
            return []

        pacing = self._service.pacing
        session = self._state.session
        events: List[BattleEvent] = [
            PacingHintEvent(session=session, step="opponent_think", delay_ms=pacing.opponent_think),
            PacingHintEvent(session=session, step="opponent_action", delay_ms=pacing.opponent_action),
        ]
        if decision.action == "evolve":
            events.extend(self._commit(self._service.handle_evolution(self._state, "opponent")))
        elif decision.action == "tag_out":
            assert decision.bench_instance_id is not None
            events.extend(
                self._commit(self._service.handle_tag_out(self._state, "opponent", decision.bench_instance_id))
            )
        else:
            events.extend(self._commit(self._service.roll_dice(self._state)))
        return events
