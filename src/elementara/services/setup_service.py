"""Menu, roster selection and coin toss: everything before the first roll."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import List, MutableSet, Sequence, Tuple

from elementara.core.rng import RNG
from elementara.core.types import ELEMENTS, CoinFace, GamePhase, Side
from elementara.data.repositories import CreaturesRepository, GameModesRepository
from elementara.domain.battle_models import BattleState, RosterSlot
from elementara.domain.pacing import BattlePacing
from elementara.services.battle_service import ActionRejectedEvent, BattleEvent, PacingHintEvent
from elementara.services.factories import create_roster
from elementara.services.progression_service import ProgressionService

logger = logging.getLogger(__name__)

SetupResult = Tuple[BattleState, List[BattleEvent]]


@dataclass(slots=True)
class PhaseChangedEvent(BattleEvent):
    phase: str
    sub_phase: str | None


@dataclass(slots=True)
class RosterSelectionChangedEvent(BattleEvent):
    creature_ids: List[str]


@dataclass(slots=True)
class CoinTossedEvent(BattleEvent):
    result: CoinFace
    first_turn: Side


class SetupService:
    """Walks a session from the title screen to ``inGame``."""

    def __init__(
        self,
        creatures_repo: CreaturesRepository,
        modes_repo: GameModesRepository,
        progression: ProgressionService,
        rng: RNG,
        *,
        pacing: BattlePacing | None = None,
        issued_ids: MutableSet[str] | None = None,
    ) -> None:
        self._creatures_repo = creatures_repo
        self._modes_repo = modes_repo
        self._progression = progression
        self._rng = rng
        self._pacing = pacing or BattlePacing()
        self._issued_ids: MutableSet[str] = issued_ids if issued_ids is not None else set()

    # -----------------------
    # Sessions
    # -----------------------
    def new_session(self) -> BattleState:
        wins = self._progression.load_win_tally()
        trophies = self._progression.load_trophies(mode.id for mode in self._modes_repo.all())
        return BattleState(endless_wins=wins, ai_difficulty=wins + 1, endless_trophies=trophies)

    def restart(self, state: BattleState) -> SetupResult:
        new_state = self._fresh_state(state, phase="setup")
        logger.info("Game restarted. Select a game mode to begin!")
        return new_state, [PhaseChangedEvent(phase="setup", sub_phase=None)]

    def back_to_menu(self, state: BattleState) -> SetupResult:
        new_state = self._fresh_state(state, phase="modeSelection")
        logger.info("Returned to game mode selection.")
        return new_state, [PhaseChangedEvent(phase="modeSelection", sub_phase=None)]

    def restart_current_mode(self, state: BattleState) -> SetupResult:
        """Replay the same mode from its instructions; an endless run starts over at zero wins."""
        if state.selected_mode is None:
            return self.back_to_menu(state)
        new_state = self._fresh_state(state, phase="instructions")
        new_state.selected_mode = state.selected_mode
        new_state.is_endless_mode_active = state.is_endless_mode_active
        if state.is_endless_mode_active:
            self._progression.save_win_tally(0)
            wins = 0
        else:
            wins = state.endless_wins
        new_state.endless_wins = wins
        new_state.ai_difficulty = wins + 1
        logger.info("Restarting current game mode.")
        return new_state, [PhaseChangedEvent(phase="instructions", sub_phase=None)]

    def _fresh_state(self, state: BattleState, *, phase: GamePhase) -> BattleState:
        wins = self._progression.load_win_tally()
        return BattleState(
            phase=phase,
            endless_wins=wins,
            ai_difficulty=wins + 1,
            endless_trophies=dict(state.endless_trophies),
            session=state.session + 1,
        )

    # -----------------------
    # Menus
    # -----------------------
    def begin(self, state: BattleState) -> SetupResult:
        new_state = copy.deepcopy(state)
        if new_state.phase != "setup":
            return self._reject(new_state, "begin", "not_in_setup")
        new_state.phase = "modeSelection"
        return new_state, [PhaseChangedEvent(phase="modeSelection", sub_phase=None)]

    def select_mode(self, state: BattleState, mode_id: str) -> SetupResult:
        new_state = copy.deepcopy(state)
        if new_state.phase != "modeSelection":
            return self._reject(new_state, "select_mode", "not_in_mode_selection")
        mode = self._modes_repo.find(mode_id)
        if mode is None:
            return self._reject(new_state, "select_mode", "unknown_mode")
        new_state.selected_mode = mode
        new_state.selection_sub_phase = "chooseChallengeType"
        logger.info("You selected %s. Choose your challenge.", mode.name)
        return new_state, [PhaseChangedEvent(phase="modeSelection", sub_phase="chooseChallengeType")]

    def select_challenge(self, state: BattleState, endless: bool) -> SetupResult:
        new_state = copy.deepcopy(state)
        if new_state.selected_mode is None or new_state.selection_sub_phase != "chooseChallengeType":
            return self._reject(new_state, "select_challenge", "no_mode_selected")
        wins = self._progression.load_win_tally() if endless else 0
        new_state.is_endless_mode_active = endless
        new_state.endless_wins = wins
        new_state.ai_difficulty = wins + 1
        new_state.phase = "instructions"
        new_state.selection_sub_phase = None
        logger.info("Endless Challenge selected!" if endless else "Standard Match selected.")
        return new_state, [PhaseChangedEvent(phase="instructions", sub_phase=None)]

    def proceed_from_instructions(self, state: BattleState) -> SetupResult:
        new_state = copy.deepcopy(state)
        if new_state.phase != "instructions" or new_state.selected_mode is None:
            return self._reject(new_state, "proceed", "not_in_instructions")
        new_state.phase = "creatureSelection"
        new_state.selection_sub_phase = "chooseElement"
        noun = "creatures" if new_state.selected_mode.player_creature_count > 1 else "creature"
        logger.info("Now choose your %s for battle!", noun)
        return new_state, [PhaseChangedEvent(phase="creatureSelection", sub_phase="chooseElement")]

    # -----------------------
    # Roster selection
    # -----------------------
    def select_element(self, state: BattleState, element: str) -> SetupResult:
        new_state = copy.deepcopy(state)
        mode = new_state.selected_mode
        if new_state.selection_sub_phase != "chooseElement" or mode is None:
            return self._reject(new_state, "select_element", "not_choosing_element")
        if element not in ELEMENTS:
            return self._reject(new_state, "select_element", "unknown_element")

        if mode.is_full_power:
            candidates = self._creatures_repo.get_by_element_and_stage(element, 3)
            sub_phase = "chooseSpecificCreatureForSet2"
        else:
            candidates = self._creatures_repo.get_by_element_and_stage(element, 1)
            sub_phase = "chooseCreature"
        if not candidates:
            logger.info("No %s creatures available. Please choose another element.", element)
            return self._reject(new_state, "select_element", "no_creatures_for_element")

        new_state.current_element_selection = element  # type: ignore[assignment]
        new_state.creatures_to_choose_from = [creature.id for creature in candidates]
        new_state.selection_sub_phase = sub_phase  # type: ignore[assignment]
        logger.info("You chose the %s element. Now pick a creature.", element)
        return new_state, [PhaseChangedEvent(phase="creatureSelection", sub_phase=sub_phase)]

    def select_creature(self, state: BattleState, creature_id: str) -> SetupResult:
        """Add a basic creature to a multi-creature roster."""
        new_state = copy.deepcopy(state)
        mode = new_state.selected_mode
        if mode is None or mode.is_full_power or new_state.selection_sub_phase != "chooseCreature":
            return self._reject(new_state, "select_creature", "not_choosing_creature")
        if creature_id not in new_state.creatures_to_choose_from:
            return self._reject(new_state, "select_creature", "unknown_creature")
        template = self._creatures_repo.get(creature_id)
        selection = new_state.player_selected_creature_ids
        if creature_id in selection:
            logger.info("%s is already in your roster.", template.name)
            return self._reject(new_state, "select_creature", "already_selected")
        if len(selection) >= mode.player_creature_count:
            return self._reject(new_state, "select_creature", "roster_full")

        selection.append(creature_id)
        logger.info("Added %s (%s) to your roster.", template.name, template.element)
        self._after_selection_change(new_state)
        return new_state, [RosterSelectionChangedEvent(creature_ids=list(selection))]

    def remove_selected_creature(self, state: BattleState, index: int) -> SetupResult:
        new_state = copy.deepcopy(state)
        mode = new_state.selected_mode
        if mode is None or mode.is_full_power or new_state.phase != "creatureSelection":
            return self._reject(new_state, "remove_creature", "not_choosing_creature")
        selection = new_state.player_selected_creature_ids
        if not 0 <= index < len(selection):
            return self._reject(new_state, "remove_creature", "index_out_of_range")
        removed = selection.pop(index)
        logger.info("Removed %s from your roster.", self._creatures_repo.get(removed).name)
        new_state.current_element_selection = None
        self._after_selection_change(new_state)
        return new_state, [RosterSelectionChangedEvent(creature_ids=list(selection))]

    def _after_selection_change(self, state: BattleState) -> None:
        assert state.selected_mode is not None
        if len(state.player_selected_creature_ids) < state.selected_mode.player_creature_count:
            state.selection_sub_phase = "chooseElement"
            state.current_element_selection = None
        else:
            state.selection_sub_phase = None

    def confirm_roster(self, state: BattleState) -> SetupResult:
        new_state = copy.deepcopy(state)
        mode = new_state.selected_mode
        if mode is None or mode.is_full_power or new_state.phase != "creatureSelection":
            return self._reject(new_state, "confirm_roster", "not_choosing_creature")
        if len(new_state.player_selected_creature_ids) != mode.player_creature_count:
            logger.info("Please select exactly %s creatures.", mode.player_creature_count)
            return self._reject(new_state, "confirm_roster", "wrong_roster_size")
        events: List[BattleEvent] = []
        self._initialize_rosters(new_state, list(new_state.player_selected_creature_ids), events)
        return new_state, events

    def select_full_power_creature(self, state: BattleState, creature_id: str) -> SetupResult:
        """Pick the single stage-3 creature for a Full Power Duel and go to the coin toss."""
        new_state = copy.deepcopy(state)
        mode = new_state.selected_mode
        if mode is None or not mode.is_full_power or new_state.selection_sub_phase != "chooseSpecificCreatureForSet2":
            return self._reject(new_state, "select_full_power_creature", "not_choosing_creature")
        if creature_id not in new_state.creatures_to_choose_from:
            return self._reject(new_state, "select_full_power_creature", "unknown_creature")
        events: List[BattleEvent] = []
        self._initialize_rosters(new_state, [creature_id], events)
        logger.info("Selected %s for Full Power Duel.", self._creatures_repo.get(creature_id).name)
        return new_state, events

    def _initialize_rosters(self, state: BattleState, creature_ids: Sequence[str], events: List[BattleEvent]) -> None:
        mode = state.selected_mode
        assert mode is not None
        player_creatures = create_roster(
            creature_ids,
            mode,
            creatures_repo=self._creatures_repo,
            rng=self._rng,
            issued_ids=self._issued_ids,
        )
        opponent_creatures = self._progression.generate_opponent_creatures(state.endless_wins, mode)

        state.player = RosterSlot(active_creature=player_creatures[0], bench_creatures=player_creatures[1:])
        state.opponent = RosterSlot(active_creature=opponent_creatures[0], bench_creatures=opponent_creatures[1:])
        state.player.conceal()
        state.opponent.conceal()

        state.phase = "coinToss"
        state.coin_flip_result = None
        state.player_selected_creature_ids = []
        state.selection_sub_phase = None
        state.current_element_selection = None
        state.creatures_to_choose_from = []
        state.battle_number += 1
        events.append(PhaseChangedEvent(phase="coinToss", sub_phase=None))
        events.append(
            PacingHintEvent(session=state.session, step="coin_toss", delay_ms=self._pacing.delay_for("coin_toss"))
        )
        logger.info("Rosters confirmed. Flipping a coin to see who goes first...")

    # -----------------------
    # Coin toss
    # -----------------------
    def resolve_coin_toss(self, state: BattleState, heads: bool | None = None) -> SetupResult:
        """Flip the coin (or use ``heads``), reveal every card and start the battle."""
        new_state = copy.deepcopy(state)
        if new_state.phase != "coinToss":
            return self._reject(new_state, "coin_toss", "not_in_coin_toss")
        if heads is None:
            heads = self._rng.chance(0.5)
        result: CoinFace = "Heads" if heads else "Tails"
        first: Side = "player" if heads else "opponent"

        new_state.coin_flip_result = result
        new_state.turn = first
        new_state.has_rolled_this_turn = False
        new_state.player.reveal()
        new_state.opponent.reveal()
        new_state.phase = "inGame"
        logger.info("Coin toss result: %s! %s first!", result, "You go" if first == "player" else "Opponent goes")
        return new_state, [
            CoinTossedEvent(result=result, first_turn=first),
            PacingHintEvent(
                session=new_state.session, step="coin_result", delay_ms=self._pacing.delay_for("coin_result")
            ),
            PhaseChangedEvent(phase="inGame", sub_phase=None),
        ]

    def _reject(self, state: BattleState, action: str, reason: str) -> SetupResult:
        logger.info("Rejected %s: %s", action, reason)
        return state, [ActionRejectedEvent(action=action, reason=reason)]
