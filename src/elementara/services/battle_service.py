"""Battle service: the dice-driven turn state machine."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import List, MutableSet, Tuple

from elementara.core.rng import RNG
from elementara.core.types import Side, other_side
from elementara.data.repositories import CreaturesRepository
from elementara.domain.battle_models import BattleState, CreatureInstance, DamageAnimation
from elementara.domain.damage import AFTERSHOCK_DAMAGE, HitKind, compute_damage, resolve_roll
from elementara.domain.pacing import BattlePacing
from elementara.services.factories import create_creature_instance
from elementara.services.progression_service import EndlessProgress, ProgressionService

logger = logging.getLogger(__name__)

CORRUPTION_TURNS = 3

TransitionResult = Tuple[BattleState, List["BattleEvent"]]


@dataclass(slots=True)
class BattleEvent:
    """Base battle event."""


@dataclass(slots=True)
class ActionRejectedEvent(BattleEvent):
    action: str
    reason: str


@dataclass(slots=True)
class PacingHintEvent(BattleEvent):
    """Suggested pause before the next step. ``session`` ties it to one battle."""

    session: int
    step: str
    delay_ms: int


@dataclass(slots=True)
class DiceRolledEvent(BattleEvent):
    side: Side
    value: int
    kind: HitKind


@dataclass(slots=True)
class CorruptionTriggeredEvent(BattleEvent):
    side: Side
    value: int


@dataclass(slots=True)
class CorruptionFadedEvent(BattleEvent):
    side: Side | None


@dataclass(slots=True)
class AttackResolvedEvent(BattleEvent):
    attacker_id: str
    attacker_name: str
    target_id: str
    target_name: str
    damage: int
    target_hp: int
    is_weakness_hit: bool = False
    is_resisted: bool = False


@dataclass(slots=True)
class AftershockEvent(BattleEvent):
    side: Side
    target_id: str
    target_name: str
    damage: int
    target_hp: int


@dataclass(slots=True)
class CreatureKnockedOutEvent(BattleEvent):
    side: Side
    instance_id: str
    name: str


@dataclass(slots=True)
class SkipScheduledEvent(BattleEvent):
    side: Side


@dataclass(slots=True)
class TurnSkippedEvent(BattleEvent):
    side: Side


@dataclass(slots=True)
class TurnEndedEvent(BattleEvent):
    next_turn: Side


@dataclass(slots=True)
class TaggedOutEvent(BattleEvent):
    side: Side
    outgoing_id: str
    outgoing_name: str
    incoming_id: str
    incoming_name: str


@dataclass(slots=True)
class EvolvedEvent(BattleEvent):
    side: Side
    instance_id: str
    from_name: str
    to_name: str


@dataclass(slots=True)
class ReplacementRequiredEvent(BattleEvent):
    side: Side


@dataclass(slots=True)
class CreatureReplacedEvent(BattleEvent):
    side: Side
    incoming_id: str
    incoming_name: str


@dataclass(slots=True)
class BattleResolvedEvent(BattleEvent):
    winner: Side


@dataclass(slots=True)
class EndlessBattleWonEvent(BattleEvent):
    win_tally: int
    ai_difficulty: int


@dataclass(slots=True)
class EndlessRunEndedEvent(BattleEvent):
    final_wins: int
    is_new_record: bool


def _side_label(side: Side) -> str:
    return "Player" if side == "player" else "Opponent"


class BattleService:
    """Turn state machine for one battle, plus the endless-mode hand-offs.

    Every public transition deep-copies the incoming state, applies the
    change and returns ``(new_state, events)``. A rejected action returns
    the untouched copy and a single ``ActionRejectedEvent``.
    """

    def __init__(
        self,
        creatures_repo: CreaturesRepository,
        progression: ProgressionService,
        rng: RNG,
        *,
        pacing: BattlePacing | None = None,
        issued_ids: MutableSet[str] | None = None,
    ) -> None:
        self._creatures_repo = creatures_repo
        self._progression = progression
        self._rng = rng
        self._pacing = pacing or BattlePacing()
        self._issued_ids: MutableSet[str] = issued_ids if issued_ids is not None else set()

    @property
    def pacing(self) -> BattlePacing:
        return self._pacing

    # -----------------------
    # Dice
    # -----------------------
    def roll_dice(self, state: BattleState, value: int | None = None) -> TransitionResult:
        """Roll for the side whose turn it is; ``value`` forces the die face."""
        new_state = copy.deepcopy(state)
        reason = self._roll_block_reason(new_state)
        if reason:
            return self._reject(new_state, "roll", reason)

        events: List[BattleEvent] = []
        side = new_state.turn
        defender_side = other_side(side)

        new_state.is_rolling = True
        new_state.has_rolled_this_turn = True
        new_state.is_tagging_out = False
        new_state.is_critical_hit = False
        new_state.is_critical_miss = False
        self._clear_attack_flags(new_state)
        logger.info("%s rolls the dice...", _side_label(side))
        self._pace(new_state, events, "dice_reveal")

        die = value if value is not None else self._rng.roll_die()
        outcome = resolve_roll(die)

        corrupts = (
            not new_state.is_corrupted
            and new_state.has_evolved(side)
            and new_state.has_evolved(defender_side)
            and new_state.last_die_roll == die
            and new_state.last_die_roll_player == other_side(side)
        )

        new_state.dice_value = die
        new_state.is_rolling = False
        new_state.last_die_roll = die
        new_state.last_die_roll_player = side
        new_state.is_critical_miss = outcome.kind == "critical_miss"
        new_state.is_critical_hit = outcome.kind == "critical_hit"
        events.append(DiceRolledEvent(side=side, value=die, kind=outcome.kind))
        logger.info("Dice rolled: %s!", die)

        if corrupts:
            new_state.is_corrupted = True
            new_state.corrupted_turns_remaining = CORRUPTION_TURNS
            new_state.corrupted_player = side
            events.append(CorruptionTriggeredEvent(side=side, value=die))
            logger.info("The die is corrupted! %s matched the last roll of %s.", _side_label(side), die)

        attacker = new_state.slot(side).active_creature
        defender = new_state.slot(defender_side).active_creature
        assert attacker is not None and defender is not None

        new_state.attacking_side = side
        new_state.defending_side = defender_side
        self._pace(new_state, events, "attack_impact")

        if outcome.targets_self:
            logger.info("Critical miss! %s hurts itself.", attacker.name)
            target, target_side = attacker, side
        else:
            logger.info("%s! %s attacks %s.", outcome.label, attacker.name, defender.name)
            target, target_side = defender, defender_side
        self._apply_damage(
            new_state,
            attacker,
            target,
            target_side,
            outcome.base_damage,
            events,
            is_critical_miss=outcome.targets_self,
        )
        new_state.shaking_side = target_side

        if outcome.forfeits_next_turn:
            new_state.skip_next_turn_for = side
            events.append(SkipScheduledEvent(side=side))
            logger.info("Critical hit! %s will skip their next turn.", _side_label(side))

        self._pace(new_state, events, "turn_advance")
        self._clear_attack_flags(new_state)

        battle_changed = self._check_win_condition(new_state, events)
        self._pace(new_state, events, "win_check_settle")
        if not battle_changed:
            self._end_turn(new_state, events, critical_hit_occurred=outcome.forfeits_next_turn)
        return new_state, events

    def _roll_block_reason(self, state: BattleState) -> str | None:
        if state.phase != "inGame":
            return "not_in_game"
        if state.is_game_over:
            return "game_over"
        if state.is_rolling:
            return "already_rolling"
        if state.has_rolled_this_turn:
            return "already_rolled"
        if state.replacement_phase_for_player is not None:
            return "replacement_pending"
        if state.is_tagging_out:
            return "tagging_out"
        if state.player.active_creature is None or state.opponent.active_creature is None:
            return "missing_active_creature"
        return None

    # -----------------------
    # Damage
    # -----------------------
    def apply_damage(
        self,
        state: BattleState,
        attacker_id: str,
        defender_id: str,
        base_damage: int,
        *,
        is_critical_miss: bool = False,
    ) -> Tuple[BattleState, List[BattleEvent], int]:
        """Hit one in-play creature with another and return the damage dealt."""
        new_state = copy.deepcopy(state)
        attacker, _ = self._find_creature(new_state, attacker_id)
        defender, defender_side = self._find_creature(new_state, defender_id)
        events: List[BattleEvent] = []
        damage = self._apply_damage(
            new_state,
            attacker,
            defender,
            defender_side,
            base_damage,
            events,
            is_critical_miss=is_critical_miss,
        )
        return new_state, events, damage

    def _apply_damage(
        self,
        state: BattleState,
        attacker: CreatureInstance,
        defender: CreatureInstance,
        defender_side: Side,
        base_damage: int,
        events: List[BattleEvent],
        *,
        is_critical_miss: bool,
    ) -> int:
        breakdown = compute_damage(
            attacker,
            defender,
            base_damage,
            is_critical_miss=is_critical_miss,
            turn=state.turn,
            ai_difficulty=state.ai_difficulty,
        )
        if breakdown.is_weakness_hit:
            logger.info("It's super effective! %s is weak to %s.", defender.name, attacker.element)
        elif breakdown.is_resisted:
            logger.info("It's not very effective... %s resists %s.", defender.name, attacker.element)

        defender.take_damage(breakdown.final)
        self._record_damage(state, defender, breakdown.final)
        events.append(
            AttackResolvedEvent(
                attacker_id=attacker.instance_id,
                attacker_name=attacker.name,
                target_id=defender.instance_id,
                target_name=defender.name,
                damage=breakdown.final,
                target_hp=defender.current_hp,
                is_weakness_hit=breakdown.is_weakness_hit,
                is_resisted=breakdown.is_resisted,
            )
        )
        logger.info("%s takes %s damage (%s HP left).", defender.name, breakdown.final, defender.current_hp)
        if defender.is_knocked_out:
            events.append(
                CreatureKnockedOutEvent(side=defender_side, instance_id=defender.instance_id, name=defender.name)
            )
            logger.info("%s was knocked out!", defender.name)
        return breakdown.final

    def _record_damage(self, state: BattleState, creature: CreatureInstance, damage: int) -> None:
        state.animation_sequence += 1
        state.damage_animations.append(
            DamageAnimation(instance_id=creature.instance_id, damage=damage, sequence=state.animation_sequence)
        )
        state.damaged_instance_ids.add(creature.instance_id)

    # -----------------------
    # Win / loss
    # -----------------------
    def check_win_condition(self, state: BattleState) -> TransitionResult:
        new_state = copy.deepcopy(state)
        events: List[BattleEvent] = []
        self._check_win_condition(new_state, events)
        return new_state, events

    def _check_win_condition(self, state: BattleState, events: List[BattleEvent]) -> bool:
        """Resolve knockouts. True when the battle ended or a new endless battle began."""
        mode = state.selected_mode
        if mode is None or state.phase != "inGame" or state.is_game_over:
            return False

        player_lost = False
        opponent_lost = False
        if mode.is_full_power:
            player_lost = self._active_is_down(state, "player")
            opponent_lost = self._active_is_down(state, "opponent")
        else:
            if self._active_is_down(state, "player"):
                if state.player.living_bench():
                    state.replacement_phase_for_player = "player"
                    events.append(ReplacementRequiredEvent(side="player"))
                    logger.info("Player must choose a replacement creature.")
                    return False
                player_lost = True
            if self._active_is_down(state, "opponent"):
                living = state.opponent.living_bench()
                if living:
                    self._replace_active(state, "opponent", self._rng.choice(living), events)
                else:
                    opponent_lost = True

        if opponent_lost:
            if state.is_endless_mode_active:
                self._endless_next_battle_setup(state, events)
            else:
                self._finish_battle(state, "player", events)
            return True
        if player_lost:
            if state.is_endless_mode_active:
                self._endless_run_end(state, events)
            else:
                self._finish_battle(state, "opponent", events)
            return True
        return False

    def _active_is_down(self, state: BattleState, side: Side) -> bool:
        active = state.slot(side).active_creature
        return active is not None and active.is_knocked_out

    def _finish_battle(self, state: BattleState, winner: Side, events: List[BattleEvent]) -> None:
        state.is_game_over = True
        state.winner = winner
        state.phase = "gameOver"
        state.skip_next_turn_for = None
        events.append(BattleResolvedEvent(winner=winner))
        logger.info("%s wins the battle!", _side_label(winner))

    # -----------------------
    # Endless mode
    # -----------------------
    def handle_endless_next_battle_setup(self, state: BattleState) -> TransitionResult:
        new_state = copy.deepcopy(state)
        events: List[BattleEvent] = []
        self._endless_next_battle_setup(new_state, events)
        return new_state, events

    def handle_endless_run_end(self, state: BattleState) -> TransitionResult:
        new_state = copy.deepcopy(state)
        events: List[BattleEvent] = []
        self._endless_run_end(new_state, events)
        return new_state, events

    def _endless_next_battle_setup(self, state: BattleState, events: List[BattleEvent]) -> None:
        mode = state.selected_mode
        assert mode is not None
        progress = self._progression.handle_win(
            EndlessProgress(win_tally=state.endless_wins, ai_difficulty=state.ai_difficulty),
            state.player.all_creatures(),
            mode,
        )
        healed = progress.roster
        state.player.active_creature = healed[0] if healed else None
        state.player.bench_creatures = list(healed[1:])
        state.player.knocked_out = []

        opponents = self._progression.generate_opponent_creatures(progress.win_tally, mode)
        state.opponent.active_creature = opponents[0]
        state.opponent.bench_creatures = list(opponents[1:])
        state.opponent.knocked_out = []

        state.endless_wins = progress.win_tally
        state.ai_difficulty = progress.ai_difficulty
        state.turn = "player"
        state.battle_number += 1
        self._reset_battle_flags(state)
        events.append(EndlessBattleWonEvent(win_tally=progress.win_tally, ai_difficulty=progress.ai_difficulty))
        logger.info(
            "Endless win #%s! A stronger opponent appears (difficulty %s).",
            progress.win_tally,
            progress.ai_difficulty,
        )

    def _endless_run_end(self, state: BattleState, events: List[BattleEvent]) -> None:
        mode = state.selected_mode
        assert mode is not None
        final_wins = state.endless_wins
        trophies, is_record = self._progression.record_trophy(state.endless_trophies, mode.id, final_wins)
        progress = self._progression.handle_loss(
            EndlessProgress(win_tally=final_wins, ai_difficulty=state.ai_difficulty)
        )
        state.endless_trophies = trophies
        state.final_endless_score = final_wins
        state.endless_wins = progress.win_tally
        state.ai_difficulty = progress.ai_difficulty
        self._finish_battle(state, "opponent", events)
        events.append(EndlessRunEndedEvent(final_wins=final_wins, is_new_record=is_record))
        if is_record:
            logger.info("New endless record for %s: %s wins!", mode.name, final_wins)
        logger.info("Endless run over after %s wins.", final_wins)

    def _reset_battle_flags(self, state: BattleState) -> None:
        state.has_rolled_this_turn = False
        state.is_rolling = False
        state.is_game_over = False
        state.winner = None
        state.skip_next_turn_for = None
        state.replacement_phase_for_player = None
        state.is_tagging_out = False
        state.last_die_roll = None
        state.last_die_roll_player = None
        state.is_critical_hit = False
        state.is_critical_miss = False
        state.is_corrupted = False
        state.corrupted_turns_remaining = 0
        state.corrupted_player = None
        state.has_player_evolved = False
        state.has_opponent_evolved = False
        state.damage_animations = []
        state.damaged_instance_ids = set()
        self._clear_attack_flags(state)

    # -----------------------
    # Turn order
    # -----------------------
    def end_turn(self, state: BattleState, critical_hit_occurred: bool = False) -> TransitionResult:
        new_state = copy.deepcopy(state)
        reason = self._end_turn_block_reason(new_state)
        if reason:
            return self._reject(new_state, "end_turn", reason)
        events: List[BattleEvent] = []
        self._end_turn(new_state, events, critical_hit_occurred=critical_hit_occurred)
        return new_state, events

    def _end_turn_block_reason(self, state: BattleState) -> str | None:
        if state.is_game_over:
            return "game_over"
        if state.phase != "inGame":
            return "not_in_game"
        if state.replacement_phase_for_player is not None:
            return "replacement_pending"
        if state.is_tagging_out:
            return "tagging_out"
        return None

    def _end_turn(self, state: BattleState, events: List[BattleEvent], *, critical_hit_occurred: bool = False) -> None:
        if self._end_turn_block_reason(state):
            return
        ending_side = state.turn
        active = state.slot(ending_side).active_creature
        if active is not None:
            active.turns_survived += 1

        if critical_hit_occurred:
            state.skip_next_turn_for = ending_side

        next_turn = other_side(ending_side)
        if state.skip_next_turn_for == next_turn:
            state.skip_next_turn_for = None
            events.append(TurnSkippedEvent(side=next_turn))
            logger.info("%s skips their turn!", _side_label(next_turn))
            next_turn = other_side(next_turn)

        state.turn = next_turn
        state.has_rolled_this_turn = False
        state.is_tagging_out = False
        events.append(TurnEndedEvent(next_turn=next_turn))
        logger.info("%s's turn.", _side_label(next_turn))

        if state.is_corrupted:
            state.corrupted_turns_remaining = max(0, state.corrupted_turns_remaining - 1)
            if state.corrupted_turns_remaining == 0:
                self._end_corruption(state, events)

    def _end_corruption(self, state: BattleState, events: List[BattleEvent]) -> None:
        corrupted_side = state.corrupted_player
        state.is_corrupted = False
        state.corrupted_player = None
        events.append(CorruptionFadedEvent(side=corrupted_side))
        logger.info("The corruption fades...")
        if corrupted_side is None:
            return
        target = state.slot(corrupted_side).active_creature
        if target is None or not target.is_alive:
            return

        self._pace(state, events, "aftershock")
        target.take_damage(AFTERSHOCK_DAMAGE)
        self._record_damage(state, target, AFTERSHOCK_DAMAGE)
        state.shaking_side = corrupted_side
        events.append(
            AftershockEvent(
                side=corrupted_side,
                target_id=target.instance_id,
                target_name=target.name,
                damage=AFTERSHOCK_DAMAGE,
                target_hp=target.current_hp,
            )
        )
        logger.info("The aftershock deals %s damage to %s!", AFTERSHOCK_DAMAGE, target.name)
        if target.is_knocked_out:
            events.append(CreatureKnockedOutEvent(side=corrupted_side, instance_id=target.instance_id, name=target.name))
            logger.info("%s was knocked out!", target.name)
        self._pace(state, events, "aftershock_win_check")
        self._check_win_condition(state, events)

    # -----------------------
    # Evolution-mode actions
    # -----------------------
    def start_tag_out(self, state: BattleState, side: Side = "player") -> TransitionResult:
        new_state = copy.deepcopy(state)
        reason = self._turn_action_block_reason(new_state, side)
        if reason is None and not new_state.slot(side).living_bench():
            reason = "no_living_bench"
        if reason:
            return self._reject(new_state, "start_tag_out", reason)
        new_state.is_tagging_out = True
        return new_state, []

    def cancel_tag_out(self, state: BattleState) -> TransitionResult:
        new_state = copy.deepcopy(state)
        if not new_state.is_tagging_out:
            return self._reject(new_state, "cancel_tag_out", "not_tagging_out")
        new_state.is_tagging_out = False
        return new_state, []

    def handle_tag_out(self, state: BattleState, side: Side, bench_instance_id: str) -> TransitionResult:
        """Swap ``side``'s active creature for a living bench creature; ends the turn."""
        new_state = copy.deepcopy(state)
        reason = self._turn_action_block_reason(new_state, side, allow_tagging=True)
        if reason:
            return self._reject(new_state, "tag_out", reason)

        slot = new_state.slot(side)
        outgoing = slot.active_creature
        index = slot.find_on_bench(bench_instance_id)
        if outgoing is None:
            return self._reject(new_state, "tag_out", "missing_active_creature")
        if index is None:
            return self._reject(new_state, "tag_out", "not_on_bench")
        incoming = slot.bench_creatures[index]
        if not incoming.is_alive:
            return self._reject(new_state, "tag_out", "creature_knocked_out")

        outgoing.turns_survived = 0
        outgoing.is_face_up = True
        incoming.turns_survived = 0
        incoming.is_face_up = True
        slot.bench_creatures[index] = outgoing
        slot.active_creature = incoming
        new_state.is_tagging_out = False

        events: List[BattleEvent] = [
            TaggedOutEvent(
                side=side,
                outgoing_id=outgoing.instance_id,
                outgoing_name=outgoing.name,
                incoming_id=incoming.instance_id,
                incoming_name=incoming.name,
            )
        ]
        logger.info("%s tags out %s for %s.", _side_label(side), outgoing.name, incoming.name)
        self._pace(new_state, events, "tag_out")
        self._end_turn(new_state, events)
        return new_state, events

    def can_evolve(self, state: BattleState, side: Side) -> bool:
        if self._turn_action_block_reason(state, side):
            return False
        return self._evolution_block_reason(state, side) is None

    def handle_evolution(self, state: BattleState, side: Side) -> TransitionResult:
        """Evolve ``side``'s active creature into its next stage at full HP; ends the turn."""
        new_state = copy.deepcopy(state)
        reason = self._turn_action_block_reason(new_state, side) or self._evolution_block_reason(new_state, side)
        if reason:
            return self._reject(new_state, "evolve", reason)

        slot = new_state.slot(side)
        current = slot.active_creature
        assert current is not None
        next_form = self._creatures_repo.get_next_evolution(current)
        assert next_form is not None

        evolved = create_creature_instance(next_form, next_form.max_hp, rng=self._rng, issued_ids=self._issued_ids)
        evolved.is_face_up = True
        slot.active_creature = evolved
        new_state.has_rolled_this_turn = True
        new_state.mark_evolved(side)

        events: List[BattleEvent] = [
            EvolvedEvent(side=side, instance_id=evolved.instance_id, from_name=current.name, to_name=evolved.name)
        ]
        logger.info("%s evolved into %s!", current.name, evolved.name)
        self._pace(new_state, events, "evolution")
        self._end_turn(new_state, events)
        return new_state, events

    def _evolution_block_reason(self, state: BattleState, side: Side) -> str | None:
        mode = state.selected_mode
        assert mode is not None
        if not mode.allow_evolution:
            return "mode_disallows_evolution"
        active = state.slot(side).active_creature
        if active is None:
            return "missing_active_creature"
        if self._creatures_repo.get_next_evolution(active) is None:
            return "no_further_evolution"
        if active.turns_survived < mode.evolution_turns_required:
            return "not_enough_turns"
        return None

    def _turn_action_block_reason(self, state: BattleState, side: Side, *, allow_tagging: bool = False) -> str | None:
        mode = state.selected_mode
        if state.phase != "inGame" or mode is None:
            return "not_in_game"
        if state.is_game_over:
            return "game_over"
        if not mode.allows_tagging:
            return "mode_disallows_action"
        if state.turn != side:
            return "not_your_turn"
        if state.is_rolling or state.has_rolled_this_turn:
            return "already_rolled"
        if state.replacement_phase_for_player is not None:
            return "replacement_pending"
        if state.is_tagging_out and not allow_tagging:
            return "tagging_out"
        return None

    # -----------------------
    # Forced replacement
    # -----------------------
    def handle_player_replacement_selection(self, state: BattleState, bench_instance_id: str) -> TransitionResult:
        """Bring in the chosen bench creature after a knockout, then end the turn."""
        new_state = copy.deepcopy(state)
        if new_state.replacement_phase_for_player != "player":
            return self._reject(new_state, "replace", "no_replacement_pending")
        index = new_state.player.find_on_bench(bench_instance_id)
        if index is None:
            return self._reject(new_state, "replace", "not_on_bench")
        incoming = new_state.player.bench_creatures[index]
        if not incoming.is_alive:
            return self._reject(new_state, "replace", "creature_knocked_out")

        events: List[BattleEvent] = []
        self._replace_active(new_state, "player", incoming, events)
        new_state.has_rolled_this_turn = False
        self._pace(new_state, events, "replacement")
        self._end_turn(new_state, events)
        return new_state, events

    def _replace_active(
        self,
        state: BattleState,
        side: Side,
        incoming: CreatureInstance,
        events: List[BattleEvent],
    ) -> None:
        slot = state.slot(side)
        index = slot.find_on_bench(incoming.instance_id)
        assert index is not None
        del slot.bench_creatures[index]
        fallen = slot.active_creature
        if fallen is not None:
            if fallen.is_alive:
                fallen.turns_survived = 0
                slot.bench_creatures.append(fallen)
            else:
                slot.knocked_out.append(fallen)
        incoming.is_face_up = True
        slot.active_creature = incoming
        if state.replacement_phase_for_player == side:
            state.replacement_phase_for_player = None
        events.append(CreatureReplacedEvent(side=side, incoming_id=incoming.instance_id, incoming_name=incoming.name))
        logger.info("%s sends out %s!", _side_label(side), incoming.name)

    # -----------------------
    # Helpers
    # -----------------------
    def _find_creature(self, state: BattleState, instance_id: str) -> Tuple[CreatureInstance, Side]:
        for side in ("player", "opponent"):
            for creature in state.slot(side).all_creatures():
                if creature.instance_id == instance_id:
                    return creature, side
        raise ValueError(f"Creature '{instance_id}' not found.")

    def _clear_attack_flags(self, state: BattleState) -> None:
        state.attacking_side = None
        state.defending_side = None
        state.shaking_side = None

    def _pace(self, state: BattleState, events: List[BattleEvent], step: str) -> None:
        events.append(PacingHintEvent(session=state.session, step=step, delay_ms=self._pacing.delay_for(step)))

    def _reject(self, state: BattleState, action: str, reason: str) -> TransitionResult:
        logger.info("Rejected %s: %s", action, reason)
        return state, [ActionRejectedEvent(action=action, reason=reason)]
