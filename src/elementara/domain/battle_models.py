"""Battle domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple

from elementara.core.types import CoinFace, Element, GamePhase, SelectionSubPhase, Side
from elementara.domain.defs import CreatureDef, GameModeDef


@dataclass(slots=True)
class CreatureInstance:
    """A creature card in play, owned by exactly one roster slot.

    Carries a snapshot of its template plus the mutable battle values.
    ``creature_id`` is the template id; ``instance_id`` tells apart two copies
    of the same template (both sides may pick the same creature).
    """

    instance_id: str
    creature_id: str
    name: str
    element: Element
    max_hp: int
    current_hp: int
    weakness: Element | None
    resistance: Element | None
    ability: str
    stage: int
    evolution_line: Tuple[str, ...]
    turns_survived: int = 0
    is_face_up: bool = False

    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    @property
    def is_knocked_out(self) -> bool:
        return self.current_hp <= 0

    def take_damage(self, amount: int) -> int:
        """Reduce HP by ``amount`` without dropping below zero; return the new HP."""
        self.current_hp = max(0, self.current_hp - max(0, amount))
        return self.current_hp

    def become(self, template: CreatureDef) -> None:
        """Swap the template snapshot for another stage of the same line."""
        self.creature_id = template.id
        self.name = template.name
        self.element = template.element
        self.weakness = template.weakness
        self.resistance = template.resistance
        self.ability = template.ability
        self.stage = template.stage
        self.evolution_line = template.evolution_line


@dataclass(slots=True)
class RosterSlot:
    """One side's creatures: the active card, the bench and the fallen."""

    active_creature: CreatureInstance | None = None
    bench_creatures: List[CreatureInstance] = field(default_factory=list)
    # Reserved; turn skipping is tracked on BattleState.skip_next_turn_for.
    skipped_turn: bool = False
    knocked_out: List[CreatureInstance] = field(default_factory=list)

    def living_bench(self) -> List[CreatureInstance]:
        return [creature for creature in self.bench_creatures if creature.is_alive]

    def find_on_bench(self, instance_id: str) -> int | None:
        for index, creature in enumerate(self.bench_creatures):
            if creature.instance_id == instance_id:
                return index
        return None

    def all_creatures(self) -> List[CreatureInstance]:
        """Active first, then bench, then knocked-out creatures."""
        creatures: List[CreatureInstance] = []
        if self.active_creature is not None:
            creatures.append(self.active_creature)
        creatures.extend(self.bench_creatures)
        creatures.extend(self.knocked_out)
        return creatures

    def reveal(self) -> None:
        for creature in self.all_creatures():
            creature.is_face_up = True

    def conceal(self) -> None:
        for creature in self.all_creatures():
            creature.is_face_up = False


@dataclass(slots=True)
class DamageAnimation:
    """Presentation hint: ``damage`` landed on ``instance_id``."""

    instance_id: str
    damage: int
    sequence: int


@dataclass(slots=True)
class BattleState:
    """Root aggregate for one play session, from the title screen to game over."""

    phase: GamePhase = "setup"
    selection_sub_phase: SelectionSubPhase | None = None
    selected_mode: GameModeDef | None = None
    turn: Side = "player"

    # Dice
    dice_value: int = 1
    is_rolling: bool = False
    has_rolled_this_turn: bool = False
    last_die_roll: int | None = None
    last_die_roll_player: Side | None = None
    is_critical_miss: bool = False
    is_critical_hit: bool = False

    player: RosterSlot = field(default_factory=RosterSlot)
    opponent: RosterSlot = field(default_factory=RosterSlot)
    is_game_over: bool = False
    winner: Side | None = None
    skip_next_turn_for: Side | None = None
    replacement_phase_for_player: Side | None = None
    is_tagging_out: bool = False

    # Roster selection
    player_selected_creature_ids: List[str] = field(default_factory=list)
    current_element_selection: Element | None = None
    creatures_to_choose_from: List[str] = field(default_factory=list)
    coin_flip_result: CoinFace | None = None

    # Corrupted die
    is_corrupted: bool = False
    corrupted_turns_remaining: int = 0
    corrupted_player: Side | None = None
    has_player_evolved: bool = False
    has_opponent_evolved: bool = False

    # Presentation bookkeeping
    attacking_side: Side | None = None
    defending_side: Side | None = None
    shaking_side: Side | None = None
    damage_animations: List[DamageAnimation] = field(default_factory=list)
    damaged_instance_ids: Set[str] = field(default_factory=set)
    animation_sequence: int = 0

    # Endless mode
    is_endless_mode_active: bool = False
    endless_wins: int = 0
    ai_difficulty: int = 1
    endless_trophies: Dict[str, int] = field(default_factory=dict)
    final_endless_score: int | None = None

    # Bumped on every reset so stale pacing hints can be discarded.
    session: int = 0
    battle_number: int = 0

    def slot(self, side: Side) -> RosterSlot:
        return self.player if side == "player" else self.opponent

    def iter_creatures(self) -> Iterator[CreatureInstance]:
        yield from self.player.all_creatures()
        yield from self.opponent.all_creatures()

    def has_evolved(self, side: Side) -> bool:
        return self.has_player_evolved if side == "player" else self.has_opponent_evolved

    def mark_evolved(self, side: Side) -> None:
        if side == "player":
            self.has_player_evolved = True
        else:
            self.has_opponent_evolved = True
