from __future__ import annotations

from typing import Sequence, Tuple

from elementara.core.rng import RNG
from elementara.core.types import Side
from elementara.data.repositories import CreaturesRepository, GameModesRepository
from elementara.domain.battle_models import BattleState, CreatureInstance, RosterSlot
from elementara.domain.pacing import BattlePacing
from elementara.services.battle_service import BattleService
from elementara.services.progress_store import InMemoryKeyValueStore
from elementara.services.progression_service import ProgressionService

_creatures_repo = CreaturesRepository()
_modes_repo = GameModesRepository()


def creatures_repo() -> CreaturesRepository:
    return _creatures_repo


def get_mode(mode_id: str):
    return _modes_repo.get(mode_id)


def make_creature(
    creature_id: str,
    *,
    max_hp: int = 50,
    current_hp: int | None = None,
    instance_id: str | None = None,
    turns_survived: int = 0,
) -> CreatureInstance:
    template = _creatures_repo.get(creature_id)
    return CreatureInstance(
        instance_id=instance_id or f"{creature_id}_100001",
        creature_id=template.id,
        name=template.name,
        element=template.element,
        max_hp=max_hp,
        current_hp=max_hp if current_hp is None else current_hp,
        weakness=template.weakness,
        resistance=template.resistance,
        ability=template.ability,
        stage=template.stage,
        evolution_line=template.evolution_line,
        turns_survived=turns_survived,
        is_face_up=True,
    )


def make_state(
    player: Sequence[CreatureInstance],
    opponent: Sequence[CreatureInstance],
    *,
    mode_id: str = "set-3",
    turn: Side = "player",
    endless: bool = False,
    endless_wins: int = 0,
) -> BattleState:
    return BattleState(
        phase="inGame",
        selected_mode=get_mode(mode_id),
        turn=turn,
        player=RosterSlot(active_creature=player[0], bench_creatures=list(player[1:])),
        opponent=RosterSlot(active_creature=opponent[0], bench_creatures=list(opponent[1:])),
        is_endless_mode_active=endless,
        endless_wins=endless_wins,
        ai_difficulty=endless_wins + 1,
        battle_number=1,
    )


def build_battle_service(
    *,
    seed: int = 7,
    store: InMemoryKeyValueStore | None = None,
    pacing: BattlePacing | None = None,
) -> Tuple[BattleService, ProgressionService, InMemoryKeyValueStore]:
    store = store if store is not None else InMemoryKeyValueStore()
    rng = RNG(seed)
    issued: set[str] = set()
    progression = ProgressionService(store, _creatures_repo, rng, issued)
    service = BattleService(_creatures_repo, progression, rng, pacing=pacing, issued_ids=issued)
    return service, progression, store
