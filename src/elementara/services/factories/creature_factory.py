"""Factory for creating creature instances from catalog templates."""
from __future__ import annotations

from typing import List, MutableSet, Sequence

from elementara.core.rng import RNG
from elementara.data.repositories import CreaturesRepository
from elementara.domain.battle_models import CreatureInstance
from elementara.domain.defs import CreatureDef, GameModeDef
from elementara.domain.hp_scaling import effective_max_hp
from elementara.services.errors import FactoryError

from .id_factory import make_instance_id


def create_creature_instance(
    template: CreatureDef,
    max_hp: int,
    *,
    rng: RNG,
    issued_ids: MutableSet[str] | None = None,
) -> CreatureInstance:
    """Instantiate a face-down, full-HP card for ``template``."""
    return CreatureInstance(
        instance_id=make_instance_id(template.id, rng, issued_ids),
        creature_id=template.id,
        name=template.name,
        element=template.element,
        max_hp=max_hp,
        current_hp=max_hp,
        weakness=template.weakness,
        resistance=template.resistance,
        ability=template.ability,
        stage=template.stage,
        evolution_line=template.evolution_line,
    )


def create_roster(
    creature_ids: Sequence[str],
    mode: GameModeDef,
    *,
    creatures_repo: CreaturesRepository,
    rng: RNG,
    issued_ids: MutableSet[str] | None = None,
) -> List[CreatureInstance]:
    """Build the player's cards for ``mode``. An unknown id aborts setup."""
    roster: List[CreatureInstance] = []
    for creature_id in creature_ids:
        try:
            template = creatures_repo.get(creature_id)
        except KeyError as exc:
            raise FactoryError(f"Creature '{creature_id}' not found.") from exc
        roster.append(
            create_creature_instance(
                template,
                effective_max_hp(template, mode),
                rng=rng,
                issued_ids=issued_ids,
            )
        )
    return roster
