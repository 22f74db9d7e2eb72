from collections import Counter

from elementara.core.types import ELEMENTS
from elementara.data.repositories import CreaturesRepository, GameModesRepository


def test_every_template_sits_at_its_stage_in_its_line() -> None:
    for creature in CreaturesRepository().all():
        assert creature.evolution_line.count(creature.id) == 1
        assert creature.evolution_line[creature.stage - 1] == creature.id


def test_lines_are_single_element_and_three_stages() -> None:
    repo = CreaturesRepository()
    for creature in repo.all():
        line = [repo.get(creature_id) for creature_id in creature.evolution_line]
        assert [member.stage for member in line] == [1, 2, 3]
        assert {member.element for member in line} == {creature.element}


def test_each_element_has_three_lines() -> None:
    basics = CreaturesRepository().get_basic_creatures()
    assert Counter(creature.element for creature in basics) == {element: 3 for element in ELEMENTS}


def test_weakness_and_resistance_never_match() -> None:
    for creature in CreaturesRepository().all():
        if creature.weakness is not None:
            assert creature.weakness != creature.resistance


def test_every_mode_can_field_an_opponent_roster() -> None:
    creatures = CreaturesRepository()
    for mode in GameModesRepository().all():
        pool = creatures.get_basic_creatures() if mode.allow_evolution else creatures.get_final_stage_creatures()
        assert len(pool) >= mode.player_creature_count
