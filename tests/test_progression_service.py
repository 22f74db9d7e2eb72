from __future__ import annotations

from dataclasses import replace

import pytest

from elementara.core.rng import RNG
from elementara.services.errors import FactoryError
from elementara.services.progress_store import InMemoryKeyValueStore
from elementara.services.progression_service import EndlessProgress, ProgressionService
from tests.helpers.battle_setup import creatures_repo, get_mode, make_creature


def _service(store: InMemoryKeyValueStore | None = None, seed: int = 11) -> ProgressionService:
    return ProgressionService(store or InMemoryKeyValueStore(), creatures_repo(), RNG(seed))


def test_win_tally_round_trip() -> None:
    service = _service()
    assert service.load_win_tally() == 0

    service.save_win_tally(7)

    assert service.load_win_tally() == 7


def test_unparsable_tally_reads_as_zero() -> None:
    service = _service(InMemoryKeyValueStore({"endless_win_tally": "lots"}))
    assert service.load_win_tally() == 0


def test_opponents_scale_with_wins_and_never_repeat() -> None:
    for seed in range(5):
        service = _service(seed=seed)
        opponents = service.generate_opponent_creatures(5, get_mode("set-3"))

        assert len(opponents) == 3
        assert all(creature.max_hp == creature.current_hp == 75 for creature in opponents)
        assert all(creature.stage == 1 for creature in opponents)
        assert all(creature.is_face_up for creature in opponents)
        assert len({creature.creature_id for creature in opponents}) == 3


def test_full_power_opponent_uses_scaled_template_hp() -> None:
    service = _service()

    (opponent,) = service.generate_opponent_creatures(2, get_mode("set-2"))

    template = creatures_repo().get(opponent.creature_id)
    assert opponent.stage == 3
    assert opponent.max_hp == template.max_hp * 6 // 5


def test_opponent_pool_too_small_raises() -> None:
    oversized = replace(get_mode("set-3"), player_creature_count=13)

    with pytest.raises(FactoryError):
        _service().generate_opponent_creatures(0, oversized)


def test_handle_win_revives_heals_and_persists() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)
    roster = [
        make_creature("sigael", current_hp=0, instance_id="a"),
        make_creature("lakanis", current_hp=10, instance_id="b"),
        make_creature("putrani", current_hp=45, instance_id="c", turns_survived=3),
    ]

    progress = service.handle_win(EndlessProgress(win_tally=2, ai_difficulty=3), roster, get_mode("set-3"))

    assert progress.win_tally == 3
    assert progress.ai_difficulty == 4
    assert store.get("endless_win_tally") == "3"
    assert [creature.current_hp for creature in progress.roster] == [25, 37, 45]
    assert all(creature.turns_survived == 0 for creature in progress.roster)
    assert roster[0].current_hp == 0


def test_handle_win_de_evolves_in_evolution_clash() -> None:
    service = _service()
    evolved = make_creature("infernuko", max_hp=150, current_hp=0, instance_id="x")

    (healed,) = service.handle_win(EndlessProgress(), [evolved], get_mode("set-3")).roster

    assert healed.creature_id == "sigael"
    assert healed.stage == 1
    assert healed.instance_id == "x"
    assert healed.max_hp == 90
    assert healed.current_hp == 45


def test_handle_win_keeps_stage_in_full_power_duel() -> None:
    service = _service()
    champion = make_creature("uludronis", max_hp=160, current_hp=100)

    (healed,) = service.handle_win(EndlessProgress(), [champion], get_mode("set-2")).roster

    assert healed.creature_id == "uludronis"
    assert healed.stage == 3
    assert healed.current_hp == 120


def test_handle_loss_resets_tally() -> None:
    store = InMemoryKeyValueStore({"endless_win_tally": "6"})
    service = _service(store)

    progress = service.handle_loss(EndlessProgress(win_tally=6, ai_difficulty=7))

    assert (progress.win_tally, progress.ai_difficulty) == (0, 1)
    assert service.load_win_tally() == 0


def test_record_trophy_only_on_new_best() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)

    trophies, is_record = service.record_trophy({}, "set-3", 4)
    assert is_record is True
    assert trophies == {"set-3": 4}

    trophies, is_record = service.record_trophy(trophies, "set-3", 2)
    assert is_record is False
    assert trophies == {"set-3": 4}
    assert service.load_trophies(["set-3", "set-2"]) == {"set-3": 4}


def test_zero_win_run_sets_no_trophy() -> None:
    store = InMemoryKeyValueStore()

    trophies, is_record = _service(store).record_trophy({}, "set-2", 0)

    assert is_record is False
    assert trophies == {}
    assert store.snapshot() == {}


def test_handle_win_returns_wounded_middle_stage_to_basic_form() -> None:
    service = _service()
    wounded = make_creature("drakalayo", max_hp=120, current_hp=30, instance_id="drakalayo_7")

    (healed,) = service.handle_win(EndlessProgress(), [wounded], get_mode("set-3")).roster

    assert (healed.creature_id, healed.name, healed.stage) == ("sigael", "Sigael", 1)
    assert healed.ability == "Sigael's Fire Burst"
    assert (healed.weakness, healed.resistance) == ("Water", "Air")
    assert healed.instance_id == "drakalayo_7"
    assert healed.is_face_up is True
    assert healed.max_hp == 90
    assert healed.current_hp == 67
    assert wounded.creature_id == "drakalayo"
