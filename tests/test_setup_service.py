from __future__ import annotations

from elementara.core.rng import RNG
from elementara.data.repositories import GameModesRepository
from elementara.domain.pacing import BattlePacing
from elementara.services import (
    ActionRejectedEvent,
    CoinTossedEvent,
    PacingHintEvent,
    ProgressionService,
    SetupService,
)
from elementara.services.progress_store import InMemoryKeyValueStore, trophy_key
from tests.helpers.battle_setup import creatures_repo


def _build(store: InMemoryKeyValueStore | None = None, seed: int = 3) -> SetupService:
    store = store if store is not None else InMemoryKeyValueStore()
    rng = RNG(seed)
    issued: set[str] = set()
    progression = ProgressionService(store, creatures_repo(), rng, issued)
    return SetupService(
        creatures_repo(),
        GameModesRepository(),
        progression,
        rng,
        pacing=BattlePacing(),
        issued_ids=issued,
    )


def _to_element_choice(service: SetupService, mode_id: str, *, endless: bool = False):
    state = service.new_session()
    state, _ = service.begin(state)
    state, _ = service.select_mode(state, mode_id)
    state, _ = service.select_challenge(state, endless)
    state, _ = service.proceed_from_instructions(state)
    return state


def _reason(events) -> str | None:
    rejected = [event for event in events if isinstance(event, ActionRejectedEvent)]
    return rejected[0].reason if rejected else None


def test_evolution_clash_flow_reaches_battle() -> None:
    service = _build()
    state = _to_element_choice(service, "set-3")
    assert (state.phase, state.selection_sub_phase) == ("creatureSelection", "chooseElement")

    state, _ = service.select_element(state, "Fire")
    assert state.creatures_to_choose_from == ["sigael", "asonis", "liyabon"]
    assert state.selection_sub_phase == "chooseCreature"

    for element, creature_id in (("Fire", "sigael"), ("Water", "lakanis"), ("Earth", "putrani")):
        if state.selection_sub_phase == "chooseElement":
            state, _ = service.select_element(state, element)
        state, _ = service.select_creature(state, creature_id)
    assert state.player_selected_creature_ids == ["sigael", "lakanis", "putrani"]
    assert state.selection_sub_phase is None

    state, events = service.confirm_roster(state)
    assert state.phase == "coinToss"
    assert state.battle_number == 1
    assert [creature.creature_id for creature in state.player.all_creatures()] == ["sigael", "lakanis", "putrani"]
    assert all(not creature.is_face_up for creature in state.iter_creatures())
    assert len(state.opponent.all_creatures()) == 3
    assert any(isinstance(event, PacingHintEvent) and event.delay_ms == 2000 for event in events)

    state, events = service.resolve_coin_toss(state, heads=True)
    assert state.phase == "inGame"
    assert state.turn == "player"
    assert state.coin_flip_result == "Heads"
    assert all(creature.is_face_up for creature in state.iter_creatures())
    assert any(isinstance(event, CoinTossedEvent) and event.first_turn == "player" for event in events)


def test_tails_gives_opponent_first_turn() -> None:
    service = _build()
    state = _to_element_choice(service, "set-2")
    state, _ = service.select_element(state, "Air")
    state, _ = service.select_full_power_creature(state, "zephyltik")

    state, _ = service.resolve_coin_toss(state, heads=False)

    assert state.turn == "opponent"
    assert state.coin_flip_result == "Tails"


def test_duplicate_selection_rejected() -> None:
    service = _build()
    state = _to_element_choice(service, "set-3")
    state, _ = service.select_element(state, "Fire")
    state, _ = service.select_creature(state, "sigael")
    state, _ = service.select_element(state, "Fire")

    state, events = service.select_creature(state, "sigael")

    assert _reason(events) == "already_selected"
    assert state.player_selected_creature_ids == ["sigael"]


def test_remove_selected_creature_returns_to_element_choice() -> None:
    service = _build()
    state = _to_element_choice(service, "set-3")
    state, _ = service.select_element(state, "Fire")
    state, _ = service.select_creature(state, "sigael")
    state, _ = service.select_element(state, "Water")
    state, _ = service.select_creature(state, "lakanis")

    state, _ = service.remove_selected_creature(state, 0)

    assert state.player_selected_creature_ids == ["lakanis"]
    assert state.selection_sub_phase == "chooseElement"
    assert _reason(service.remove_selected_creature(state, 4)[1]) == "index_out_of_range"


def test_confirm_with_short_roster_rejected() -> None:
    service = _build()
    state = _to_element_choice(service, "set-3")
    state, _ = service.select_element(state, "Fire")
    state, _ = service.select_creature(state, "sigael")

    state, events = service.confirm_roster(state)

    assert _reason(events) == "wrong_roster_size"
    assert state.phase == "creatureSelection"


def test_full_power_duel_uses_printed_hp() -> None:
    service = _build()
    state = _to_element_choice(service, "set-2")

    state, _ = service.select_element(state, "Air")
    assert state.selection_sub_phase == "chooseSpecificCreatureForSet2"
    assert "zephyltik" in state.creatures_to_choose_from

    state, _ = service.select_full_power_creature(state, "zephyltik")
    player = state.player.active_creature
    assert player.creature_id == "zephyltik"
    assert player.max_hp == player.current_hp == 140
    assert state.player.bench_creatures == []
    assert state.opponent.active_creature.stage == 3


def test_rejects_out_of_order_actions() -> None:
    service = _build()
    state = service.new_session()

    assert _reason(service.select_mode(state, "set-3")[1]) == "not_in_mode_selection"
    state, _ = service.begin(state)
    assert _reason(service.select_mode(state, "set-9")[1]) == "unknown_mode"
    assert _reason(service.resolve_coin_toss(state)[1]) == "not_in_coin_toss"


def test_endless_run_scales_opponents_from_saved_tally() -> None:
    store = InMemoryKeyValueStore({"endless_win_tally": "5"})
    service = _build(store)
    state = _to_element_choice(service, "set-3", endless=True)
    assert state.endless_wins == 5
    assert state.ai_difficulty == 6

    for element, creature_id in (("Fire", "sigael"), ("Water", "lakanis"), ("Earth", "putrani")):
        state, _ = service.select_element(state, element)
        state, _ = service.select_creature(state, creature_id)
    state, _ = service.confirm_roster(state)

    assert [creature.max_hp for creature in state.opponent.all_creatures()] == [75, 75, 75]
    assert [creature.max_hp for creature in state.player.all_creatures()] == [50, 50, 50]


def test_standard_match_ignores_saved_tally() -> None:
    service = _build(InMemoryKeyValueStore({"endless_win_tally": "5"}))

    state = _to_element_choice(service, "set-3")

    assert state.endless_wins == 0
    assert state.ai_difficulty == 1


def test_restart_current_mode_resets_endless_tally() -> None:
    store = InMemoryKeyValueStore({"endless_win_tally": "4", trophy_key("set-3"): "9"})
    service = _build(store)
    state = _to_element_choice(service, "set-3", endless=True)

    new_state, _ = service.restart_current_mode(state)

    assert store.get("endless_win_tally") == "0"
    assert new_state.phase == "instructions"
    assert new_state.selected_mode.id == "set-3"
    assert new_state.is_endless_mode_active is True
    assert new_state.endless_wins == 0
    assert new_state.endless_trophies["set-3"] == 9
    assert new_state.session == state.session + 1


def test_back_to_menu_keeps_trophies() -> None:
    store = InMemoryKeyValueStore({trophy_key("set-2"): "3"})
    service = _build(store)
    state = _to_element_choice(service, "set-2")

    new_state, _ = service.back_to_menu(state)

    assert new_state.phase == "modeSelection"
    assert new_state.selected_mode is None
    assert new_state.endless_trophies["set-2"] == 3
