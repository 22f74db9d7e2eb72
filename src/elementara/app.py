"""Composition root: wires repositories, services and the controller."""
from __future__ import annotations

import secrets
from pathlib import Path
from typing import MutableSet

from elementara import config
from elementara.core.rng import RNG
from elementara.data.repositories import CreaturesRepository, GameModesRepository
from elementara.domain.pacing import BattlePacing
from elementara.services.battle_service import BattleService
from elementara.services.controllers import BattleController
from elementara.services.progress_store import JsonFileKeyValueStore, KeyValueStore
from elementara.services.progression_service import ProgressionService
from elementara.services.setup_service import SetupService

_MAX_RANDOM_SEED = 2**31 - 1


def build_battle_controller(
    *,
    store: KeyValueStore | None = None,
    seed: int | None = None,
    definitions_path: Path | str | None = None,
    pacing: BattlePacing | None = None,
) -> BattleController:
    """Construct a controller over concrete repositories and a seeded RNG.

    Defaults: progress in the per-user JSON file, a random seed, the bundled
    definitions and the pacing from the user's config file.
    """
    if seed is None:
        seed = secrets.randbelow(_MAX_RANDOM_SEED)
    rng = RNG(seed)
    store = store if store is not None else JsonFileKeyValueStore()
    pacing = pacing if pacing is not None else config.load_pacing()
    issued_ids: MutableSet[str] = set()

    creatures_repo = CreaturesRepository(base_path=definitions_path)
    modes_repo = GameModesRepository(base_path=definitions_path)
    progression = ProgressionService(store, creatures_repo, rng, issued_ids)
    battle_service = BattleService(creatures_repo, progression, rng, pacing=pacing, issued_ids=issued_ids)
    setup_service = SetupService(
        creatures_repo,
        modes_repo,
        progression,
        rng,
        pacing=pacing,
        issued_ids=issued_ids,
    )
    return BattleController(battle_service, setup_service, creatures_repo=creatures_repo, rng=rng)


__all__ = ["build_battle_controller"]
