"""Endless-mode meta-progression: win tally, AI difficulty, trophies, opponents."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, MutableSet, Sequence, Tuple

from elementara.core.rng import RNG
from elementara.data.repositories import CreaturesRepository
from elementara.domain.battle_models import CreatureInstance
from elementara.domain.defs import GameModeDef
from elementara.domain.hp_scaling import effective_max_hp, recover_after_win, scale_opponent_hp
from elementara.services.errors import FactoryError
from elementara.services.factories import create_creature_instance
from elementara.services.progress_store import WIN_TALLY_KEY, KeyValueStore, trophy_key

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EndlessProgress:
    """Run-level numbers that survive between endless battles."""

    win_tally: int = 0
    ai_difficulty: int = 1
    roster: List[CreatureInstance] = field(default_factory=list)


class ProgressionService:
    """Pure progression rules plus the only reads/writes of the progress store."""

    def __init__(
        self,
        store: KeyValueStore,
        creatures_repo: CreaturesRepository,
        rng: RNG,
        issued_ids: MutableSet[str] | None = None,
    ) -> None:
        self._store = store
        self._creatures_repo = creatures_repo
        self._rng = rng
        self._issued_ids: MutableSet[str] = issued_ids if issued_ids is not None else set()

    # -----------------------
    # Persistence
    # -----------------------
    def load_win_tally(self) -> int:
        return self._read_count(WIN_TALLY_KEY)

    def save_win_tally(self, tally: int) -> None:
        self._store.set(WIN_TALLY_KEY, str(max(0, tally)))

    def load_trophies(self, mode_ids: Iterable[str]) -> Dict[str, int]:
        trophies: Dict[str, int] = {}
        for mode_id in mode_ids:
            if self._store.get(trophy_key(mode_id)) is not None:
                trophies[mode_id] = self._read_count(trophy_key(mode_id))
        return trophies

    def record_trophy(self, trophies: Dict[str, int], mode_id: str, wins: int) -> Tuple[Dict[str, int], bool]:
        """Store ``wins`` as the mode's trophy if it beats the best so far."""
        updated = dict(trophies)
        if wins <= updated.get(mode_id, 0):
            return updated, False
        self._store.set(trophy_key(mode_id), str(wins))
        updated[mode_id] = wins
        return updated, True

    def _read_count(self, key: str) -> int:
        raw = self._store.get(key)
        if raw is None:
            return 0
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer progress value %r for %s", raw, key)
            return 0
        return max(0, value)

    # -----------------------
    # Battle boundaries
    # -----------------------
    def handle_win(
        self,
        progress: EndlessProgress,
        roster: Sequence[CreatureInstance],
        mode: GameModeDef,
    ) -> EndlessProgress:
        """Bank a win, then de-evolve and patch up the player's creatures.

        De-evolution runs before healing, so a revived creature's baseline is
        its stage-1 max HP rather than the max HP it had when it fell.
        """
        new_tally = progress.win_tally + 1
        self.save_win_tally(new_tally)

        healed: List[CreatureInstance] = []
        for member in roster:
            creature = copy.deepcopy(member)
            if mode.allow_evolution and creature.stage != 1:
                basic = self._creatures_repo.get_basic_form(creature)
                if basic is not None:
                    creature.become(basic)
                    creature.max_hp = basic.max_hp
            creature.current_hp = recover_after_win(min(creature.current_hp, creature.max_hp), creature.max_hp)
            creature.turns_survived = 0
            healed.append(creature)

        return EndlessProgress(win_tally=new_tally, ai_difficulty=new_tally + 1, roster=healed)

    def handle_loss(self, progress: EndlessProgress) -> EndlessProgress:
        self.save_win_tally(0)
        return EndlessProgress(win_tally=0, ai_difficulty=1, roster=list(progress.roster))

    def generate_opponent_creatures(self, win_count: int, mode: GameModeDef) -> List[CreatureInstance]:
        """Draw a fresh, revealed opponent roster scaled for ``win_count`` wins."""
        if mode.allow_evolution:
            pool = self._creatures_repo.get_basic_creatures()
        else:
            pool = self._creatures_repo.get_final_stage_creatures()
        count = mode.player_creature_count
        if len(pool) < count:
            raise FactoryError(
                f"Mode '{mode.id}' needs {count} opponent creatures but only {len(pool)} are available."
            )

        opponents: List[CreatureInstance] = []
        for template in self._rng.sample(pool, count):
            max_hp = scale_opponent_hp(effective_max_hp(template, mode), win_count)
            creature = create_creature_instance(template, max_hp, rng=self._rng, issued_ids=self._issued_ids)
            creature.is_face_up = True
            opponents.append(creature)
        return opponents
