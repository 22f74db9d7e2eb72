"""Creature catalog repository."""
from __future__ import annotations

import re
from typing import Dict, List, Tuple

from elementara.core.types import ELEMENTS, Element
from elementara.data.errors import DataReferenceError, DataValidationError
from elementara.data.repositories.base import RepositoryBase
from elementara.domain.defs import CreatureDef

_NO_ELEMENT = "None"
_WHITESPACE = re.compile(r"\s")


def make_creature_id(name: str) -> str:
    """Return the slug id used for a creature name ("Sigael" -> "sigael")."""
    return _WHITESPACE.sub("-", name.lower())


class CreaturesRepository(RepositoryBase[CreatureDef]):
    """Loads evolution lines from creatures.json and answers catalog queries.

    The file is keyed by evolution-line name. Each line declares its element
    and lists three creatures with a zero-based ``stage``; templates are
    expanded so every stage knows the ids of its whole line.
    """

    def __init__(self, base_path=None) -> None:
        super().__init__("creatures.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, CreatureDef]:
        creatures: Dict[str, CreatureDef] = {}
        for line_name, payload in raw.items():
            context = f"creature line '{line_name}'"
            line_data = self._require_mapping(payload, context)
            self._assert_exact_fields(line_data, {"element", "creatures"}, context)
            element = self._require_element(line_data["element"], f"{context} element")
            entries = self._require_list(line_data["creatures"], f"{context} creatures")
            if not entries:
                raise DataValidationError(f"{context} must list at least one creature.")

            parsed = [self._parse_entry(entry, line_name, index) for index, entry in enumerate(entries)]
            parsed.sort(key=lambda item: item[1])
            stages = [stage for _, stage, _, _, _ in parsed]
            if stages != list(range(len(parsed))):
                raise DataReferenceError(f"{context} stages must run 0..{len(parsed) - 1} without gaps; got {stages}.")

            line_ids = tuple(make_creature_id(name) for name, *_ in parsed)
            for name, stage, hp, weakness, resistance in parsed:
                creature_id = make_creature_id(name)
                if creature_id in creatures:
                    raise DataReferenceError(f"Duplicate creature id '{creature_id}' in {context}.")
                creatures[creature_id] = CreatureDef(
                    id=creature_id,
                    name=name,
                    element=element,
                    max_hp=hp,
                    weakness=weakness,
                    resistance=resistance,
                    ability=f"{name}'s {element} Burst",
                    stage=stage + 1,
                    evolution_line=line_ids,
                    line_name=line_name,
                )
        return creatures

    def _parse_entry(
        self, payload: object, line_name: str, index: int
    ) -> Tuple[str, int, int, Element | None, Element | None]:
        context = f"creature line '{line_name}' entry {index}"
        entry = self._require_mapping(payload, context)
        self._assert_exact_fields(entry, {"name", "stage", "hp", "weakness", "resistance"}, context)
        name = self._require_str(entry["name"], f"{context} name")
        stage = self._require_int(entry["stage"], f"{context} stage")
        if stage not in (0, 1, 2):
            raise DataValidationError(f"{context} stage must be 0, 1 or 2.")
        hp = self._require_int(entry["hp"], f"{context} hp")
        if hp <= 0:
            raise DataValidationError(f"{context} hp must be positive.")
        weakness = self._require_optional_element(entry["weakness"], f"{context} weakness")
        resistance = self._require_optional_element(entry["resistance"], f"{context} resistance")
        return name, stage, hp, weakness, resistance

    # -----------------------
    # Catalog queries
    # -----------------------
    def get_by_stage(self, stage: int) -> List[CreatureDef]:
        """Return every template at ``stage`` in catalog order."""
        return [creature for creature in self.in_authored_order() if creature.stage == stage]

    def get_by_element_and_stage(self, element: Element, stage: int) -> List[CreatureDef]:
        return [creature for creature in self.get_by_stage(stage) if creature.element == element]

    def get_basic_creatures(self) -> List[CreatureDef]:
        return self.get_by_stage(1)

    def get_final_stage_creatures(self) -> List[CreatureDef]:
        return self.get_by_stage(3)

    def get_next_evolution(self, creature) -> CreatureDef | None:
        """Return the template one stage above ``creature``.

        Accepts a template or a battle instance. A creature whose id is not
        part of its own line, or that is already at the end of it, has no
        further evolution.
        """
        creature_id, line = _identity(creature)
        if creature_id not in line:
            return None
        position = line.index(creature_id)
        if position == len(line) - 1:
            return None
        return self.find(line[position + 1])

    def get_basic_form(self, creature) -> CreatureDef | None:
        """Return the stage-1 template of ``creature``'s evolution line."""
        _, line = _identity(creature)
        if not line:
            return None
        return self.find(line[0])

    # -----------------------
    # Validation helpers
    # -----------------------
    @staticmethod
    def _require_element(value: object, context: str) -> Element:
        if value not in ELEMENTS:
            raise DataValidationError(f"{context} must be one of {list(ELEMENTS)}.")
        return value  # type: ignore[return-value]

    def _require_optional_element(self, value: object, context: str) -> Element | None:
        if value == _NO_ELEMENT or value is None:
            return None
        return self._require_element(value, context)


def _identity(creature) -> Tuple[str, Tuple[str, ...]]:
    # Templates carry ``id``; battle instances carry ``creature_id``.
    creature_id = getattr(creature, "creature_id", None) or creature.id
    return creature_id, tuple(creature.evolution_line)
