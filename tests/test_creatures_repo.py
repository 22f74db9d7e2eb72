import json
from pathlib import Path

import pytest

from elementara.data.errors import DataLoadError, DataReferenceError, DataValidationError
from elementara.data.repositories import CreaturesRepository, make_creature_id


def test_bundled_catalog_has_thirty_six_templates() -> None:
    repo = CreaturesRepository()

    creatures = repo.all()

    assert len(creatures) == 36
    assert len(repo.get_basic_creatures()) == 12
    assert len(repo.get_final_stage_creatures()) == 12


def test_template_fields_are_derived_from_the_line() -> None:
    repo = CreaturesRepository()

    drakalayo = repo.get("drakalayo")

    assert drakalayo.name == "Drakalayo"
    assert drakalayo.element == "Fire"
    assert drakalayo.stage == 2
    assert drakalayo.max_hp == 120
    assert drakalayo.weakness == "Water"
    assert drakalayo.resistance == "Earth"
    assert drakalayo.ability == "Drakalayo's Fire Burst"
    assert drakalayo.evolution_line == ("sigael", "drakalayo", "infernuko")


def test_none_element_maps_to_missing_resistance() -> None:
    assert CreaturesRepository().get("asonis").resistance is None


def test_make_creature_id_lowercases_and_hyphenates() -> None:
    assert make_creature_id("Sigael") == "sigael"
    assert make_creature_id("Big Red Drake") == "big-red-drake"


def test_unknown_id_lookup() -> None:
    repo = CreaturesRepository()

    with pytest.raises(KeyError):
        repo.get("missingno")
    assert repo.find("missingno") is None


def test_filters_keep_catalog_order() -> None:
    repo = CreaturesRepository()

    basic_fire = [creature.id for creature in repo.get_by_element_and_stage("Fire", 1)]
    final_air = [creature.id for creature in repo.get_by_element_and_stage("Air", 3)]

    assert basic_fire == ["sigael", "asonis", "liyabon"]
    assert final_air == ["zephyltik", "bagynox", "uludronis"]


def test_next_evolution_and_basic_form() -> None:
    repo = CreaturesRepository()
    sigael = repo.get("sigael")
    infernuko = repo.get("infernuko")

    assert repo.get_next_evolution(sigael).id == "drakalayo"
    assert repo.get_next_evolution(repo.get("drakalayo")).id == "infernuko"
    assert repo.get_next_evolution(infernuko) is None
    assert repo.get_basic_form(infernuko).id == "sigael"


def test_loads_custom_definitions(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "creatures.json", {"Flare": _line("Fire", ["Spark", "Flare"])})

    repo = CreaturesRepository(base_path=definitions_dir)

    assert [creature.id for creature in repo.in_authored_order()] == ["spark", "flare"]
    assert repo.get("flare").stage == 2
    assert repo.get_next_evolution(repo.get("flare")) is None


def test_unknown_field_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    line = _line("Fire", ["Spark"])
    line["creatures"][0]["speed"] = 3
    _write_json(definitions_dir / "creatures.json", {"Spark": line})

    with pytest.raises(DataValidationError):
        CreaturesRepository(base_path=definitions_dir).all()


def test_unknown_element_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "creatures.json", {"Bolt": _line("Lightning", ["Bolt"])})

    with pytest.raises(DataValidationError):
        CreaturesRepository(base_path=definitions_dir).all()


def test_boolean_hp_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    line = _line("Water", ["Drop"])
    line["creatures"][0]["hp"] = True
    _write_json(definitions_dir / "creatures.json", {"Drop": line})

    with pytest.raises(DataValidationError):
        CreaturesRepository(base_path=definitions_dir).all()


def test_stage_gap_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    line = _line("Earth", ["Pebble", "Boulder"])
    line["creatures"][1]["stage"] = 2
    _write_json(definitions_dir / "creatures.json", {"Boulder": line})

    with pytest.raises(DataReferenceError):
        CreaturesRepository(base_path=definitions_dir).all()


def test_duplicate_id_across_lines_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "creatures.json",
        {"Gust": _line("Air", ["Gust"]), "Breeze": _line("Air", ["gust"])},
    )

    with pytest.raises(DataReferenceError):
        CreaturesRepository(base_path=definitions_dir).all()


def test_missing_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError):
        CreaturesRepository(base_path=_make_definitions_dir(tmp_path)).all()


def _line(element: str, names: list) -> dict:
    return {
        "element": element,
        "creatures": [
            {"name": name, "stage": stage, "hp": 80 + 10 * stage, "weakness": "None", "resistance": "None"}
            for stage, name in enumerate(names)
        ],
    }


def _make_definitions_dir(tmp_path: Path) -> Path:
    definitions_dir = tmp_path / "definitions"
    definitions_dir.mkdir()
    return definitions_dir


def _write_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")
