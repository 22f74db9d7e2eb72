import json
from pathlib import Path

import pytest

from elementara.services.errors import ProgressStoreError
from elementara.services.progress_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    trophy_key,
)


def test_in_memory_store_defaults_to_none() -> None:
    store = InMemoryKeyValueStore({"a": "1"})

    store.set("b", "2")

    assert store.get("a") == "1"
    assert store.get("missing") is None
    assert store.snapshot() == {"a": "1", "b": "2"}


def test_trophy_key_format() -> None:
    assert trophy_key("set-3") == "endless_trophy_set-3"


def test_json_store_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "progress.json"
    JsonFileKeyValueStore(path).set("endless_win_tally", "7")

    reopened = JsonFileKeyValueStore(path)

    assert reopened.get("endless_win_tally") == "7"
    assert json.loads(path.read_text(encoding="utf-8")) == {"endless_win_tally": "7"}


def test_json_store_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    assert store.get("endless_win_tally") is None
    store.set("endless_win_tally", "1")
    assert store.get("endless_win_tally") == "1"


def test_json_store_ignores_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"endless_win_tally": 3}), encoding="utf-8")

    assert JsonFileKeyValueStore(path).get("endless_win_tally") is None


def test_json_store_write_failure_raises(tmp_path: Path) -> None:
    blocked = tmp_path / "progress.json"
    blocked.mkdir()

    with pytest.raises(ProgressStoreError):
        JsonFileKeyValueStore(blocked).set("endless_win_tally", "1")
