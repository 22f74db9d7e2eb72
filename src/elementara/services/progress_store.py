"""Key-value storage for the endless-mode win tally and trophies."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Protocol

from elementara import config
from elementara.services.errors import ProgressStoreError

logger = logging.getLogger(__name__)

WIN_TALLY_KEY = "endless_win_tally"
TROPHY_KEY_PREFIX = "endless_trophy_"


def trophy_key(mode_id: str) -> str:
    return f"{TROPHY_KEY_PREFIX}{mode_id}"


class KeyValueStore(Protocol):
    """Minimal string store, shaped like browser local storage."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local store; the default for tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


class JsonFileKeyValueStore:
    """Persists every key in a single JSON object on disk."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else config.get_progress_path()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        payload = self._read()
        payload[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise ProgressStoreError(f"Unable to write progress file: {self._path}") from exc

    def _read(self) -> Dict[str, object]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Progress file %s is unreadable, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Progress file %s does not hold an object, starting empty", self._path)
            return {}
        return raw
