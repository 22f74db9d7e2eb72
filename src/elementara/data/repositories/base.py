"""Base repository implementation for JSON definition data."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, List, TypeVar

from elementara.data import paths
from elementara.data.errors import DataValidationError
from elementara.data.json_loader import load_json_object

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Common caching and loading behavior for repositories."""

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    def _get_file_path(self) -> Path:
        definitions_dir = paths.get_definitions_path(self._base_path)
        return definitions_dir / self._filename

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        """Convert a raw dict into typed definitions, preserving authored order."""
        raise NotImplementedError

    def _ensure_loaded(self) -> Dict[str, T]:
        if self._definitions is None:
            self._definitions = self._build(load_json_object(self._get_file_path()))
        return self._definitions

    def get(self, def_id: str) -> T:
        """Return a definition by id."""
        definitions = self._ensure_loaded()
        try:
            return definitions[def_id]
        except KeyError as exc:
            raise KeyError(def_id) from exc

    def find(self, def_id: str) -> T | None:
        """Return a definition by id, or None when it does not exist."""
        return self._ensure_loaded().get(def_id)

    def all(self) -> List[T]:
        """Return all definitions sorted deterministically by id."""
        definitions = self._ensure_loaded()
        return [definitions[key] for key in sorted(definitions.keys())]

    def in_authored_order(self) -> List[T]:
        """Return all definitions in the order they appear in the file."""
        return list(self._ensure_loaded().values())

    # -----------------------
    # Validation helpers
    # -----------------------
    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        # bool is an int subclass; JSON true/false is never a valid count.
        if isinstance(value, bool) or not isinstance(value, int):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_bool(value: object, context: str) -> bool:
        if not isinstance(value, bool):
            raise DataValidationError(f"{context} must be a boolean.")
        return value

    @staticmethod
    def _require_list(value: object, context: str) -> list[object]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return value

    @staticmethod
    def _assert_exact_fields(
        payload: dict[str, object],
        expected_keys: set[str],
        context: str,
        *,
        optional_fields: set[str] | None = None,
    ) -> None:
        actual_keys = set(payload.keys())
        optional = optional_fields or set()
        missing = expected_keys - actual_keys
        unknown = actual_keys - expected_keys - optional
        if missing or unknown:
            msg_parts = []
            if missing:
                msg_parts.append(f"missing fields: {sorted(missing)}")
            if unknown:
                msg_parts.append(f"unknown fields: {sorted(unknown)}")
            raise DataValidationError(f"{context} has schema issues ({'; '.join(msg_parts)}).")
