"""Per-user configuration and data locations."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

from elementara.domain.pacing import BattlePacing

logger = logging.getLogger(__name__)

_DEFAULT_PACING_MODE = "animated"
_PROGRESS_FILENAME = "progress.json"


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Elementara"
        return Path.home() / "Elementara"
    return Path.home() / ".config" / "elementara"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_progress_path() -> Path:
    """Return the file backing the win tally and trophies."""
    return get_user_data_dir() / _PROGRESS_FILENAME


def _normalize_pacing_mode(value: object) -> str:
    return "instant" if value == "instant" else _DEFAULT_PACING_MODE


def load_config(path: Path | None = None) -> Dict[str, str]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {"pacing_mode": _DEFAULT_PACING_MODE}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return {"pacing_mode": _DEFAULT_PACING_MODE}
    if not isinstance(raw, dict):
        return {"pacing_mode": _DEFAULT_PACING_MODE}
    return {"pacing_mode": _normalize_pacing_mode(raw.get("pacing_mode"))}


def save_config(config: Dict[str, str], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"pacing_mode": _normalize_pacing_mode(config.get("pacing_mode"))}
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def load_pacing(path: Path | None = None) -> BattlePacing:
    return BattlePacing.from_mode(load_config(path)["pacing_mode"])
