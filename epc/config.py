"""Persistent JSON state and reader settings.

Stores library history, path-keyed reading positions, and display settings.
Malformed or missing state falls back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

from .highlight import DEFAULT_STYLE

logger = logging.getLogger(__name__)

APP_NAME = "epc"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "state.json"
LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / "epc.log"
DEFAULT_TICK_MS = 10


def config_path() -> Path:
    """Resolve the state file, honouring ``EPC_CONFIG`` when set."""
    override = os.environ.get("EPC_CONFIG")
    return Path(override).expanduser() if override else CONFIG_PATH


def log_path() -> Path:
    override = os.environ.get("EPC_LOG")
    return Path(override).expanduser() if override else LOG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    path = config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring unreadable state file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: Mapping[str, object]) -> None:
    """Persist state as pretty-printed JSON; write failures are logged only."""
    path = config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(dict(data), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.debug("could not write state file %s: %s", path, exc)


def _coerce_nonnegative_int(value: object) -> int | None:
    """Booleans and non-integers are invalid; negatives clamp to ``0``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return max(0, value)


def load_history() -> list[Path]:
    """Return persisted history, dropping entries that are not non-empty strings."""
    value = load_config().get("history")
    if not isinstance(value, list):
        return []
    return [Path(item) for item in value if isinstance(item, str) and item]


def load_positions() -> dict[Path, int]:
    value = load_config().get("positions")
    if not isinstance(value, dict):
        return {}
    positions: dict[Path, int] = {}
    for raw_path, raw_offset in value.items():
        offset = _coerce_nonnegative_int(raw_offset)
        if not isinstance(raw_path, str) or not raw_path or offset is None:
            continue
        positions[Path(raw_path)] = offset
    return positions


def save_reading_state(history: Iterable[Path], positions: Mapping[Path, int]) -> None:
    """Write history and reading positions, merging with offsets already on disk."""
    config = load_config()
    merged = {str(path): offset for path, offset in load_positions().items()}
    for path, offset in positions.items():
        merged[str(path)] = max(0, int(offset))
    config["history"] = [str(path) for path in history]
    config["positions"] = merged
    save_config(config)


@dataclass(frozen=True)
class ReaderSettings:
    """Display and runtime settings for one session."""

    style: str = DEFAULT_STYLE
    tick_ms: int = DEFAULT_TICK_MS
    debug: bool = False
    state_path: Path = CONFIG_PATH
    log_path: Path = LOG_PATH

    @property
    def tick_seconds(self) -> float:
        return self.tick_ms / 1000.0


def load_settings(style: str | None = None, debug: bool = False) -> ReaderSettings:
    """Build settings from the state file, letting CLI overrides win."""
    config = load_config()
    stored_style = config.get("style")
    if style is None:
        style = stored_style if isinstance(stored_style, str) and stored_style else DEFAULT_STYLE
    tick_ms = _coerce_nonnegative_int(config.get("tick_ms"))
    return ReaderSettings(
        style=style,
        tick_ms=tick_ms if tick_ms else DEFAULT_TICK_MS,
        debug=debug,
        state_path=config_path(),
        log_path=log_path(),
    )


__all__ = [
    "CONFIG_PATH",
    "DEFAULT_TICK_MS",
    "LOG_PATH",
    "ReaderSettings",
    "config_path",
    "load_config",
    "load_history",
    "load_positions",
    "load_settings",
    "log_path",
    "save_config",
    "save_reading_state",
]
