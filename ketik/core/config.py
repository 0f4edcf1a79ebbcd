"""Game constants and the optional YAML settings file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

BATCH_SIZE = 25
MIN_WORDS_FOR_CUSTOM = 10
MIN_MINUTES_FOR_WPM = 0.0167  # ~1 second
CHARACTERS_PER_WORD = 5
ACCURACY_WEIGHT = 1.5
TIME_MODES: Tuple[int, ...] = (15, 30, 60)
DEFAULT_TIME_MODE = 30

LANG_ENGLISH = "English"
LANG_CUSTOM = "Custom"


@dataclass(frozen=True)
class GameSettings:
    """Tunable game constants.

    ``accuracy_weight`` is the exponent applied to the accuracy factor of the
    weighted score; larger values punish low accuracy more steeply.
    """

    batch_size: int = BATCH_SIZE
    min_words_for_custom: int = MIN_WORDS_FOR_CUSTOM
    min_minutes_for_wpm: float = MIN_MINUTES_FOR_WPM
    characters_per_word: int = CHARACTERS_PER_WORD
    accuracy_weight: float = ACCURACY_WEIGHT
    time_modes: Tuple[int, ...] = TIME_MODES
    default_time_mode: int = DEFAULT_TIME_MODE


def default_settings_path() -> Path:
    return Path.home() / ".ketik" / "settings.yaml"


def load_settings(path: Optional[Path] = None) -> GameSettings:
    """Load settings from *path* (default ``~/.ketik/settings.yaml``).

    A missing or empty file yields the defaults. Unknown keys are ignored.
    Raises ValueError if the file cannot be read or holds invalid values.
    """
    file_path = path if path is not None else default_settings_path()
    if not file_path.exists():
        return GameSettings()
    try:
        raw = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Could not load settings from %s: %s", file_path, e)
        raise ValueError(f"{file_path.name}: could not read settings") from e

    if raw is None:
        return GameSettings()
    if not isinstance(raw, dict):
        raise ValueError(f"{file_path.name}: expected a YAML mapping")

    known = {f.name for f in fields(GameSettings)}
    ignored = sorted(str(k) for k in raw if k not in known)
    if ignored:
        logger.debug("Ignoring unknown settings in %s: %s", file_path, ", ".join(ignored))
    return _build_settings({k: v for k, v in raw.items() if k in known}, file_path.name)


def _build_settings(values: Dict[str, Any], source: str) -> GameSettings:
    defaults = GameSettings()

    def _int(key: str, minimum: int) -> int:
        value = values.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{source}: '{key}' must be an integer")
        if value < minimum:
            raise ValueError(f"{source}: '{key}' must be at least {minimum}")
        return value

    def _positive_float(key: str, allow_zero: bool = False) -> float:
        value = values.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{source}: '{key}' must be a number")
        if value < 0 or (value == 0 and not allow_zero):
            raise ValueError(f"{source}: '{key}' must be positive")
        return float(value)

    raw_modes = values.get("time_modes", list(defaults.time_modes))
    if not isinstance(raw_modes, (list, tuple)) or not raw_modes:
        raise ValueError(f"{source}: 'time_modes' must be a non-empty list")
    for mode in raw_modes:
        if isinstance(mode, bool) or not isinstance(mode, int) or mode <= 0:
            raise ValueError(f"{source}: 'time_modes' must contain positive integers")
    time_modes = tuple(raw_modes)

    default_time_mode = _int("default_time_mode", 1)
    if default_time_mode not in time_modes:
        raise ValueError(
            f"{source}: 'default_time_mode' ({default_time_mode}) is not one of {list(time_modes)}"
        )

    return GameSettings(
        batch_size=_int("batch_size", 1),
        min_words_for_custom=_int("min_words_for_custom", 1),
        min_minutes_for_wpm=_positive_float("min_minutes_for_wpm"),
        characters_per_word=_int("characters_per_word", 1),
        accuracy_weight=_positive_float("accuracy_weight", allow_zero=True),
        time_modes=time_modes,
        default_time_mode=default_time_mode,
    )
