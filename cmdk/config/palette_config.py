"""
Palette configuration.

Display and search options for the command palette, with persisted
preferences stored in ~/.config/cmdk/palette_config.json
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .constants import (
    CMDK_CONFIG_DIR,
    DEFAULT_ASYNC_THRESHOLD,
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_EMPTY_STATE_TEXT,
    DEFAULT_LOADING_TEXT,
    DEFAULT_PLACEHOLDER_TEXT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteOptions:
    """Host-facing options for one palette."""

    placeholder_text: str = DEFAULT_PLACEHOLDER_TEXT
    empty_state_text: str = DEFAULT_EMPTY_STATE_TEXT
    loading_text: str = DEFAULT_LOADING_TEXT
    show_shortcut_hints: bool = True  # Key chips next to each command
    show_hints: bool = True  # Navigation footer
    max_recent: int | None = None
    subsequence_matching: bool = False
    async_threshold: int = DEFAULT_ASYNC_THRESHOLD
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS

    def merged(self, overrides: dict[str, Any]) -> PaletteOptions:
        """Copy with known keys from overrides applied; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


def get_palette_config_path() -> Path:
    """
    Get path to the palette config file.

    Returns:
        Path to ~/.config/cmdk/palette_config.json
    """
    CMDK_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CMDK_CONFIG_DIR / "palette_config.json"


# Accepted JSON types per option; bool is checked separately since it is an int
_OPTION_TYPES: dict[str, tuple[type, ...]] = {
    "placeholder_text": (str,),
    "empty_state_text": (str,),
    "loading_text": (str,),
    "show_shortcut_hints": (bool,),
    "show_hints": (bool,),
    "max_recent": (int, type(None)),
    "subsequence_matching": (bool,),
    "async_threshold": (int,),
    "debounce_seconds": (int, float),
}


def _valid_option(key: str, value: Any) -> bool:
    expected = _OPTION_TYPES.get(key)
    if expected is None:
        return True
    if isinstance(value, bool) and bool not in expected:
        return False
    if not isinstance(value, expected):
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        return False
    return True


def load_palette_config() -> dict[str, Any]:
    """
    Load persisted palette preferences.

    Returns:
        Preference dict, empty if the file doesn't exist or is invalid.
        Values of the wrong type are dropped so their defaults apply.
    """
    path = get_palette_config_path()
    if not path.exists():
        return {}
    try:
        config = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable palette config {path}: {e}")
        return {}
    if not isinstance(config, dict):
        logger.warning(f"Ignoring palette config {path}: expected a JSON object")
        return {}

    valid = {}
    for key, value in config.items():
        if _valid_option(key, value):
            valid[key] = value
        else:
            logger.warning(f"Ignoring palette config value {key}={value!r} in {path}")
    return valid


def load_palette_options(**overrides: Any) -> PaletteOptions:
    """Defaults, then persisted preferences, then explicit overrides."""
    return PaletteOptions().merged(load_palette_config()).merged(overrides)
