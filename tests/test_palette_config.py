"""Tests for palette configuration."""

import json
import logging

from cmdk.config.constants import DEFAULT_EMPTY_STATE_TEXT, DEFAULT_PLACEHOLDER_TEXT
from cmdk.config.palette_config import (
    PaletteOptions,
    get_palette_config_path,
    load_palette_config,
    load_palette_options,
)


def _write_config(content: str) -> None:
    get_palette_config_path().write_text(content)


def test_default_options():
    options = PaletteOptions()
    assert options.placeholder_text == DEFAULT_PLACEHOLDER_TEXT == "Type a command or search..."
    assert options.empty_state_text == DEFAULT_EMPTY_STATE_TEXT == "No commands found"
    assert options.show_shortcut_hints is True
    assert options.show_hints is True
    assert options.max_recent is None
    assert options.subsequence_matching is False


def test_merged_ignores_unknown_keys():
    options = PaletteOptions().merged({"placeholder_text": "Go to...", "colour": "red"})

    assert options.placeholder_text == "Go to..."
    assert not hasattr(options, "colour")


def test_config_path_is_inside_config_dir(isolated_config_dir):
    assert get_palette_config_path() == isolated_config_dir / "palette_config.json"


def test_load_returns_defaults_without_file():
    assert load_palette_config() == {}
    assert load_palette_options() == PaletteOptions()


def test_partial_config_merges_with_defaults():
    _write_config(json.dumps({"empty_state_text": "Nothing here", "max_recent": 3}) + "\n")

    options = load_palette_options()
    assert options.empty_state_text == "Nothing here"
    assert options.max_recent == 3
    assert options.placeholder_text == DEFAULT_PLACEHOLDER_TEXT


def test_overrides_win_over_file():
    _write_config(json.dumps({"max_recent": 2}))

    assert load_palette_options(max_recent=5).max_recent == 5


def test_invalid_json_falls_back_to_defaults(caplog):
    _write_config("{not json")

    with caplog.at_level(logging.WARNING):
        assert load_palette_config() == {}
    assert load_palette_options() == PaletteOptions()
    assert "unreadable palette config" in caplog.text


def test_non_object_falls_back_to_defaults(caplog):
    _write_config("[1, 2]")

    with caplog.at_level(logging.WARNING):
        assert load_palette_config() == {}
    assert "expected a JSON object" in caplog.text


def test_wrong_typed_values_are_skipped(caplog):
    _write_config(
        json.dumps(
            {
                "max_recent": "3",
                "show_hints": "no",
                "async_threshold": True,
                "debounce_seconds": -1,
                "empty_state_text": "Nothing here",
            }
        )
    )

    with caplog.at_level(logging.WARNING):
        options = load_palette_options()

    assert options.max_recent is None
    assert options.show_hints is True
    assert options.async_threshold == PaletteOptions().async_threshold
    assert options.debounce_seconds == PaletteOptions().debounce_seconds
    assert options.empty_state_text == "Nothing here"
    assert "max_recent" in caplog.text


def test_null_max_recent_and_integer_debounce_are_accepted():
    _write_config(json.dumps({"max_recent": None, "debounce_seconds": 0}))

    options = load_palette_options()
    assert options.max_recent is None
    assert options.debounce_seconds == 0
