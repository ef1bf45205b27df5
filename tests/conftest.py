"""Shared pytest fixtures for cmdk tests."""

import pytest

from cmdk.ui.command_palette import Command, Group


@pytest.fixture
def groups():
    return [
        Group(id="navigation", label="Navigation"),
        Group(id="actions", label="Actions"),
    ]


@pytest.fixture
def commands():
    """A small grouped catalogue with one disabled and one ungrouped command."""
    return [
        Command(id="home", label="Go to Home", group_id="navigation", shortcut=("⌘", "H")),
        Command(
            id="settings",
            label="Open Settings",
            description="Manage your preferences",
            group_id="navigation",
        ),
        Command(id="new-file", label="Create New File", group_id="actions", keywords=("add",)),
        Command(id="premium", label="Premium Feature", description="Upgrade to access", disabled=True),
        Command(id="docs", label="Documentation", keywords=("manual", "help")),
    ]


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Keep palette preferences and log files out of the real home directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("cmdk.config.palette_config.CMDK_CONFIG_DIR", config_dir)
    monkeypatch.setattr("cmdk.error_handling.CMDK_CONFIG_DIR", config_dir)
    config_dir.mkdir()
    return config_dir
