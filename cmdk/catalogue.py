"""
Catalogue files for the command palette.

A catalogue file is a JSON object with "groups" and "commands" arrays:

    {
      "groups": [{"id": "navigation", "label": "Navigation"}],
      "commands": [
        {"id": "home", "label": "Go to Home", "group_id": "navigation",
         "shortcut": ["⌘", "H"], "keywords": ["start"]}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any

from cmdk.error_handling import CatalogueFileError, file_not_found_error
from cmdk.ui.command_palette.palette_commands import Command, Group

logger = logging.getLogger(__name__)


def _string_list(value: Any, field: str, item_id: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CatalogueFileError(
            f"Field '{field}' of command '{item_id}' must be a list of strings",
            details={"command_id": item_id, "field": field},
        )
    return tuple(value)


def parse_group(data: Any) -> Group:
    if not isinstance(data, dict) or not isinstance(data.get("id"), str):
        raise CatalogueFileError("Every group needs a string 'id'", details={"group": repr(data)})
    return Group(
        id=data["id"],
        label=str(data.get("label", data["id"])),
        icon=data.get("icon"),
    )


def parse_command(data: Any) -> Command:
    if not isinstance(data, dict) or not isinstance(data.get("id"), str):
        raise CatalogueFileError("Every command needs a string 'id'", details={"command": repr(data)})
    command_id = data["id"]
    if not isinstance(data.get("label"), str):
        raise CatalogueFileError(
            f"Command '{command_id}' needs a string 'label'",
            details={"command_id": command_id},
        )
    return Command(
        id=command_id,
        label=data["label"],
        description=data.get("description"),
        keywords=_string_list(data.get("keywords"), "keywords", command_id),
        group_id=data.get("group_id", data.get("groupId")),
        shortcut=_string_list(data.get("shortcut"), "shortcut", command_id),
        disabled=bool(data.get("disabled", False)),
        icon=data.get("icon"),
    )


def parse_catalogue(data: Any) -> tuple[list[Command], list[Group]]:
    """Build commands and groups from decoded catalogue JSON."""
    if not isinstance(data, dict):
        raise CatalogueFileError(
            "Catalogue must be a JSON object",
            suggestion="Wrap the arrays as {\"groups\": [...], \"commands\": [...]}",
        )
    groups = data.get("groups", [])
    commands = data.get("commands", [])
    if not isinstance(groups, list) or not isinstance(commands, list):
        raise CatalogueFileError("'groups' and 'commands' must be arrays")
    return [parse_command(c) for c in commands], [parse_group(g) for g in groups]


def load_catalogue_file(path: Path) -> tuple[list[Command], list[Group]]:
    """
    Read a catalogue file.

    Raises:
        FileSystemError: If the file does not exist
        CatalogueFileError: If the file is not a valid catalogue
    """
    if not path.exists():
        raise file_not_found_error(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CatalogueFileError(
            f"Invalid JSON in {path}",
            details={"path": str(path), "error": str(e)},
            suggestion="Check the file with a JSON validator.",
        ) from e
    commands, groups = parse_catalogue(data)
    logger.debug(f"Read {len(commands)} commands and {len(groups)} groups from {path}")
    return commands, groups


def command_to_dict(command: Command) -> dict[str, Any]:
    """JSON-friendly view of a command, without its action."""
    return {
        "id": command.id,
        "label": command.label,
        "description": command.description,
        "keywords": list(command.keywords),
        "group_id": command.group_id,
        "shortcut": list(command.shortcut),
        "disabled": command.disabled,
    }


def sample_catalogue() -> tuple[list[Command], list[Group]]:
    """Built-in catalogue used when no file is given."""
    groups = [
        Group(id="navigation", label="Navigation"),
        Group(id="actions", label="Actions"),
        Group(id="user", label="Account"),
        Group(id="help", label="Help"),
    ]
    commands = [
        Command(id="home", label="Go to Home", shortcut=("⌘", "H"), group_id="navigation"),
        Command(id="dashboard", label="Open Dashboard", shortcut=("⌘", "D"), group_id="navigation"),
        Command(
            id="settings",
            label="Open Settings",
            description="Manage your preferences",
            shortcut=("⌘", ","),
            group_id="navigation",
        ),
        Command(id="search", label="Search Files", shortcut=("⌘", "P"), group_id="actions"),
        Command(id="new-file", label="Create New File", shortcut=("⌘", "N"), group_id="actions"),
        Command(id="new-project", label="Create New Project", group_id="actions"),
        Command(
            id="premium",
            label="Premium Feature",
            description="Upgrade to access",
            disabled=True,
        ),
        Command(id="profile", label="View Profile", group_id="user"),
        Command(
            id="docs",
            label="Documentation",
            description="View help and guides",
            keywords=("manual", "guide"),
            group_id="help",
        ),
        Command(id="support", label="Get Support", group_id="help"),
        Command(id="logout", label="Sign Out", keywords=("logout", "exit"), group_id="user"),
    ]
    return commands, groups
