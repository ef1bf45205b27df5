"""
Command catalogue for the command palette.

Holds the commands and groups supplied by the host for one palette session.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    """An action that can be invoked from the palette."""

    id: str  # Unique identifier, e.g. "nav.home"
    label: str  # Display text, also used for matching
    description: str | None = None  # Secondary text, weaker match
    keywords: tuple[str, ...] = ()  # Invisible search terms
    group_id: str | None = None  # Group this command is listed under
    shortcut: tuple[str, ...] = ()  # Display-only key tokens, e.g. ("⌘", "K")
    disabled: bool = False  # Listed but never confirmable
    icon: str | None = None
    action: Callable[[], None] | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Group:
    """A named bucket commands are listed under when no query is active."""

    id: str
    label: str
    icon: str | None = None


class AnomalyKind(Enum):
    """Catalogue problems that are normalized instead of rejected."""

    DUPLICATE_COMMAND = "duplicate_command"
    DUPLICATE_GROUP = "duplicate_group"
    DANGLING_GROUP = "dangling_group"


@dataclass(frozen=True)
class CatalogueAnomaly:
    """A normalization applied while loading a catalogue."""

    kind: AnomalyKind
    item_id: str
    detail: str


class CatalogueStore:
    """Read-only view over the commands and groups of one session."""

    def __init__(self, commands: Iterable[Command] = (), groups: Iterable[Group] = ()):
        self._commands: dict[str, Command] = {}
        self._groups: dict[str, Group] = {}
        self.anomalies: list[CatalogueAnomaly] = []
        self.load(commands, groups)

    def load(self, commands: Iterable[Command], groups: Iterable[Group] = ()) -> None:
        """Replace the catalogue contents.

        Duplicate ids keep their first declaration. Commands pointing at an
        unknown group are kept and listed as ungrouped.
        """
        self._commands = {}
        self._groups = {}
        self.anomalies = []

        for group in groups:
            if group.id in self._groups:
                self._record(AnomalyKind.DUPLICATE_GROUP, group.id, "later declaration dropped")
                continue
            self._groups[group.id] = group

        for command in commands:
            if command.id in self._commands:
                self._record(AnomalyKind.DUPLICATE_COMMAND, command.id, "later declaration dropped")
                continue
            if command.group_id is not None and command.group_id not in self._groups:
                self._record(
                    AnomalyKind.DANGLING_GROUP,
                    command.id,
                    f"unknown group {command.group_id!r}, listed as ungrouped",
                )
            self._commands[command.id] = command

        logger.debug(
            f"Loaded catalogue: {len(self._commands)} commands, {len(self._groups)} groups"
        )

    def _record(self, kind: AnomalyKind, item_id: str, detail: str) -> None:
        self.anomalies.append(CatalogueAnomaly(kind=kind, item_id=item_id, detail=detail))
        logger.warning(f"Catalogue {kind.value}: {item_id} ({detail})")

    def get(self, command_id: str) -> Command | None:
        """Get a command by ID."""
        return self._commands.get(command_id)

    def get_group(self, group_id: str) -> Group | None:
        return self._groups.get(group_id)

    def group_of(self, command: Command) -> Group | None:
        """The group a command is effectively listed under, None if ungrouped."""
        if command.group_id is None:
            return None
        return self._groups.get(command.group_id)

    @property
    def commands(self) -> list[Command]:
        """Commands in declared order."""
        return list(self._commands.values())

    @property
    def groups(self) -> list[Group]:
        """Groups in declared order."""
        return list(self._groups.values())

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)
