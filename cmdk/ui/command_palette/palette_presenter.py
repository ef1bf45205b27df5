"""
Presenter for the command palette.

Owns the open/closed lifecycle, the session state, keyboard navigation
and the outbound selection/close events.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from cmdk.config.palette_config import PaletteOptions

from .palette_commands import CatalogueStore, Command, Group
from .palette_keys import KeyAction, translate_key
from .palette_ranking import FilterFn, PaletteResults, ResultSection, rank_commands

logger = logging.getLogger(__name__)


class PaletteStatus(Enum):
    """Lifecycle states of the palette."""

    CLOSED = "closed"
    OPEN = "open"


class Direction(Enum):
    """Selection movement direction."""

    NEXT = "next"
    PREVIOUS = "previous"


@dataclass
class PaletteState:
    """State of one open palette session."""

    query: str = ""
    sections: tuple[ResultSection, ...] = ()
    visible_items: tuple[Command, ...] = ()
    active_index: int | None = None
    recent_ids: tuple[str, ...] = ()
    is_searching: bool = False
    is_loading: bool = False

    @property
    def active_command(self) -> Command | None:
        if self.active_index is None:
            return None
        return self.visible_items[self.active_index]

    @property
    def is_empty(self) -> bool:
        return not self.visible_items


def first_enabled_index(items: tuple[Command, ...]) -> int | None:
    """Index of the first command that can be confirmed."""
    for index, command in enumerate(items):
        if not command.disabled:
            return index
    return None


class PalettePresenter:
    """
    Handles command palette state transitions.

    Closed -> Open on open(); back to Closed on confirm() of an enabled
    command or on cancel(). Calls made while closed are ignored, they come
    from events that belonged to a session that has already ended.

    on_close fires exactly once per session. on_command_selected fires at
    most once, only on a successful confirm, right before on_close.
    """

    def __init__(
        self,
        options: PaletteOptions | None = None,
        on_close: Callable[[], None] | None = None,
        on_command_selected: Callable[[Command], None] | None = None,
        on_state_update: Callable[[PaletteState], None] | None = None,
        filter_fn: FilterFn | None = None,
    ):
        self.options = options or PaletteOptions()
        self.on_close = on_close
        self.on_command_selected = on_command_selected
        self.on_state_update = on_state_update
        self.filter_fn = filter_fn
        self._session: PaletteState | None = None
        self._catalogue: CatalogueStore | None = None
        self._generation = 0

    @property
    def status(self) -> PaletteStatus:
        return PaletteStatus.OPEN if self._session is not None else PaletteStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> PaletteState | None:
        """Current session state, None while closed."""
        return self._session

    @property
    def catalogue(self) -> CatalogueStore | None:
        return self._catalogue

    def _notify_update(self) -> None:
        """Notify listeners of state change."""
        if self.on_state_update and self._session is not None:
            self.on_state_update(self._session)

    def _rank(self, query: str, catalogue: CatalogueStore, recent_ids: tuple[str, ...]) -> PaletteResults:
        return rank_commands(
            query,
            catalogue,
            recent_ids,
            max_recent=self.options.max_recent,
            subsequence_matching=self.options.subsequence_matching,
            filter_fn=self.filter_fn,
        )

    def _apply_results(self, session: PaletteState, query: str, results: PaletteResults) -> None:
        """Install new results, keeping the active command by id when possible."""
        previous = session.active_command
        session.query = query
        session.sections = results.sections
        session.visible_items = results.items
        session.active_index = first_enabled_index(results.items)

        if previous is not None:
            for index, command in enumerate(results.items):
                if command.id == previous.id and not command.disabled:
                    session.active_index = index
                    break

    def _recompute(self, query: str) -> None:
        session = self._session
        assert session is not None and self._catalogue is not None
        self._generation += 1
        session.is_searching = False
        self._apply_results(session, query, self._rank(query, self._catalogue, session.recent_ids))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(
        self,
        commands: Iterable[Command],
        groups: Iterable[Group] = (),
        recent_ids: Iterable[str] = (),
    ) -> None:
        """Start a new session over the given catalogue."""
        if self._session is not None:
            logger.debug("open() ignored: palette already open")
            return

        self._catalogue = CatalogueStore(commands, groups)
        self._session = PaletteState(recent_ids=tuple(recent_ids))
        self._recompute("")
        logger.debug(f"Palette opened with {len(self._catalogue)} commands")
        self._notify_update()

    def replace_catalogue(
        self,
        commands: Iterable[Command],
        groups: Iterable[Group] = (),
        recent_ids: Iterable[str] | None = None,
    ) -> None:
        """Swap the catalogue mid-session, keeping the query text."""
        if self._session is None:
            return

        self._catalogue = CatalogueStore(commands, groups)
        if recent_ids is not None:
            self._session.recent_ids = tuple(recent_ids)
        self._recompute(self._session.query)
        self._notify_update()

    def _end_session(self) -> None:
        self._session = None
        self._catalogue = None
        # Invalidate any search still in flight
        self._generation += 1

    def _emit_close(self) -> None:
        logger.debug("Palette closed")
        if self.on_close:
            self.on_close()

    def cancel(self) -> None:
        """Close without a selection (Escape or host-initiated close)."""
        if self._session is None:
            return
        self._end_session()
        self._emit_close()

    close = cancel

    def confirm(self) -> None:
        """
        Run the active command and close.

        No-op without an enabled active command, or while a search for newer
        query text is still running.
        """
        if self._session is None or self._session.is_searching:
            return

        command = self._session.active_command
        if command is None or command.disabled:
            return

        self._end_session()
        logger.debug(f"Command selected: {command.id}")
        try:
            if command.action:
                command.action()
            if self.on_command_selected:
                self.on_command_selected(command)
        finally:
            self._emit_close()

    # -------------------------------------------------------------------------
    # Query
    # -------------------------------------------------------------------------

    def set_query(self, query: str) -> None:
        """Recompute the visible list for new query text."""
        if self._session is None:
            return
        self._recompute(query)
        self._notify_update()

    def clear_query(self) -> None:
        self.set_query("")

    async def search(self, query: str) -> None:
        """
        Recompute for new query text, off the event loop for large catalogues.

        A newer query, a catalogue swap or closing the palette while this
        runs makes its results stale; stale results are dropped.
        """
        session = self._session
        catalogue = self._catalogue
        if session is None or catalogue is None:
            return

        if len(catalogue) < self.options.async_threshold:
            self.set_query(query)
            return

        self._generation += 1
        generation = self._generation
        session.query = query
        session.is_searching = True
        self._notify_update()

        try:
            results = await asyncio.to_thread(self._rank, query, catalogue, session.recent_ids)
        except asyncio.CancelledError:
            if generation == self._generation and session is self._session:
                session.is_searching = False
            raise

        if generation != self._generation or session is not self._session:
            logger.debug(f"Discarding stale results for query {query!r}")
            return

        session.is_searching = False
        self._apply_results(session, query, results)
        self._notify_update()

    def set_loading(self, loading: bool) -> None:
        """Toggle the host-driven loading indicator."""
        if self._session is None:
            return
        self._session.is_loading = loading
        self._notify_update()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def move_selection(self, direction: Direction | str) -> None:
        """Move to the next/previous enabled item, wrapping at either end."""
        session = self._session
        if session is None:
            return

        direction = Direction(direction)
        items = session.visible_items
        count = len(items)
        if count == 0:
            return

        step = 1 if direction is Direction.NEXT else -1
        if session.active_index is not None:
            start = session.active_index
        else:
            start = -1 if direction is Direction.NEXT else count

        for offset in range(1, count + 1):
            index = (start + step * offset) % count
            if not items[index].disabled:
                session.active_index = index
                self._notify_update()
                return

    def set_active(self, index: int) -> None:
        """Make an item active, e.g. on pointer hover. Disabled items are skipped."""
        session = self._session
        if session is None:
            return
        if 0 <= index < len(session.visible_items) and not session.visible_items[index].disabled:
            session.active_index = index
            self._notify_update()

    def select(self, command_id: str) -> None:
        """Activate and confirm a command by id, e.g. on pointer click."""
        session = self._session
        if session is None:
            return
        for index, command in enumerate(session.visible_items):
            if command.id == command_id:
                if command.disabled:
                    return
                session.active_index = index
                self.confirm()
                return

    def handle_key(self, key: str) -> bool:
        """
        Apply a navigation key.

        Returns:
            True if the key was consumed, False to pass it to text input
        """
        if self._session is None:
            return False

        action = translate_key(key)
        if action is None:
            return False

        if action is KeyAction.MOVE_NEXT:
            self.move_selection(Direction.NEXT)
        elif action is KeyAction.MOVE_PREVIOUS:
            self.move_selection(Direction.PREVIOUS)
        elif action is KeyAction.CONFIRM:
            self.confirm()
        elif action is KeyAction.CANCEL:
            self.cancel()
        return True
