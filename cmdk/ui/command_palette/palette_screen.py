"""
Command Palette Screen - modal overlay.

Renders a PalettePresenter session: search input, sectioned results with
shortcut hints, and an empty or loading line. Dismisses with the selected
Command, or None when cancelled.
"""

import asyncio
import logging
from collections.abc import Iterable

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import Input, ListItem, ListView, Static

from cmdk.config.constants import MAX_DESCRIPTION_WIDTH, MAX_LABEL_WIDTH
from cmdk.config.palette_config import PaletteOptions

from .palette_commands import Command, Group
from .palette_keys import KEY_ACTIONS
from .palette_presenter import PalettePresenter, PaletteState
from .palette_ranking import FilterFn

logger = logging.getLogger(__name__)


def _truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


class PaletteSectionHeader(ListItem):
    """Non-selectable section heading."""

    DEFAULT_CSS = """
    PaletteSectionHeader {
        height: 1;
        padding: 0 1;
        color: $text-muted;
        text-style: bold;
    }
    """

    def __init__(self, label: str, **kwargs):
        super().__init__(disabled=True, **kwargs)
        self.label = label

    def compose(self) -> ComposeResult:
        yield Static(escape(self.label.upper()))


class PaletteResultWidget(ListItem):
    """Widget for a single command row."""

    DEFAULT_CSS = """
    PaletteResultWidget {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, command: Command, show_shortcut: bool = True, **kwargs):
        super().__init__(disabled=command.disabled, **kwargs)
        self.command = command
        self.show_shortcut = show_shortcut

    def _row_markup(self) -> str:
        command = self.command
        parts = []
        if command.icon:
            parts.append(escape(command.icon))
        parts.append(escape(_truncate(command.label, MAX_LABEL_WIDTH)))
        if command.description:
            parts.append(f"[dim]{escape(_truncate(command.description, MAX_DESCRIPTION_WIDTH))}[/dim]")
        if self.show_shortcut and command.shortcut:
            keys = " ".join(f"[reverse] {escape(k)} [/reverse]" for k in command.shortcut)
            parts.append(f"  {keys}")
        return " ".join(parts)

    def compose(self) -> ComposeResult:
        yield Static(self._row_markup())


class CommandPaletteScreen(ModalScreen[Command | None]):
    """Command palette modal overlay."""

    CSS = """
    CommandPaletteScreen {
        align: center top;
        padding-top: 5;
    }

    #palette-container {
        width: 80;
        height: auto;
        max-height: 30;
        background: $surface;
        border: solid $primary;
    }

    #palette-input {
        width: 100%;
        height: 3;
        border: none;
        border-bottom: solid $primary-darken-1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #palette-results {
        height: auto;
        max-height: 20;
        padding: 0;
    }

    #palette-status {
        height: auto;
        padding: 1 2;
        color: $text-muted;
        text-align: center;
    }

    #palette-hints {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
    }

    ListItem.--highlight {
        background: $accent;
    }
    """

    # Priority bindings so the focused Input never swallows navigation keys
    BINDINGS = [
        Binding(key, f"palette_key('{key}')", action.value, show=False, priority=True)
        for key, action in KEY_ACTIONS.items()
    ]

    def __init__(
        self,
        commands: Iterable[Command],
        groups: Iterable[Group] = (),
        recent_ids: Iterable[str] = (),
        options: PaletteOptions | None = None,
        filter_fn: FilterFn | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.commands = list(commands)
        self.groups = list(groups)
        self.recent_ids = list(recent_ids)
        self.options = options or PaletteOptions()
        self.presenter = PalettePresenter(
            options=self.options,
            on_close=self._on_close,
            on_command_selected=self._on_command_selected,
            on_state_update=self._on_state_update,
            filter_fn=filter_fn,
        )
        self._selected: Command | None = None
        self._render_id = 0
        self._debounce_timer: Timer | None = None
        self._search_task: asyncio.Task | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="palette-container"):
            yield Input(placeholder=self.options.placeholder_text, id="palette-input")
            yield ListView(id="palette-results")
            yield Static("", id="palette-status")
            if self.options.show_hints:
                yield Static("↑↓ Navigate │ Enter Select │ Esc Close", id="palette-hints")

    def on_mount(self) -> None:
        """Open the session and focus the input."""
        self.presenter.open(self.commands, self.groups, self.recent_ids)
        self.query_one("#palette-input", Input).focus()

    # -------------------------------------------------------------------------
    # Presenter callbacks
    # -------------------------------------------------------------------------

    def _on_command_selected(self, command: Command) -> None:
        self._selected = command

    def _on_close(self) -> None:
        self._cancel_pending_search()
        self.dismiss(self._selected)

    def _on_state_update(self, state: PaletteState) -> None:
        """Schedule a render; only the newest one runs."""
        self._render_id += 1
        self.call_later(self._render_results, state, self._render_id)

    async def _render_results(self, state: PaletteState, render_id: int) -> None:
        if render_id != self._render_id or not self.presenter.is_open:
            return

        results_view = self.query_one("#palette-results", ListView)
        status = self.query_one("#palette-status", Static)
        await results_view.clear()
        if render_id != self._render_id:
            return

        showing_status = state.is_loading or state.is_empty
        for hints in self.query("#palette-hints"):
            hints.display = not showing_status

        if showing_status:
            status.update(self.options.loading_text if state.is_loading else self.options.empty_state_text)
            status.display = True
            return
        status.display = False

        rows: list[ListItem] = []
        active_row: int | None = None
        flat_index = 0
        for section in state.sections:
            if section.label:
                rows.append(PaletteSectionHeader(section.label))
            for command in section.commands:
                if flat_index == state.active_index:
                    active_row = len(rows)
                rows.append(PaletteResultWidget(command, self.options.show_shortcut_hints))
                flat_index += 1

        await results_view.extend(rows)
        results_view.index = active_row

    # -------------------------------------------------------------------------
    # Input handling
    # -------------------------------------------------------------------------

    def _cancel_pending_search(self) -> None:
        if self._debounce_timer:
            self._debounce_timer.stop()
            self._debounce_timer = None
        if self._search_task and not self._search_task.done():
            self._search_task.cancel()

    def _start_search(self, query: str) -> None:
        self._debounce_timer = None
        self._search_task = asyncio.create_task(self.presenter.search(query))

    def on_input_changed(self, event: Input.Changed) -> None:
        """Debounce query changes; a newer keystroke cancels the pending search."""
        if event.input.id != "palette-input":
            return
        self._cancel_pending_search()
        query = event.value
        self._debounce_timer = self.set_timer(
            self.options.debounce_seconds, lambda: self._start_search(query)
        )

    def _flush_query(self) -> None:
        """Apply typed text immediately so navigation and confirm see its results."""
        state = self.presenter.state
        if state is None:
            return
        value = self.query_one("#palette-input", Input).value
        if self._debounce_timer is None and not state.is_searching and value == state.query:
            return
        self._cancel_pending_search()
        self.presenter.set_query(value)

    def action_palette_key(self, key: str) -> None:
        """Route a bound key through the presenter's keyboard contract."""
        self._flush_query()
        self.presenter.handle_key(key)

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        """Handle pointer selection of a row."""
        if isinstance(event.item, PaletteResultWidget):
            self.presenter.select(event.item.command.id)
