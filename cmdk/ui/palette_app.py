"""Standalone Textual app hosting the command palette."""

from collections.abc import Iterable

from textual.app import App, ComposeResult
from textual.widgets import Static

from cmdk.config.palette_config import PaletteOptions

from .command_palette import Command, CommandPaletteScreen, Group


class PaletteDemoApp(App[Command | None]):
    """Opens the palette on start and exits with the chosen command."""

    def __init__(
        self,
        commands: Iterable[Command],
        groups: Iterable[Group] = (),
        recent_ids: Iterable[str] = (),
        options: PaletteOptions | None = None,
    ):
        super().__init__()
        self.commands = list(commands)
        self.groups = list(groups)
        self.recent_ids = list(recent_ids)
        self.options = options

    def compose(self) -> ComposeResult:
        yield Static("cmdk")

    def on_mount(self) -> None:
        self.push_screen(
            CommandPaletteScreen(self.commands, self.groups, self.recent_ids, self.options),
            self.exit,
        )
