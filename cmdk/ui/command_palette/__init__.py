"""
Command Palette - keyboard-driven quick action overlay.

Provides:
- CatalogueStore: Commands and groups for one session
- rank_commands: Filtering and ranking of the visible list
- PalettePresenter: Session lifecycle and keyboard navigation
- CommandPaletteScreen: Modal overlay rendering a session
"""

from .palette_commands import CatalogueAnomaly, CatalogueStore, Command, Group
from .palette_presenter import Direction, PalettePresenter, PaletteState, PaletteStatus
from .palette_ranking import MatchTier, PaletteResults, ResultSection, rank_commands
from .palette_screen import CommandPaletteScreen

__all__ = [
    "CatalogueAnomaly",
    "CatalogueStore",
    "Command",
    "CommandPaletteScreen",
    "Direction",
    "Group",
    "MatchTier",
    "PalettePresenter",
    "PaletteResults",
    "PaletteState",
    "PaletteStatus",
    "ResultSection",
    "rank_commands",
]
