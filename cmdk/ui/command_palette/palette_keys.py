"""Keyboard contract for the command palette."""

from enum import Enum


class KeyAction(Enum):
    """Palette actions reachable from the keyboard."""

    MOVE_NEXT = "move_next"
    MOVE_PREVIOUS = "move_previous"
    CONFIRM = "confirm"
    CANCEL = "cancel"


# Textual key names. Anything not listed belongs to the text input.
KEY_ACTIONS: dict[str, KeyAction] = {
    "down": KeyAction.MOVE_NEXT,
    "ctrl+n": KeyAction.MOVE_NEXT,
    "up": KeyAction.MOVE_PREVIOUS,
    "ctrl+p": KeyAction.MOVE_PREVIOUS,
    "enter": KeyAction.CONFIRM,
    "escape": KeyAction.CANCEL,
    "ctrl+k": KeyAction.CANCEL,
}


def translate_key(key: str) -> KeyAction | None:
    """Map a key name to a palette action, None to pass it through."""
    return KEY_ACTIONS.get(key)
