# reviewtui/ui_ptk/keys.py
"""Key presses as delivered by prompt_toolkit, plus the help-modal binding record."""
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

ENTER = Keys.ControlM
TAB = Keys.ControlI
BACKTAB = Keys.BackTab
BACKSPACE = Keys.ControlH
ESCAPE = Keys.Escape
CTRL_C = Keys.ControlC
UP = Keys.Up
DOWN = Keys.Down
LEFT = Keys.Left
RIGHT = Keys.Right

_LABELS = {
    ENTER: "Enter",
    TAB: "Tab",
    BACKTAB: "Shift-Tab",
    BACKSPACE: "Backspace",
    ESCAPE: "Esc",
    CTRL_C: "Ctrl-C",
    UP: "Up",
    DOWN: "Down",
    LEFT: "Left",
    RIGHT: "Right",
    " ": "Space",
}

# keys that never reach the views
IGNORED = {Keys.CPRResponse, Keys.Vt100MouseEvent, Keys.WindowsMouseEvent,
           Keys.BracketedPaste, Keys.Ignore, Keys.SIGINT}


def press(key, data: Optional[str] = None) -> KeyPress:
    """Build a KeyPress the way the terminal would report it."""
    if data is None:
        if key == ENTER:
            data = "\r"
        elif key == TAB:
            data = "\t"
        elif key == ESCAPE:
            data = "\x1b"
        elif isinstance(key, str) and len(key) == 1:
            data = key
        else:
            data = ""
    return KeyPress(key, data)


def char(kp: KeyPress) -> Optional[str]:
    """The printable character of a plain key press, else None."""
    key = kp.key
    if isinstance(key, Keys):
        return None
    if isinstance(key, str) and len(key) == 1 and key.isprintable():
        return key
    return None


def is_key(kp: KeyPress, *keys) -> bool:
    return kp.key in keys


def label(key) -> str:
    if key in _LABELS:
        return _LABELS[key]
    if isinstance(key, Keys):
        return key.value
    return str(key)


@dataclass(frozen=True)
class KeyBinding:
    key: KeyPress
    description: str
    label: str = ""

    @property
    def display(self) -> str:
        return self.label or label(self.key.key)


def binding(key, description: str, display: str = "") -> KeyBinding:
    return KeyBinding(press(key), description, display)
