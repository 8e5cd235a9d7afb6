# reviewtui/ui_ptk/bind.py
import asyncio
import logging

from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys

from reviewtui.ui_ptk.keys import IGNORED

log = logging.getLogger(__name__)


def build_keybindings(inputs: asyncio.Queue) -> KeyBindings:
    """Forward every key press to the producer's input queue.

    The views decide what keys mean; nothing is handled here.
    """
    kb = KeyBindings()

    @kb.add(Keys.Any)
    def _(event):
        for press in event.key_sequence:
            if press.key in IGNORED:
                continue
            inputs.put_nowait(press)

    return kb
