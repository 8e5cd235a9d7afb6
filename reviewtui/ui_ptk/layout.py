# reviewtui/ui_ptk/layout.py
import asyncio

from prompt_toolkit.application import Application
from prompt_toolkit.layout import Layout

from reviewtui.ui_ptk.bind import build_keybindings
from reviewtui.ui_ptk.styles import STYLE
from reviewtui.ui_ptk.widgets import frame_window


def build_application(processor, inputs: asyncio.Queue) -> Application:
    window = frame_window(processor.paint)
    app = Application(
        layout=Layout(window, focused_element=window),
        key_bindings=build_keybindings(inputs),
        mouse_support=False,
        full_screen=True,
        style=STYLE,
    )
    # Esc is a key of its own here, not a meta prefix
    app.ttimeoutlen = 0.05
    app.timeoutlen = 0.05
    return app
