# reviewtui/ui_ptk/widgets.py
from typing import Callable

from prompt_toolkit.layout import Window
from prompt_toolkit.layout.controls import UIControl, UIContent

from reviewtui.ui_ptk.frame import FrameBuffer


class FrameControl(UIControl):
    """Paints a fresh FrameBuffer of the window's size on every redraw."""

    def __init__(self, paint: Callable[[FrameBuffer], None]):
        self.paint = paint

    def is_focusable(self) -> bool:
        return True

    def create_content(self, width: int, height: int) -> UIContent:
        buf = FrameBuffer(width, height)
        self.paint(buf)

        def get_line(i: int):
            if 0 <= i < buf.height:
                return buf.line_fragments(i)
            return []

        return UIContent(get_line=get_line, line_count=max(1, height), show_cursor=False)


def frame_window(paint: Callable[[FrameBuffer], None]) -> Window:
    return Window(content=FrameControl(paint), always_hide_cursor=True, wrap_lines=False)
