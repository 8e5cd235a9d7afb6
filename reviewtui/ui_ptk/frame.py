# reviewtui/ui_ptk/frame.py
"""Character-cell frame that views paint into before prompt_toolkit shows it."""
from dataclasses import dataclass
from typing import List, Tuple

from reviewtui.ui_ptk.text_sanitize import sanitize_text

Cell = Tuple[str, str]  # (style, char)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def inner(self, margin: int = 1) -> "Rect":
        return Rect(self.x + margin, self.y + margin,
                    max(0, self.width - 2 * margin), max(0, self.height - 2 * margin))

    def centered(self, width: int, height: int) -> "Rect":
        """A ``width`` x ``height`` rect centered in this one, clipped to it."""
        w = min(width, self.width)
        h = min(height, self.height)
        return Rect(self.x + (self.width - w) // 2, self.y + (self.height - h) // 2, w, h)

    def split_columns(self, left_width: int) -> Tuple["Rect", "Rect"]:
        left_width = max(0, min(left_width, self.width))
        return (Rect(self.x, self.y, left_width, self.height),
                Rect(self.x + left_width, self.y, self.width - left_width, self.height))

    def rows(self, start: int, count: int) -> "Rect":
        start = max(0, min(start, self.height))
        return Rect(self.x, self.y + start, self.width, max(0, min(count, self.height - start)))


class FrameBuffer:
    def __init__(self, width: int, height: int, style: str = ""):
        self.width = max(0, width)
        self.height = max(0, height)
        self.base_style = style
        self._cells: List[List[Cell]] = []
        self.clear()

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def clear(self) -> None:
        self._cells = [[(self.base_style, " ") for _ in range(self.width)] for _ in range(self.height)]

    def put(self, x: int, y: int, text: str, style: str = "", max_width: int = None) -> int:
        """Write ``text`` starting at (x, y); returns the column after the last cell written."""
        if y < 0 or y >= self.height:
            return x
        text = sanitize_text(text)
        if max_width is not None:
            text = text[:max(0, max_width)]
        row = self._cells[y]
        for ch in text:
            if x >= self.width:
                break
            if x >= 0:
                row[x] = (style, ch)
            x += 1
        return x

    def fill(self, rect: Rect, style: str = "", ch: str = " ") -> None:
        for y in range(max(0, rect.y), min(self.height, rect.bottom)):
            row = self._cells[y]
            for x in range(max(0, rect.x), min(self.width, rect.right)):
                row[x] = (style, ch)

    def box(self, rect: Rect, style: str = "class:border", title: str = "",
            title_style: str = "class:title", fill_style: str = "class:dialog") -> None:
        """Clear ``rect`` and draw a single-line border with an optional title."""
        if rect.width < 2 or rect.height < 2:
            return
        self.fill(rect, fill_style)
        right = rect.right - 1
        bottom = rect.bottom - 1
        self.put(rect.x, rect.y, "┌" + "─" * (rect.width - 2) + "┐", style)
        self.put(rect.x, bottom, "└" + "─" * (rect.width - 2) + "┘", style)
        for y in range(rect.y + 1, bottom):
            self.put(rect.x, y, "│", style)
            self.put(right, y, "│", style)
        if title:
            self.put(rect.x + 2, rect.y, f" {title} ", title_style, max_width=rect.width - 4)

    def cell(self, x: int, y: int) -> Cell:
        return self._cells[y][x]

    def line_fragments(self, y: int) -> List[Tuple[str, str]]:
        """Row ``y`` as prompt_toolkit (style, text) fragments, adjacent styles merged."""
        out: List[Tuple[str, str]] = []
        for style, ch in self._cells[y]:
            if out and out[-1][0] == style:
                out[-1] = (style, out[-1][1] + ch)
            else:
                out.append((style, ch))
        return out

    def lines(self) -> List[str]:
        return ["".join(ch for _, ch in row) for row in self._cells]

    def text(self) -> str:
        return "\n".join(line.rstrip() for line in self.lines())
