# reviewtui/core/view_stack.py
from typing import Generic, List, TypeVar

V = TypeVar("V")


class ViewStack(Generic[V]):
    """LIFO of UI modes. Never empty: the root view cannot be popped."""

    def __init__(self, root: V):
        self._views: List[V] = [root]

    def push(self, view: V) -> None:
        self._views.append(view)

    def pop(self):
        if len(self._views) <= 1:
            return None
        return self._views.pop()

    def current(self) -> V:
        return self._views[-1]

    def __len__(self) -> int:
        return len(self._views)

    def __iter__(self):
        return iter(list(self._views))

    def render_order(self) -> List[V]:
        """Views to paint, bottom first.

        Starts at the top and walks down while the view is an overlay, so the
        first opaque view and every overlay above it are painted in order.
        """
        i = len(self._views) - 1
        while i > 0 and getattr(self._views[i], "is_overlay", False):
            i -= 1
        return self._views[i:]
