from reviewtui.core.view_stack import ViewStack


class _V:
    def __init__(self, name, overlay=False):
        self.name = name
        self.is_overlay = overlay


def test_pop_never_empties_the_stack():
    root = _V("root")
    stack = ViewStack(root)
    assert stack.pop() is None
    assert stack.pop() is None
    assert len(stack) == 1
    assert stack.current() is root


def test_push_pop_lifo():
    stack = ViewStack(_V("root"))
    a, b = _V("a"), _V("b")
    stack.push(a)
    stack.push(b)
    assert stack.current() is b
    assert stack.pop() is b
    assert stack.current() is a
    assert len(stack) == 2


def test_render_order_stops_at_first_opaque_view():
    root, details, comments, help_ = _V("root"), _V("details"), _V("comments", True), _V("help", True)
    stack = ViewStack(root)
    for v in (details, comments, help_):
        stack.push(v)
    assert [v.name for v in stack.render_order()] == ["details", "comments", "help"]


def test_render_order_single_opaque_top():
    stack = ViewStack(_V("root"))
    stack.push(_V("dialog", True))
    stack.push(_V("details"))
    assert [v.name for v in stack.render_order()] == ["details"]


def test_render_order_overlay_over_root():
    stack = ViewStack(_V("root"))
    stack.push(_V("dialog", True))
    assert [v.name for v in stack.render_order()] == ["root", "dialog"]
