# reviewtui/ui_ptk/styles.py
from prompt_toolkit.styles import Style

STYLE = Style.from_dict({
    "": "",
    "header": "bold reverse",
    "title": "bold",
    "border": "#888888",
    "dialog": "",
    "muted": "#888888",
    "hint": "#888888 italic",
    "selected": "reverse",
    "error": "#ff5555 bold",
    "warning": "#ffaa00",
    "success": "#55ff55",
    "marker.viewed": "#55ff55",
    "marker.comment": "#55aaff",
    "marker.changed": "#ffaa00",
    "marker.missing": "#ff5555",
    "diff.add": "#55ff55",
    "diff.del": "#ff5555",
    "diff.hunk": "#55aaff",
    "input": "underline",
    "input.focused": "underline bold",
    "resolved": "#888888 strike",
    "key": "bold #55aaff",
})
