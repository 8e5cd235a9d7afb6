# reviewtui/ui_ptk/text_sanitize.py
import re

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_text(text: str, tab_width: int = 4) -> str:
    """Strip escape sequences and control characters; tabs become spaces."""
    if not isinstance(text, str):
        return ""
    sanitized = ANSI_ESCAPE_PATTERN.sub('', text)
    sanitized = sanitized.replace('\t', ' ' * tab_width)
    sanitized = CONTROL_CHARS_PATTERN.sub('', sanitized)
    return sanitized.replace('\r', '').replace('\n', ' ')


def truncate(text: str, width: int, ellipsis: str = "…") -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= len(ellipsis):
        return text[:width]
    return text[:width - len(ellipsis)] + ellipsis
