"""A coloured horizontal bar showing how far a download has got."""

from __future__ import annotations

from tdm import styles
from tdm.status import Status

_FILLED = "█"
_EMPTY = "░"

_COLOURS = {
    Status.ACTIVE: styles.TEAL,
    Status.PAUSED: styles.PEACH,
    Status.COMPLETED: styles.GREEN,
    Status.CANCELLED: styles.MAUVE,
    Status.FAILED: styles.RED,
}


def progress_bar(width: int, percent: float, status: Status) -> str:
    """Render a bar of the given width filled to percent (0.0 to 1.0)."""
    if width <= 0:
        return ""
    percent = min(max(percent, 0.0), 1.0)
    filled = int(width * percent)
    empty = width - filled

    filled_style = styles.Style(foreground=_COLOURS.get(status, styles.YELLOW))
    return filled_style.render(_FILLED * filled) + styles.PROGRESS_BAR_EMPTY_STYLE.render(
        _EMPTY * empty
    )