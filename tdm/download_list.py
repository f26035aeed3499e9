"""The scrolling list of downloads, or a logo when there are none."""

from __future__ import annotations

from collections.abc import Sequence

from tdm import styles
from tdm.download_item import DownloadInfo, download_item

_ITEM_HEIGHT = 4

_LOGO = (
    "████████╗██████╗ ███╗   ███╗",
    "╚══██╔══╝██╔══██╗████╗ ████║",
    "   ██║   ██║  ██║██╔████╔██║",
    "   ██║   ██║  ██║██║╚██╔╝██║",
    "   ██║   ██████╔╝██║ ╚═╝ ██║",
    "   ╚═╝   ╚═════╝ ╚═╝     ╚═╝",
)
_LOGO_COLOURS = (
    styles.BLUE,
    styles.MAUVE,
    styles.RED,
    styles.PEACH,
    styles.YELLOW,
    styles.GREEN,
)


def render_download_list(
    downloads: Sequence[DownloadInfo], selected: int, width: int, height: int
) -> str:
    """Render as many downloads as fit, keeping the selected one in view."""
    if not downloads:
        return _render_empty_view(width, height)

    if height <= 0:
        return styles.Style(width=width, height=height).render("")

    visible_count = height // _ITEM_HEIGHT
    start = max(selected - visible_count // 2, 0)
    end = start + visible_count
    if end > len(downloads):
        end = len(downloads)
        start = max(end - visible_count, 0)

    rows = [
        download_item(info, width, index == selected)
        for index, info in enumerate(downloads[start:end], start)
    ]
    content = styles.join_vertical("left", *rows)
    return styles.Style(width=width, height=height).render(content)


def _render_empty_view(width: int, height: int) -> str:
    lines = [
        styles.Style(foreground=colour).render(line)
        for line, colour in zip(_LOGO, _LOGO_COLOURS)
    ]
    subtitle = styles.Style(foreground=styles.TEXT, italic=True).render(
        "Terminal Download Manager"
    )
    content = styles.join_vertical("center", *lines)
    content = styles.join_vertical("center", content, "", subtitle)
    return styles.place(width, height, "center", "center", content)