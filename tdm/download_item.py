"""One entry of the download list: name, state, bar and transfer details."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from tdm import styles
from tdm.progress_bar import progress_bar
from tdm.status import Progress, Status

_HORIZONTAL_PADDING = 4
_STATUS_WIDTH = 12

_STATUS_LABELS = {
    Status.ACTIVE: (styles.STATUS_ACTIVE, "● active"),
    Status.PAUSED: (styles.STATUS_PAUSED, "❚❚ paused"),
    Status.COMPLETED: (styles.STATUS_COMPLETED, "✔ completed"),
    Status.CANCELLED: (styles.STATUS_CANCELLED, "⊘ cancelled"),
    Status.FAILED: (styles.STATUS_FAILED, "✖ failed"),
}
_QUEUED_LABEL = (styles.STATUS_QUEUED, "○ queued")


@dataclass(frozen=True)
class DownloadInfo:
    """What the list shows about a single download."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    filename: str = ""
    status: Status = Status.PENDING
    progress: Progress = field(default_factory=Progress)


def format_size(num_bytes: int) -> str:
    """Human-readable size using binary units, such as '1.5 MiB'."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{num_bytes / div:.1f} {'KMGTPE'[exp]}iB"


def download_item(info: DownloadInfo, width: int, selected: bool) -> str:
    """Render one download as a three-line block of the given width."""
    inner_width = width - _HORIZONTAL_PADDING
    progress = info.progress

    name = info.filename
    name_width = int(inner_width * 0.6)
    if len(name) > name_width:
        name = name[: max(name_width - 3, 0)] + "..."
    name_block = styles.Style(width=name_width).render(name)

    label_style, label = _STATUS_LABELS.get(info.status, _QUEUED_LABEL)
    status_block = styles.Style(width=_STATUS_WIDTH).render(label_style.render(label))

    percent = f"{progress.percentage:.1f}%"
    spacer_width = (
        inner_width
        - name_width
        - styles.visible_width(status_block)
        - styles.visible_width(percent)
    )
    spacer = styles.Style(width=spacer_width).render("")
    line1 = styles.join_horizontal("bottom", name_block, status_block, spacer, percent)

    bar = progress_bar(inner_width, progress.percentage / 100.0, info.status)
    line2 = styles.LIST_ITEM_STYLE.render(bar)

    size_info = f"{format_size(progress.downloaded)} / {format_size(progress.total_size)}"
    speed_info = "--/s"
    if info.status == Status.ACTIVE:
        speed_info = format_size(progress.speed_bps) + "/s"

    eta = "--"
    if info.status == Status.ACTIVE and progress.eta_text() != "unknown":
        eta = progress.eta_text()
    elif info.status == Status.COMPLETED:
        eta = "Done"

    info_line = f"{size_info}  {speed_info}  ETA: {eta}"
    line3 = styles.LIST_ITEM_STYLE.replace(faint=True).render(info_line)

    item = styles.join_vertical("left", line1, line2, line3)
    container = styles.SELECTED_ITEM_STYLE if selected else styles.LIST_ITEM_STYLE
    return container.replace(padding=(0, 2), width=width).render(item)