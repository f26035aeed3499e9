"""Download states and progress snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum


class Status(IntEnum):
    """Lifecycle state of a download."""

    PENDING = 0
    ACTIVE = 1
    PAUSED = 2
    COMPLETED = 3
    FAILED = 4
    QUEUED = 5
    CANCELLED = 6


@dataclass(frozen=True)
class Progress:
    """A point-in-time view of how far a download has got."""

    total_size: int = 0
    downloaded: int = 0
    percentage: float = 0.0
    speed_bps: int = 0
    eta: timedelta = timedelta(0)

    def eta_text(self) -> str:
        """Remaining time as text such as '1m30s', or 'unknown' without an estimate."""
        seconds = int(self.eta.total_seconds())
        if seconds <= 0:
            return "unknown"
        hours, rest = divmod(seconds, 3600)
        minutes, secs = divmod(rest, 60)
        if hours:
            return f"{hours}h{minutes}m{secs}s"
        if minutes:
            return f"{minutes}m{secs}s"
        return f"{secs}s"