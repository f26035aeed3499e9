"""A worker that drives one torrent download."""

from __future__ import annotations

import logging
import os
import shutil
import threading
import time
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, InvalidStateError
from datetime import datetime, timedelta, timezone
from typing import Any

from tdm.repository import Repository
from tdm.status import Progress, Status
from tdm.torrent_download import TorrentClient, TorrentDownload, TorrentHandle

log = logging.getLogger(__name__)

_PART_EXT = ".part"
_SAVE_INTERVAL = 10.0
_TICK_INTERVAL = 0.5
_SMOOTHING_WINDOW = 5.0
_STOP_TIMEOUT = 5.0
_TERMINAL = (Status.COMPLETED, Status.FAILED, Status.CANCELLED)


class AlreadyStartedError(RuntimeError):
    """Raised when a worker is started while already running."""

    def __init__(self, message: str = "download already started") -> None:
        super().__init__(message)


def _remove_path(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path, ignore_errors=True)
        return
    try:
        os.remove(path)
    except OSError:
        pass


class TorrentWorker:
    """Starts, tracks, pauses and removes a single torrent download."""

    def __init__(
        self,
        download: TorrentDownload | None,
        url: str,
        is_magnet: bool,
        directory: str,
        client: TorrentClient | None,
        repo: Repository | None,
        priority: int,
    ) -> None:
        if download is None:
            if client is None:
                raise RuntimeError("torrent client is not set")
            download = TorrentDownload.create(client, url, is_magnet, directory, priority)
            if repo is not None:
                repo.save(download)

        self._download = download
        self._repo = repo
        self._client = client

        self._handle: TorrentHandle | None = None
        self._handle_lock = threading.Lock()
        self._flags_lock = threading.Lock()
        self._started = False
        self._finished = False
        self._stopping = False

        self._stop_event: threading.Event | None = None
        self._threads: list[threading.Thread] = []
        self._done: Future[None] = Future()

        downloaded, total = download.downloaded, download.total_size
        percentage = downloaded / total * 100 if total > 0 else 0.0
        if download.status == Status.COMPLETED:
            percentage = 100.0
        self._progress_lock = threading.Lock()
        self._progress = Progress(
            total_size=total, downloaded=downloaded, percentage=percentage
        )

    @property
    def priority(self) -> int:
        return self._download.priority

    @property
    def id(self) -> Any:
        return self._download.id

    @property
    def status(self) -> Status:
        return self._download.status

    @property
    def filename(self) -> str:
        return self._download.name

    @property
    def done(self) -> Future[None]:
        """A future resolved when the download completes."""
        return self._done

    @property
    def progress(self) -> Progress:
        """The latest progress snapshot."""
        with self._progress_lock:
            return self._progress

    def queue(self) -> None:
        """Mark the download as waiting for a slot."""
        self._download.status = Status.QUEUED

    def start(self) -> None:
        """Begin downloading; raise AlreadyStartedError if already running."""
        with self._flags_lock:
            if self._started:
                raise AlreadyStartedError()
            self._started = True

        download = self._download
        if download.status in (Status.COMPLETED, Status.CANCELLED):
            self._started = False
            return

        if self._client is None:
            self._started = False
            raise RuntimeError("torrent client is not set")

        try:
            handle = self._client.get_torrent_handler(download.url, download.is_magnet)
        except Exception:
            self._started = False
            raise

        with self._handle_lock:
            self._handle = handle
        self._stopping = False

        handle.verify_data()
        handle.download_all()

        download.status = Status.ACTIVE
        download.start_time = datetime.now(timezone.utc)

        stop = threading.Event()
        self._stop_event = stop
        loops: list[Callable[[threading.Event], None]] = [
            self._save_state,
            self._track_progress,
            self._wait_completion,
        ]
        self._threads = [
            threading.Thread(target=loop, args=(stop,), daemon=True) for loop in loops
        ]
        for thread in self._threads:
            thread.start()

    def pause(self) -> None:
        """Suspend an active or queued download."""
        if self._download.status not in (Status.ACTIVE, Status.QUEUED):
            return
        self._stop(Status.PAUSED, remove=False)

    def cancel(self) -> None:
        """Stop the download and mark it cancelled."""
        self._stop(Status.CANCELLED, remove=False)

    def remove(self) -> None:
        """Cancel the download and delete its files and record."""
        self._stop(Status.CANCELLED, remove=True)

    def _snapshot_handle(self) -> TorrentHandle | None:
        with self._handle_lock:
            if self._stopping:
                return None
            return self._handle

    def _drop_torrent(self) -> None:
        self._stopping = True
        with self._handle_lock:
            if self._handle is not None:
                self._handle.drop()
                self._handle = None

    def _persist(self) -> None:
        if self._repo is None:
            return
        try:
            self._repo.save(self._download)
        except Exception as exc:
            log.warning("failed to save torrent download %s: %s", self._download.id, exc)

    def _save_state(self, stop: threading.Event) -> None:
        while not stop.wait(_SAVE_INTERVAL):
            if not self._stopping:
                self._persist()

    def _track_progress(self, stop: threading.Event) -> None:
        samples: deque[tuple[float, int]] = deque()
        while not stop.wait(_TICK_INTERVAL):
            handle = self._snapshot_handle()
            if handle is None:
                continue

            downloaded = handle.bytes_completed() if handle.has_info() else 0
            self._download.downloaded = downloaded

            now = time.monotonic()
            samples.append((now, downloaded))
            cutoff = now - _SMOOTHING_WINDOW
            while samples and samples[0][0] < cutoff:
                samples.popleft()

            speed = 0.0
            if len(samples) >= 2:
                elapsed = samples[-1][0] - samples[0][0]
                if elapsed > 0:
                    speed = (samples[-1][1] - samples[0][1]) / elapsed

            total = self._download.total_size
            percentage = min(downloaded / total * 100.0, 100.0) if total > 0 else 0.0

            eta = timedelta(0)
            if speed > 0 and total > downloaded:
                eta = timedelta(seconds=int((total - downloaded) / speed))

            with self._progress_lock:
                self._progress = Progress(
                    total_size=total,
                    downloaded=downloaded,
                    percentage=percentage,
                    speed_bps=int(speed),
                    eta=eta,
                )

    def _wait_completion(self, stop: threading.Event) -> None:
        while not stop.wait(_TICK_INTERVAL):
            handle = self._snapshot_handle()
            if handle is None:
                return
            if not (handle.is_complete() and handle.bytes_completed() >= handle.length):
                continue

            with self._flags_lock:
                if self._finished:
                    return
                self._finished = True

            self._drop_torrent()
            stop.set()

            self._download.status = Status.COMPLETED
            self._download.end_time = datetime.now(timezone.utc)
            self._persist()
            self._started = False

            try:
                self._done.set_result(None)
            except InvalidStateError:
                pass
            return

    def _stop(self, target: Status, remove: bool) -> None:
        if self._download.status in _TERMINAL:
            if remove:
                self._cleanup()
            return

        if self._stop_event is not None:
            self._stop_event.set()
        self._drop_torrent()
        self._download.status = target

        deadline = time.monotonic() + _STOP_TIMEOUT
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join(max(0.0, deadline - time.monotonic()))

        if not remove:
            self._persist()
        self._started = False

        if remove:
            self._cleanup()

    def _cleanup(self) -> None:
        download = self._download
        if download.name:
            path = os.path.join(download.directory, download.name)
            _remove_path(path)
            _remove_path(path + _PART_EXT)
        if self._repo is not None:
            self._repo.delete(download.id)