"""A worker that runs yt-dlp for one download and tracks its progress."""

from __future__ import annotations

import logging
import math
import os
import re
import shutil
import subprocess
import tempfile
import threading
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass, field
from datetime import timedelta
from typing import IO, Any
from urllib.parse import urlsplit

from tdm.repository import Repository, RepositoryError
from tdm.status import Progress, Status
from tdm.ytdlp_download import YtdlpDownload

log = logging.getLogger(__name__)

_SAVE_INTERVAL = 10.0
_POLL_INTERVAL = 0.2
_TERMINAL = (Status.COMPLETED, Status.CANCELLED, Status.FAILED)
_INT = re.compile(r"[+-]?\d+")
_UNKNOWN = ("", "unknown", "n/a")

_UNITS = {
    "": 1,
    "B": 1,
    "KIB": 1024,
    "MIB": 1024**2,
    "GIB": 1024**3,
    "TIB": 1024**4,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
}


@dataclass
class YtdlpConfig:
    """Settings for running yt-dlp."""

    download_dir: str = ""
    binary_path: str = ""
    format: str = ""
    args: list[str] = field(default_factory=list)


class YtdlpError(Exception):
    """Raised when a yt-dlp download cannot proceed."""


class AlreadyStartedError(YtdlpError):
    """Raised when a worker is started while already running."""

    def __init__(self, message: str = "download already started") -> None:
        super().__init__(message)


class BinaryNotFoundError(YtdlpError):
    """Raised when the yt-dlp executable cannot be found."""

    def __init__(self, message: str = "yt-dlp binary not found") -> None:
        super().__init__(message)


def can_handle(url: str) -> bool:
    """Whether the URL belongs to a site that yt-dlp should download from."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    host = parts.netloc.rsplit("@", 1)[-1].lower().removeprefix("www.")
    return (
        host == "youtu.be"
        or host.endswith("youtube.com")
        or host.endswith("youtube-nocookie.com")
    )


def _atoi(text: str) -> int | None:
    return int(text) if _INT.fullmatch(text) else None


def parse_size(value: str) -> int:
    """Convert a size such as '4.0MiB' or '~512KiB' to bytes; 0 when unknown."""
    cleaned = value.strip("~,").strip()
    if cleaned.lower() in _UNKNOWN:
        return 0

    num_part, unit_part = cleaned, ""
    for index, char in enumerate(cleaned):
        if not (char.isdigit() and char.isascii()) and char != ".":
            num_part, unit_part = cleaned[:index], cleaned[index:]
            break
    if not num_part:
        num_part = cleaned

    if not re.fullmatch(r"\d*\.?\d*", num_part) or num_part in ("", "."):
        return 0
    multiplier = _UNITS.get(unit_part.strip().upper())
    if multiplier is None:
        return 0
    return int(float(num_part) * multiplier)


def parse_speed(value: str) -> int:
    """Convert a rate such as '2.00MiB/s' to bytes per second."""
    return parse_size(value.removesuffix("/s"))


def parse_eta(value: str) -> timedelta:
    """Convert 'MM:SS' or 'HH:MM:SS' to a duration; zero when unknown."""
    cleaned = value.strip()
    if cleaned.lower() in _UNKNOWN:
        return timedelta(0)

    numbers = [_atoi(part) for part in cleaned.split(":")]
    if len(numbers) not in (2, 3) or any(n is None for n in numbers):
        return timedelta(0)
    if len(numbers) == 2:
        minutes, seconds = numbers
        return timedelta(minutes=minutes, seconds=seconds)
    hours, minutes, seconds = numbers
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def parse_progress(
    content: str,
) -> tuple[float, int, int, int, timedelta] | None:
    """Parse a yt-dlp progress line body.

    Returns (percentage, total, downloaded, speed, eta), or None when the text
    is not a progress report.
    """
    fields = content.split()
    if not fields or not fields[0].endswith("%"):
        return None
    try:
        pct = float(fields[0][:-1])
    except ValueError:
        return None
    percentage = max(0.0, min(100.0, pct))

    total = speed = 0
    eta = timedelta(0)
    tokens = iter(fields[1:])
    for token in tokens:
        if token not in ("of", "at", "ETA"):
            continue
        following = next(tokens, None)
        if following is None:
            break
        if token == "of":
            total = parse_size(following)
        elif token == "at":
            speed = parse_speed(following)
        else:
            eta = parse_eta(following)

    downloaded = int(percentage / 100 * total) if total > 0 else 0
    return percentage, total, downloaded, speed, eta


def calculate_percentage(downloaded: int, total: int) -> float:
    """Percentage done, clamped to 0..100; 100 when the size is unknown but data arrived."""
    if total <= 0:
        return 100.0 if downloaded > 0 else 0.0
    pct = downloaded / total * 100
    if math.isnan(pct):
        return 0.0
    return min(100.0, max(0.0, pct))


class YtdlpWorker:
    """Runs yt-dlp for a single download and reports its progress."""

    def __init__(
        self,
        config: YtdlpConfig | None,
        url: str,
        download: YtdlpDownload | None,
        repo: Repository | None,
        priority: int,
    ) -> None:
        if config is None:
            raise ValueError("ytdlp config is required")

        if download is not None:
            if download.status == Status.ACTIVE:
                download.set_status(Status.PAUSED)
            if not download.directory:
                download.directory = config.download_dir
        else:
            directory = config.download_dir or tempfile.gettempdir()
            download = YtdlpDownload.create(url, directory, priority)

        if download.priority != priority:
            download.set_priority(priority)

        self._config = config
        self._repo = repo
        self._download = download

        self._flags_lock = threading.Lock()
        self._started = False
        self._finished = False
        self._skip_save = False
        self._stop_event: threading.Event | None = None
        self._done: Future[None] = Future()

        self._progress_lock = threading.Lock()
        self._progress = Progress(
            total_size=download.total_size,
            downloaded=download.downloaded,
            percentage=calculate_percentage(download.downloaded, download.total_size),
        )

        if repo is not None:
            repo.save(download)

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
        """The output file name when known, otherwise the URL."""
        return self._download.filename or self._download.url

    @property
    def done(self) -> Future[None]:
        """A future resolved when the yt-dlp run ends."""
        return self._done

    @property
    def progress(self) -> Progress:
        """The latest progress snapshot."""
        with self._progress_lock:
            return self._progress

    def queue(self) -> None:
        """Mark the download as waiting for a slot."""
        self._download.set_status(Status.QUEUED)

    def start(self) -> None:
        """Launch yt-dlp in the background; raise AlreadyStartedError if running."""
        with self._flags_lock:
            if self._started:
                raise AlreadyStartedError()
            self._started = True
            self._finished = False

        if self._download.status in (Status.COMPLETED, Status.CANCELLED):
            self._started = False
            return

        self._download.set_status(Status.ACTIVE)
        stop = threading.Event()
        self._stop_event = stop
        threading.Thread(target=self._save_state, args=(stop,), daemon=True).start()
        threading.Thread(target=self._run, args=(stop,), daemon=True).start()

    def pause(self) -> None:
        """Pause the download."""
        self._stop(Status.PAUSED, remove=False)

    def cancel(self) -> None:
        """Cancel the download."""
        self._stop(Status.CANCELLED, remove=False)

    def remove(self) -> None:
        """Cancel the download and delete its files and record."""
        self._stop(Status.CANCELLED, remove=True)

    def handle_line(self, line: str) -> None:
        """Interpret one line of yt-dlp output."""
        trimmed = line.strip()
        if not trimmed:
            return

        if trimmed.startswith("[download]"):
            self._handle_download_line(trimmed.removeprefix("[download]").strip())
            return

        if trimmed.startswith("[Merger] Merging formats into"):
            start = trimmed.find('"')
            end = trimmed.rfind('"')
            if start >= 0 and end > start:
                self._download.set_path(trimmed[start + 1 : end])
            return

        if trimmed.startswith("[Moving]"):
            segments = trimmed.split('"')
            if len(segments) >= 2:
                self._download.set_path(segments[-2])

    def _handle_download_line(self, content: str) -> None:
        if content.startswith("Destination:"):
            destination = content.removeprefix("Destination:").strip()
            if destination:
                self._download.set_path(destination)
            return

        parsed = parse_progress(content)
        if parsed is None:
            return
        percentage, total, downloaded, speed, eta = parsed
        self._download.set_progress(downloaded, total)
        with self._progress_lock:
            self._progress = Progress(
                total_size=total,
                downloaded=downloaded,
                percentage=percentage,
                speed_bps=speed,
                eta=eta,
            )

    def _run(self, stop: threading.Event) -> None:
        try:
            self._execute(stop)
        except Exception as exc:
            self._finish(exc)
        else:
            self._finish(None)

    def _execute(self, stop: threading.Event) -> None:
        binary = shutil.which(self._config.binary_path or "yt-dlp")
        if binary is None:
            raise BinaryNotFoundError()

        directory = self._download.directory
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise YtdlpError(f"failed to create directory {directory}: {exc}") from exc

        args = ["--newline", "--no-playlist", "-o", os.path.join(directory, "%(title)s.%(ext)s")]
        fmt = self._config.format.strip()
        if fmt:
            args += ["-f", fmt]
        args += self._config.args
        args.append(self._download.url)

        proc = subprocess.Popen(
            [binary, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        readers = [
            threading.Thread(target=self._consume, args=(stream,), daemon=True)
            for stream in (proc.stdout, proc.stderr)
        ]
        for reader in readers:
            reader.start()

        while proc.poll() is None:
            if stop.wait(_POLL_INTERVAL):
                proc.kill()
                break
        returncode = proc.wait()
        for reader in readers:
            reader.join()

        if stop.is_set():
            return
        if returncode != 0:
            raise YtdlpError(f"yt-dlp exited with status {returncode}")

    def _consume(self, stream: IO[str] | None) -> None:
        if stream is None:
            return
        try:
            with stream:
                for line in stream:
                    self.handle_line(line)
        except (OSError, ValueError) as exc:
            log.debug("yt-dlp output error: %s", exc)

    def _finish(self, err: BaseException | None) -> None:
        with self._flags_lock:
            if self._finished:
                return
            self._finished = True

        try:
            if err is not None:
                self._download.set_status(Status.FAILED)
            elif self._download.status not in (Status.PAUSED, Status.CANCELLED):
                self._complete()
        finally:
            if self._stop_event is not None:
                self._stop_event.set()
            if self._repo is not None and not self._skip_save:
                try:
                    self._repo.save(self._download)
                except Exception as exc:
                    log.error("failed to save download: %s", exc)
            self._started = False
            try:
                if err is None:
                    self._done.set_result(None)
                else:
                    self._done.set_exception(err)
            except InvalidStateError:
                pass

    def _complete(self) -> None:
        download = self._download
        download.set_status(Status.COMPLETED)
        downloaded = download.downloaded
        total = download.total_size or downloaded
        with self._progress_lock:
            self._progress = Progress(
                total_size=total, downloaded=downloaded, percentage=100.0
            )

    def _save_state(self, stop: threading.Event) -> None:
        while not stop.wait(_SAVE_INTERVAL):
            if self._repo is not None and not self._skip_save:
                try:
                    self._repo.save(self._download)
                except Exception as exc:
                    log.error("failed to persist yt-dlp download: %s", exc)

    def _stop(self, target: Status, remove: bool) -> None:
        current = self._download.status
        if current in _TERMINAL:
            if remove:
                self._cleanup_files()
            return
        if target == Status.PAUSED and current == Status.PAUSED:
            return

        self._download.set_status(target)
        if self._stop_event is not None:
            self._stop_event.set()

        if remove:
            self._cleanup_files()
            return

        if self._repo is not None:
            self._repo.save(self._download)

    def _cleanup_files(self) -> None:
        self._skip_save = True
        path = self._download.path
        if path:
            for candidate in (path, path + ".part", path + ".ytdl"):
                try:
                    os.remove(candidate)
                except OSError:
                    pass
        if self._repo is not None:
            try:
                self._repo.delete(self._download.id)
            except RepositoryError:
                pass