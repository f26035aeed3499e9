# tdm

`tdm` is a library of building blocks for a terminal download manager.

## Modules

- `tdm.status`: the `Status` enum (`PENDING`, `ACTIVE`, `PAUSED`, `COMPLETED`, `FAILED`, `QUEUED`, `CANCELLED`) and the frozen `Progress` snapshot, whose `eta_text()` gives the remaining time as text such as `1m30s`, or `unknown`.
- `tdm.repository`: `Repository`, a store of download records in a SQLite file. `save(download)` stores or replaces a record under its id, `get_all()` returns a dict of id to `StoredObject` (a type label and compact JSON), and `delete(id)` removes a record or raises `DownloadNotFoundError`. It can be used as a context manager.
- `tdm.http_errors`: the `DownloadError` family of exceptions, `classify_http_error(status_code)`, `classify_error(err)` and `is_fallback_error(err)`.
- `tdm.http_client`: `Client`, a pooled `requests` session with `head`, `range` and `get` methods that raise the classified errors; `range` raises `RangesNotSupportedError` unless the server answers 206. Also `is_downloadable(url)`, `get_filename(response)` and `parse_last_modified(header)`.
- `tdm.torrent_util`: `has_torrent_file(url)` (by `.torrent` suffix or a HEAD request's Content-Type) and `is_valid_magnet_link(url)`.
- `tdm.torrent_download`: `TorrentDownload`, a torrent record with `to_json()` / `from_json()`, and the `TorrentClient` and `TorrentHandle` protocols.
- `tdm.torrent_worker`: `TorrentWorker`, which starts, tracks, pauses, cancels and removes one torrent download through a `TorrentClient` you supply.
- `tdm.ytdlp_download` and `tdm.ytdlp_worker`: `YtdlpDownload` records and `YtdlpWorker`, which runs the `yt-dlp` program in the background and parses its output. `can_handle(url)` recognises YouTube URLs; the parsing helpers are `parse_progress`, `parse_size`, `parse_speed`, `parse_eta` and `calculate_percentage`.
- `tdm.styles`, `tdm.progress_bar`, `tdm.download_item` and `tdm.download_list`: plain ANSI rendering of progress bars, download rows (`download_item`, `format_size`, `DownloadInfo`) and scrolling download lists (`render_download_list`).

## Installation

```
pip install .
```

With the test extra, to run the test suite:

```
pip install ".[test]"
pytest
```

## Example

Running a yt-dlp download and keeping its record:

```python
from tdm.repository import Repository
from tdm.ytdlp_worker import YtdlpConfig, YtdlpError, YtdlpWorker

with Repository("downloads.db") as repo:
    worker = YtdlpWorker(YtdlpConfig(download_dir="videos"),
                         "https://youtu.be/abc", None, repo, 5)
    worker.start()
    try:
        worker.done.result()
    except YtdlpError as exc:
        print("failed:", exc)
    print(worker.status, worker.progress)
```

`done` is a `concurrent.futures.Future`; `status`, `progress`, `filename`, `id` and `priority` are properties. Running yt-dlp downloads requires the `yt-dlp` executable, either on `PATH` or named by `YtdlpConfig.binary_path`.

Rendering a list of downloads:

```python
from tdm.download_item import DownloadInfo
from tdm.download_list import render_download_list
from tdm.status import Progress, Status

infos = [
    DownloadInfo(filename="file.iso", status=Status.ACTIVE,
                 progress=Progress(total_size=1000, downloaded=500, percentage=50.0)),
]
print(render_download_list(infos, selected=0, width=80, height=12))
```

## What the package does not do

- It has no command and no interactive terminal screen; the rendering functions return strings for a program to display.
- It has no engine that queues downloads, limits how many run at once or reloads saved records into workers.
- It has no worker for plain HTTP downloads; `tdm.http_client` only probes and fetches responses.
- It has no BitTorrent implementation: `TorrentWorker` needs an object that satisfies the `TorrentClient` protocol.