from datetime import timedelta

import pytest

from tdm.download_item import DownloadInfo, download_item, format_size
from tdm.status import Progress, Status

LONG_FILENAME = "this-is-a-very-long-filename-that-will-definitely-be-truncated.zip"
SHORT_FILENAME = "file.txt"


@pytest.mark.parametrize(
    "info, width, selected, expected",
    [
        (
            DownloadInfo(
                filename=SHORT_FILENAME,
                status=Status.ACTIVE,
                progress=Progress(
                    total_size=1000,
                    downloaded=500,
                    percentage=50.0,
                    speed_bps=100,
                    eta=timedelta(seconds=5),
                ),
            ),
            80,
            False,
            [SHORT_FILENAME, "active", "50.0%", "500 B / 1000 B", "100 B/s", "ETA: 5s"],
        ),
        (
            DownloadInfo(
                filename=SHORT_FILENAME,
                status=Status.PAUSED,
                progress=Progress(total_size=2048, downloaded=1024, percentage=50.0),
            ),
            80,
            True,
            ["paused", "1.0 KiB / 2.0 KiB", "--/s", "ETA: --"],
        ),
        (
            DownloadInfo(
                filename="completed.iso",
                status=Status.COMPLETED,
                progress=Progress(
                    total_size=5000000, downloaded=5000000, percentage=100.0
                ),
            ),
            100,
            False,
            ["completed.iso", "completed", "100.0%", "4.8 MiB / 4.8 MiB", "ETA: Done"],
        ),
        (
            DownloadInfo(
                filename="failed_download",
                status=Status.FAILED,
                progress=Progress(total_size=1000, downloaded=100, percentage=10.0),
            ),
            80,
            False,
            ["failed_download", "failed", "10.0%"],
        ),
        (
            DownloadInfo(
                filename="cancelled.tar.gz",
                status=Status.CANCELLED,
                progress=Progress(total_size=1000, downloaded=200, percentage=20.0),
            ),
            80,
            False,
            ["cancelled.tar.gz", "cancelled", "20.0%"],
        ),
        (
            DownloadInfo(
                filename="queued_file",
                status=Status.QUEUED,
                progress=Progress(total_size=5000, downloaded=0, percentage=0.0),
            ),
            80,
            False,
            ["queued_file", "queued", "0.0%", "0 B / 4.9 KiB"],
        ),
        (
            DownloadInfo(
                filename=LONG_FILENAME,
                status=Status.ACTIVE,
                progress=Progress(total_size=1000, downloaded=10, percentage=1.0),
            ),
            80,
            False,
            ["..."],
        ),
    ],
    ids=["active", "selected-paused", "completed", "failed", "cancelled", "queued", "long"],
)
def test_download_item(info, width, selected, expected):
    output = download_item(info, width, selected)
    for check in expected:
        assert check in output


def test_long_filename_is_truncated():
    info = DownloadInfo(filename=LONG_FILENAME, status=Status.ACTIVE)
    output = download_item(info, 80, False)
    assert LONG_FILENAME not in output
    assert LONG_FILENAME[:10] in output


def test_active_without_eta_shows_dashes():
    info = DownloadInfo(
        filename=SHORT_FILENAME,
        status=Status.ACTIVE,
        progress=Progress(total_size=1000, downloaded=10, percentage=1.0),
    )
    assert "ETA: --" in download_item(info, 80, False)


def test_selected_item_differs_from_unselected():
    info = DownloadInfo(filename=SHORT_FILENAME, status=Status.PAUSED)
    assert download_item(info, 80, True) != download_item(info, 80, False)


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (500, "500 B"),
        (1000, "1000 B"),
        (1024, "1.0 KiB"),
        (2048, "2.0 KiB"),
        (5000, "4.9 KiB"),
        (5000000, "4.8 MiB"),
    ],
)
def test_format_size(num_bytes, expected):
    assert format_size(num_bytes) == expected