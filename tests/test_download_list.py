import pytest

from tdm.download_item import DownloadInfo
from tdm.download_list import render_download_list
from tdm.status import Progress, Status

DOWNLOADS = [
    DownloadInfo(filename="file-0.txt", status=Status.ACTIVE, progress=Progress(percentage=10)),
    DownloadInfo(filename="file-1.txt", status=Status.PAUSED, progress=Progress(percentage=20)),
    DownloadInfo(
        filename="file-2.txt", status=Status.COMPLETED, progress=Progress(percentage=100)
    ),
    DownloadInfo(filename="file-3.txt", status=Status.QUEUED, progress=Progress(percentage=0)),
    DownloadInfo(filename="file-4.txt", status=Status.FAILED, progress=Progress(percentage=50)),
]


@pytest.mark.parametrize(
    "downloads, selected, width, height, should_contain, should_not_contain",
    [
        ([], 0, 80, 20, ["Terminal Download Manager"], []),
        (DOWNLOADS[:2], 1, 80, 10, ["file-0.txt", "file-1.txt"], []),
        (
            DOWNLOADS,
            2,
            80,
            12,
            ["file-1.txt", "file-2.txt", "file-3.txt"],
            ["file-0.txt", "file-4.txt"],
        ),
        (
            DOWNLOADS,
            0,
            80,
            12,
            ["file-0.txt", "file-1.txt", "file-2.txt"],
            ["file-3.txt", "file-4.txt"],
        ),
        (
            DOWNLOADS,
            4,
            80,
            12,
            ["file-2.txt", "file-3.txt", "file-4.txt"],
            ["file-0.txt", "file-1.txt"],
        ),
    ],
    ids=["empty", "no-scroll", "middle", "top", "bottom"],
)
def test_render_download_list(
    downloads, selected, width, height, should_contain, should_not_contain
):
    output = render_download_list(downloads, selected, width, height)
    for check in should_contain:
        assert check in output
    for check in should_not_contain:
        assert check not in output


def test_zero_height_is_visually_empty():
    output = render_download_list(DOWNLOADS, 0, 80, 0)
    assert output.strip() == ""


def test_list_fills_requested_height():
    output = render_download_list(DOWNLOADS, 0, 80, 12)
    assert len(output.split("\n")) >= 12


def test_empty_view_fills_box():
    output = render_download_list([], 0, 80, 20)
    assert len(output.split("\n")) == 20
    assert "████████╗" in output