import pytest

from tdm.progress_bar import progress_bar
from tdm.status import Status


@pytest.mark.parametrize(
    "width, percent, status, expected_filled, expected_empty",
    [
        (20, 0.0, Status.ACTIVE, 0, 20),
        (20, 0.5, Status.PAUSED, 10, 10),
        (20, 1.0, Status.COMPLETED, 20, 0),
        (10, -0.5, Status.FAILED, 0, 10),
        (10, 1.5, Status.CANCELLED, 10, 0),
        (0, 0.5, Status.QUEUED, 0, 0),
        (15, 0.33, Status.ACTIVE, 4, 11),
    ],
)
def test_progress_bar_counts(width, percent, status, expected_filled, expected_empty):
    output = progress_bar(width, percent, status)
    assert output.count("█") == expected_filled
    assert output.count("░") == expected_empty


def test_zero_width_is_empty():
    assert progress_bar(0, 0.5, Status.QUEUED) == ""


def test_negative_width_is_empty():
    assert progress_bar(-3, 0.5, Status.ACTIVE) == ""


def test_status_changes_fill_colour():
    active = progress_bar(10, 0.5, Status.ACTIVE)
    failed = progress_bar(10, 0.5, Status.FAILED)
    assert active.count("█") == failed.count("█")
    assert active != failed


def test_pending_and_queued_share_colour():
    assert progress_bar(10, 0.3, Status.PENDING) == progress_bar(10, 0.3, Status.QUEUED)