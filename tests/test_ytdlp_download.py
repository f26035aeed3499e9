import json
import uuid

import pytest

from tdm.status import Status
from tdm.ytdlp_download import YtdlpDownload


def test_create_sets_defaults():
    d = YtdlpDownload.create("https://youtu.be/abc", "/downloads", 4)
    assert d.url == "https://youtu.be/abc"
    assert d.directory == "/downloads"
    assert d.priority == 4
    assert d.status == Status.PENDING
    assert d.path == ""
    assert d.created_at == d.updated_at
    assert d.created_at is not None


def test_create_gives_unique_ids():
    a = YtdlpDownload.create("u", "d", 1)
    b = YtdlpDownload.create("u", "d", 1)
    assert a.id != b.id


def test_download_type():
    assert YtdlpDownload().download_type() == "ytdlp"


def test_filename_empty_without_path():
    assert YtdlpDownload.create("u", "d", 1).filename == ""


def test_set_path_normalises_and_exposes_basename():
    d = YtdlpDownload.create("u", "d", 1)
    d.set_path("/tmp/videos/../clip.mp4")
    assert d.path.endswith("clip.mp4")
    assert ".." not in d.path
    assert d.filename == "clip.mp4"


def test_setters_touch_updated_at():
    d = YtdlpDownload.create("u", "d", 1)
    before = d.updated_at
    d.set_status(Status.ACTIVE)
    d.set_priority(9)
    d.set_progress(10, 20)
    assert d.status == Status.ACTIVE
    assert d.priority == 9
    assert (d.downloaded, d.total_size) == (10, 20)
    assert d.updated_at >= before


def test_json_round_trip():
    d = YtdlpDownload.create("https://youtu.be/abc", "/downloads", 3)
    d.set_path("/downloads/title.webm")
    d.set_progress(55, 200)
    d.set_status(Status.PAUSED)
    restored = YtdlpDownload.from_json(d.to_json())
    assert restored == d


def test_json_uses_wire_keys():
    d = YtdlpDownload.create("u", "d", 2)
    obj = json.loads(d.to_json())
    assert set(obj) == {
        "id", "url", "dir", "path", "status", "priority",
        "totalSize", "downloaded", "createdAt", "updatedAt",
    }
    assert obj["id"] == str(d.id)
    assert obj["status"] == int(Status.PENDING)


def test_from_json_missing_times_are_none():
    ident = uuid.uuid4()
    d = YtdlpDownload.from_json(json.dumps({"id": str(ident), "url": "u"}))
    assert d.id == ident
    assert d.created_at is None
    assert d.updated_at is None


@pytest.mark.parametrize("data", ["{", "[]", '{"status": "x"}', '{"id": "not-a-uuid"}'])
def test_from_json_rejects_malformed(data):
    with pytest.raises(ValueError):
        YtdlpDownload.from_json(data)