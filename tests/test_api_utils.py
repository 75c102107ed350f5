from __future__ import annotations

import io

from werkzeug.datastructures import FileStorage

from splitview.viewer import Viewer
from splitview_api.registry import ViewerRegistry
from splitview_api.utils import content_disposition, format_file_size, validate_upload
from tests.helpers import FakeProxy

ALLOWED = {"application/pdf", "text/csv"}


def _file(data: bytes, filename: str, content_type: str) -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)


def test_format_file_size() -> None:
    assert format_file_size(0) == "0 B"
    assert format_file_size(512) == "512.0 B"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(20 * 1024 * 1024) == "20.0 MB"


def test_validate_upload() -> None:
    assert validate_upload(None, 1, ALLOWED) == {"valid": False, "error": "No file uploaded"}

    wrong = validate_upload(_file(b"x", "a.txt", "text/plain"), 1, ALLOWED)
    assert wrong == {"valid": False, "error": "Unsupported file type: text/plain"}

    big = validate_upload(_file(b"x" * (1024 * 1024 + 1), "a.pdf", "application/pdf"), 1, ALLOWED)
    assert big == {"valid": False, "error": "File too large", "max_size_mb": 1}

    ok = _file(b"a,b", "a.csv", "text/csv; charset=utf-8")
    result = validate_upload(ok, 1, ALLOWED)
    assert result["valid"] and result["mimetype"] == "text/csv" and result["file_size"] == 3
    assert ok.read() == b"a,b"


def test_content_disposition_encodes_filenames() -> None:
    assert content_disposition("inline") == "inline"
    assert content_disposition("inline", "báo cáo.pdf") == "inline; filename*=UTF-8''b%C3%A1o%20c%C3%A1o.pdf"


def test_registry_evicts_and_closes_least_recent() -> None:
    registry = ViewerRegistry(lambda: Viewer(FakeProxy()), max_viewers=2)
    first = registry.get_or_create(None)
    first.open_upload(b"a\n1\n", "text/csv")
    second = registry.get_or_create(None)

    assert registry.get(first.viewer_id) is first
    third = registry.get_or_create(None)

    assert len(registry) == 2
    assert registry.get(second.viewer_id) is None
    assert registry.get(first.viewer_id) is first
    assert registry.get(third.viewer_id) is third


def test_registry_remove_closes_viewer() -> None:
    registry = ViewerRegistry(lambda: Viewer(FakeProxy()))
    viewer = registry.get_or_create("unknown-id")
    viewer.open_upload(b"a\n1\n", "text/csv")

    assert registry.get_or_create(viewer.viewer_id) is viewer
    assert registry.remove(viewer.viewer_id)
    assert len(viewer.blobs) == 0
    assert not registry.remove(viewer.viewer_id)

    registry.get_or_create(None)
    registry.close_all()
    assert len(registry) == 0
