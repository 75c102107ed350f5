from __future__ import annotations

import pytest

from splitview.blobstore import BlobStore, blob_id, is_blob_url


def test_object_urls_round_trip_until_revoked() -> None:
    store = BlobStore()
    url = store.create_object_url(b"data", "image/png", "a.png")

    assert is_blob_url(url)
    assert url in store
    blob = store.get(url)
    assert (blob.content_type, blob.data, blob.filename, blob.size) == ("image/png", b"data", "a.png", 4)

    assert store.revoke_object_url(url) is True
    assert store.revoke_object_url(url) is False
    assert store.get(url) is None
    assert len(store) == 0


def test_urls_are_unique_and_clear_revokes_all() -> None:
    store = BlobStore()
    urls = {store.create_object_url(b"x", "text/plain") for _ in range(5)}

    assert len(urls) == 5
    store.clear()
    assert len(store) == 0


def test_missing_content_type_defaults_to_octet_stream() -> None:
    store = BlobStore()
    assert store.get(store.create_object_url(b"x", "")).content_type == "application/octet-stream"


def test_blob_id_rejects_other_urls() -> None:
    assert blob_id("blob:abc") == "abc"
    assert not is_blob_url("https://example.com")
    assert not is_blob_url(None)
    with pytest.raises(ValueError):
        blob_id("https://example.com")
    assert BlobStore().revoke_object_url("https://example.com") is False
