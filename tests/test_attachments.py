"""
Attachment download through the API, plus the local and GridFS attachment backends.
"""

import mongomock
import mongomock.gridfs
import pytest

import config
from file_utils import (
    AttachmentNotFound,
    AttachmentWriteError,
    GridFSAttachmentStore,
    LocalAttachmentStore,
    build_attachment_store,
    get_mime_type,
    make_reference,
)


def _submit_with_file(client, headers, filename, content, content_type):
    resp = client.post(
        "/grievances",
        data={"title": "With file", "description": "See attached", "category": "General"},
        files={"photo": (filename, content, content_type)},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["attachments"][0]


class TestDownloadAttachment:
    def test_image_served_inline(self, client, student_headers):
        attachment = _submit_with_file(client, student_headers, "crack.png", b"png-data", "image/png")
        resp = client.get(attachment["file_url"], headers=student_headers)
        assert resp.status_code == 200
        assert resp.content == b"png-data"
        assert resp.headers["content-type"].startswith("image/png")
        assert resp.headers["content-disposition"].startswith("inline")
        assert resp.headers["x-content-type-options"] == "nosniff"

    def test_svg_forced_download(self, client, student_headers):
        svg = b"<svg xmlns=\"http://www.w3.org/2000/svg\"><script>alert(1)</script></svg>"
        attachment = _submit_with_file(client, student_headers, "drawing.svg", svg, "image/svg+xml")
        resp = client.get(attachment["file_url"], headers=student_headers)
        assert resp.status_code == 200
        assert resp.headers["content-disposition"].startswith("attachment")
        assert resp.headers["x-content-type-options"] == "nosniff"

    def test_document_forced_download(self, client, student_headers, admin_headers):
        attachment = _submit_with_file(client, student_headers, "receipt.pdf", b"%PDF-1.4", "application/pdf")
        resp = client.get(attachment["file_url"], headers=admin_headers)
        assert resp.status_code == 200
        assert resp.content == b"%PDF-1.4"
        disposition = resp.headers["content-disposition"]
        assert disposition.startswith("attachment")
        assert "receipt.pdf" in disposition

    def test_other_student_forbidden(self, client, student_headers, other_headers):
        attachment = _submit_with_file(client, student_headers, "private.pdf", b"secret", "application/pdf")
        resp = client.get(attachment["file_url"], headers=other_headers)
        assert resp.status_code == 403

    def test_unknown_reference(self, client, student_headers):
        resp = client.get("/grievances/attachments/does-not-exist.png", headers=student_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Attachment not found"

    def test_missing_bytes(self, client, student_headers, attachment_store):
        attachment = _submit_with_file(client, student_headers, "gone.png", b"bytes", "image/png")
        attachment_store.delete(attachment["reference"])
        resp = client.get(attachment["file_url"], headers=student_headers)
        assert resp.status_code == 404

    def test_requires_authentication(self, client, student_headers):
        attachment = _submit_with_file(client, student_headers, "a.png", b"x", "image/png")
        assert client.get(attachment["file_url"]).status_code == 401


class TestLocalAttachmentStore:
    def test_put_get_delete(self, tmp_path):
        store = LocalAttachmentStore(str(tmp_path))
        reference = store.put(b"hello", "notes.txt", "text/plain")
        assert reference.endswith(".txt")
        assert (tmp_path / reference).read_bytes() == b"hello"

        content, content_type = store.get(reference)
        assert content == b"hello"
        assert content_type == "text/plain"

        assert store.delete(reference) is True
        assert store.delete(reference) is False
        with pytest.raises(AttachmentNotFound):
            store.get(reference)

    def test_references_are_unique(self, tmp_path):
        store = LocalAttachmentStore(str(tmp_path))
        assert store.put(b"a", "same.png") != store.put(b"b", "same.png")

    @pytest.mark.parametrize("reference", ["../secret.txt", "nested/file.txt", "", ".."])
    def test_path_like_references_not_found(self, tmp_path, reference):
        store = LocalAttachmentStore(str(tmp_path / "store"))
        (tmp_path / "secret.txt").write_bytes(b"do not serve")
        with pytest.raises(AttachmentNotFound):
            store.get(reference)

    def test_write_failure(self, tmp_path):
        store = LocalAttachmentStore(str(tmp_path / "store"))
        store.root = tmp_path / "missing" / "dir"
        with pytest.raises(AttachmentWriteError):
            store.put(b"data", "file.txt")


class TestGridFSAttachmentStore:
    @pytest.fixture
    def store(self):
        mongomock.gridfs.enable_gridfs_integration()
        return GridFSAttachmentStore(mongomock.MongoClient().grievance_files, bucket="attachments")

    def test_put_get(self, store):
        reference = store.put(b"%PDF-1.4", "Receipt.PDF", "application/pdf")
        assert reference.endswith(".pdf")

        stored = store.fs.find_one({"filename": reference})
        assert stored.metadata == {"contentType": "application/pdf", "originalName": "Receipt.PDF"}

        content, content_type = store.get(reference)
        assert content == b"%PDF-1.4"
        assert content_type == "application/pdf"

    def test_content_type_guessed_from_name(self, store):
        reference = store.put(b"png", "photo.png")
        assert store.get(reference)[1] == "image/png"

    def test_get_missing(self, store):
        with pytest.raises(AttachmentNotFound):
            store.get("0123456789abcdef.png")

    def test_delete(self, store):
        reference = store.put(b"bytes", "note.txt", "text/plain")
        assert store.delete(reference) is True
        assert store.delete(reference) is False
        with pytest.raises(AttachmentNotFound):
            store.get(reference)


class TestHelpers:
    def test_make_reference_keeps_extension(self):
        assert make_reference("Photo.JPG").endswith(".jpg")
        assert "." not in make_reference("no_extension")
        assert "." not in make_reference(None)

    def test_get_mime_type(self):
        assert get_mime_type("a.png") == "image/png"
        assert get_mime_type("a.unknownext") == "application/octet-stream"

    def test_build_local_store(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path / "up"))
        store = build_attachment_store("local")
        assert isinstance(store, LocalAttachmentStore)
        assert (tmp_path / "up").is_dir()

    def test_build_unknown_backend(self):
        with pytest.raises(ValueError):
            build_attachment_store("s3")
