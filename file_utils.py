import logging
import mimetypes
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

import gridfs
from fastapi import UploadFile
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

import config

logger = logging.getLogger(__name__)


class AttachmentStoreError(Exception):
    """Base error of the attachment backends."""


class AttachmentNotFound(AttachmentStoreError):
    pass


class AttachmentWriteError(AttachmentStoreError):
    pass


def get_mime_type(file_path: str) -> str:
    """
    Get the MIME type of a file based on its extension.
    """
    mime_type, _ = mimetypes.guess_type(file_path)
    return mime_type or 'application/octet-stream'


def make_reference(filename: Optional[str]) -> str:
    """Generate a unique stored name while preserving the extension."""
    file_ext = Path(filename or "").suffix.lower()
    return f"{uuid.uuid4().hex}{file_ext}"


class AttachmentStore(ABC):
    """Save uploaded bytes, hand back an opaque reference, resolve it later."""

    @abstractmethod
    def put(self, content: bytes, filename: str, content_type: Optional[str] = None) -> str:
        ...

    @abstractmethod
    def get(self, reference: str) -> Tuple[bytes, str]:
        ...

    @abstractmethod
    def delete(self, reference: str) -> bool:
        ...


class LocalAttachmentStore(AttachmentStore):
    """Files kept under a directory on the server's disk."""

    def __init__(self, root: str = config.UPLOAD_DIR):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, reference: str) -> Path:
        # references are bare file names, never paths
        if not reference or Path(reference).name != reference or reference in (".", ".."):
            raise AttachmentNotFound(reference)
        return self.root / reference

    def put(self, content: bytes, filename: str, content_type: Optional[str] = None) -> str:
        reference = make_reference(filename)
        try:
            with open(self.root / reference, "wb") as buffer:
                buffer.write(content)
        except OSError as e:
            raise AttachmentWriteError(f"Error saving file: {e}") from e
        return reference

    def get(self, reference: str) -> Tuple[bytes, str]:
        path = self._path(reference)
        if not path.is_file():
            raise AttachmentNotFound(reference)
        return path.read_bytes(), get_mime_type(str(path))

    def delete(self, reference: str) -> bool:
        try:
            path = self._path(reference)
        except AttachmentNotFound:
            return False
        if path.exists():
            path.unlink()
            return True
        return False


class GridFSAttachmentStore(AttachmentStore):
    """Files kept in a MongoDB GridFS bucket, looked up by their stored filename."""

    def __init__(self, database, bucket: str = config.GRIDFS_BUCKET):
        self.fs = gridfs.GridFS(database, collection=bucket)

    @classmethod
    def from_url(cls, url: str = config.MONGODB_URL, database: str = config.GRIDFS_DATABASE,
                 bucket: str = config.GRIDFS_BUCKET) -> "GridFSAttachmentStore":
        client = MongoClient(url)
        return cls(client[database], bucket=bucket)

    def put(self, content: bytes, filename: str, content_type: Optional[str] = None) -> str:
        reference = make_reference(filename)
        metadata = {
            "contentType": content_type or get_mime_type(filename or reference),
            "originalName": filename,
        }
        try:
            self.fs.put(content, filename=reference, metadata=metadata)
        except PyMongoError as e:
            raise AttachmentWriteError(f"Error saving file: {e}") from e
        return reference

    def get(self, reference: str) -> Tuple[bytes, str]:
        grid_out = self.fs.find_one({"filename": reference})
        if grid_out is None:
            raise AttachmentNotFound(reference)
        metadata = grid_out.metadata or {}
        return grid_out.read(), metadata.get("contentType") or get_mime_type(reference)

    def delete(self, reference: str) -> bool:
        grid_out = self.fs.find_one({"filename": reference})
        if grid_out is None:
            return False
        self.fs.delete(grid_out._id)
        return True


def build_attachment_store(backend: str = config.ATTACHMENT_BACKEND) -> AttachmentStore:
    """Pick the attachment backend once, at startup."""
    if backend == "local":
        return LocalAttachmentStore(config.UPLOAD_DIR)
    if backend == "gridfs":
        return GridFSAttachmentStore.from_url()
    raise ValueError(f"Unknown attachment backend: {backend!r}")


async def save_upload_file(store: AttachmentStore, upload_file: UploadFile) -> dict:
    """
    Push an uploaded file into the attachment store.

    Args:
        store: The configured attachment backend
        upload_file: The uploaded file

    Returns:
        dict with the stored reference, original name, content type and size,
        ready to build a GrievanceAttachment from.
    """
    file_content = await upload_file.read()
    content_type = upload_file.content_type or get_mime_type(upload_file.filename or "")
    reference = await run_in_threadpool(store.put, file_content, upload_file.filename, content_type)
    logger.info("Stored attachment %s (%d bytes)", reference, len(file_content))
    return {
        "reference": reference,
        "file_name": upload_file.filename,
        "file_type": content_type,
        "file_size": len(file_content),
    }
