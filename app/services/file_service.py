"""
File storage for uploaded materials.

``LocalFileStorage`` keeps bytes under ``UPLOAD_DIR``; ``GCSFileStorage`` keeps
them in a Google Cloud Storage bucket. Both return a ``StoredFile`` carrying the
durable reference and the MD5 checksum used for deduplication.
"""
import hashlib
import logging
import mimetypes
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError

from app.core.config import settings


logger = logging.getLogger(__name__)


def compute_checksum(data: bytes) -> str:
    """MD5 hex digest of the content."""
    return hashlib.md5(data).hexdigest()


def _safe_filename(filename: str) -> str:
    name = Path(filename or "upload").name
    return "".join(c if c.isalnum() or c in "._-" else "_" for c in name) or "upload"


@dataclass
class StoredFile:
    reference: str
    checksum: str
    size: int


class FileStorage(ABC):
    """Interface of the file collaborator."""

    @abstractmethod
    def save(self, data: bytes, filename: str, user_id: int) -> StoredFile:
        ...

    @abstractmethod
    def read(self, reference: str) -> bytes:
        ...

    @abstractmethod
    def delete(self, reference: str) -> bool:
        """Best-effort removal. Returns False instead of raising."""


class LocalFileStorage(FileStorage):
    """Stores files on the local disk."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, filename: str, user_id: int) -> StoredFile:
        relative = Path(f"user_{user_id}") / f"{uuid.uuid4().hex}_{_safe_filename(filename)}"
        target = self.base_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"File '{filename}' stored locally as '{relative}'")
        return StoredFile(reference=str(relative), checksum=compute_checksum(data), size=len(data))

    def read(self, reference: str) -> bytes:
        return (self.base_dir / reference).read_bytes()

    def delete(self, reference: str) -> bool:
        try:
            os.remove(self.base_dir / reference)
            logger.info(f"File '{reference}' deleted successfully.")
            return True
        except OSError as e:
            logger.warning(f"Failed to delete file '{reference}': {e}")
            return False


class GCSFileStorage(FileStorage):
    """Google Cloud Storage backend."""

    def __init__(self):
        try:
            self.client = storage.Client(project=settings.GCS_PROJECT_ID)
            self.bucket = self.client.bucket(settings.GCS_BUCKET_NAME)
        except GoogleCloudError as e:
            logger.error(f"Failed to initialize Google Cloud Storage client: {e}")
            raise

    def save(self, data: bytes, filename: str, user_id: int) -> StoredFile:
        gcs_filename = (
            f"user_{user_id}/{datetime.now().strftime('%Y%m%d%H%M%S')}_"
            f"{uuid.uuid4().hex[:8]}_{_safe_filename(filename)}"
        )
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        try:
            blob = self.bucket.blob(gcs_filename)
            blob.metadata = {
                "original_filename": filename,
                "uploaded_by": str(user_id),
                "upload_time": datetime.now().isoformat(),
            }
            blob.upload_from_string(data, content_type=content_type, timeout=120)
            logger.info(f"File '{filename}' uploaded successfully as '{gcs_filename}'.")
        except GoogleCloudError as e:
            logger.error(f"Failed to upload file '{filename}': {e}")
            raise
        return StoredFile(reference=gcs_filename, checksum=compute_checksum(data), size=len(data))

    def read(self, reference: str) -> bytes:
        try:
            return self.bucket.blob(reference).download_as_bytes()
        except GoogleCloudError as e:
            logger.error(f"Failed to retrieve content for file '{reference}': {e}")
            raise

    def delete(self, reference: str) -> bool:
        try:
            self.bucket.blob(reference).delete()
            logger.info(f"File '{reference}' deleted successfully.")
            return True
        except GoogleCloudError as e:
            logger.error(f"Failed to delete file '{reference}': {e}")
            return False


def create_file_storage() -> FileStorage:
    """Storage backend selected by ``STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "gcs":
        return GCSFileStorage()
    return LocalFileStorage()
