"""Storage service for uploaded media (post thumbnails, avatars).

Uses local disk for now. Designed to swap for S3/MinIO later via StorageBackend interface.
Files live flat under UPLOAD_DIR and are addressed by generated filename; the API
serves them at /uploads/{filename}.
"""
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Protocol

from inkwell.core.config import settings
from inkwell.core.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaUpload:
    """An uploaded file read into memory."""

    filename: str
    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


def generate_filename(original: str) -> str:
    """Build a collision-free name: {stem}_{uuid4}{suffix}.

    Directory components of the client-supplied name are dropped. The suffix is kept
    so the extension still hints at the content type.
    """
    path = PurePath(original.replace("\\", "/"))
    stem = path.stem or "upload"
    return f"{stem}_{uuid.uuid4()}{path.suffix}"


class StorageBackend(Protocol):
    """Protocol for storage backends. Implement LocalStorage now, S3Storage later."""

    def save(self, filename: str, data: bytes) -> None:
        """Persist data under filename."""
        ...

    def delete(self, filename: str) -> bool:
        """Delete file. Returns True if deleted, False if it did not exist."""
        ...

    def exists(self, filename: str) -> bool:
        ...

    def url_for(self, filename: str) -> str:
        ...

    def list_filenames(self) -> list[str]:
        ...

    def modified_at(self, filename: str) -> float:
        """Last modification time as a POSIX timestamp."""
        ...


class LocalStorage:
    """Store files on local disk. Path: {UPLOAD_DIR}/{filename}"""

    def __init__(self, base_dir: str | Path | None = None, base_url: str | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, filename: str) -> Path:
        path = (self.base_dir / filename).resolve()
        if not filename or path.parent != self.base_dir:
            raise StorageError(f"Invalid media filename: {filename!r}")
        return path

    def save(self, filename: str, data: bytes) -> None:
        path = self._path(filename)
        try:
            path.write_bytes(data)
        except OSError as exc:
            logger.error("Failed to write media file", extra={"media_filename": filename, "error": str(exc)})
            raise StorageError() from exc

    def delete(self, filename: str) -> bool:
        path = self._path(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def exists(self, filename: str) -> bool:
        try:
            return self._path(filename).is_file()
        except StorageError:
            return False

    def url_for(self, filename: str) -> str:
        return f"{self.base_url}/uploads/{filename}"

    def list_filenames(self) -> list[str]:
        return sorted(p.name for p in self.base_dir.iterdir() if p.is_file())

    def modified_at(self, filename: str) -> float:
        return self._path(filename).stat().st_mtime


# Singleton - swap implementation here when moving to S3
_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage
