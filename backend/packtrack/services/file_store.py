"""
PackTrack Backend — Document File Store
========================================

What:  Persists uploaded document bytes to disk and removes them again.
How:   Validates size and declared MIME type against per-call constraints,
       writes under a UUID filename with aiofiles, and maps stored files to
       the public `/uploads/...` URL served by the static mount.
Who:   PackagingService (document upload, document delete, item delete).

Directory Structure:
    uploads/                    ← settings.upload_root (served at /uploads)
    └── packaging/
        ├── 3f1c...-9a2b.pdf
        └── 8d7e...-4c5f.pdf

Storage paths saved in the database are relative to the upload root
("packaging/<uuid>.pdf"), so the root can move between environments.

Concurrency:
    Concurrent stores never collide (uuid4 filenames). A concurrent delete
    and read of the same file is the caller's problem.
"""

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional, Sequence

import aiofiles
import aiofiles.os

from packtrack.config import settings
from packtrack.exceptions import SizeExceededError, StorageError, UnsupportedTypeError

logger = logging.getLogger(__name__)

# Subdirectory of the upload root holding packaging documents
DOCUMENT_FOLDER = "packaging"


@dataclass(frozen=True)
class UploadConstraints:
    """Limits applied to a single `store` call."""

    max_size_bytes: int
    allowed_mime_types: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class FileHandle:
    """Result of a successful store."""

    original_name: str
    filename: str
    storage_path: str
    size: int
    mimetype: str


class FileStore:
    """
    Filesystem-backed document storage.

    Lifecycle of an uploaded document:
        1. store(): size check → declared type check → UUID name → write bytes
        2. storage_path is saved on the PackagingDocument row
        3. url_for()/url_for_path() build the public URL for responses
        4. delete(): removes the file; a file that is already gone is fine
    """

    def __init__(
        self,
        upload_root: Optional[str] = None,
        url_prefix: Optional[str] = None,
        folder: str = DOCUMENT_FOLDER,
    ):
        self.upload_root = Path(upload_root or settings.upload_root).resolve()
        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")
        self.folder = folder

    @property
    def document_dir(self) -> Path:
        return self.upload_root / self.folder

    def ensure_root(self) -> Path:
        """Create the document directory if needed (idempotent)."""
        self.document_dir.mkdir(parents=True, exist_ok=True)
        return self.document_dir

    def _check(self, size: int, mimetype: str, constraints: UploadConstraints) -> None:
        if size > constraints.max_size_bytes:
            raise SizeExceededError(size=size, max_size=constraints.max_size_bytes)
        if mimetype not in constraints.allowed_mime_types:
            raise UnsupportedTypeError(mimetype, allowed=constraints.allowed_mime_types)

    def resolve(self, storage_path: str) -> Path:
        """
        Map a storage path to an absolute path inside the upload root.

        Raises:
            StorageError if the path escapes the upload root.
        """
        candidate = Path(storage_path)
        if not candidate.is_absolute():
            candidate = self.upload_root / candidate
        resolved = candidate.resolve()
        if resolved != self.upload_root and self.upload_root not in resolved.parents:
            raise StorageError(
                message="Invalid file path",
                context={"storage_path": storage_path},
            )
        return resolved

    async def store(
        self,
        content: bytes,
        mimetype: str,
        original_name: str,
        constraints: UploadConstraints,
    ) -> FileHandle:
        """
        Validate and write a document.

        Validation order matches the upload rules: size first, then type.
        The original extension is kept; the rest of the name is a uuid4.

        Raises:
            SizeExceededError:    len(content) > constraints.max_size_bytes
            UnsupportedTypeError: mimetype not in constraints.allowed_mime_types
            StorageError:         directory creation or write failed
        """
        size = len(content)
        self._check(size, mimetype, constraints)

        extension = PurePosixPath(original_name or "").suffix
        filename = f"{uuid.uuid4()}{extension}"
        storage_path = f"{self.folder}/{filename}"
        absolute_path = self.upload_root / storage_path

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise StorageError(
                message="Failed to save uploaded document. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes, %s)", storage_path, size, mimetype)
        return FileHandle(
            original_name=original_name,
            filename=filename,
            storage_path=storage_path,
            size=size,
            mimetype=mimetype,
        )

    async def delete(self, storage_path: str) -> None:
        """
        Remove a stored file.

        Idempotent: a missing file counts as already deleted. Every other
        OS failure surfaces as StorageError.
        """
        path = self.resolve(storage_path)
        try:
            await aiofiles.os.remove(path)
            logger.info("File deleted: %s", storage_path)
        except FileNotFoundError:
            logger.debug("Delete: file already gone: %s", storage_path)
        except OSError as e:
            logger.error("Failed to delete file %s: %s", path, str(e))
            raise StorageError(
                message="Failed to delete stored document.",
                context={"path": str(path), "os_error": str(e)},
            )

    def url_for(self, filename: str) -> str:
        """Public URL for a stored filename. Pure; no IO."""
        return f"{self.url_prefix}/{self.folder}/{filename}"

    def url_for_path(self, storage_path: str) -> str:
        """Public URL for a storage path as saved on a document row."""
        return self.url_for(PurePosixPath(storage_path).name)


# ── Default Instance ──────────────────────────────────────────────────────
# Handed to services through packtrack.dependencies.get_file_store
file_store = FileStore()
