"""
ClauseGuard Backend — Upload File Service
==========================================

What:  Upload filter (declared media type, size) and scoped temporary storage.
How:   validate_upload() rejects bad uploads before anything touches disk;
       temporary_upload() writes the bytes under a UUID filename in UPLOAD_DIR
       and removes the file when the `async with` block exits, whatever the
       exit path (success, extraction failure, LLM failure).
Who:   Called by AnalysisService during the submit workflow.

Upload filter:
    1. Media type: application/pdf, image/*, text/plain (declared by the client)
    2. Size:       Content-Length and actual byte count ≤ MAX_FILE_SIZE
    3. Empty file: rejected
    UUID filenames contain no user input (no path traversal).
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from clauseguard.config import settings
from clauseguard.exceptions import (
    FileStorageError,
    UnsupportedMediaError,
    ValidationError,
)
from clauseguard.services.text_extractor import (
    PDF_MEDIA_TYPE,
    TEXT_MEDIA_TYPE,
    is_supported_media_type,
    normalize_media_type,
)

logger = logging.getLogger(__name__)

# Suffix of the temp file; helps Pillow/pypdf and anyone inspecting the directory
MEDIA_SUFFIXES = {
    PDF_MEDIA_TYPE: ".pdf",
    TEXT_MEDIA_TYPE: ".txt",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}


class FileService:
    """Validates uploads and owns the temporary file lifecycle."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()

    def ensure_upload_dir(self) -> Path:
        """Creates the upload directory (mode 755) if needed. Called at startup."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        try:
            os.chmod(self.upload_dir, 0o755)
        except OSError as e:
            logger.warning("Could not set permissions on %s: %s", self.upload_dir, str(e))
        return self.upload_dir

    def validate_media_type(self, media_type: Optional[str]) -> str:
        normalized = normalize_media_type(media_type)
        if not is_supported_media_type(normalized):
            raise UnsupportedMediaError(media_type=media_type)
        return normalized

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against the configured maximum.

        Two checks: the Content-Length reported by the client (may be missing or
        wrong) and the byte count actually received.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="O arquivo enviado está vazio.", field="file")

        if (content_length and content_length > settings.max_file_size) or (
            actual_size > settings.max_file_size
        ):
            raise ValidationError(
                message=f"O arquivo excede o tamanho máximo de {max_mb:.0f}MB.",
                field="file",
                context={
                    "max_size_mb": max_mb,
                    "reported_size": content_length,
                    "actual_size": actual_size,
                },
            )

    def validate_upload(
        self,
        media_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """Runs the upload filter. Returns the normalized media type."""
        normalized = self.validate_media_type(media_type)
        self.validate_size(content_length, len(content))
        return normalized

    def _temp_path(self, media_type: str) -> Path:
        suffix = MEDIA_SUFFIXES.get(media_type, "")
        return self.upload_dir / f"{uuid.uuid4()}{suffix}"

    @asynccontextmanager
    async def temporary_upload(self, content: bytes, media_type: str) -> AsyncIterator[str]:
        """
        Write an upload to disk for the duration of an `async with` block.

        Usage:
            async with file_service.temporary_upload(content, "application/pdf") as path:
                text = extractor.extract(path, "application/pdf")

        Yields:
            Absolute path of the temporary file.

        Raises:
            FileStorageError: The file could not be written.
        """
        path = self._temp_path(media_type)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            self.cleanup_file(str(path))
            raise FileStorageError(context={"os_error": str(e)})

        logger.info("Upload stored: %s (%d bytes)", path.name, len(content))
        try:
            yield str(path)
        finally:
            self.cleanup_file(str(path))

    def cleanup_file(self, file_path: str) -> None:
        """
        Remove a temporary upload if it exists.

        A failure to delete is logged, not raised: the request outcome must not
        depend on the scratch directory.
        """
        path = Path(file_path)
        try:
            path.unlink(missing_ok=True)
            logger.debug("Cleaned up upload: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", path.name, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
