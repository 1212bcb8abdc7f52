"""
DevCamper Backend — Photo Storage Service
===========================================

What:  Validates bootcamp photo uploads and writes them to the upload
       directory.
How:   Checks presence, MIME type (must be image/*) and size against
       settings.max_file_upload, then writes the bytes with aiofiles under
       a deterministic name: photo_<bootcamp id><original extension>.
Who:   BootcampService.upload_photo().

Re-uploading a photo for the same bootcamp with the same extension
overwrites the previous file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles

from devcamper.exceptions import BadUploadError, FileStorageError
from devcamper.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class PhotoStorage:
    """
    Args:
        upload_dir: directory photos are written to (created on demand)
        max_size:   maximum accepted size in bytes
    """

    def __init__(self, upload_dir: str, max_size: int):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_size = max_size

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> Optional[BadUploadError]:
        """Return the first problem with the upload, or None when acceptable."""
        if not filename:
            return BadUploadError(message="Please upload a file")

        if not (content_type or "").startswith("image"):
            return BadUploadError(
                message="Please upload an image file",
                context={"content_type": content_type},
            )

        if size > self.max_size:
            return BadUploadError(
                message=f"Please upload an image less than {self.max_size}",
                context={"size": size, "max_size": self.max_size},
            )

        return None

    @staticmethod
    def photo_filename(resource_id, original_filename: str) -> str:
        """photo_<id><ext>, e.g. photo_5d713995-....jpg"""
        return f"photo_{resource_id}{Path(original_filename).suffix.lower()}"

    async def save(self, filename: str, content: bytes) -> Result[str]:
        """
        Write content to <upload_dir>/<filename>.

        Returns Ok(filename) or Err(FileStorageError) on any OS error.
        """
        path = self.upload_dir / filename
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", path, str(e))
            return Err(FileStorageError(context={"path": str(path), "os_error": str(e)}))

        logger.info("Photo stored: %s (%d bytes)", filename, len(content))
        return Ok(filename)

    async def remove(self, filename: str) -> None:
        """Delete a stored photo if present. Missing files are ignored."""
        path = self.upload_dir / filename
        try:
            os.remove(path)
            logger.info("Removed photo: %s", filename)
        except FileNotFoundError:
            logger.debug("Photo already gone: %s", filename)
