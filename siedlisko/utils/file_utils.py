"""
File upload utilities for listing image validation and storage.
"""

import io
import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from siedlisko.config import get_settings
from siedlisko.utils.exceptions import (
    FileSizeExceededError,
    FileUploadError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

settings = get_settings()

# Directory under the upload root (and URL segment under /uploads) holding listing images
LISTINGS_SUBDIR = "listings"
PUBLIC_UPLOAD_PREFIX = "/uploads"


class FileValidator:
    """Utility class for image upload validation."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS = {
        "image/jpeg": [".jpg", ".jpeg"],
        "image/png": [".png"],
        "image/webp": [".webp"],
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        "image/jpeg": "jpeg",
        "image/png": "png",
        "image/webp": "webp",
    }

    MIME_ALIASES = {
        "image/jpg": "image/jpeg",
        "image/pjpeg": "image/jpeg",
    }

    @classmethod
    def normalize_mime_type(cls, mime_type: Optional[str]) -> str:
        mime_type = (mime_type or "").split(";")[0].strip().lower()
        return cls.MIME_ALIASES.get(mime_type, mime_type)

    @classmethod
    def validate_mime_type(cls, mime_type: Optional[str]) -> str:
        """
        Validate MIME type.

        Returns:
            Normalized MIME type

        Raises:
            UnsupportedFileTypeError: If MIME type is not supported
        """
        normalized = cls.normalize_mime_type(mime_type)
        if normalized not in cls.SUPPORTED_FORMATS:
            raise UnsupportedFileTypeError(mime_type or "unknown", list(cls.SUPPORTED_FORMATS))
        return normalized

    @classmethod
    def validate_file_extension(cls, filename: Optional[str], mime_type: str) -> str:
        """
        Validate that the file extension is supported and matches the MIME type.

        Returns:
            Lowercase file extension including the dot

        Raises:
            FileUploadError: If the extension is missing or does not match
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise FileUploadError("File must have an extension")

        expected_extensions = cls.SUPPORTED_FORMATS[mime_type]
        if extension not in expected_extensions:
            raise FileUploadError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        return extension

    @staticmethod
    def validate_file_size(file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If the file exceeds the limit
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @classmethod
    def inspect_image(cls, content: bytes, mime_type: str) -> Tuple[int, int]:
        """
        Decode image content and check it is really of the declared type.

        Args:
            content: Raw file bytes
            mime_type: Normalized, supported MIME type

        Returns:
            Tuple of (width, height)

        Raises:
            FileUploadError: If content is not a valid image of that type
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                width, height = img.size
                pil_format = (img.format or "").lower()
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise FileUploadError(f"Invalid image file: {e}")

        if pil_format != cls.PIL_FORMATS[mime_type]:
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        return width, height

    @classmethod
    async def read_upload(cls, file: UploadFile, max_size: Optional[int] = None) -> Tuple[bytes, str, str, int, int]:
        """
        Read and fully validate an uploaded image.

        Args:
            file: FastAPI UploadFile object
            max_size: Maximum allowed size in bytes

        Returns:
            Tuple of (content, mime_type, extension, width, height)
        """
        max_allowed = max_size or settings.max_file_size

        mime_type = cls.validate_mime_type(file.content_type)
        extension = cls.validate_file_extension(file.filename, mime_type)

        await file.seek(0)
        # One byte past the limit is enough to detect an oversized file
        content = await file.read(max_allowed + 1)
        cls.validate_file_size(len(content), max_allowed)

        width, height = cls.inspect_image(content, mime_type)
        return content, mime_type, extension, width, height


class FileStorage:
    """Stores listing image files under ``<upload_dir>/listings``."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.listings_dir = self.base_dir / LISTINGS_SUBDIR
        self.listings_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_unique_filename(extension: str) -> str:
        return f"{uuid.uuid4()}{extension}"

    @staticmethod
    def public_path(filename: str) -> str:
        """URL path under which a stored file is served."""
        return f"{PUBLIC_UPLOAD_PREFIX}/{LISTINGS_SUBDIR}/{filename}"

    def path_for(self, filename: str) -> Path:
        # Stored names are generated; reject anything that could escape the directory
        if Path(filename).name != filename:
            raise FileUploadError(f"Invalid stored filename '{filename}'")
        return self.listings_dir / filename

    async def save(self, content: bytes, extension: str) -> str:
        """
        Write file content under a generated unique name.

        Args:
            content: File bytes
            extension: File extension including the dot

        Returns:
            Generated filename

        Raises:
            FileUploadError: If the file cannot be written
        """
        filename = self.generate_unique_filename(extension)
        file_path = self.path_for(filename)

        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            self.delete(filename)
            raise FileUploadError(f"Failed to save file: {e}")

        logger.debug(f"Stored {len(content)} bytes as {file_path}")
        return filename

    def delete(self, filename: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if the file was deleted, False if it did not exist or
            could not be removed
        """
        file_path = self.path_for(filename)
        try:
            file_path.unlink()
            return True
        except FileNotFoundError:
            logger.warning(f"Stored file already missing: {file_path}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete stored file {file_path}: {e}")
            return False

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()
