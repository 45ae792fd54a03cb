"""
Tests for upload validation and file storage.
"""

import pytest

from siedlisko.utils.exceptions import (
    FileSizeExceededError,
    FileUploadError,
    UnsupportedFileTypeError,
)
from siedlisko.utils.file_utils import FileStorage, FileValidator
from tests.conftest import create_test_image, make_upload


class TestFileValidator:
    """Upload validation rules."""

    @pytest.mark.parametrize("mime_type, expected", [
        ("image/jpeg", "image/jpeg"),
        ("image/jpg", "image/jpeg"),
        ("IMAGE/PNG", "image/png"),
        ("image/webp; charset=binary", "image/webp"),
    ])
    def test_mime_type_normalized(self, mime_type, expected):
        assert FileValidator.validate_mime_type(mime_type) == expected

    @pytest.mark.parametrize("mime_type", ["image/gif", "application/pdf", None, ""])
    def test_mime_type_rejected(self, mime_type):
        with pytest.raises(UnsupportedFileTypeError):
            FileValidator.validate_mime_type(mime_type)

    def test_extension_must_match_mime_type(self):
        assert FileValidator.validate_file_extension("DOM.JPEG", "image/jpeg") == ".jpeg"

        with pytest.raises(FileUploadError):
            FileValidator.validate_file_extension("dom.png", "image/jpeg")

    @pytest.mark.parametrize("filename", [None, "", "bez_rozszerzenia"])
    def test_extension_required(self, filename):
        with pytest.raises(FileUploadError):
            FileValidator.validate_file_extension(filename, "image/jpeg")

    def test_file_size_limits(self):
        assert FileValidator.validate_file_size(1024, max_size=2048) == 1024

        with pytest.raises(FileUploadError):
            FileValidator.validate_file_size(0)

        with pytest.raises(FileSizeExceededError):
            FileValidator.validate_file_size(2049, max_size=2048)

    def test_inspect_image_dimensions(self):
        assert FileValidator.inspect_image(create_test_image(320, 200), "image/jpeg") == (320, 200)

    @pytest.mark.asyncio
    async def test_read_upload_rejects_oversized_file(self):
        content = create_test_image(400, 400, format="PNG")

        with pytest.raises(FileSizeExceededError):
            await FileValidator.read_upload(make_upload(content, "big.png", "image/png"), max_size=len(content) - 1)

    @pytest.mark.asyncio
    async def test_read_upload(self):
        content = create_test_image(100, 50)
        data, mime_type, extension, width, height = await FileValidator.read_upload(make_upload(content))

        assert data == content
        assert (mime_type, extension, width, height) == ("image/jpeg", ".jpg", 100, 50)


class TestFileStorage:
    """Stored files."""

    @pytest.mark.asyncio
    async def test_save_and_delete(self, file_storage: FileStorage):
        filename = await file_storage.save(b"content", ".jpg")

        assert filename.endswith(".jpg")
        assert file_storage.path_for(filename).read_bytes() == b"content"
        assert file_storage.delete(filename) is True
        assert not file_storage.exists(filename)

    def test_delete_missing_file(self, file_storage: FileStorage):
        assert file_storage.delete("missing.jpg") is False

    def test_public_path(self):
        assert FileStorage.public_path("abc.png") == "/uploads/listings/abc.png"

    @pytest.mark.parametrize("filename", ["../secret.jpg", "nested/file.jpg"])
    def test_path_traversal_rejected(self, file_storage: FileStorage, filename):
        with pytest.raises(FileUploadError):
            file_storage.path_for(filename)

    @pytest.mark.asyncio
    async def test_unique_names(self, file_storage: FileStorage):
        first = await file_storage.save(b"a", ".png")
        second = await file_storage.save(b"a", ".png")
        assert first != second
