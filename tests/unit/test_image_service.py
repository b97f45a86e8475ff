"""Unit tests for upload validation and the image service."""

import pytest

from app.core.errors import FileTooLargeError, InvalidFileTypeError
from app.schemas.upload import ImageUpload
from app.services.image_service import ImageService, validate_image
from tests.fixtures.fakes import FakeImageStore

ALLOWED = ["image/jpeg", "image/png", "image/webp"]


def check(size=100, content_type="image/png", filename="a.png", allowed=ALLOWED, max_bytes=1000):
    return validate_image(size, content_type, filename, max_bytes=max_bytes, allowed_types=allowed)


class TestValidateImage:
    @pytest.mark.parametrize(
        "content_type, filename, ext",
        [
            ("image/jpeg", "sofa.jpg", "jpg"),
            ("image/jpeg", "sofa.JPEG", "jpeg"),
            ("image/png", "sofa.png", "png"),
            ("image/webp", "sofa.webp", "webp"),
        ],
    )
    def test_accepts_allowed_images(self, content_type, filename, ext):
        assert check(content_type=content_type, filename=filename) == ext

    def test_size_at_limit_is_accepted(self):
        assert check(size=1000) == "png"

    def test_size_above_limit(self):
        with pytest.raises(FileTooLargeError):
            check(size=1001)

    def test_size_is_checked_first(self):
        with pytest.raises(FileTooLargeError):
            check(size=5000, content_type="text/html", filename="x.exe")

    def test_disallowed_content_type(self):
        with pytest.raises(InvalidFileTypeError):
            check(content_type="image/gif")

    def test_content_type_parameters_are_ignored(self):
        assert check(content_type="Image/PNG; charset=binary") == "png"

    def test_spoofed_content_type_is_caught_by_extension(self):
        with pytest.raises(InvalidFileTypeError):
            check(content_type="image/png", filename="payload.html")

    def test_missing_extension(self):
        with pytest.raises(InvalidFileTypeError):
            check(filename="README")

    def test_extension_type_must_be_allowed_too(self):
        # .jpg maps to image/jpeg, which this policy does not allow
        with pytest.raises(InvalidFileTypeError):
            check(content_type="image/png", filename="a.jpg", allowed=["image/png"])


class TestImageService:
    def test_upload_uses_random_name_with_canonical_extension(self):
        store = FakeImageStore([])
        service = ImageService(store, max_bytes=1000, allowed_types=ALLOWED)

        url = service.upload(ImageUpload(filename="My Chair.PNG", content_type="image/png", data=b"img"))

        assert url.endswith(".png")
        assert "My Chair" not in url
        assert store.objects[url] == b"img"

    def test_invalid_upload_never_reaches_store(self):
        log = []
        service = ImageService(FakeImageStore(log), max_bytes=2, allowed_types=ALLOWED)

        with pytest.raises(FileTooLargeError):
            service.upload(ImageUpload(filename="a.png", content_type="image/png", data=b"big"))

        assert log == []

    def test_declared_size_defaults_to_data_length(self):
        upload = ImageUpload(filename="a.png", content_type="image/png", data=b"12345")

        assert upload.size == 5

    def test_delete_empty_url_is_noop(self):
        log = []
        service = ImageService(FakeImageStore(log), max_bytes=10, allowed_types=ALLOWED)

        service.delete(None)
        service.delete("")

        assert log == []
