import shutil
from io import BytesIO
from pathlib import Path
from tempfile import mkdtemp

from botocore.exceptions import ClientError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from PIL import Image

TEST_IMAGE_SIZES = {
    "medium": {"width": 40, "height": 30},
    "small": {"width": 16, "height": 12},
}


def make_image_bytes(
    *,
    size: tuple[int, int] = (64, 64),
    color: tuple[int, int, int] = (10, 120, 200),
    image_format: str = "PNG",
) -> bytes:
    buf = BytesIO()
    mode = "RGBA" if image_format == "PNG" else "RGB"
    fill = (*color, 255) if mode == "RGBA" else color
    img = Image.new(mode, size, color=fill)
    if image_format == "GIF":
        img = img.convert("P")
    img.save(buf, format=image_format)
    return buf.getvalue()


def make_upload(
    *,
    name: str = "avatar.png",
    content: bytes | None = None,
    content_type: str = "image/png",
    size: tuple[int, int] = (64, 64),
    color: tuple[int, int, int] = (10, 120, 200),
    image_format: str = "PNG",
) -> SimpleUploadedFile:
    if content is None:
        content = make_image_bytes(size=size, color=color, image_format=image_format)
    return SimpleUploadedFile(name, content, content_type=content_type)


def s3_client_error(operation: str, code: str = "SlowDown") -> ClientError:
    """The error type the S3 storage backend raises for throttling, 403s and 5xx."""
    return ClientError({"Error": {"Code": code, "Message": "Please reduce your request rate."}}, operation)


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return img.size


class AvatarStorageTestMixin:
    """Point the avatar storage alias at a throwaway directory for each test."""

    def setUp(self) -> None:
        super().setUp()
        self.media_root = Path(mkdtemp(prefix="avatar_test_cache_"))
        self.addCleanup(shutil.rmtree, self.media_root, True)

        settings_override = override_settings(
            STORAGES={
                "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
                "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
                "avatars": {
                    "BACKEND": "django.core.files.storage.FileSystemStorage",
                    "OPTIONS": {"location": str(self.media_root)},
                },
            },
            AVATAR_STORAGE_ALIAS="avatars",
            AVATAR_IMAGE_SIZES=TEST_IMAGE_SIZES,
        )
        settings_override.enable()
        self.addCleanup(settings_override.disable)

    def cache_path(self, avatar_id: object, image_format: str) -> Path:
        return self.media_root / str(avatar_id) / f"{image_format}.jpg"
