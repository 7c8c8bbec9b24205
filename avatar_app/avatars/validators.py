"""Upload validation for avatar images.

Rules run in a fixed order: presence, non-empty payload, declared MIME type,
filename extension, size limit and finally the actual content. Presence and
emptiness short-circuit; the remaining rules all report.
"""

from __future__ import annotations

from io import BytesIO
from typing import Final

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.core.validators import FileExtensionValidator
from PIL import Image, UnidentifiedImageError

MAX_UPLOAD_SIZE: Final[int] = 5 * 1024 * 1024
ALLOWED_MIME_TYPES: Final[tuple[str, ...]] = ("image/jpeg", "image/png", "image/gif")
ALLOWED_EXTENSIONS: Final[tuple[str, ...]] = ("png", "jpg", "gif")

_extension_validator = FileExtensionValidator(
    allowed_extensions=list(ALLOWED_EXTENSIONS),
    message=(
        "The file extension should be one of the following: "
        + ", ".join(ALLOWED_EXTENSIONS)
        + "."
    ),
)


def validate_avatar_upload(file: UploadedFile | None) -> None:
    """Raise ``ValidationError({"file": [...]})`` when an upload breaks a rule."""
    errors = avatar_upload_errors(file)
    if errors:
        raise ValidationError({"file": errors})


def avatar_upload_errors(file: UploadedFile | None) -> list[ValidationError]:
    if file is None:
        return [ValidationError("A file is required.", code="required")]

    size = _upload_size(file)
    if not size:
        return [ValidationError("The file should not be empty.", code="empty")]

    errors: list[ValidationError] = []

    content_type = str(getattr(file, "content_type", "") or "").split(";", 1)[0].strip().lower()
    if content_type not in ALLOWED_MIME_TYPES:
        errors.append(
            ValidationError(
                "The file mime type should be one of the following: %(allowed)s.",
                code="invalid_mime_type",
                params={"allowed": ", ".join(ALLOWED_MIME_TYPES)},
            )
        )

    try:
        _extension_validator(file)
    except ValidationError as exc:
        errors.append(exc)

    if size > MAX_UPLOAD_SIZE:
        errors.append(
            ValidationError(
                "The file is not valid, or exceeds max size of %(max_size)s bytes.",
                code="file_too_large",
                params={"max_size": MAX_UPLOAD_SIZE},
            )
        )
        # Not worth decoding a payload that is already rejected.
        return errors

    detected = detect_image_mime_type(file)
    if detected not in ALLOWED_MIME_TYPES:
        errors.append(
            ValidationError(
                "The file content is not a valid image of type: %(allowed)s.",
                code="invalid_content",
                params={"allowed": ", ".join(ALLOWED_MIME_TYPES)},
            )
        )

    return errors


def detect_image_mime_type(file: UploadedFile) -> str | None:
    """Sniff the MIME type from the bytes, ignoring whatever the client declared."""
    data = read_upload(file)
    try:
        with Image.open(BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return None
    if not image_format:
        return None
    return Image.MIME.get(image_format.upper())


def read_upload(file: UploadedFile) -> bytes:
    """Read the whole upload and rewind it so it can be read again."""
    file.seek(0)
    data = file.read()
    file.seek(0)
    return data


def _upload_size(file: UploadedFile) -> int:
    size = getattr(file, "size", None)
    if size is None:
        size = len(read_upload(file))
    return int(size)
