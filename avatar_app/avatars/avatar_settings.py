from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from django.conf import settings

from avatars.exceptions import AvatarConfigError

FORMAT_MEDIUM: Final[str] = "medium"
FORMAT_SMALL: Final[str] = "small"
FORMATS: Final[tuple[str, ...]] = (FORMAT_MEDIUM, FORMAT_SMALL)
DEFAULT_FORMAT: Final[str] = FORMAT_MEDIUM

IMAGE_EXTENSION: Final[str] = ".jpg"


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int


@dataclass(frozen=True)
class AvatarSettings:
    """Explicit avatar configuration, built once from Django settings."""

    medium: ImageSize
    small: ImageSize
    default_images: dict[str, str]
    storage_alias: str = "avatars"

    @classmethod
    def from_settings(cls) -> AvatarSettings:
        sizes = getattr(settings, "AVATAR_IMAGE_SIZES", None)
        if not isinstance(sizes, dict):
            raise AvatarConfigError("AVATAR_IMAGE_SIZES must be configured")

        default_images = getattr(settings, "AVATAR_DEFAULT_IMAGES", None) or {}
        if not isinstance(default_images, dict):
            raise AvatarConfigError("AVATAR_DEFAULT_IMAGES must be a mapping of format to path")

        return cls(
            medium=_read_size(sizes, FORMAT_MEDIUM),
            small=_read_size(sizes, FORMAT_SMALL),
            default_images={str(k): str(v) for k, v in default_images.items() if v},
            storage_alias=str(getattr(settings, "AVATAR_STORAGE_ALIAS", "") or "avatars"),
        )

    def size_for(self, image_format: str) -> ImageSize:
        if image_format == FORMAT_SMALL:
            return self.small
        return self.medium

    def default_image_for(self, image_format: str | None) -> str:
        """Return the configured default image path for a format.

        Unknown formats fall back to the default format's image. A missing
        default-format image is a configuration error.
        """
        path = self.default_images.get(image_format or DEFAULT_FORMAT)
        if path:
            return path
        path = self.default_images.get(DEFAULT_FORMAT)
        if path:
            return path
        raise AvatarConfigError(f"AVATAR_DEFAULT_IMAGES has no entry for {DEFAULT_FORMAT!r}")


def _read_size(sizes: dict[str, Any], image_format: str) -> ImageSize:
    entry = sizes.get(image_format)
    if not isinstance(entry, dict):
        raise AvatarConfigError(f"AVATAR_IMAGE_SIZES[{image_format!r}] is missing")

    values: dict[str, int] = {}
    for dimension in ("width", "height"):
        raw = entry.get(dimension)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise AvatarConfigError(
                f"AVATAR_IMAGE_SIZES[{image_format!r}][{dimension!r}] must be an integer, got {raw!r}"
            ) from None
        if value <= 0:
            raise AvatarConfigError(
                f"AVATAR_IMAGE_SIZES[{image_format!r}][{dimension!r}] must be positive, got {value}"
            )
        values[dimension] = value

    return ImageSize(width=values["width"], height=values["height"])
