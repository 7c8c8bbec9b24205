from __future__ import annotations

import logging
import uuid
from typing import BinaryIO

from django.contrib.staticfiles import finders

from avatars import pipeline
from avatars.avatar_settings import DEFAULT_FORMAT, FORMAT_SMALL, IMAGE_EXTENSION, AvatarSettings
from avatars.cache_storage import AvatarBlobCache, avatar_cache_key
from avatars.exceptions import AvatarCacheError, AvatarConfigError
from avatars.models import Avatar

logger = logging.getLogger(__name__)


def normalize_format(image_format: str | None) -> str:
    """Map a requested format to a known one.

    ``None`` and blank mean the default format, a trailing image extension
    is dropped (``small.jpg`` is ``small``) and anything unknown is served as
    the default format.
    """
    value = str(image_format or "").strip().lower()
    if value.endswith(IMAGE_EXTENSION):
        value = value[: -len(IMAGE_EXTENSION)]
    if value == FORMAT_SMALL:
        return FORMAT_SMALL
    return DEFAULT_FORMAT


class AvatarCacheManager:
    """Resolve the bytes to serve for an avatar, regenerating or falling back as needed.

    Reads never fail because of the cache: a missing entry is regenerated,
    and any storage or image error degrades to the default image. Only a
    missing default-image configuration is raised.
    """

    def __init__(self, avatar_settings: AvatarSettings, cache: AvatarBlobCache) -> None:
        self.avatar_settings = avatar_settings
        self.cache = cache

    @classmethod
    def from_settings(cls) -> AvatarCacheManager:
        avatar_settings = AvatarSettings.from_settings()
        return cls(avatar_settings, AvatarBlobCache.from_alias(avatar_settings.storage_alias))

    def resolve_stream(self, avatar_id: object | None, image_format: str | None = None) -> BinaryIO:
        resolved = normalize_format(image_format)
        avatar = self._find_avatar(avatar_id) if avatar_id else None
        if avatar is None:
            return self.fallback_stream(resolved)
        return self.read_stream_in_cache(avatar, resolved)

    def read_stream_in_cache(self, avatar: Avatar, image_format: str | None = None) -> BinaryIO:
        resolved = normalize_format(image_format)

        if avatar.is_empty:
            return self.fallback_stream(resolved)

        key = avatar_cache_key(avatar.pk, resolved)
        try:
            if not self.cache.exists(key):
                logger.info("Regenerating cached avatar %s (%s)", avatar.pk, resolved)
                pipeline.populate_cache(avatar, self.avatar_settings, self.cache)
            return self.cache.open(key)
        except AvatarCacheError:
            logger.warning(
                "Could not read the avatar %s in cache; serving the default image",
                avatar.pk,
                exc_info=True,
                extra={
                    "event": "avatars.cache.read_failed",
                    "component": "avatars",
                    "outcome": "fallback",
                    "avatar_id": str(avatar.pk),
                    "image_format": resolved,
                },
            )
            return self.fallback_stream(resolved)

    def fallback_path(self, image_format: str | None = None) -> str:
        """Absolute filesystem path of the default image for a format."""
        relative = self.avatar_settings.default_image_for(image_format)
        found = finders.find(relative)
        if not found:
            raise AvatarConfigError(f"Default avatar image {relative!r} was not found in static files")
        if isinstance(found, list):
            found = found[0]
        return str(found)

    def fallback_stream(self, image_format: str | None = None) -> BinaryIO:
        return open(self.fallback_path(image_format), "rb")

    @staticmethod
    def _find_avatar(avatar_id: object) -> Avatar | None:
        try:
            pk = avatar_id if isinstance(avatar_id, uuid.UUID) else uuid.UUID(str(avatar_id))
        except ValueError:
            return None
        return Avatar.objects.filter(pk=pk).first()
