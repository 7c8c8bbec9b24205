"""Avatar lifecycle stages.

The record store calls these at fixed points (see ``avatars.signals``):

- ``validate`` and ``transform`` before an avatar row is written; raising
  aborts the write;
- ``populate_cache`` and ``delete_sibling_avatars`` after the row is written;
- ``teardown_cache`` after the row is deleted.

Cache maintenance never raises. A saved or deleted row stays saved or deleted
even when the cache storage misbehaves.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction

from avatars.avatar_settings import FORMAT_MEDIUM, FORMAT_SMALL, IMAGE_EXTENSION, AvatarSettings
from avatars.cache_storage import AvatarBlobCache, avatar_cache_key
from avatars.exceptions import AvatarCacheError, TransformError
from avatars.image_processing import resize_and_crop
from avatars.models import Avatar, Profile
from avatars.validators import read_upload, validate_avatar_upload

logger = logging.getLogger(__name__)


def validate(avatar: Avatar) -> None:
    """Check an attached upload. An avatar without upload is a valid empty avatar."""
    if avatar.file is None:
        return
    validate_avatar_upload(avatar.file)


def transform(avatar: Avatar, avatar_settings: AvatarSettings) -> None:
    """Derive the medium variant from the attached upload into ``avatar.data``."""
    upload = avatar.file
    if upload is None:
        return

    size = avatar_settings.medium
    try:
        avatar.data = resize_and_crop(read_upload(upload), size.width, size.height)
    except TransformError as exc:
        logger.info("Rejected avatar upload for profile %s: %s", avatar.profile_id, exc)
        raise ValidationError(
            {
                "data": ValidationError(
                    "Could not save the data in %(extension)s format.",
                    code="transform_failed",
                    params={"extension": IMAGE_EXTENSION},
                )
            }
        ) from exc


def populate_cache(avatar: Avatar, avatar_settings: AvatarSettings, cache: AvatarBlobCache) -> None:
    """Write the medium variant, then derive the small one from the cached medium.

    Empty avatars leave no cache entries. Each step logs its own failure and
    the next step still runs.
    """
    data = avatar.image_data()
    if data is None:
        return

    medium_key = avatar_cache_key(avatar.pk, FORMAT_MEDIUM)
    small_key = avatar_cache_key(avatar.pk, FORMAT_SMALL)

    try:
        cache.write(medium_key, data)
    except AvatarCacheError:
        logger.error(
            "Error while saving medium avatar with ID %s",
            avatar.pk,
            exc_info=True,
            extra=_log_extra("cache_write_failed", avatar, image_format=FORMAT_MEDIUM),
        )

    try:
        # Read back from storage: a later regeneration takes the same path.
        content = cache.read(medium_key)
        size = avatar_settings.small
        cache.write(small_key, resize_and_crop(content, size.width, size.height))
    except (AvatarCacheError, TransformError):
        logger.error(
            "Error while saving small avatar with ID %s",
            avatar.pk,
            exc_info=True,
            extra=_log_extra("cache_write_failed", avatar, image_format=FORMAT_SMALL),
        )


def delete_sibling_avatars(avatar: Avatar) -> int:
    """Delete every other avatar of the same profile; returns how many went away."""
    deleted, _ = Avatar.objects.siblings_of(avatar).delete()
    if deleted:
        logger.info("Replaced %d previous avatar(s) of profile %s", deleted, avatar.profile_id)
    return deleted


def teardown_cache(avatar_id: object, cache: AvatarBlobCache) -> None:
    """Remove the cache subtree of a deleted avatar."""
    try:
        cache.delete_subtree(str(avatar_id))
    except AvatarCacheError as exc:
        logger.warning(
            "Could not delete cached avatar %s: %s",
            avatar_id,
            exc,
            extra={
                "event": "avatars.cache.teardown_failed",
                "component": "avatars",
                "outcome": "error",
                "avatar_id": str(avatar_id),
            },
        )


def upload_avatar(profile: Profile, file: UploadedFile | None) -> Avatar:
    """Create the profile's new avatar from an upload.

    Unlike a bare ``Avatar.objects.create()``, an upload is mandatory here.
    Raises ``ValidationError`` for a rejected file; nothing is stored then.
    """
    validate_avatar_upload(file)
    with transaction.atomic():
        return Avatar.objects.create(profile=profile, file=file)


def delete_profile_avatar(profile: Profile) -> int:
    deleted, _ = Avatar.objects.filter(profile=profile).delete()
    return deleted


def _log_extra(event: str, avatar: Avatar, *, image_format: str) -> dict[str, str]:
    return {
        "event": f"avatars.cache.{event}",
        "component": "avatars",
        "outcome": "error",
        "avatar_id": str(avatar.pk),
        "image_format": image_format,
    }
