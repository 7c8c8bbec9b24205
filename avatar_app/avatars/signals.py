from __future__ import annotations

import logging

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from avatars import pipeline
from avatars.avatar_settings import AvatarSettings
from avatars.cache_storage import AvatarBlobCache
from avatars.models import Avatar

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Avatar, dispatch_uid="avatars.pre_save")
def avatar_pre_save(sender: type[Avatar], instance: Avatar, raw: bool = False, **kwargs) -> None:
    if raw:
        return
    pipeline.validate(instance)
    pipeline.transform(instance, AvatarSettings.from_settings())


@receiver(post_save, sender=Avatar, dispatch_uid="avatars.post_save")
def avatar_post_save(sender: type[Avatar], instance: Avatar, raw: bool = False, **kwargs) -> None:
    if raw:
        return
    avatar_settings = AvatarSettings.from_settings()
    pipeline.populate_cache(instance, avatar_settings, AvatarBlobCache.from_alias(avatar_settings.storage_alias))
    # The upload has been consumed; the instance may be saved again later.
    instance.file = None
    pipeline.delete_sibling_avatars(instance)


@receiver(post_delete, sender=Avatar, dispatch_uid="avatars.post_delete")
def avatar_post_delete(sender: type[Avatar], instance: Avatar, **kwargs) -> None:
    avatar_settings = AvatarSettings.from_settings()
    logger.debug("Tearing down cache of deleted avatar %s", instance.pk)
    pipeline.teardown_cache(instance.pk, AvatarBlobCache.from_alias(avatar_settings.storage_alias))
