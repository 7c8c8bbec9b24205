from __future__ import annotations

import uuid

from django.core.files.uploadedfile import UploadedFile
from django.db import models


class Profile(models.Model):
    username = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("username",)

    def __str__(self) -> str:
        return self.username

    def current_avatar(self) -> Avatar | None:
        """Return the live avatar, or None when the profile never uploaded one."""
        return self.avatars.order_by("-created_at").first()


class AvatarQuerySet(models.QuerySet):
    def siblings_of(self, avatar: Avatar) -> AvatarQuerySet:
        return self.filter(profile_id=avatar.profile_id).exclude(pk=avatar.pk)

    def with_data(self) -> AvatarQuerySet:
        return self.exclude(data__isnull=True)


class Avatar(models.Model):
    """A profile picture.

    The upload is attached through the transient ``file`` attribute and is
    never stored. ``data`` holds the medium variant produced while saving; the
    small variant only ever lives in the cache storage.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="avatars")
    data = models.BinaryField(null=True, blank=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AvatarQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["profile", "created_at"], name="avatar_profile_created"),
        ]

    def __init__(self, *args, **kwargs) -> None:
        self._upload: UploadedFile | None = None
        super().__init__(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.profile_id}:{self.pk}"

    @property
    def file(self) -> UploadedFile | None:
        return self._upload

    @file.setter
    def file(self, value: UploadedFile | None) -> None:
        self._upload = value

    def image_data(self) -> bytes | None:
        # PostgreSQL hands binary columns back as memoryview.
        if not self.data:
            return None
        return bytes(self.data)

    @property
    def is_empty(self) -> bool:
        return self.image_data() is None
