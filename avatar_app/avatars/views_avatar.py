from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.http import FileResponse, HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.utils.cache import patch_cache_control
from django.views.decorators.http import require_GET, require_POST

from avatars import pipeline
from avatars.avatar_cache import AvatarCacheManager
from avatars.avatar_settings import FORMAT_MEDIUM, FORMAT_SMALL
from avatars.models import Avatar, Profile

logger = logging.getLogger(__name__)

_AVATAR_MAX_AGE_SECONDS = 5 * 60


@require_GET
def avatar_image(request: HttpRequest, image_format: str, avatar_id: str | None = None) -> FileResponse:
    stream = AvatarCacheManager.from_settings().resolve_stream(avatar_id, image_format)
    response = FileResponse(stream)
    patch_cache_control(response, public=True, max_age=_AVATAR_MAX_AGE_SECONDS)
    return response


@require_POST
def avatar_upload(request: HttpRequest, username: str) -> JsonResponse:
    profile = get_object_or_404(Profile, username=username)
    try:
        avatar = pipeline.upload_avatar(profile, request.FILES.get("file"))
    except ValidationError as exc:
        return JsonResponse({"errors": exc.message_dict}, status=400)

    logger.info("Stored avatar %s for profile %s", avatar.pk, profile.username)
    return JsonResponse(avatar_payload(avatar), status=201)


@require_POST
def avatar_delete(request: HttpRequest, username: str) -> HttpResponse:
    profile = get_object_or_404(Profile, username=username)
    deleted = pipeline.delete_profile_avatar(profile)
    logger.info("Deleted %d avatar(s) of profile %s", deleted, profile.username)
    return HttpResponse(status=204)


def avatar_payload(avatar: Avatar) -> dict[str, object]:
    return {
        "id": str(avatar.pk),
        "profile": avatar.profile.username,
        "empty": avatar.is_empty,
        "url": {
            image_format: reverse("avatar-image", args=[avatar.pk, image_format])
            for image_format in (FORMAT_SMALL, FORMAT_MEDIUM)
        },
    }
