from __future__ import annotations

import logging

from django.core.files.storage import storages
from django.db import connection
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from avatars.avatar_settings import AvatarSettings

logger = logging.getLogger(__name__)


@require_GET
def healthz(_request: HttpRequest) -> JsonResponse:
    return JsonResponse({"status": "ok"})


@require_GET
def readyz(_request: HttpRequest) -> JsonResponse:
    try:
        connection.ensure_connection()
    except Exception as exc:
        logger.exception("Health check readyz failed: database")
        return JsonResponse({"status": "not ready", "database": "error", "error": str(exc)}, status=503)

    try:
        storage = storages[AvatarSettings.from_settings().storage_alias]
        storage.exists("readyz")
    except Exception as exc:
        logger.exception("Health check readyz failed: avatar storage")
        return JsonResponse({"status": "not ready", "avatar_storage": "error", "error": str(exc)}, status=503)

    return JsonResponse({"status": "ready", "database": "ok", "avatar_storage": "ok"})
