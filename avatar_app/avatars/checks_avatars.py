from django.contrib.staticfiles import finders
from django.core.checks import Error, Warning, register

from avatars.avatar_settings import DEFAULT_FORMAT, FORMATS, AvatarSettings
from avatars.exceptions import AvatarConfigError


@register()
def check_avatar_settings(_app_configs=None, **_kwargs) -> list[Error | Warning]:
    try:
        avatar_settings = AvatarSettings.from_settings()
    except AvatarConfigError as exc:
        return [
            Error(
                str(exc),
                hint="Set width and height for both 'medium' and 'small' in AVATAR_IMAGE_SIZES.",
                id="avatars.E001",
            )
        ]

    issues: list[Error | Warning] = []
    if not avatar_settings.default_images.get(DEFAULT_FORMAT):
        issues.append(
            Error(
                f"AVATAR_DEFAULT_IMAGES has no {DEFAULT_FORMAT!r} entry; avatar reads cannot fall back.",
                id="avatars.E002",
            )
        )

    for image_format in FORMATS:
        path = avatar_settings.default_images.get(image_format)
        if path and not finders.find(path):
            issues.append(
                Warning(
                    f"Default avatar image {path!r} for {image_format!r} is not in the static files.",
                    obj=image_format,
                    id="avatars.W001",
                )
            )
    return issues
