from django import template
from django.urls import reverse

from avatars.avatar_cache import normalize_format
from avatars.models import Profile

register = template.Library()


@register.simple_tag
def avatar_url(profile: Profile | None, image_format: str | None = None) -> str:
    """URL of a profile's live avatar; the default image URL when there is none."""
    resolved = normalize_format(image_format)
    avatar = profile.current_avatar() if profile is not None else None
    if avatar is None:
        return reverse("avatar-default-image", args=[resolved])
    return reverse("avatar-image", args=[avatar.pk, resolved])
