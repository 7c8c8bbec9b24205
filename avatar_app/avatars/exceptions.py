"""Avatar pipeline exception classes."""

from django.core.exceptions import ImproperlyConfigured


class TransformError(ValueError):
    """Raised when image bytes cannot be decoded or the target size is invalid."""


class AvatarCacheError(OSError):
    """Raised when the avatar cache storage fails to read, write or delete."""


class AvatarCacheMiss(AvatarCacheError):
    """Raised when a cache key does not exist."""


class AvatarConfigError(ImproperlyConfigured):
    """Raised when required avatar settings are missing or invalid."""


__all__ = [
    "AvatarCacheError",
    "AvatarCacheMiss",
    "AvatarConfigError",
    "TransformError",
]
