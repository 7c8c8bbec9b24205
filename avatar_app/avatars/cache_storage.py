from __future__ import annotations

import logging
import posixpath

from django.core.files.base import ContentFile, File
from django.core.files.storage import Storage, storages

from avatars.avatar_settings import IMAGE_EXTENSION
from avatars.exceptions import AvatarCacheError, AvatarCacheMiss

logger = logging.getLogger(__name__)


def avatar_cache_key(avatar_id: object, image_format: str) -> str:
    """Return the cache key of one avatar variant: ``{avatar_id}/{format}.jpg``."""
    return posixpath.join(str(avatar_id), f"{image_format}{IMAGE_EXTENSION}")


class AvatarBlobCache:
    """Byte store over a Django storage backend, keyed by avatar id.

    Writes overwrite, so concurrent regeneration of the same avatar only
    repeats work. Whatever the backend raises (``OSError`` on the filesystem,
    botocore errors on S3) comes out as ``AvatarCacheError``; a missing key
    comes out as ``AvatarCacheMiss``.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    @classmethod
    def from_alias(cls, alias: str) -> AvatarBlobCache:
        return cls(storages[alias])

    def exists(self, key: str) -> bool:
        try:
            return bool(self.storage.exists(key))
        except Exception as exc:
            raise AvatarCacheError(f"Could not check avatar cache key {key!r}: {exc}") from exc

    def read(self, key: str) -> bytes:
        with self.open(key) as fh:
            try:
                return fh.read()
            except Exception as exc:
                raise AvatarCacheError(f"Could not read avatar cache key {key!r}: {exc}") from exc

    def open(self, key: str) -> File:
        try:
            return self.storage.open(key, "rb")
        except FileNotFoundError as exc:
            raise AvatarCacheMiss(f"Avatar cache key {key!r} does not exist") from exc
        except Exception as exc:
            raise AvatarCacheError(f"Could not open avatar cache key {key!r}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        try:
            # Storage.save() never overwrites; it picks an alternative name.
            if self.storage.exists(key):
                self.storage.delete(key)
            saved_name = self.storage.save(key, ContentFile(data))
        except Exception as exc:
            raise AvatarCacheError(f"Could not write avatar cache key {key!r}: {exc}") from exc

        if saved_name != key:
            # A concurrent writer recreated the key between delete and save.
            self._discard(saved_name)
            logger.debug("Avatar cache key %s was rewritten concurrently", key)

    def delete_subtree(self, prefix: str) -> None:
        """Recursively delete everything under ``prefix``; a missing prefix is a no-op."""
        prefix = prefix.strip("/")
        if not prefix:
            raise AvatarCacheError("Refusing to delete the avatar cache root")

        try:
            directories, files = self.storage.listdir(prefix)
        except FileNotFoundError:
            return
        except Exception as exc:
            raise AvatarCacheError(f"Could not list avatar cache prefix {prefix!r}: {exc}") from exc

        for directory in directories:
            self.delete_subtree(posixpath.join(prefix, directory))

        try:
            for name in files:
                self.storage.delete(posixpath.join(prefix, name))
            # Removes the now-empty directory on filesystem backends; object
            # stores have nothing to remove.
            self.storage.delete(prefix)
        except FileNotFoundError:
            pass
        except Exception as exc:
            raise AvatarCacheError(f"Could not delete avatar cache prefix {prefix!r}: {exc}") from exc

    def _discard(self, name: str) -> None:
        try:
            self.storage.delete(name)
        except Exception:
            logger.warning("Could not remove stray avatar cache file %s", name, exc_info=True)
