import logging
from typing import override

from django.core.management.base import BaseCommand

from avatars import pipeline
from avatars.avatar_settings import AvatarSettings
from avatars.cache_storage import AvatarBlobCache
from avatars.models import Avatar

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = (
        "Regenerate the medium and small cache entries of every avatar that "
        "has image data. Empty avatars are skipped."
    )

    @override
    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Delete each avatar's cache directory before regenerating it.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report which avatars would be rebuilt without touching the cache.",
        )

    @override
    def handle(self, *args, **options) -> None:
        clear: bool = bool(options.get("clear"))
        dry_run: bool = bool(options.get("dry_run"))

        avatar_settings = AvatarSettings.from_settings()
        cache = AvatarBlobCache.from_alias(avatar_settings.storage_alias)

        rebuilt = 0
        for avatar in Avatar.objects.with_data().order_by("created_at").iterator():
            if dry_run:
                self.stdout.write(f"[dry-run] Would rebuild avatar {avatar.pk}")
                rebuilt += 1
                continue

            if clear:
                pipeline.teardown_cache(avatar.pk, cache)
            pipeline.populate_cache(avatar, avatar_settings, cache)
            rebuilt += 1

        logger.info("Avatar cache rebuild finished: rebuilt=%d dry_run=%s", rebuilt, dry_run)
        prefix = "[dry-run] " if dry_run else ""
        self.stdout.write(self.style.SUCCESS(f"{prefix}Rebuilt {rebuilt} avatar(s)."))
