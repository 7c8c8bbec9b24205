from django.test import SimpleTestCase, override_settings

from avatars.avatar_settings import AvatarSettings, ImageSize
from avatars.checks_avatars import check_avatar_settings
from avatars.exceptions import AvatarConfigError

_SIZES = {
    "medium": {"width": 200, "height": 150},
    "small": {"width": 80, "height": 60},
}


class AvatarSettingsTests(SimpleTestCase):
    @override_settings(AVATAR_IMAGE_SIZES=_SIZES, AVATAR_STORAGE_ALIAS="avatar-cache")
    def test_reads_sizes_and_storage_alias(self) -> None:
        avatar_settings = AvatarSettings.from_settings()

        self.assertEqual(avatar_settings.medium, ImageSize(width=200, height=150))
        self.assertEqual(avatar_settings.small, ImageSize(width=80, height=60))
        self.assertEqual(avatar_settings.size_for("small"), ImageSize(width=80, height=60))
        self.assertEqual(avatar_settings.size_for("anything"), ImageSize(width=200, height=150))
        self.assertEqual(avatar_settings.storage_alias, "avatar-cache")

    def test_missing_or_invalid_dimensions_are_fatal(self) -> None:
        broken = [
            None,
            {"medium": {"width": 200, "height": 200}},
            {"medium": {"width": 200}, "small": {"width": 80, "height": 80}},
            {"medium": {"width": 0, "height": 200}, "small": {"width": 80, "height": 80}},
            {"medium": {"width": "wide", "height": 200}, "small": {"width": 80, "height": 80}},
        ]
        for sizes in broken:
            with self.subTest(sizes=sizes), override_settings(AVATAR_IMAGE_SIZES=sizes):
                with self.assertRaises(AvatarConfigError):
                    AvatarSettings.from_settings()

    @override_settings(AVATAR_DEFAULT_IMAGES={"medium": "m.gif", "small": "s.gif"})
    def test_default_image_uses_format_specific_path(self) -> None:
        avatar_settings = AvatarSettings.from_settings()
        self.assertEqual(avatar_settings.default_image_for("small"), "s.gif")
        self.assertEqual(avatar_settings.default_image_for("medium"), "m.gif")
        self.assertEqual(avatar_settings.default_image_for(None), "m.gif")

    @override_settings(AVATAR_DEFAULT_IMAGES={"medium": "m.gif"})
    def test_default_image_falls_back_to_default_format(self) -> None:
        avatar_settings = AvatarSettings.from_settings()
        self.assertEqual(avatar_settings.default_image_for("small"), "m.gif")
        self.assertEqual(avatar_settings.default_image_for("huge"), "m.gif")

    @override_settings(AVATAR_DEFAULT_IMAGES={"small": "s.gif"})
    def test_default_image_without_default_format_entry_is_fatal(self) -> None:
        avatar_settings = AvatarSettings.from_settings()
        self.assertEqual(avatar_settings.default_image_for("small"), "s.gif")
        with self.assertRaises(AvatarConfigError):
            avatar_settings.default_image_for("medium")


class AvatarSettingsCheckTests(SimpleTestCase):
    def test_shipped_settings_pass(self) -> None:
        self.assertEqual(check_avatar_settings(), [])

    @override_settings(AVATAR_IMAGE_SIZES={"medium": {"width": 200, "height": 200}})
    def test_missing_dimensions_report_error(self) -> None:
        issues = check_avatar_settings()
        self.assertEqual([issue.id for issue in issues], ["avatars.E001"])

    @override_settings(AVATAR_DEFAULT_IMAGES={"small": "avatars/img/default-small.gif"})
    def test_missing_default_format_image_reports_error(self) -> None:
        issues = check_avatar_settings()
        self.assertEqual([issue.id for issue in issues], ["avatars.E002"])

    @override_settings(
        AVATAR_DEFAULT_IMAGES={
            "medium": "avatars/img/default-medium.gif",
            "small": "avatars/img/missing.gif",
        }
    )
    def test_default_image_missing_from_static_files_warns(self) -> None:
        issues = check_avatar_settings()
        self.assertEqual([issue.id for issue in issues], ["avatars.W001"])
        self.assertEqual(issues[0].obj, "small")
