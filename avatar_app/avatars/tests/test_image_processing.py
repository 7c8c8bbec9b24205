from io import BytesIO
from unittest.mock import patch

from django.test import SimpleTestCase
from PIL import Image

from avatars.exceptions import TransformError
from avatars.image_processing import resize_and_crop
from avatars.tests.utils_test_data import image_size, make_image_bytes


def _striped_wide_image() -> bytes:
    # 300x100: blue | red | blue, each band 100px wide.
    img = Image.new("RGB", (300, 100), color=(0, 0, 255))
    img.paste((255, 0, 0), (100, 0, 200, 100))
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class ResizeAndCropTests(SimpleTestCase):
    def test_output_has_exact_target_size_for_any_aspect_ratio(self) -> None:
        for source_size in [(64, 64), (400, 100), (100, 400), (7, 3), (2000, 2000)]:
            with self.subTest(source_size=source_size):
                out = resize_and_crop(make_image_bytes(size=source_size), 50, 20)
                self.assertEqual(image_size(out), (50, 20))

    def test_output_is_jpeg(self) -> None:
        out = resize_and_crop(make_image_bytes(image_format="GIF"), 10, 10)
        with Image.open(BytesIO(out)) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")

    def test_crop_keeps_the_center_of_a_wide_image(self) -> None:
        out = resize_and_crop(_striped_wide_image(), 20, 20)

        with Image.open(BytesIO(out)) as img:
            img.load()
            r, g, b = img.getpixel((10, 10))
        self.assertGreater(r, 200)
        self.assertLess(b, 60)

    def test_upscales_small_images_to_cover_the_target(self) -> None:
        out = resize_and_crop(make_image_bytes(size=(4, 8)), 40, 40)
        self.assertEqual(image_size(out), (40, 40))

    def test_transparency_is_flattened_onto_white(self) -> None:
        buf = BytesIO()
        Image.new("RGBA", (10, 10), color=(0, 0, 0, 0)).save(buf, format="PNG")

        out = resize_and_crop(buf.getvalue(), 5, 5)

        with Image.open(BytesIO(out)) as img:
            r, g, b = img.getpixel((2, 2))
        self.assertGreater(min(r, g, b), 240)

    def test_is_deterministic(self) -> None:
        data = make_image_bytes(size=(123, 77), color=(200, 30, 90))
        self.assertEqual(resize_and_crop(data, 31, 17), resize_and_crop(data, 31, 17))

    def test_rejects_non_positive_dimensions(self) -> None:
        data = make_image_bytes()
        for width, height in [(0, 10), (10, 0), (-1, 5)]:
            with self.subTest(width=width, height=height):
                with self.assertRaises(TransformError):
                    resize_and_crop(data, width, height)

    def test_rejects_undecodable_bytes(self) -> None:
        with self.assertRaises(TransformError):
            resize_and_crop(b"definitely not an image", 10, 10)

    def test_rejects_empty_bytes(self) -> None:
        with self.assertRaises(TransformError):
            resize_and_crop(b"", 10, 10)

    def test_encoder_failure_raises_transform_error(self) -> None:
        data = make_image_bytes()
        with patch.object(Image.Image, "save", side_effect=OSError("encoder error -2")):
            with self.assertRaises(TransformError):
                resize_and_crop(data, 20, 20)
