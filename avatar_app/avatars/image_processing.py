from __future__ import annotations

import logging
from io import BytesIO
from typing import Final

from PIL import Image, ImageOps, UnidentifiedImageError

from avatars.exceptions import TransformError

logger = logging.getLogger(__name__)

OUTPUT_FORMAT: Final[str] = "JPEG"
OUTPUT_CONTENT_TYPE: Final[str] = "image/jpeg"
JPEG_QUALITY: Final[int] = 85

_BACKGROUND: Final[tuple[int, int, int]] = (255, 255, 255)


def resize_and_crop(data: bytes, width: int, height: int) -> bytes:
    """Scale an image to cover ``width`` x ``height`` and crop the overflow.

    The crop is centered, the aspect ratio is never distorted and the result
    is always re-encoded as JPEG. Transparent pixels are flattened onto white.
    """
    if width <= 0 or height <= 0:
        raise TransformError(f"Target size must be positive, got {width}x{height}")
    if not data:
        raise TransformError("No image data to transform")

    try:
        with Image.open(BytesIO(data)) as source:
            source.load()
            img = ImageOps.exif_transpose(source)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise TransformError(f"Could not decode image: {exc}") from exc

    img = _flatten(img)

    logger.debug("Resizing avatar %dx%d -> %dx%d", img.width, img.height, width, height)
    img = ImageOps.fit(
        img,
        (width, height),
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )

    buf = BytesIO()
    try:
        img.save(buf, format=OUTPUT_FORMAT, quality=JPEG_QUALITY, optimize=True)
    except (OSError, ValueError) as exc:
        raise TransformError(f"Could not encode image as {OUTPUT_FORMAT}: {exc}") from exc
    return buf.getvalue()


def _flatten(img: Image.Image) -> Image.Image:
    # JPEG has no alpha channel.
    if img.mode in {"RGBA", "LA"} or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, _BACKGROUND)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img
