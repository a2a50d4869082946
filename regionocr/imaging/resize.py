"""
Resize stage.

Scaling goes through Pillow, which plays the part of the rasterizer: a
tainted surface can be scaled and drawn, but its result cannot be read
back, so the stage may hand the scaled surface itself to the next stage.
"""

from __future__ import annotations

import logging

from PIL import Image

from regionocr.config import ResizeOptions
from regionocr.exceptions import InvalidInputError, PixelAccessError
from regionocr.models import Bitmap, DrawableSurface, ImageSource

logger = logging.getLogger(__name__)


def _source_image(source: ImageSource) -> tuple[Image.Image, bool]:
    if isinstance(source, Bitmap):
        return source.to_image(), True
    if isinstance(source, DrawableSurface):
        image = source.image if source.image.mode == "RGBA" else source.image.convert("RGBA")
        return image, source.origin_clean
    raise InvalidInputError(f"Unsupported input type: {type(source).__name__}", stage="resize")


def apply_resize(source: ImageSource, options: ResizeOptions | None = None) -> ImageSource:
    """
    Scale by ``options.scale`` (default 2x) with Lanczos resampling.

    Returns:
        A Bitmap of ``int(width * scale) x int(height * scale)`` (at least 1x1), or the
        scaled DrawableSurface if its pixels cannot be read back.
    """
    options = options or ResizeOptions()
    image, origin_clean = _source_image(source)

    # Never scale a side below one pixel
    new_size = (
        max(1, int(image.width * options.scale)),
        max(1, int(image.height * options.scale)),
    )
    scaled = DrawableSurface(
        image.resize(new_size, Image.Resampling.LANCZOS),
        origin_clean=origin_clean,
    )

    try:
        return scaled.read_pixels(stage="resize")
    except PixelAccessError as e:
        logger.warning("Resize output is tainted; passing the surface on: %s", e)
        return scaled
