"""
Normalization of image inputs.

Every image stage accepts either variant of ``ImageSource`` and converts it
to a Bitmap here before touching pixels.
"""

from __future__ import annotations

import numpy as np

from regionocr.exceptions import InvalidInputError
from regionocr.models import Bitmap, DrawableSurface, ImageSource


def to_bitmap(source: ImageSource, stage: str) -> Bitmap:
    """
    Convert a Bitmap or DrawableSurface into a Bitmap.

    Args:
        source: Image input.
        stage: Name of the calling stage, attached to any error.

    Raises:
        InvalidInputError: If ``source`` is neither variant.
        PixelAccessError: If ``source`` is a tainted surface.
    """
    if isinstance(source, Bitmap):
        return source
    if isinstance(source, DrawableSurface):
        return source.read_pixels(stage=stage)
    raise InvalidInputError(f"Unsupported input type: {type(source).__name__}", stage=stage)


def as_array(source: ImageSource, stage: str) -> np.ndarray:
    """Return a private, writable ``(height, width, 4)`` copy of the pixels."""
    return to_bitmap(source, stage).to_array()
