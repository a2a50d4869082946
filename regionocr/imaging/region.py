"""
Largest white-region extraction.

Isolates the dominant white area of a capture (typically a speech bubble)
and erases everything outside it, while keeping ink fully enclosed by
the region.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from regionocr.imaging.surface import as_array
from regionocr.models import Bitmap, ImageSource

logger = logging.getLogger(__name__)

WHITE_ABOVE = 128


def label_components(mask: np.ndarray) -> tuple[int, np.ndarray, np.ndarray]:
    """
    Label the 4-connected components of a 2-D boolean mask.

    Returns:
        ``(count, labels, stats)`` as from ``cv2.connectedComponentsWithStats``;
        label 0 is the unset part of the mask.
    """
    return cv2.connectedComponentsWithStats(mask.astype(np.uint8), connectivity=4)[:3]


def largest_component(labels: np.ndarray, stats: np.ndarray) -> int:
    """Label of the largest component; the first in scan order wins ties."""
    areas = stats[1:, cv2.CC_STAT_AREA]
    tied = np.flatnonzero(areas == areas.max()) + 1
    if len(tied) == 1:
        return int(tied[0])
    flat = labels.ravel()
    return int(min(tied, key=lambda lbl: int(np.argmax(flat == lbl))))


def fill_enclosed(mask: np.ndarray) -> np.ndarray:
    """
    Add to ``mask`` every non-mask component that does not touch the border.

    Returns a new 2-D boolean mask.
    """
    height, width = mask.shape
    count, labels, stats = label_components(~mask)
    if count <= 1:
        return mask.copy()

    left = stats[1:, cv2.CC_STAT_LEFT]
    top = stats[1:, cv2.CC_STAT_TOP]
    right = left + stats[1:, cv2.CC_STAT_WIDTH]
    bottom = top + stats[1:, cv2.CC_STAT_HEIGHT]
    touches_border = (left == 0) | (top == 0) | (right >= width) | (bottom >= height)

    enclosed = np.flatnonzero(~touches_border) + 1
    return mask | np.isin(labels, enclosed)


def extract_largest_white_region(source: ImageSource) -> ImageSource:
    """
    Keep the largest white region plus the holes it encloses.

    Pixels with red > 128 are white. The largest 4-connected white component
    wins (the first one found on ties). Non-region components that do not
    touch the image border are ink inside the region and are kept. Kept
    pixels retain their color and become opaque; everything else becomes
    opaque white.

    Returns the input unchanged if the image has no white pixels.
    """
    pixels = as_array(source, "region")
    white = pixels[..., 0] > WHITE_ABOVE
    if not white.any():
        logger.warning("No white region found; returning input unchanged")
        return source

    count, labels, stats = label_components(white)
    mask = fill_enclosed(labels == largest_component(labels, stats))

    out = np.full_like(pixels, 255)
    out[mask, :3] = pixels[mask, :3]
    logger.debug(
        "Region extraction kept %d of %d pixels (%d white components)",
        int(mask.sum()),
        mask.size,
        count - 1,
    )
    return Bitmap.from_array(out)
