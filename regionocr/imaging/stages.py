"""
Pixel transform stages.

Each stage reads a private copy of its input and returns a new Bitmap.
Channel values are stored with round-half-to-even and clamped to 0-255,
the same way a clamped byte buffer stores fractional values.

Stages:
- apply_grayscale: luminance into R, G and B
- apply_contrast: histogram-driven contrast stretch
- apply_median_blur: 3x3 per-channel median
- apply_adaptive_threshold: local-mean binarization via an integral image
- apply_morphology: binary open/close/erode/dilate on black foreground
"""

from __future__ import annotations

import logging

import numpy as np

from regionocr.config import ContrastOptions, MorphologyOptions, ThresholdOptions
from regionocr.imaging.surface import as_array
from regionocr.models import Bitmap, ImageSource

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Fraction of pixels ignored at each end of the histogram
HISTOGRAM_TRIM = 0.01

# Upper bounds below this are treated as an already near-white background
NEAR_WHITE_LEVEL = 200
MIN_WHITE_LEVEL = 240

# Red-channel levels separating black from white in binary stages
ERODE_WHITE_ABOVE = 128
DILATE_BLACK_BELOW = 128


def _store(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _luminance(pixels: np.ndarray) -> np.ndarray:
    rgb = pixels[..., :3].astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]


# =============================================================================
# GRAYSCALE
# =============================================================================


def apply_grayscale(source: ImageSource) -> Bitmap:
    """
    Convert to grayscale using 0.299R + 0.587G + 0.114B.

    The luminance is written to all three color channels; alpha is kept.
    """
    pixels = as_array(source, "grayscale")
    gray = _store(_luminance(pixels))
    pixels[..., 0] = gray
    pixels[..., 1] = gray
    pixels[..., 2] = gray
    return Bitmap.from_array(pixels)


# =============================================================================
# CONTRAST STRETCH
# =============================================================================


def luminance_bounds(pixels: np.ndarray) -> tuple[int, int]:
    """
    Find the 1%-trimmed luminance range of an RGBA array.

    Fully transparent pixels are left out of the histogram but still count
    toward the total used for the 1% threshold.

    Returns:
        ``(min_lum, max_lum)`` before the near-white clamp is applied.
    """
    height, width = pixels.shape[:2]
    visible = pixels[..., 3] != 0
    # Round half up, like Math.round on non-negative values
    lum = np.floor(_luminance(pixels)[visible] + 0.5).astype(np.int64)
    histogram = np.bincount(np.clip(lum, 0, 255), minlength=256)

    cutoff = width * height * HISTOGRAM_TRIM
    min_lum, max_lum = 0, 255

    cumulative = 0
    for level in range(256):
        cumulative += int(histogram[level])
        if cumulative > cutoff:
            min_lum = level
            break

    cumulative = 0
    for level in range(255, -1, -1):
        cumulative += int(histogram[level])
        if cumulative > cutoff:
            max_lum = level
            break

    return min_lum, max_lum


def apply_contrast(source: ImageSource, options: ContrastOptions | None = None) -> Bitmap:
    """
    Stretch contrast between the trimmed luminance bounds.

    An upper bound below 200 is raised to 255; otherwise it is raised to at
    least 240, so a white page background stays white. If the range is
    empty the input pixels are returned unchanged. Fully transparent pixels
    are never modified.

    ``options`` is accepted so the stage fits the runner's calling
    convention; the stretch range comes from the histogram alone.
    """
    pixels = as_array(source, "contrast")
    min_lum, max_lum = luminance_bounds(pixels)

    if max_lum < NEAR_WHITE_LEVEL:
        max_lum = 255
    else:
        max_lum = max(max_lum, MIN_WHITE_LEVEL)

    value_range = max_lum - min_lum
    if value_range <= 0:
        logger.debug("Contrast range is empty (min=%d, max=%d); unchanged", min_lum, max_lum)
        return Bitmap.from_array(pixels)

    scale = 255 / value_range
    visible = pixels[..., 3] != 0
    rgb = pixels[..., :3].astype(np.float64)
    stretched = _store((rgb - min_lum) * scale)
    pixels[..., :3] = np.where(visible[..., None], stretched, pixels[..., :3])
    return Bitmap.from_array(pixels)


# =============================================================================
# MEDIAN BLUR
# =============================================================================


def apply_median_blur(source: ImageSource) -> Bitmap:
    """
    Apply a 3x3 median filter to R, G and B independently.

    Border rows and columns are copied unchanged; alpha is untouched.
    """
    pixels = as_array(source, "blur")
    height, width = pixels.shape[:2]
    if height < 3 or width < 3:
        return Bitmap.from_array(pixels)

    rgb = pixels[..., :3]
    window = np.stack(
        [
            rgb[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]
            for dy in (-1, 0, 1)
            for dx in (-1, 0, 1)
        ]
    )
    pixels[1:-1, 1:-1, :3] = np.sort(window, axis=0)[4]
    return Bitmap.from_array(pixels)


# =============================================================================
# ADAPTIVE THRESHOLD
# =============================================================================


def integral_image(channel: np.ndarray) -> np.ndarray:
    """
    Build a summed-area table padded with a leading row and column of zeros.

    ``table[y, x]`` is the sum of ``channel[:y, :x]``.
    """
    height, width = channel.shape
    table = np.zeros((height + 1, width + 1), dtype=np.int64)
    table[1:, 1:] = channel.astype(np.int64).cumsum(axis=0).cumsum(axis=1)
    return table


def apply_adaptive_threshold(
    source: ImageSource, options: ThresholdOptions | None = None
) -> Bitmap:
    """
    Binarize against the mean of a local window.

    The red channel is compared with the mean of a ``block_size`` square
    window centred on the pixel, clipped at the image edges and divided by
    the clipped pixel count. Pixels darker than ``mean - constant`` become
    black; all others become white. Alpha is forced opaque.
    """
    options = options or ThresholdOptions()
    pixels = as_array(source, "threshold")
    height, width = pixels.shape[:2]
    if height == 0 or width == 0:
        return Bitmap.from_array(pixels)

    red = pixels[..., 0]
    table = integral_image(red)
    half = options.block_size // 2

    ys = np.arange(height)
    xs = np.arange(width)
    y1 = np.maximum(ys - half, 0)[:, None]
    y2 = np.minimum(ys + half, height - 1)[:, None] + 1
    x1 = np.maximum(xs - half, 0)[None, :]
    x2 = np.minimum(xs + half, width - 1)[None, :] + 1

    window_sum = table[y2, x2] - table[y1, x2] - table[y2, x1] + table[y1, x1]
    count = (y2 - y1) * (x2 - x1)
    mean = window_sum / count

    foreground = red < mean - options.constant
    out = np.full_like(pixels, 255)
    out[foreground, :3] = 0
    return Bitmap.from_array(out)


# =============================================================================
# MORPHOLOGY
# =============================================================================


def erode(black: np.ndarray, radius: int) -> np.ndarray:
    """
    Binary erosion of a black-foreground mask.

    A pixel stays black only if its whole window is black and lies inside
    the image; pixels near the border therefore always erode away.
    """
    height, width = black.shape
    padded = np.zeros((height + 2 * radius, width + 2 * radius), dtype=bool)
    padded[radius : radius + height, radius : radius + width] = black
    result = np.ones_like(black)
    for dy in range(2 * radius + 1):
        for dx in range(2 * radius + 1):
            result &= padded[dy : dy + height, dx : dx + width]
    return result


def dilate(black: np.ndarray, radius: int) -> np.ndarray:
    """
    Binary dilation of a black-foreground mask.

    A pixel becomes black if any in-bounds pixel of its window is black.
    """
    height, width = black.shape
    padded = np.zeros((height + 2 * radius, width + 2 * radius), dtype=bool)
    padded[radius : radius + height, radius : radius + width] = black
    result = np.zeros_like(black)
    for dy in range(2 * radius + 1):
        for dx in range(2 * radius + 1):
            result |= padded[dy : dy + height, dx : dx + width]
    return result


def _render_binary(black: np.ndarray) -> np.ndarray:
    out = np.full(black.shape + (4,), 255, dtype=np.uint8)
    out[black, :3] = 0
    return out


def _erode_pixels(pixels: np.ndarray, radius: int) -> np.ndarray:
    return _render_binary(erode(pixels[..., 0] <= ERODE_WHITE_ABOVE, radius))


def _dilate_pixels(pixels: np.ndarray, radius: int) -> np.ndarray:
    return _render_binary(dilate(pixels[..., 0] < DILATE_BLACK_BELOW, radius))


def apply_morphology(source: ImageSource, options: MorphologyOptions | None = None) -> Bitmap:
    """
    Apply a binary morphological operation; black is the foreground.

    ``open`` (erode then dilate) removes specks and thin border lines;
    ``close`` (dilate then erode) fills small gaps in strokes. Output pixels
    are pure black or white and fully opaque.
    """
    options = options or MorphologyOptions()
    pixels = as_array(source, "morphology")
    radius = options.kernel_size

    if options.type == "open":
        pixels = _dilate_pixels(_erode_pixels(pixels, radius), radius)
    elif options.type == "close":
        pixels = _erode_pixels(_dilate_pixels(pixels, radius), radius)
    elif options.type == "erode":
        pixels = _erode_pixels(pixels, radius)
    else:
        pixels = _dilate_pixels(pixels, radius)

    return Bitmap.from_array(pixels)
