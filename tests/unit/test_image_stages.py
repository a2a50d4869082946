"""
Unit tests for the image stage library (regionocr/imaging/).

Tests each pixel stage in isolation:
- grayscale, contrast, median blur, adaptive threshold, morphology
- largest white-region extraction
- resize
"""

import time

import numpy as np
import pytest
from conftest import gray_bitmap, red_channel
from PIL import Image

from regionocr.config import MorphologyOptions, ResizeOptions, ThresholdOptions
from regionocr.exceptions import InvalidInputError, PixelAccessError
from regionocr.imaging.region import extract_largest_white_region
from regionocr.imaging.resize import apply_resize
from regionocr.imaging.stages import (
    apply_adaptive_threshold,
    apply_contrast,
    apply_grayscale,
    apply_median_blur,
    apply_morphology,
    erode,
    integral_image,
)
from regionocr.imaging.surface import to_bitmap
from regionocr.models import Bitmap, DrawableSurface

# =============================================================================
# Normalization Tests
# =============================================================================


class TestSurfaceNormalization:
    """Every stage accepts either image variant and nothing else."""

    def test_bitmap_passes_through(self):
        bmp = Bitmap.blank(2, 2)
        assert to_bitmap(bmp, "x") is bmp

    def test_clean_surface_is_read(self):
        surface = DrawableSurface(Image.new("RGBA", (2, 3), (9, 9, 9, 255)))
        assert to_bitmap(surface, "x").pixel(1, 2) == (9, 9, 9, 255)

    @pytest.mark.parametrize(
        "stage,name",
        [
            (apply_grayscale, "grayscale"),
            (apply_contrast, "contrast"),
            (apply_median_blur, "blur"),
            (apply_adaptive_threshold, "threshold"),
            (apply_morphology, "morphology"),
            (extract_largest_white_region, "region"),
            (apply_resize, "resize"),
        ],
    )
    def test_unknown_input_names_stage(self, stage, name):
        with pytest.raises(InvalidInputError) as exc_info:
            stage("not an image")
        assert exc_info.value.stage == name

    def test_tainted_surface_raises(self):
        surface = DrawableSurface(Image.new("RGBA", (2, 2)), origin_clean=False)
        with pytest.raises(PixelAccessError) as exc_info:
            apply_grayscale(surface)
        assert exc_info.value.stage == "grayscale"


# =============================================================================
# Grayscale Tests
# =============================================================================


class TestGrayscale:
    def test_channels_equal_and_alpha_kept(self, rng):
        pixels = rng.integers(0, 256, size=(6, 7, 4), dtype=np.uint8)
        source = Bitmap.from_array(pixels)
        out = apply_grayscale(source).to_array()
        assert np.array_equal(out[..., 0], out[..., 1])
        assert np.array_equal(out[..., 1], out[..., 2])
        assert np.array_equal(out[..., 3], pixels[..., 3])

    def test_luminance_weights(self):
        source = Bitmap(1, 1, bytes([100, 150, 200, 77]))
        # 0.299*100 + 0.587*150 + 0.114*200 = 140.75
        assert apply_grayscale(source).pixel(0, 0) == (141, 141, 141, 77)

    def test_input_untouched(self, random_bitmap):
        before = random_bitmap.data
        apply_grayscale(random_bitmap)
        assert random_bitmap.data == before

    def test_accepts_surface(self):
        surface = DrawableSurface(Image.new("RGBA", (2, 2), (255, 0, 0, 255)))
        # 0.299 * 255 = 76.245
        assert apply_grayscale(surface).pixel(0, 0) == (76, 76, 76, 255)


# =============================================================================
# Contrast Tests
# =============================================================================


class TestContrast:
    def test_empty_range_returns_same_bytes(self):
        source = gray_bitmap(np.full((5, 5), 250))
        assert apply_contrast(source).data == source.data

    def test_white_image_unchanged(self):
        source = Bitmap.blank(4, 4)
        assert apply_contrast(source).data == source.data

    def test_stretch_dark_image(self):
        levels = np.full((10, 10), 50)
        levels[5:] = 150
        out = red_channel(apply_contrast(gray_bitmap(levels)))
        # min=50, max=150 (<200, raised to 255): scale 255/205
        assert np.all(out[:5] == 0)
        assert np.all(out[5:] == 124)

    def test_bright_upper_bound_raised_to_240(self):
        levels = np.full((10, 10), 20)
        levels[5:] = 220
        out = red_channel(apply_contrast(gray_bitmap(levels)))
        # min=20, max=max(220, 240)=240: scale 255/220
        assert np.all(out[:5] == 0)
        assert np.all(out[5:] == 232)

    def test_transparent_pixels_untouched(self):
        levels = np.full((10, 10), 50)
        levels[5:] = 150
        pixels = gray_bitmap(levels).to_array()
        pixels[9, 9] = (150, 150, 150, 0)
        out = apply_contrast(Bitmap.from_array(pixels))
        assert out.pixel(9, 9) == (150, 150, 150, 0)

    def test_fully_transparent_image_unchanged(self):
        source = gray_bitmap(np.full((3, 3), 90), alpha=0)
        assert apply_contrast(source).data == source.data


# =============================================================================
# Median Blur Tests
# =============================================================================


class TestMedianBlur:
    def test_removes_salt_noise(self):
        levels = np.full((5, 5), 100)
        levels[2, 2] = 255
        out = red_channel(apply_median_blur(gray_bitmap(levels)))
        assert np.all(out == 100)

    def test_borders_copied(self, random_bitmap):
        before = random_bitmap.to_array()
        after = apply_median_blur(random_bitmap).to_array()
        assert np.array_equal(after[0], before[0])
        assert np.array_equal(after[-1], before[-1])
        assert np.array_equal(after[:, 0], before[:, 0])
        assert np.array_equal(after[:, -1], before[:, -1])

    def test_per_channel_median(self, random_bitmap):
        before = random_bitmap.to_array()
        after = apply_median_blur(random_bitmap).to_array()
        for channel in range(3):
            window = before[0:3, 0:3, channel].ravel()
            assert after[1, 1, channel] == sorted(window)[4]

    def test_alpha_untouched(self, rng):
        pixels = rng.integers(0, 256, size=(5, 5, 4), dtype=np.uint8)
        out = apply_median_blur(Bitmap.from_array(pixels)).to_array()
        assert np.array_equal(out[..., 3], pixels[..., 3])

    def test_tiny_image_unchanged(self):
        source = gray_bitmap([[1, 2], [3, 4]])
        assert apply_median_blur(source).data == source.data


# =============================================================================
# Adaptive Threshold Tests
# =============================================================================


class TestAdaptiveThreshold:
    def test_integral_image(self):
        table = integral_image(np.array([[1, 2], [3, 4]]))
        assert table.shape == (3, 3)
        assert table[2, 2] == 10
        assert table[1, 2] == 3
        assert table[2, 1] == 4

    def test_uniform_image_is_white(self):
        out = apply_adaptive_threshold(gray_bitmap(np.full((6, 6), 77))).to_array()
        assert np.all(out == 255)

    def test_dark_dot_becomes_black(self):
        levels = np.full((15, 15), 255)
        levels[7, 7] = 0
        out = apply_adaptive_threshold(gray_bitmap(levels))
        assert out.pixel(7, 7) == (0, 0, 0, 255)
        assert int((red_channel(out) == 0).sum()) == 1

    def test_window_clipped_at_edges(self):
        levels = np.full((3, 3), 255)
        levels[0, 0] = 0
        # Every window covers the whole image: mean = 8 * 255 / 9
        out = red_channel(apply_adaptive_threshold(gray_bitmap(levels)))
        assert out[0, 0] == 0
        assert int((out == 255).sum()) == 8

    def test_constant_controls_sensitivity(self):
        levels = np.full((5, 5), 200)
        levels[2, 2] = 190
        lenient = apply_adaptive_threshold(gray_bitmap(levels), ThresholdOptions(constant=10))
        strict = apply_adaptive_threshold(gray_bitmap(levels), ThresholdOptions(constant=5))
        assert lenient.pixel(2, 2)[0] == 255
        assert strict.pixel(2, 2)[0] == 0

    def test_alpha_forced_opaque(self):
        out = apply_adaptive_threshold(gray_bitmap(np.full((3, 3), 10), alpha=0)).to_array()
        assert np.all(out[..., 3] == 255)


# =============================================================================
# Morphology Tests
# =============================================================================


class TestMorphology:
    def test_erosion_never_adds_foreground(self, rng):
        levels = np.where(rng.random((20, 20)) < 0.6, 0, 255)
        source = gray_bitmap(levels)
        out = red_channel(apply_morphology(source, MorphologyOptions(type="erode")))
        became_black = (out == 0) & (levels > 128)
        assert not became_black.any()

    def test_erosion_clears_border(self):
        out = red_channel(
            apply_morphology(gray_bitmap(np.zeros((5, 5))), MorphologyOptions(type="erode"))
        )
        assert np.all(out[1:4, 1:4] == 0)
        assert np.all(out[0] == 255)
        assert np.all(out[:, 4] == 255)

    def test_open_removes_speck(self):
        levels = np.full((7, 7), 255)
        levels[3, 3] = 0
        out = apply_morphology(gray_bitmap(levels)).to_array()
        assert np.all(out == 255)

    def test_open_keeps_solid_block(self):
        levels = np.full((9, 9), 255)
        levels[3:6, 3:6] = 0
        out = red_channel(apply_morphology(gray_bitmap(levels)))
        assert np.array_equal(out == 0, levels == 0)

    def test_dilate_grows_pixel(self):
        levels = np.full((5, 5), 255)
        levels[2, 2] = 0
        out = red_channel(apply_morphology(gray_bitmap(levels), MorphologyOptions(type="dilate")))
        assert np.all(out[1:4, 1:4] == 0)
        assert int((out == 0).sum()) == 9

    def test_close_fills_gap(self):
        levels = np.zeros((7, 7))
        levels[3, 3] = 255
        out = red_channel(apply_morphology(gray_bitmap(levels), MorphologyOptions(type="close")))
        assert out[3, 3] == 0

    def test_zero_kernel_is_identity_on_binary(self, rng):
        levels = np.where(rng.random((6, 6)) < 0.5, 0, 255)
        out = red_channel(
            apply_morphology(gray_bitmap(levels), MorphologyOptions(type="open", kernel_size=0))
        )
        assert np.array_equal(out, levels)

    def test_output_is_binary_and_opaque(self, random_bitmap):
        out = apply_morphology(random_bitmap).to_array()
        assert set(np.unique(out[..., :3])) <= {0, 255}
        assert np.all(out[..., 3] == 255)

    def test_erode_mask_helper(self):
        black = np.ones((3, 3), dtype=bool)
        assert erode(black, 1).sum() == 1


# =============================================================================
# Region Extraction Tests
# =============================================================================


def _bubble_scene() -> np.ndarray:
    """Black 9x12 scene with a bubble (rows 1-7, cols 1-6) and a small white patch."""
    levels = np.zeros((9, 12))
    levels[1:8, 1:7] = 255
    levels[4, 3] = 0  # ink inside the bubble
    levels[2:4, 9:11] = 255  # small patch
    return levels


class TestRegionExtraction:
    def test_no_white_returns_input(self):
        source = gray_bitmap(np.zeros((4, 4)))
        assert extract_largest_white_region(source) is source

    def test_keeps_bubble_and_enclosed_ink(self):
        out = red_channel(extract_largest_white_region(gray_bitmap(_bubble_scene())))
        assert out[4, 3] == 0
        expected = np.full((9, 12), 255)
        expected[4, 3] = 0
        assert np.array_equal(out, expected)

    def test_mask_keeps_color_and_sets_alpha(self):
        pixels = gray_bitmap(_bubble_scene()).to_array()
        pixels[2, 2] = (200, 10, 10, 100)
        out = extract_largest_white_region(Bitmap.from_array(pixels))
        assert out.pixel(2, 2) == (200, 10, 10, 255)

    def test_first_largest_wins_ties(self):
        pixels = gray_bitmap(np.zeros((3, 5))).to_array()
        pixels[1, 1] = (200, 0, 0, 255)
        pixels[1, 3] = (150, 0, 0, 255)
        out = extract_largest_white_region(Bitmap.from_array(pixels))
        assert out.pixel(1, 1) == (200, 0, 0, 255)
        assert out.pixel(3, 1) == (255, 255, 255, 255)

    def test_border_touching_ink_removed(self):
        levels = np.full((5, 5), 255)
        levels[0, 2] = 0  # ink touching the top edge
        out = red_channel(extract_largest_white_region(gray_bitmap(levels)))
        assert np.all(out == 255)

    def test_screen_sized_capture(self):
        # ink line every 7th row splits the capture into tied 6-row white bands
        levels = np.full((720, 1280), 255)
        levels[3::7] = 0
        levels[6::7, 640] = 0  # one ink dot inside each 6-row band

        start = time.perf_counter()
        out = red_channel(extract_largest_white_region(gray_bitmap(levels)))
        elapsed = time.perf_counter() - start

        expected = np.full((720, 1280), 255)
        expected[6, 640] = 0
        assert np.array_equal(out, expected)
        assert elapsed < 1.0

    def test_ink_ring_inside_bubble_kept(self):
        levels = np.zeros((12, 12))
        levels[1:11, 1:11] = 255
        levels[4:8, 4:8] = 0
        levels[5:7, 5:7] = 255  # white island inside the ring
        out = red_channel(extract_largest_white_region(gray_bitmap(levels)))
        expected = np.full((12, 12), 255)
        expected[4:8, 4:8] = 0
        expected[5:7, 5:7] = 255
        assert np.array_equal(out, expected)


# =============================================================================
# Resize Tests
# =============================================================================


class TestResize:
    def test_default_doubles(self):
        out = apply_resize(Bitmap.blank(3, 2))
        assert isinstance(out, Bitmap)
        assert (out.width, out.height) == (6, 4)

    def test_fractional_scale_truncates(self):
        out = apply_resize(Bitmap.blank(3, 3), ResizeOptions(scale=1.5))
        assert (out.width, out.height) == (4, 4)

    @pytest.mark.parametrize("size", [(1, 1), (3, 1), (1, 4)])
    def test_downscale_never_below_one_pixel(self, size):
        out = apply_resize(Bitmap.blank(*size), ResizeOptions(scale=0.25))
        assert out.width >= 1
        assert out.height >= 1
        assert (out.width, out.height) == tuple(max(1, int(side * 0.25)) for side in size)

    def test_clean_surface_gives_bitmap(self):
        surface = DrawableSurface(Image.new("RGB", (2, 2), (0, 0, 0)))
        out = apply_resize(surface)
        assert isinstance(out, Bitmap)
        assert out.pixel(0, 0)[3] == 255

    def test_tainted_surface_degrades_to_surface(self, caplog):
        surface = DrawableSurface(Image.new("RGBA", (2, 3)), origin_clean=False)
        with caplog.at_level("WARNING"):
            out = apply_resize(surface)
        assert isinstance(out, DrawableSurface)
        assert out.origin_clean is False
        assert (out.width, out.height) == (4, 6)
        assert "tainted" in caplog.text
