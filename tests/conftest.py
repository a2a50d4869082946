"""
Pytest configuration and fixtures for RegionOCR tests.
"""

import numpy as np
import pytest

from regionocr.models import Bitmap, Recognition


def gray_bitmap(values, alpha=255) -> Bitmap:
    """Build a Bitmap whose R, G and B channels all equal ``values`` (2-D)."""
    levels = np.asarray(values, dtype=np.uint8)
    pixels = np.empty(levels.shape + (4,), dtype=np.uint8)
    pixels[..., 0] = levels
    pixels[..., 1] = levels
    pixels[..., 2] = levels
    pixels[..., 3] = alpha
    return Bitmap.from_array(pixels)


def red_channel(bitmap: Bitmap) -> np.ndarray:
    return bitmap.to_array()[..., 0]


class FakeEngine:
    """OCR engine double that records its calls and returns fixed text."""

    def __init__(self, text: str = "", confidence: float = 0.9):
        self.text = text
        self.confidence = confidence
        self.calls = []

    def recognize(self, bitmap, lang, psm):
        self.calls.append((bitmap, lang, psm))
        return Recognition(text=self.text, confidence=self.confidence)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible pixel data."""
    return np.random.default_rng(1234)


@pytest.fixture
def random_bitmap(rng) -> Bitmap:
    """A 12x9 RGBA bitmap of random pixels, fully opaque."""
    pixels = rng.integers(0, 256, size=(9, 12, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return Bitmap.from_array(pixels)


@pytest.fixture
def fake_engine():
    return FakeEngine(text="Helle World")


@pytest.fixture
def english_dictionary():
    from regionocr.ocr.dictionary import DictionaryManager

    manager = DictionaryManager()
    manager.load("eng", words=["hello", "world"])
    return manager
