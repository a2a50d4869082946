"""
OCR engine interface and the Tesseract adapter.

The pipelines treat the engine as a black box: it takes a Bitmap, a
language and a page segmentation mode and returns text with a mean
confidence.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Protocol

import pytesseract

from regionocr.config import EngineOptions
from regionocr.exceptions import EngineError
from regionocr.models import Bitmap, Recognition

logger = logging.getLogger(__name__)


# =============================================================================
# PAGE SEGMENTATION
# =============================================================================

PSM_SINGLE_LINE = 7
PSM_VERTICAL_BLOCK = 5
PSM_UNIFORM_BLOCK = 6

WIDE_ASPECT_RATIO = 3.0
TALL_ASPECT_RATIO = 0.2


def select_psm(width: int, height: int, options: EngineOptions) -> int:
    """
    Choose the Tesseract page segmentation mode for a captured region.

    With ``auto_psm`` off the configured mode is used. Otherwise a wide
    strip (aspect ratio > 3) is read as a single line, a tall strip
    (< 0.2) as a vertical block, and anything else as a uniform block.
    """
    if not options.auto_psm:
        return options.psm
    if height <= 0:
        return PSM_SINGLE_LINE

    aspect_ratio = width / height
    if aspect_ratio > WIDE_ASPECT_RATIO:
        return PSM_SINGLE_LINE
    if aspect_ratio < TALL_ASPECT_RATIO:
        return PSM_VERTICAL_BLOCK
    return PSM_UNIFORM_BLOCK


# =============================================================================
# ENGINES
# =============================================================================


class OCREngine(Protocol):
    """Anything that can recognize text in a Bitmap."""

    def recognize(self, bitmap: Bitmap, lang: str, psm: int) -> Recognition: ...


def tesseract_available() -> bool:
    """Check if the Tesseract binary is installed and usable."""
    try:
        pytesseract.get_tesseract_version()
        return True
    except pytesseract.TesseractNotFoundError:
        logger.debug("Tesseract binary not found")
        return False


@dataclass
class TesseractEngine:
    """
    OCR engine backed by the Tesseract binary through pytesseract.

    Words are regrouped into Tesseract's lines and paragraphs: lines are
    joined with newlines and paragraphs with blank lines, so the text
    pipeline sees the same structure Tesseract found.

    Attributes:
        oem: Tesseract OCR engine mode.
        whitelist: Characters Tesseract may output ("" for no restriction).
        timeout: Seconds before the Tesseract call is abandoned (0 for none).
    """

    oem: int = 1
    whitelist: str = ""
    timeout: float = 0

    @classmethod
    def from_options(cls, options: EngineOptions) -> TesseractEngine:
        return cls(oem=options.oem, whitelist=options.whitelist)

    def build_config(self, psm: int) -> str:
        """Command-line config string passed to Tesseract."""
        config = f"--oem {self.oem} --psm {psm}"
        if self.whitelist:
            config += f" -c tessedit_char_whitelist={self.whitelist}"
        return config

    def recognize(self, bitmap: Bitmap, lang: str, psm: int) -> Recognition:
        """
        Recognize text in ``bitmap``.

        Raises:
            EngineError: If Tesseract is missing, fails or times out.
        """
        try:
            data = pytesseract.image_to_data(
                bitmap.to_image(),
                lang=lang,
                config=self.build_config(psm),
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise EngineError("Tesseract is not installed or not on PATH") from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise EngineError(f"Tesseract failed: {e}") from e

        return _assemble(data)


def _assemble(data: dict[str, list]) -> Recognition:
    """Join Tesseract word boxes into text and a mean confidence."""
    lines: dict[tuple[int, int, int], list[str]] = defaultdict(list)
    confidences: list[float] = []

    for i, word in enumerate(data["text"]):
        if not str(word).strip():
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines[key].append(str(word).strip())
        conf = float(data["conf"][i])
        if conf >= 0:  # -1 means no confidence
            confidences.append(conf)

    paragraphs: dict[tuple[int, int], list[str]] = defaultdict(list)
    for (block, par, _line), words in lines.items():
        paragraphs[(block, par)].append(" ".join(words))

    text = "\n\n".join("\n".join(par_lines) for par_lines in paragraphs.values())
    confidence = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
    logger.debug("Tesseract returned %d lines, confidence %.2f", len(lines), confidence)
    return Recognition(text=text, confidence=confidence)
