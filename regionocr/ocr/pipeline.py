"""
OCR extraction orchestrator.

Ties the stages together for one captured region:
1. Image preprocessing (regionocr.imaging)
2. Recognition by the external OCR engine
3. Text cleaning (regionocr.text) with the rules of the capture's scope

Each call works on its own values; the only shared state is the loaded
dictionary, which is read-only after loading.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace

from regionocr.config import ExtractionConfig, TextOptions
from regionocr.exceptions import ConfigurationError
from regionocr.imaging.pipeline import build_image_pipeline, run_image_pipeline
from regionocr.imaging.surface import to_bitmap
from regionocr.models import ImageSource, RuleSet
from regionocr.ocr.dictionary import DictionaryManager
from regionocr.ocr.engine import OCREngine, TesseractEngine, select_psm
from regionocr.rules import GLOBAL_SCOPE, RuleBook
from regionocr.text.pipeline import process_text

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class ExtractionResult:
    """
    Result of processing one capture.

    ``original_text`` is the engine output before cleaning, kept for
    side-by-side comparison with ``text``.
    """

    text: str
    original_text: str
    confidence: float
    psm: int
    warnings: list[str] = field(default_factory=list)
    debug_steps: list[tuple[str, ImageSource]] = field(default_factory=list)
    processing_time_ms: float = 0.0


# =============================================================================
# OCR PIPELINE
# =============================================================================


@dataclass
class OCRPipeline:
    """
    Capture-to-text pipeline.

    Attributes:
        config: Image, engine and text options.
        engine: OCR engine; Tesseract by default.
        dictionary: Shared vocabulary store for dictionary correction.
        rules: Scoped user rules, merged per call.

    Example:
        >>> pipeline = OCRPipeline(config=ExtractionConfig.manhwa())
        >>> result = pipeline.process(Bitmap.from_image(Image.open("bubble.png")))
        >>> result.text
        'WHAT ARE YOU DOING?'
    """

    config: ExtractionConfig = field(default_factory=ExtractionConfig)
    engine: OCREngine | None = None
    dictionary: DictionaryManager = field(default_factory=DictionaryManager)
    rules: RuleBook = field(default_factory=RuleBook)

    def __post_init__(self) -> None:
        if self.engine is None:
            self.engine = TesseractEngine.from_options(self.config.engine)

    def _text_options(self, scope: str | None) -> TextOptions:
        text = self.config.text
        scoped = self.rules.effective(scope)
        if not scoped:
            return text
        merged = RuleSet(text.replacements, text.deletions).merged(scoped)
        return replace(text, replacements=merged.replacements, deletions=merged.deletions)

    def _ensure_dictionary(self, warnings: list[str] | None = None) -> None:
        text = self.config.text
        if not text.dictionary_correction or self.dictionary.is_loaded(text.language):
            return
        try:
            self.dictionary.load(text.language)
        except ConfigurationError as e:
            # Correction then passes text through unchanged
            logger.warning("Dictionary correction skipped: %s", e)
            if warnings is not None:
                warnings.append(f"Dictionary correction skipped: {e}")

    def process_text(
        self, text: str, scope: str | None = GLOBAL_SCOPE, warnings: list[str] | None = None
    ) -> str:
        """
        Clean ``text`` with the configured options and the rules of ``scope``.

        The dictionary is loaded on first use when dictionary correction is on;
        a language without a vocabulary is reported in ``warnings``.
        """
        self._ensure_dictionary(warnings)
        return process_text(
            text, self._text_options(scope), dictionary=self.dictionary, warnings=warnings
        )

    def process(self, source: ImageSource, scope: str | None = GLOBAL_SCOPE) -> ExtractionResult:
        """
        Preprocess, recognize and clean one capture.

        Args:
            source: Captured region.
            scope: Rule scope of the capture (see ``scope_for_origin``).

        Returns:
            ExtractionResult with cleaned and raw text.

        Raises:
            InvalidInputError, PixelAccessError: If the capture cannot be read.
            EngineError: If the OCR engine fails.
        """
        start_time = time.time()
        debug_steps: list[tuple[str, ImageSource]] = []
        warnings: list[str] = []

        def record_step(name: str, image: ImageSource) -> None:
            debug_steps.append((name, image))

        if self.config.debug:
            record_step("original", source)

        steps = build_image_pipeline(
            self.config.image, on_step=record_step if self.config.debug else None
        )
        prepared = to_bitmap(run_image_pipeline(source, steps), "output")

        psm = select_psm(prepared.width, prepared.height, self.config.engine)
        recognition = self.engine.recognize(prepared, self.config.engine.lang, psm)
        raw_text = recognition.text.strip()
        logger.debug(
            "Recognized %d chars (psm=%d, confidence=%.2f)",
            len(raw_text),
            psm,
            recognition.confidence,
        )

        cleaned = self.process_text(raw_text, scope=scope, warnings=warnings)

        return ExtractionResult(
            text=cleaned,
            original_text=raw_text,
            confidence=recognition.confidence,
            psm=psm,
            warnings=warnings,
            debug_steps=debug_steps,
            processing_time_ms=(time.time() - start_time) * 1000,
        )


def create_pipeline(
    profile: str = "default",
    engine: OCREngine | None = None,
    rules: RuleBook | None = None,
    debug: bool = False,
) -> OCRPipeline:
    """
    Create an OCR pipeline from a named profile.

    Args:
        profile: "default" or "manhwa".
        engine: OCR engine (Tesseract if omitted).
        rules: Scoped user rules.
        debug: Record intermediate images in results.

    Returns:
        Configured OCRPipeline instance.
    """
    config = ExtractionConfig.profile(profile)
    config.debug = debug
    return OCRPipeline(config=config, engine=engine, rules=rules or RuleBook())
