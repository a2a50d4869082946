"""
OCR integration: dictionary, engine and the capture-to-text orchestrator.

Example:
    >>> from regionocr.ocr import create_pipeline
    >>> pipeline = create_pipeline("manhwa")
    >>> pipeline.process_text("H E L L O\\nthere")
    'HELLO there'
"""

from regionocr.ocr.dictionary import (
    DictionaryManager,
    find_closest_match,
    levenshtein_distance,
)
from regionocr.ocr.engine import (
    OCREngine,
    TesseractEngine,
    select_psm,
    tesseract_available,
)
from regionocr.ocr.pipeline import (
    ExtractionResult,
    OCRPipeline,
    create_pipeline,
)

__all__ = [
    # Pipeline
    "OCRPipeline",
    "ExtractionResult",
    "create_pipeline",
    # Engine
    "OCREngine",
    "TesseractEngine",
    "select_psm",
    "tesseract_available",
    # Dictionary
    "DictionaryManager",
    "find_closest_match",
    "levenshtein_distance",
]
