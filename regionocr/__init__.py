"""
RegionOCR: turn screen-region captures into clean text.

A captured region goes through an image preprocessing pipeline, an OCR
engine (Tesseract by default) and a text cleaning pipeline that repairs
OCR artifacts and applies user-defined rules.

Example:
    >>> import regionocr
    >>> pipeline = regionocr.create_pipeline("manhwa")
    >>> result = pipeline.process(regionocr.Bitmap.from_image(image))
    >>> print(result.text)

    >>> # Text cleaning on its own
    >>> regionocr.process_text("l am  here .")
    'I am here.'
"""

from regionocr.config import (
    ContrastOptions,
    EngineOptions,
    ExtractionConfig,
    ImageOptions,
    MorphologyOptions,
    ResizeOptions,
    TextOptions,
    ThresholdOptions,
)
from regionocr.exceptions import (
    ConfigurationError,
    DictionaryNotLoadedError,
    EngineError,
    InvalidInputError,
    PixelAccessError,
    RegionOCRError,
    RuleCompileError,
    StageError,
)
from regionocr.imaging import PipelineStep, process_image, run_image_pipeline
from regionocr.models import (
    Bitmap,
    DeletionRule,
    DrawableSurface,
    ImageSource,
    Recognition,
    ReplacementRule,
    RuleSet,
)
from regionocr.ocr import (
    DictionaryManager,
    ExtractionResult,
    OCRPipeline,
    TesseractEngine,
    create_pipeline,
)
from regionocr.rules import GLOBAL_SCOPE, RuleBook, scope_for_origin
from regionocr.text import process_text

__version__ = "0.1.0"
__all__ = [
    # Main API
    "OCRPipeline",
    "ExtractionResult",
    "create_pipeline",
    "process_image",
    "process_text",
    "run_image_pipeline",
    "PipelineStep",
    # Configuration
    "ExtractionConfig",
    "ImageOptions",
    "TextOptions",
    "EngineOptions",
    "ResizeOptions",
    "ContrastOptions",
    "ThresholdOptions",
    "MorphologyOptions",
    # Images
    "Bitmap",
    "DrawableSurface",
    "ImageSource",
    # Rules
    "ReplacementRule",
    "DeletionRule",
    "RuleSet",
    "RuleBook",
    "GLOBAL_SCOPE",
    "scope_for_origin",
    # OCR
    "DictionaryManager",
    "Recognition",
    "TesseractEngine",
    # Exceptions
    "RegionOCRError",
    "StageError",
    "InvalidInputError",
    "PixelAccessError",
    "RuleCompileError",
    "DictionaryNotLoadedError",
    "ConfigurationError",
    "EngineError",
]
