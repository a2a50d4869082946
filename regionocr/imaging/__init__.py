"""
Image preprocessing for OCR.

Stages take a Bitmap or DrawableSurface and return a new image; the
runner chains them in the order given by ImageOptions.

Example:
    >>> from regionocr.imaging import process_image
    >>> bitmap = process_image(capture, ImageOptions(remove_borders=True))
"""

from regionocr.imaging.pipeline import (
    STAGES,
    PipelineStep,
    build_image_pipeline,
    process_image,
    run_image_pipeline,
)
from regionocr.imaging.region import extract_largest_white_region
from regionocr.imaging.resize import apply_resize
from regionocr.imaging.stages import (
    apply_adaptive_threshold,
    apply_contrast,
    apply_grayscale,
    apply_median_blur,
    apply_morphology,
)
from regionocr.imaging.surface import to_bitmap

__all__ = [
    # Runner
    "PipelineStep",
    "STAGES",
    "build_image_pipeline",
    "process_image",
    "run_image_pipeline",
    # Stages
    "apply_adaptive_threshold",
    "apply_contrast",
    "apply_grayscale",
    "apply_median_blur",
    "apply_morphology",
    "apply_resize",
    "extract_largest_white_region",
    # Normalization
    "to_bitmap",
]
