"""
Image pipeline runner.

Runs an ordered list of stages, feeding each stage's output into the
next. An optional per-step hook receives every intermediate image for
debugging; it cannot change the pipeline output.

Example:
    >>> steps = build_image_pipeline(ImageOptions(adaptive_threshold=True))
    >>> [step.name for step in steps]
    ['resize', 'grayscale', 'contrast', 'threshold']
    >>> bitmap = process_image(capture, ImageOptions())
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from regionocr.config import ImageOptions
from regionocr.exceptions import StageError
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
from regionocr.models import Bitmap, ImageSource

logger = logging.getLogger(__name__)

StageFunc = Callable[..., ImageSource]
StepHook = Callable[[str, ImageSource], None]

# Stage names in canonical order
STAGES: dict[str, StageFunc] = {
    "resize": apply_resize,
    "grayscale": apply_grayscale,
    "blur": apply_median_blur,
    "contrast": apply_contrast,
    "threshold": apply_adaptive_threshold,
    "morphology": apply_morphology,
    "region": extract_largest_white_region,
}


@dataclass
class PipelineStep:
    """
    One configured stage.

    Attributes:
        stage: Stage function; called as ``stage(image)`` or
            ``stage(image, options)`` when options are set.
        name: Name used in logs, errors and the debug hook.
        options: Stage options, or None for parameterless stages.
        on_complete: Hook called with ``(name, image)`` after the stage.
    """

    stage: StageFunc
    name: str
    options: Any = None
    on_complete: StepHook | None = None

    def run(self, image: ImageSource) -> ImageSource:
        if self.options is None:
            return self.stage(image)
        return self.stage(image, self.options)


def _notify(step: PipelineStep, image: ImageSource) -> None:
    if step.on_complete is None:
        return
    try:
        step.on_complete(step.name, image)
    except Exception as e:
        logger.warning("Debug hook for stage %s failed: %s", step.name, e)


def run_image_pipeline(source: ImageSource, steps: Sequence[PipelineStep]) -> ImageSource:
    """
    Run ``steps`` in order and return the final image.

    Raises:
        StageError: Re-raised with ``stage`` set to the failing step's name
            when the stage did not name itself.
        Exception: Any other stage failure, re-raised with a
            ``stage: <name>`` note attached.
    """
    current = source
    for step in steps:
        logger.debug("Running image stage %s", step.name)
        try:
            current = step.run(current)
        except StageError as e:
            if e.stage is None:
                e.stage = step.name
            logger.error("Image stage %s failed: %s", step.name, e)
            raise
        except Exception as e:
            e.add_note(f"stage: {step.name}")
            logger.error("Image stage %s failed: %s", step.name, e)
            raise
        _notify(step, current)
    return current


def build_image_pipeline(
    options: ImageOptions, on_step: StepHook | None = None
) -> list[PipelineStep]:
    """
    Build the steps enabled in ``options`` in canonical order.

    Order: resize, grayscale, blur, contrast, threshold, morphology, region.
    """
    enabled = [
        (options.resize, "resize", options.resize_options),
        (options.grayscale, "grayscale", None),
        (options.median_blur, "blur", None),
        (options.contrast, "contrast", options.contrast_options),
        (options.adaptive_threshold, "threshold", options.threshold_options),
        (options.morphology, "morphology", options.morphology_options),
        (options.remove_borders, "region", None),
    ]
    return [
        PipelineStep(stage=STAGES[name], name=name, options=stage_options, on_complete=on_step)
        for is_enabled, name, stage_options in enabled
        if is_enabled
    ]


def process_image(
    source: ImageSource,
    options: ImageOptions | None = None,
    on_step: StepHook | None = None,
) -> Bitmap:
    """
    Run the pipeline described by ``options`` and return a Bitmap.

    A surface left by the last stage is read back here, so a tainted
    result raises PixelAccessError.
    """
    options = options or ImageOptions()
    steps = build_image_pipeline(options, on_step=on_step)
    result = run_image_pipeline(source, steps)
    return to_bitmap(result, "output")
