"""
Exception classes for RegionOCR.

All RegionOCR exceptions inherit from RegionOCRError,
making it easy to catch all library errors.

Structural failures (InvalidInputError, PixelAccessError) abort a pipeline
run. RuleCompileError and DictionaryNotLoadedError are recovered inside the
text stages and never reach the caller of the text pipeline.

Example:
    >>> try:
    ...     result = pipeline.process(surface)
    ... except regionocr.PixelAccessError as e:
    ...     print(f"Cannot read pixels in stage {e.stage}")
    ... except regionocr.RegionOCRError as e:
    ...     print(f"RegionOCR error: {e}")
"""


class RegionOCRError(Exception):
    """
    Base exception for all RegionOCR errors.

    Catch this to handle any RegionOCR-specific error.
    """

    pass


class StageError(RegionOCRError):
    """Error raised by (or on behalf of) a named image stage."""

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class InvalidInputError(StageError):
    """
    Raised when a stage receives an object it cannot interpret as an image.

    Example:
        >>> apply_grayscale("not an image")
        InvalidInputError: [grayscale] Unsupported input type: str
    """

    pass


class PixelAccessError(StageError):
    """
    Raised when a pixel buffer cannot be read back from a drawable surface.

    This happens for surfaces that are not origin-clean (tainted captures).
    No recovery is attempted inside the pipelines.
    """

    pass


class RuleCompileError(RegionOCRError):
    """
    Raised when a user replacement rule cannot be compiled.

    The replacement stage catches this per rule, skips the rule and
    continues with the remaining ones.
    """

    def __init__(self, find: str, reason: str) -> None:
        super().__init__(f"Invalid replacement rule {find!r}: {reason}")
        self.find = find
        self.reason = reason


class DictionaryNotLoadedError(RegionOCRError):
    """
    Raised when a vocabulary is requested for a language that is not loaded.

    The dictionary correction stage treats this as a soft failure and
    passes the text through unchanged.
    """

    pass


class ConfigurationError(RegionOCRError):
    """
    Raised for invalid configuration.

    Example:
        >>> TextOptions(noise_aggression="extreme")
        ConfigurationError: noise_aggression must be one of ('low', 'medium', 'high')
    """

    pass


class EngineError(RegionOCRError):
    """Raised when the external OCR engine fails or is not installed."""

    pass
