"""
Data models for RegionOCR.

These models are the values that flow through the pipelines:
- Bitmap / DrawableSurface: the two image variants accepted by image stages
- ReplacementRule / DeletionRule / RuleSet: user-defined text rules
- Recognition: the result of the external OCR engine
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

import numpy as np
from PIL import Image

from regionocr.exceptions import ConfigurationError, PixelAccessError

CHANNELS = 4  # R, G, B, A


# =============================================================================
# IMAGES
# =============================================================================


@dataclass(frozen=True)
class Bitmap:
    """
    An RGBA pixel buffer, row-major with a top-left origin.

    The buffer is immutable: stages read a private copy through
    ``to_array()`` and return a new Bitmap, so a caller can keep using its
    input after a pipeline run.

    Example:
        >>> bmp = Bitmap.blank(2, 1, fill=(255, 0, 0, 255))
        >>> bmp.data
        b'\\xff\\x00\\x00\\xff\\xff\\x00\\x00\\xff'
    """

    width: int
    height: int
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Bitmap dimensions must be >= 0, got {self.width}x{self.height}")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Bitmap buffer length {len(self.data)} does not match "
                f"{self.width}x{self.height}x{CHANNELS} = {expected}"
            )

    @classmethod
    def blank(
        cls, width: int, height: int, fill: tuple[int, int, int, int] = (255, 255, 255, 255)
    ) -> Bitmap:
        """Create a bitmap with every pixel set to ``fill``."""
        return cls(width, height, bytes(fill) * (width * height))

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> Bitmap:
        """Create a bitmap from an ``(height, width, 4)`` array."""
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (height, width, 4) array, got shape {pixels.shape}")
        height, width = pixels.shape[:2]
        return cls(width, height, np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())

    @classmethod
    def from_image(cls, image: Image.Image) -> Bitmap:
        """Create a bitmap from a Pillow image (converted to RGBA)."""
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls(rgba.width, rgba.height, rgba.tobytes())

    def to_array(self) -> np.ndarray:
        """Return a writable ``(height, width, 4)`` uint8 copy of the pixels."""
        return (
            np.frombuffer(self.data, dtype=np.uint8)
            .reshape(self.height, self.width, CHANNELS)
            .copy()
        )

    def to_image(self) -> Image.Image:
        """Return the pixels as a Pillow RGBA image."""
        return Image.frombytes("RGBA", (self.width, self.height), self.data)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the RGBA tuple at ``(x, y)``."""
        i = (y * self.width + x) * CHANNELS
        return tuple(self.data[i : i + CHANNELS])  # type: ignore[return-value]


@dataclass
class DrawableSurface:
    """
    A rendering surface wrapping a Pillow image.

    A surface that is not origin-clean (e.g. drawn from a cross-origin
    capture) can still be scaled and drawn, but its pixels cannot be
    read back.

    Attributes:
        image: The Pillow image backing the surface.
        origin_clean: Whether pixel read-back is permitted.
    """

    image: Image.Image
    origin_clean: bool = True

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def read_pixels(self, stage: str | None = None) -> Bitmap:
        """
        Read the surface back into a Bitmap.

        Raises:
            PixelAccessError: If the surface is not origin-clean.
        """
        if not self.origin_clean:
            raise PixelAccessError("Surface is tainted; pixel data cannot be read", stage=stage)
        return Bitmap.from_image(self.image)


ImageSource: TypeAlias = Bitmap | DrawableSurface


# =============================================================================
# TEXT RULES
# =============================================================================


def _flag(data: Mapping[str, Any], snake: str, camel: str, default: bool) -> bool:
    if snake in data:
        return bool(data[snake])
    if camel in data:
        return bool(data[camel])
    return default


@dataclass(frozen=True)
class ReplacementRule:
    """
    A user find/replace rule.

    Attributes:
        find: Literal text, or a pattern when ``is_regex`` is set.
        replace: Replacement text (a ``re`` template for regex rules).
        is_regex: Use ``find`` directly as a Python regular expression.
        case_sensitive: Match case exactly (default is case-insensitive).
        whole_word: Anchor literal rules on word boundaries.
        enabled: Disabled rules are skipped.
    """

    find: str
    replace: str = ""
    is_regex: bool = False
    case_sensitive: bool = False
    whole_word: bool = False
    enabled: bool = True

    @classmethod
    def coerce(cls, value: ReplacementRule | Mapping[str, Any]) -> ReplacementRule:
        """Build a rule from a rule object or its persisted mapping form."""
        if isinstance(value, ReplacementRule):
            return value
        if isinstance(value, Mapping):
            return cls(
                find=str(value.get("find") or ""),
                replace=str(value.get("replace") or ""),
                is_regex=_flag(value, "is_regex", "isRegex", False),
                case_sensitive=_flag(value, "case_sensitive", "caseSensitive", False),
                whole_word=_flag(value, "whole_word", "wholeWord", False),
                enabled=_flag(value, "enabled", "enabled", True),
            )
        raise ConfigurationError(f"Cannot interpret {type(value).__name__} as a replacement rule")


@dataclass(frozen=True)
class DeletionRule:
    """
    A user character-deletion rule.

    With no context flag set the character is removed everywhere. Each
    flag protects occurrences whose two neighbours match its context.
    """

    char: str
    ignore_between_letters: bool = False
    ignore_between_numbers: bool = False
    ignore_inside_words: bool = False

    @property
    def has_context(self) -> bool:
        return (
            self.ignore_between_letters or self.ignore_between_numbers or self.ignore_inside_words
        )

    @classmethod
    def coerce(cls, value: DeletionRule | Mapping[str, Any] | str) -> DeletionRule:
        """Build a rule from a rule object, a mapping, or a legacy bare string."""
        if isinstance(value, DeletionRule):
            return value
        if isinstance(value, str):
            return cls(char=value)
        if isinstance(value, Mapping):
            return cls(
                char=str(value.get("char") or ""),
                ignore_between_letters=_flag(
                    value, "ignore_between_letters", "ignoreBetweenLetters", False
                ),
                ignore_between_numbers=_flag(
                    value, "ignore_between_numbers", "ignoreBetweenNumbers", False
                ),
                ignore_inside_words=_flag(value, "ignore_inside_words", "ignoreInsideWords", False),
            )
        raise ConfigurationError(f"Cannot interpret {type(value).__name__} as a deletion rule")


def coerce_replacements(values: Iterable[Any] | None) -> tuple[ReplacementRule, ...]:
    return tuple(ReplacementRule.coerce(v) for v in values or ())


def coerce_deletions(values: Iterable[Any] | None) -> tuple[DeletionRule, ...]:
    return tuple(DeletionRule.coerce(v) for v in values or ())


@dataclass(frozen=True)
class RuleSet:
    """An ordered snapshot of replacement and deletion rules."""

    replacements: tuple[ReplacementRule, ...] = ()
    deletions: tuple[DeletionRule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "replacements", coerce_replacements(self.replacements))
        object.__setattr__(self, "deletions", coerce_deletions(self.deletions))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> RuleSet:
        data = data or {}
        return cls(
            replacements=data.get("replacements") or (),
            deletions=data.get("deletions") or (),
        )

    def merged(self, other: RuleSet) -> RuleSet:
        """Return this rule set followed by ``other``."""
        return RuleSet(
            replacements=self.replacements + other.replacements,
            deletions=self.deletions + other.deletions,
        )

    def __bool__(self) -> bool:
        return bool(self.replacements or self.deletions)


# =============================================================================
# OCR ENGINE RESULT
# =============================================================================


@dataclass
class Recognition:
    """Text recognized by the OCR engine, with mean confidence in 0.0-1.0."""

    text: str
    confidence: float
