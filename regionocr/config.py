"""
Configuration for RegionOCR pipelines.

Options are resolved once, when the dataclasses are constructed, and are
read-only for the duration of a pipeline run.

Example:
    >>> config = ExtractionConfig.manhwa()
    >>> config.text.manhwa_mode
    True
    >>> config = ExtractionConfig.from_settings({"noise_aggression": "high"})
    >>> config.text.noise_aggression
    'high'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from regionocr.exceptions import ConfigurationError
from regionocr.models import (
    DeletionRule,
    ReplacementRule,
    coerce_deletions,
    coerce_replacements,
)

logger = logging.getLogger(__name__)

NoiseAggression = Literal["low", "medium", "high"]
MorphologyType = Literal["open", "close", "erode", "dilate"]

NOISE_AGGRESSION_LEVELS = ("low", "medium", "high")
MORPHOLOGY_TYPES = ("open", "close", "erode", "dilate")
PROFILES = ("default", "manhwa")


# =============================================================================
# IMAGE STAGE OPTIONS
# =============================================================================


@dataclass(frozen=True)
class ResizeOptions:
    """Scale factor for the resize stage."""

    scale: float = 2.0

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ConfigurationError(f"scale must be > 0, got {self.scale}")


@dataclass(frozen=True)
class ContrastOptions:
    """
    Options for the contrast stretch.

    ``val`` is kept for compatibility with stored settings; the stretch
    derives its range from the luminance histogram.
    """

    val: int = 50


@dataclass(frozen=True)
class ThresholdOptions:
    """Adaptive threshold window size and offset from the local mean."""

    block_size: int = 15
    constant: float = 10

    def __post_init__(self) -> None:
        if self.block_size < 1 or self.block_size % 2 == 0:
            raise ConfigurationError(
                f"block_size must be a positive odd number, got {self.block_size}"
            )


@dataclass(frozen=True)
class MorphologyOptions:
    """Morphological operation and square kernel radius."""

    type: MorphologyType = "open"
    kernel_size: int = 1

    def __post_init__(self) -> None:
        if self.type not in MORPHOLOGY_TYPES:
            raise ConfigurationError(
                f"morphology type must be one of {MORPHOLOGY_TYPES}, got {self.type!r}"
            )
        if self.kernel_size < 0:
            raise ConfigurationError(f"kernel_size must be >= 0, got {self.kernel_size}")


@dataclass
class ImageOptions:
    """
    Toggles and parameters for the image preprocessing pipeline.

    Defaults follow the default profile: upscale, grayscale and contrast
    stretch on; blur, thresholding, morphology and border removal off.
    """

    resize: bool = True
    grayscale: bool = True
    contrast: bool = True
    median_blur: bool = False
    adaptive_threshold: bool = False
    morphology: bool = False
    remove_borders: bool = False

    resize_options: ResizeOptions = field(default_factory=ResizeOptions)
    contrast_options: ContrastOptions = field(default_factory=ContrastOptions)
    threshold_options: ThresholdOptions = field(default_factory=ThresholdOptions)
    morphology_options: MorphologyOptions = field(default_factory=MorphologyOptions)


# =============================================================================
# TEXT OPTIONS
# =============================================================================


@dataclass
class TextOptions:
    """
    Configuration for the text cleaning pipeline.

    Each stage has its own switch; a disabled stage does not run at all.
    Rule lists are frozen into tuples so a run sees a stable snapshot.

    Attributes:
        noise_cleaning: Remove border spikes and stray symbols.
        noise_aggression: "low", "medium" or "high".
        normalize_whitespace: Collapse spacing and fix punctuation spacing.
        manhwa_mode: Repair letter-spaced words and reflow bubble text.
        regex_correction: Always-on structural fixes (spacing, l/1 -> I, bars).
        dictionary_correction: Replace unknown words with close vocabulary words.
        dictionary_max_distance: Maximum edit distance for a replacement.
        dictionary_ignore_caps: Leave ALL-CAPS tokens untouched.
        language: Vocabulary language code (Tesseract style, e.g. "eng").
        user_rules: Apply deletions and replacements.
        text_reconstruction: Merge lines and stabilize sentences.
        reconstruct_merge_lines: Join single newlines inside paragraphs.
        reconstruct_stabilize: Join "word- word" hyphenation breaks.
        replacements: Find/replace rules, applied in order.
        deletions: Character deletion rules, applied in order.
    """

    noise_cleaning: bool = True
    noise_aggression: NoiseAggression = "medium"
    normalize_whitespace: bool = True
    manhwa_mode: bool = False
    regex_correction: bool = True
    dictionary_correction: bool = False
    dictionary_max_distance: int = 1
    dictionary_ignore_caps: bool = True
    language: str = "eng"
    user_rules: bool = True
    text_reconstruction: bool = True
    reconstruct_merge_lines: bool = True
    reconstruct_stabilize: bool = True
    replacements: tuple[ReplacementRule, ...] = ()
    deletions: tuple[DeletionRule, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration and freeze rule lists."""
        if self.noise_aggression not in NOISE_AGGRESSION_LEVELS:
            raise ConfigurationError(
                f"noise_aggression must be one of {NOISE_AGGRESSION_LEVELS}, "
                f"got {self.noise_aggression!r}"
            )
        if self.dictionary_max_distance < 1:
            raise ConfigurationError(
                f"dictionary_max_distance must be >= 1, got {self.dictionary_max_distance}"
            )
        self.replacements = coerce_replacements(self.replacements)
        self.deletions = coerce_deletions(self.deletions)


# =============================================================================
# ENGINE OPTIONS
# =============================================================================


@dataclass
class EngineOptions:
    """Options forwarded to the OCR engine."""

    lang: str = "eng"
    psm: int = 3
    oem: int = 1
    whitelist: str = ""
    auto_psm: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.psm <= 13:
            raise ConfigurationError(f"psm must be between 0 and 13, got {self.psm}")


# =============================================================================
# TOP-LEVEL CONFIG
# =============================================================================


@dataclass
class ExtractionConfig:
    """
    Complete configuration for one extraction: image, engine and text.

    Example:
        >>> config = ExtractionConfig(text=TextOptions(dictionary_correction=True))
        >>> pipeline = OCRPipeline(config=config)
    """

    image: ImageOptions = field(default_factory=ImageOptions)
    text: TextOptions = field(default_factory=TextOptions)
    engine: EngineOptions = field(default_factory=EngineOptions)
    debug: bool = False

    @classmethod
    def default(cls) -> ExtractionConfig:
        """General-purpose settings."""
        return cls()

    @classmethod
    def manhwa(cls) -> ExtractionConfig:
        """Settings tuned for comic speech bubbles."""
        return cls(
            image=ImageOptions(
                resize=True,
                grayscale=True,
                contrast=True,
                median_blur=False,
                adaptive_threshold=False,  # hurts detailed art backgrounds
            ),
            text=TextOptions(
                dictionary_correction=False,  # character names are often unique
                manhwa_mode=True,
                reconstruct_merge_lines=True,
                reconstruct_stabilize=True,
            ),
        )

    @classmethod
    def profile(cls, name: str) -> ExtractionConfig:
        """Return a named preset ("default" or "manhwa")."""
        if name == "default":
            return cls.default()
        if name == "manhwa":
            return cls.manhwa()
        raise ConfigurationError(f"Unknown profile {name!r}; expected one of {PROFILES}")

    @classmethod
    def from_settings(
        cls, settings: Mapping[str, Any], base: ExtractionConfig | None = None
    ) -> ExtractionConfig:
        """
        Build a config from flat settings keys, on top of ``base``.

        Keys follow the stored settings shape (``preprocess_resize``,
        ``noise_aggression``, ``dict_strength``, ``tess_psm``, ...). Missing
        keys keep the value from ``base`` (the default profile if omitted).

        Args:
            settings: Flat mapping of setting names to values.
            base: Config supplying values for missing keys.

        Returns:
            A new ExtractionConfig.
        """
        base = base or cls.default()
        img, txt, eng = base.image, base.text, base.engine

        def get(key: str, current: Any) -> Any:
            value = settings.get(key)
            return current if value is None else value

        scale = get("preprocess_scale", img.resize_options.scale)
        image = ImageOptions(
            resize=bool(get("preprocess_resize", img.resize)),
            grayscale=bool(get("preprocess_grayscale", img.grayscale)),
            contrast=bool(get("preprocess_contrast", img.contrast)),
            median_blur=bool(get("preprocess_blur", img.median_blur)),
            adaptive_threshold=bool(get("preprocess_threshold", img.adaptive_threshold)),
            morphology=bool(get("preprocess_morphology", img.morphology)),
            remove_borders=bool(get("preprocess_borders", img.remove_borders)),
            resize_options=ResizeOptions(scale=float(scale)),
            contrast_options=ContrastOptions(
                val=int(get("contrast_val", img.contrast_options.val))
            ),
            threshold_options=ThresholdOptions(
                block_size=int(get("threshold_block_size", img.threshold_options.block_size)),
                constant=float(get("threshold_constant", img.threshold_options.constant)),
            ),
            morphology_options=MorphologyOptions(
                type=get("morphology_type", img.morphology_options.type),
                kernel_size=int(get("morphology_kernel_size", img.morphology_options.kernel_size)),
            ),
        )
        text = TextOptions(
            noise_cleaning=bool(get("clean_noise", txt.noise_cleaning)),
            noise_aggression=get("noise_aggression", txt.noise_aggression),
            normalize_whitespace=bool(get("clean_normalize", txt.normalize_whitespace)),
            manhwa_mode=bool(get("manhwa_mode", txt.manhwa_mode)),
            regex_correction=bool(get("clean_regex", txt.regex_correction)),
            dictionary_correction=bool(get("clean_dict", txt.dictionary_correction)),
            dictionary_max_distance=int(get("dict_strength", txt.dictionary_max_distance)),
            dictionary_ignore_caps=bool(get("dict_ignore_caps", txt.dictionary_ignore_caps)),
            language=str(get("tess_lang", txt.language)),
            user_rules=bool(get("clean_user", txt.user_rules)),
            text_reconstruction=bool(get("reconstruct_text", txt.text_reconstruction)),
            reconstruct_merge_lines=bool(get("reconstruct_merge", txt.reconstruct_merge_lines)),
            reconstruct_stabilize=bool(get("reconstruct_stabilize", txt.reconstruct_stabilize)),
            replacements=get("user_replacements", txt.replacements),
            deletions=get("user_deletions", txt.deletions),
        )
        engine = EngineOptions(
            lang=str(get("tess_lang", eng.lang)),
            psm=int(get("tess_psm", eng.psm)),
            oem=int(get("tess_oem", eng.oem)),
            whitelist=str(get("tess_whitelist", eng.whitelist)),
            auto_psm=bool(get("auto_psm", eng.auto_psm)),
        )
        return cls(
            image=image,
            text=text,
            engine=engine,
            debug=bool(get("debug_mode", base.debug)),
        )

    @classmethod
    def load(cls, path: Path | str) -> ExtractionConfig:
        """
        Load a config from a YAML file.

        The file holds flat settings keys, optionally a ``profile`` naming
        the preset to start from. A ``rules`` section, if present, is left
        for ``RuleBook.load``.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the YAML is malformed or not a mapping.
        """
        path = Path(path)
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Malformed config file {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        base = cls.profile(str(data.get("profile", "default")))
        config = cls.from_settings(data, base=base)
        logger.debug("Loaded config from %s (profile=%s)", path, data.get("profile", "default"))
        return config
