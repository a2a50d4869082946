"""
Command-line interface.

Usage:
    regionocr image capture.png [--profile manhwa] [--config settings.yaml]
    regionocr text raw.txt [--aggression high] [--dictionary]
    regionocr preprocess capture.png prepared.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from PIL import Image

from regionocr.config import PROFILES, ExtractionConfig
from regionocr.exceptions import RegionOCRError
from regionocr.imaging import process_image, to_bitmap
from regionocr.models import Bitmap
from regionocr.ocr import OCRPipeline
from regionocr.rules import RuleBook, scope_for_origin

logger = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> tuple[ExtractionConfig, RuleBook]:
    if args.config:
        config = ExtractionConfig.load(args.config)
        rules = RuleBook.load(args.config)
    else:
        config = ExtractionConfig.profile(args.profile)
        rules = RuleBook()

    engine_changes: dict[str, object] = {}
    text_changes: dict[str, object] = {}
    if getattr(args, "lang", None):
        engine_changes["lang"] = text_changes["language"] = args.lang
    if getattr(args, "psm", None) is not None:
        engine_changes.update(psm=args.psm, auto_psm=False)
    if getattr(args, "auto_psm", False):
        engine_changes["auto_psm"] = True
    if getattr(args, "aggression", None):
        text_changes["noise_aggression"] = args.aggression
    if getattr(args, "dictionary", False):
        text_changes["dictionary_correction"] = True

    # replace() re-runs validation
    config.engine = replace(config.engine, **engine_changes)
    config.text = replace(config.text, **text_changes)
    return config, rules


def _open_bitmap(path: Path) -> Bitmap:
    with Image.open(path) as image:
        return Bitmap.from_image(image)


def _cmd_image(args: argparse.Namespace) -> int:
    config, rules = _load(args)
    config.debug = args.debug_dir is not None
    pipeline = OCRPipeline(config=config, rules=rules)

    result = pipeline.process(_open_bitmap(args.path), scope=scope_for_origin(args.origin))

    if args.debug_dir is not None:
        args.debug_dir.mkdir(parents=True, exist_ok=True)
        for i, (name, image) in enumerate(result.debug_steps):
            out = args.debug_dir / f"{i:02d}_{name}.png"
            to_bitmap(image, name).to_image().save(out)
            logger.info("Wrote %s", out)

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    print(result.original_text if args.raw else result.text)
    logger.info(
        "psm=%d confidence=%.2f time=%.0fms",
        result.psm,
        result.confidence,
        result.processing_time_ms,
    )
    return 0


def _cmd_text(args: argparse.Namespace) -> int:
    config, rules = _load(args)
    pipeline = OCRPipeline(config=config, rules=rules)

    if args.path is None or str(args.path) == "-":
        raw = sys.stdin.read()
    else:
        raw = args.path.read_text(encoding="utf-8")

    warnings: list[str] = []
    print(pipeline.process_text(raw, scope=scope_for_origin(args.origin), warnings=warnings))
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


def _cmd_preprocess(args: argparse.Namespace) -> int:
    config, _rules = _load(args)
    bitmap = process_image(_open_bitmap(args.path), config.image)
    bitmap.to_image().save(args.output)
    logger.info("Wrote %dx%d image to %s", bitmap.width, bitmap.height, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regionocr", description="OCR screen-region captures and clean the text"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--profile", choices=PROFILES, default="default", help="Preset to use")
    common.add_argument("--config", type=Path, help="YAML settings file (overrides --profile)")

    text_opts = argparse.ArgumentParser(add_help=False)
    text_opts.add_argument("--origin", help="Page origin selecting site-scoped rules")
    text_opts.add_argument("--aggression", choices=("low", "medium", "high"))
    text_opts.add_argument("--dictionary", action="store_true", help="Enable dictionary correction")
    text_opts.add_argument("--lang", help="Tesseract language code (e.g. eng)")

    sub = parser.add_subparsers(dest="command", required=True)

    image = sub.add_parser("image", parents=[common, text_opts], help="Extract text from an image")
    image.add_argument("path", type=Path)
    image.add_argument("--psm", type=int, help="Tesseract page segmentation mode")
    image.add_argument("--auto-psm", action="store_true", help="Pick PSM from aspect ratio")
    image.add_argument("--debug-dir", type=Path, help="Write intermediate images here")
    image.add_argument("--raw", action="store_true", help="Print text before cleaning")
    image.set_defaults(func=_cmd_image)

    text = sub.add_parser("text", parents=[common, text_opts], help="Clean raw OCR text")
    text.add_argument("path", type=Path, nargs="?", help="Text file (stdin if omitted)")
    text.set_defaults(func=_cmd_text)

    prep = sub.add_parser("preprocess", parents=[common], help="Write the preprocessed image")
    prep.add_argument("path", type=Path)
    prep.add_argument("output", type=Path)
    prep.set_defaults(func=_cmd_preprocess)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (RegionOCRError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
