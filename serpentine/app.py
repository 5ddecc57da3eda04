"""Serpentine - command line entry point."""

import argparse
import dataclasses
import logging
import re
import sys
from pathlib import Path

from serpentine.config_manager import ConfigManager
from serpentine.image_processing import (
    ImageProcessor,
    SerpentineError,
    extract_all_color_groups,
    extract_color_group_svg,
)
from serpentine.models import DEFAULT_CONFIG_FILE, ProcessingMode, Settings

logger = logging.getLogger("serpentine")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="serpentine",
        description="Convert an image into zigzag line-art SVG.",
    )
    parser.add_argument("image", help="Input image (path or base64 data URL)")
    parser.add_argument("-o", "--output", type=Path, help="Output SVG path")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ProcessingMode],
        help="Color grouping mode",
    )
    parser.add_argument("--columns", type=int, help="Grid columns")
    parser.add_argument("--rows", type=int, help="Grid rows")
    parser.add_argument("--colors", type=int, help="Gray levels / palette size")
    parser.add_argument("--min-density", type=int)
    parser.add_argument("--max-density", type=int)
    parser.add_argument("--threshold", type=int, help="Brightness threshold (0-255)")
    parser.add_argument("--distance-threshold", type=float)
    parser.add_argument("--monochrome-color")
    parser.add_argument("--curved", action="store_true", default=None)
    parser.add_argument(
        "--per-tile",
        dest="continuous",
        action="store_false",
        default=None,
        help="One path per tile instead of continuous paths",
    )
    parser.add_argument("--invert", action="store_true", default=None)
    parser.add_argument("--seed", type=int, help="K-means seed (posterize)")
    parser.add_argument("--background", help="Background fill color")
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Load settings from a JSON config file (e.g. {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the effective settings back to the config file",
    )
    parser.add_argument("--group", help="Only write this color group key")
    parser.add_argument(
        "--split-dir",
        type=Path,
        help="Also write one SVG per color group into this directory",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


# Maps CLI argument names to Settings fields
_OVERRIDES = {
    "mode": "processing_mode",
    "columns": "columns_count",
    "rows": "rows_count",
    "colors": "colors_amt",
    "min_density": "min_density",
    "max_density": "max_density",
    "threshold": "brightness_threshold",
    "distance_threshold": "path_distance_threshold",
    "monochrome_color": "monochrome_color",
    "curved": "curved_paths",
    "continuous": "continuous_paths",
    "invert": "invert",
    "seed": "kmeans_seed",
}


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    """Apply command line overrides on top of base settings."""
    changes = {}
    for arg_name, field_name in _OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is None:
            continue
        if field_name == "processing_mode":
            value = ProcessingMode(value)
        changes[field_name] = value
    return dataclasses.replace(base, **changes)


def layer_filename(display_name: str) -> str:
    """File name for an exported color group."""
    return re.sub(r"[^a-z0-9]", "-", display_name.lower()) + ".svg"


def main(argv: "list[str] | None" = None) -> int:
    """Run the converter. Returns a process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_manager = ConfigManager(args.config) if args.config else None
    base = config_manager.load() if config_manager else Settings()
    settings = settings_from_args(args, base)

    if args.save_config:
        manager = config_manager or ConfigManager()
        ok, error = manager.save(settings)
        if not ok:
            logger.error("Could not save configuration: %s", error)

    processor = ImageProcessor(settings)
    try:
        image_data = processor.process(args.image)
    except SerpentineError as e:
        logger.error("%s", e)
        return 1

    try:
        svg_content = processor.generate_svg(image_data, background=args.background)
    except SerpentineError as e:
        logger.error("%s", e)
        return 1

    if args.group:
        svg_content = extract_color_group_svg(svg_content, args.group)
        if svg_content is None:
            logger.error("No color group %r in output", args.group)
            return 1

    output = args.output
    if output is None:
        stem = "vector-image" if args.image.startswith("data:") else Path(args.image).stem
        output = Path(f"{stem}.svg")

    try:
        output.write_text(svg_content, encoding="utf-8")
        logger.info("Wrote %s", output)

        if args.split_dir:
            args.split_dir.mkdir(parents=True, exist_ok=True)
            color_groups = image_data.color_groups or {}
            for key, group_svg in extract_all_color_groups(svg_content).items():
                group = color_groups.get(key)
                name = group.display_name if group else key
                path = args.split_dir / layer_filename(name)
                path.write_text(group_svg, encoding="utf-8")
                logger.info("Wrote %s", path)
    except OSError as e:
        logger.error("Could not write output: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
