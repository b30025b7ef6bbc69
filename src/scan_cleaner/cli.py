"""Command line interface for the scan cleaner."""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.table import Table

from .batch import BatchCleaner
from .config import (
    ArtifactParams,
    Config,
    get_default_config,
    load_config,
    params_from_dict,
    save_config,
)
from .exceptions import ConfigurationError, ImageLoadError, ScanCleanerError, ValidationError
from .processors import ArtifactCleaningProcessor, CleaningStats, load_image, load_mask, save_image
from .utils.logging_utils import (
    configure_opencv_logging,
    console,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PROCESSING_ERROR = 1
EXIT_INVALID_INPUT = 2

PARAM_OPTIONS = {
    "brightness_threshold": "Minimum HSV value (%%) of an artifact pixel",
    "saturation_threshold": "Maximum HSV saturation (%%) of an artifact pixel",
    "mean_saturation_threshold": "Maximum local mean saturation (%%)",
    "black_pixel_brightness_threshold": "Black ink is darker than this value (%%)",
    "black_pixel_saturation_threshold": "Black ink is less saturated than this (%%)",
    "structuring_element_size": "Diameter of the ink protection disk (odd)",
    "blur_kernel_size": "Window of the local mean saturation (odd)",
    "morph_opening_kernel_size": "Kernel of the morphological opening (odd)",
}


def _load_base_config(args: argparse.Namespace) -> Config:
    if not args.config:
        return get_default_config()
    config = load_config(args.config)
    # command line flags override the file's logging section
    setup_logging_from_config(
        config.logging,
        level=args.log_level,
        log_file=args.log_file,
        use_rich=False if args.no_rich else None,
    )
    return config


def _params_with_overrides(config: Config, args: argparse.Namespace) -> ArtifactParams:
    overrides = {
        name: getattr(args, name)
        for name in PARAM_OPTIONS
        if getattr(args, name, None) is not None
    }
    if not overrides:
        return config.params
    return params_from_dict({**config.params.model_dump(), **overrides})


def render_stats(stats: CleaningStats) -> Table:
    """Rich table of the cleaning counters."""
    table = Table(title="Cleaning statistics")
    table.add_column("Counter")
    table.add_column("Pixels", justify="right")
    for key, value in stats.to_dict().items():
        if key != "thresholds":
            table.add_row(key.replace("_", " "), str(value))
    return table


def cmd_clean(args: argparse.Namespace) -> int:
    config = _load_base_config(args)
    params = _params_with_overrides(config, args)

    raster = load_image(Path(args.input))
    manual_whitelist = None
    if args.whitelist:
        manual_whitelist = load_mask(Path(args.whitelist), raster.shape[:2])

    processor = ArtifactCleaningProcessor(config.output)
    result = processor.process(raster, params=params, manual_whitelist=manual_whitelist)

    input_path = Path(args.input)
    output = Path(args.output) if args.output else input_path.with_name(
        input_path.stem + config.output.cleaned_suffix
    )
    save_image(result.cleaned, output)
    logger.info(f"Saved cleaned image: {output}")

    if args.visualization:
        save_image(result.visualization, Path(args.visualization))
        logger.info(f"Saved visualization: {args.visualization}")

    if args.stats:
        stats_path = Path(args.stats)
        stats_path.parent.mkdir(parents=True, exist_ok=True)
        stats_path.write_text(json.dumps(result.stats.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved statistics: {stats_path}")

    if config.output.save_debug_masks:
        processor.save_debug_images_to_dir(output.parent / "debug", prefix=input_path.stem)

    if not args.quiet:
        console.print(render_stats(result.stats))
    return EXIT_OK


def cmd_batch(args: argparse.Namespace) -> int:
    config = _load_base_config(args)
    params = _params_with_overrides(config, args)
    updates = {"params": params}
    if args.output:
        out = Path(args.output)
        updates["directories"] = config.directories.model_copy(update={
            "output_dir": str(out / "cleaned"),
            "visualization_dir": str(out / "visualization"),
            "stats_dir": str(out / "stats"),
        })
    if args.whitelist_dir:
        directories = updates.get("directories", config.directories)
        updates["directories"] = directories.model_copy(update={"whitelist_dir": args.whitelist_dir})
    config = config.model_copy(update=updates)

    cleaner = BatchCleaner(config, max_workers=args.workers, show_progress=not args.quiet)
    summary = cleaner.process_directory(Path(args.input) if args.input else None)

    if summary["failed_count"]:
        logger.error(f"{summary['failed_count']} of {summary['total']} images failed")
        return EXIT_PROCESSING_ERROR
    return EXIT_OK


def cmd_init_config(args: argparse.Namespace) -> int:
    save_config(get_default_config(), Path(args.path))
    logger.info(f"Wrote default configuration to {args.path}")
    return EXIT_OK


def _add_param_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("detection parameters")
    for name, help_text in PARAM_OPTIONS.items():
        kind = int if name.endswith("_size") else float
        group.add_argument(f"--{name.replace('_', '-')}", dest=name, type=kind, help=help_text)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scan-cleaner",
        description="Erase light, unsaturated scan artifacts while protecting black ink",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--log-file", help="Also write a detailed log to this file")
    p.add_argument("--no-rich", action="store_true", help="Plain text console logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("clean", help="Clean a single image")
    sp.add_argument("input", help="Input image path")
    sp.add_argument("-o", "--output", help="Cleaned PNG path (default: <input>_cleaned.png)")
    sp.add_argument("--visualization", help="Write the red/blue/green visualization here")
    sp.add_argument("--whitelist", help="Manual whitelist mask image (white = protect)")
    sp.add_argument("--stats", help="Write statistics JSON here")
    sp.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    _add_param_arguments(sp)
    sp.set_defaults(func=cmd_clean)

    sp = sub.add_parser("batch", help="Clean every image in a directory")
    sp.add_argument("input", nargs="?", help="Input directory (default: use config)")
    sp.add_argument("-o", "--output", help="Output root directory (default: use config)")
    sp.add_argument("--whitelist-dir", help="Directory of <stem>_whitelist.png masks")
    sp.add_argument("-w", "--workers", type=int, help="Number of worker processes")
    sp.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    _add_param_arguments(sp)
    sp.set_defaults(func=cmd_batch)

    sp = sub.add_parser("init-config", help="Write the default configuration file")
    sp.add_argument("path", help="Destination (.json, .yaml or .yml)")
    sp.set_defaults(func=cmd_init_config)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        args.log_level = logging.DEBUG
    elif args.quiet:
        args.log_level = logging.WARNING
    else:
        args.log_level = None
    level = args.log_level or logging.INFO
    setup_logging(level=level, log_file=args.log_file, use_rich=not args.no_rich,
                  format_style="simple")
    configure_opencv_logging(logging.WARNING)

    try:
        return args.func(args)
    except (ValidationError, ConfigurationError, ImageLoadError) as e:
        logger.error(str(e))
        return EXIT_INVALID_INPUT
    except ScanCleanerError as e:
        logger.error(str(e))
        return EXIT_PROCESSING_ERROR


if __name__ == "__main__":
    sys.exit(main())
