"""
Command-line entry point: dominant-colours FILENAME [options]

Results go to stdout as text or JSON; progress is logged to stderr.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dominant_colours import __version__
from dominant_colours.config import config
from dominant_colours.services.colors.errors import ColorExtractionError
from dominant_colours.services.colors.extraction import extract_dominant_colors
from dominant_colours.services.colors.formatting import format_json, format_text
from dominant_colours.services.colors.swatches import save_svg_swatch
from dominant_colours.utils.logging import get_logger


LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dominant-colours",
        description="Extract dominant colours from images using k-means clustering",
    )
    parser.add_argument("filename", help="Image file to analyze")
    parser.add_argument("-c", "--colours", type=_positive_int, default=config.DEFAULT_K,
                        help="Number of colours to extract (default: %(default)s)")
    parser.add_argument("-f", "--format", choices=["text", "json"], default="text",
                        help="Output format for colour data (default: %(default)s)")
    parser.add_argument("-s", "--swatch", action="store_true", help="Output SVG swatch")
    parser.add_argument("-o", "--output", default="swatch.svg",
                        help="SVG swatch output file (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=config.SEED,
                        help="Seed for sampling and initialization (default: %(default)s)")
    parser.add_argument("--sample-cap", type=_positive_int, default=config.SAMPLE_CAP,
                        help="Maximum number of pixels to cluster (default: %(default)s)")
    parser.add_argument("--max-iterations", type=_positive_int, default=config.MAX_ITERATIONS,
                        help="K-means iteration bound (default: %(default)s)")
    parser.add_argument("--tolerance", type=float, default=config.TOLERANCE,
                        help="Convergence tolerance (default: %(default)s)")
    parser.add_argument("--degenerate-policy", choices=["raise", "reduce"], default=config.DEGENERATE_POLICY,
                        help="Fail or return fewer colours when the image has too few distinct colours")
    parser.add_argument("--workers", type=_positive_int, default=config.WORKERS,
                        help="Threads used for the assignment step (default: %(default)s)")
    parser.add_argument("--log-level", type=str.upper, default=config.LOG_LEVEL.upper(), choices=LOG_LEVELS,
                        help="Log level for stderr output (default: %(default)s)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not config.validate_k(args.colours):
        parser.error(f"argument -c/--colours: must be at most {config.MAX_K}, got {args.colours}")
    log = get_logger(args.log_level)

    log.info("Loading image...", extra={"filename": args.filename})
    try:
        report = extract_dominant_colors(
            Path(args.filename),
            k=args.colours,
            seed=args.seed,
            sample_cap=args.sample_cap,
            max_iterations=args.max_iterations,
            tolerance=args.tolerance,
            degenerate_policy=args.degenerate_policy,
            workers=args.workers,
        )
    except (ColorExtractionError, ValueError) as e:
        log.error(f"Colour extraction failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = report.result
    if args.format == "json":
        print(format_json(result))
    else:
        print(format_text(result))

    if args.swatch:
        log.info(f"Saving colour swatch to {args.output}...")
        try:
            save_svg_swatch(result, args.output)
        except OSError as e:
            print(f"Error: failed to save colour swatch: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
