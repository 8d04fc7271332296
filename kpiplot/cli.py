"""
kpiplot command line.

Reads an analytics export, renders it and writes the image to the chosen
path. The output format comes from the file extension.
"""

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

from .errors import PipelineError
from .models import RenderOptions
from .pipeline import render_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kpiplot",
        description="Plot a platform analytics export, optionally normalized against its benchmark",
    )
    parser.add_argument(
        "input",
        help="Analytics export (CSV/TSV) with a Date column and KPI columns",
    )
    parser.add_argument(
        "-o", "--output",
        default="plot.png",
        help="Output image path; .png or .svg (default: plot.png)",
    )
    parser.add_argument(
        "-n", "--normalize",
        action="store_true",
        help="Rescale the series against its benchmark column",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the image after writing it",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = RenderOptions(
        input_path=Path(args.input),
        output_path=Path(args.output),
        normalize=args.normalize,
        no_open=args.no_open,
    )

    try:
        result = render_file(options.input_path, options.output_path, normalize=options.normalize)
    except PipelineError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for item in result.warnings:
        logger.warning("%s: %s (%s)", item.issue, item.value, item.action)

    if not options.no_open:
        webbrowser.open(options.output_path.resolve().as_uri())
    return 0


if __name__ == "__main__":
    sys.exit(main())
