from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from photoresize.services.encoders import DEFAULT_OUTPUT_TYPE
from photoresize.services.errors import ResolutionError, SourceError
from photoresize.services.resolution import DEFAULT_RESOLUTION
from photoresize.services.run_config import RunConfig, build_run_config, check_source
from photoresize.services.walker import RunSummary, walk_tree

logger = logging.getLogger("photoresize")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2

TYPES_HELP = """\
available image types:
  jpeg, png
  tiff: tiff with Deflate compression (alias for tiff-deflate)
  tiff-lzw: tiff with LZW compression
  tiff-none: tiff with no compression
unknown types fall back to jpeg
"""


def configure_logging(verbose: bool = False) -> None:
	handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(logging.Formatter("%(message)s"))
	logger.handlers[:] = [handler]
	logger.setLevel(logging.DEBUG if verbose else logging.INFO)
	logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="tsresize",
		description="Resize and re-encode every JPEG/TIFF/CR2 image under <source>",
		epilog=TYPES_HELP,
		formatter_class=argparse.RawDescriptionHelpFormatter,
	)
	parser.add_argument("source", nargs="?", help="Directory to scan")
	parser.add_argument("-res", "--res", default=DEFAULT_RESOLUTION, help="Target resolution WxH (default=%(default)s)")
	parser.add_argument("-type", "--type", dest="output_type", default=DEFAULT_OUTPUT_TYPE, help="Output image type (default=%(default)s)")
	parser.add_argument("-output", "--output", default=None, help="Destination directory (default=<source>/<res>)")
	parser.add_argument("-mirror", "--mirror", action="store_true", help="Mirror source subdirectories under the destination")
	parser.add_argument("-strict", "--strict", action="store_true", help="Exit with status 2 if any file failed")
	parser.add_argument("-verbose", "--verbose", action="store_true", help="Debug logging")
	return parser


def prepare_destination(config: RunConfig, explicit: bool) -> None:
	if not explicit:
		logger.info("[path] no <destination>, creating %s", config.dest_root)
	try:
		config.dest_root.mkdir(parents=True, exist_ok=True)
	except OSError as exc:
		logger.warning("[path] could not create %s: %s", config.dest_root, exc)


def log_summary(summary: RunSummary) -> None:
	logger.info("[summary] %d converted, %d failed", summary.succeeded, summary.failed)


def main(argv: Optional[List[str]] = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	configure_logging(args.verbose)

	if not args.source:
		logger.error("[path] no <source> specified")
		parser.print_usage(sys.stderr)
		return EXIT_FATAL
	source = Path(args.source)
	try:
		check_source(source)
	except SourceError as exc:
		logger.error("[path] %s", exc)
		return EXIT_FATAL

	try:
		config = build_run_config(
			source,
			resolution=args.res,
			output_type=args.output_type,
			dest_root=Path(args.output) if args.output else None,
			mirror_tree=args.mirror,
		)
	except ResolutionError as exc:
		logger.error("[res] %s", exc)
		return EXIT_FATAL
	except SourceError as exc:
		logger.error("[path] %s", exc)
		return EXIT_FATAL

	prepare_destination(config, explicit=bool(args.output))
	summary = walk_tree(config)
	log_summary(summary)
	if args.strict and summary.failed:
		return EXIT_PARTIAL
	return EXIT_OK


if __name__ == "__main__":
	sys.exit(main())
