from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from photoresize.services.encoders import DEFAULT_OUTPUT_TYPE, ImageEncoder, select_encoder
from photoresize.services.errors import ResolutionError, SourceError
from photoresize.services.resolution import DEFAULT_RESOLUTION, parse_resolution

ACCEPTED_EXTENSIONS = frozenset({"jpeg", "jpg", "tif", "tiff", "cr2"})


@dataclass(frozen=True)
class RunConfig:
	source_root: Path
	dest_root: Path
	width: int
	height: int
	output_type: str
	extension: str
	encoder: ImageEncoder
	mirror_tree: bool = False

	def __post_init__(self) -> None:
		if self.width <= 0 or self.height <= 0:
			raise ResolutionError(f"target resolution {self.width}x{self.height} must be positive")

	@property
	def resolution(self) -> str:
		return f"{self.width}x{self.height}"


def check_source(source: Path) -> None:
	if not source.exists():
		raise SourceError(f"<source> {source} does not exist.")
	if not source.is_dir():
		raise SourceError(f"<source> {source} is not a directory.")
	if not os.access(source, os.R_OK | os.X_OK):
		raise SourceError(f"<source> {source} is not readable.")


def default_dest_root(source_root: Path, resolution: str) -> Path:
	return source_root / resolution


def build_run_config(
	source_root: Path,
	resolution: str = DEFAULT_RESOLUTION,
	output_type: Optional[str] = DEFAULT_OUTPUT_TYPE,
	dest_root: Optional[Path] = None,
	mirror_tree: bool = False,
) -> RunConfig:
	"""
	Build the immutable configuration for one run.

	Raises ResolutionError for a malformed or non-positive resolution and
	SourceError when the destination is the source root itself. When no
	destination is given it defaults to <source_root>/<resolution>, using the
	resolution string exactly as it was passed in.
	"""
	width, height = parse_resolution(resolution)
	encoder, extension = select_encoder(output_type)
	if dest_root is None:
		dest_root = default_dest_root(source_root, resolution)
	elif os.path.realpath(dest_root) == os.path.realpath(source_root):
		raise SourceError(f"<destination> {dest_root} is the source directory; files would be overwritten")
	return RunConfig(
		source_root=source_root,
		dest_root=dest_root,
		width=width,
		height=height,
		output_type=output_type or "",
		extension=extension,
		encoder=encoder,
		mirror_tree=mirror_tree,
	)
