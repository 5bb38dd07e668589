from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from photoresize.services.converter import convert_image
from photoresize.services.errors import ConversionError
from photoresize.services.run_config import ACCEPTED_EXTENSIONS, RunConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
	source: Path
	destination: Path
	error: Optional[str] = None
	sidecar: Optional[Path] = None

	@property
	def ok(self) -> bool:
		return self.error is None


@dataclass
class RunSummary:
	results: List[FileResult] = field(default_factory=list)
	walk_errors: List[str] = field(default_factory=list)

	@property
	def total(self) -> int:
		return len(self.results)

	@property
	def succeeded(self) -> int:
		return sum(1 for r in self.results if r.ok)

	@property
	def failed(self) -> int:
		return self.total - self.succeeded

	def as_dict(self) -> Dict[str, Any]:
		return {
			"total": self.total,
			"succeeded": self.succeeded,
			"failed": self.failed,
			"converted": [str(r.destination) for r in self.results if r.ok],
			"sidecars": [str(r.sidecar) for r in self.results if r.sidecar is not None],
			"errors": [{"source": str(r.source), "error": r.error} for r in self.results if not r.ok],
			"walk_errors": list(self.walk_errors),
		}


def file_extension(path: Path) -> str:
	return path.suffix[1:].lower()


def is_accepted(path: Path) -> bool:
	return file_extension(path) in ACCEPTED_EXTENSIONS


def destination_for(source: Path, config: RunConfig) -> Path:
	name = f"{source.stem}.{config.extension}"
	if config.mirror_tree:
		rel_dir = source.parent.relative_to(config.source_root)
		return config.dest_root / rel_dir / name
	return config.dest_root / name


def display_path(path: Path) -> str:
	try:
		return str(path.resolve())
	except OSError:
		return str(path)


def iter_source_files(config: RunConfig, walk_errors: List[str]) -> Iterator[Path]:
	"""
	Yield every regular file under the source root in sorted order.

	The destination directory is pruned when it sits inside the source tree so
	a run never re-reads its own output.
	"""
	skip_dir = os.path.realpath(config.dest_root)

	def onerror(exc: OSError) -> None:
		walk_errors.append(str(exc))

	for dirpath, dirnames, filenames in os.walk(config.source_root, onerror=onerror):
		dirnames[:] = sorted(
			d for d in dirnames if os.path.realpath(os.path.join(dirpath, d)) != skip_dir
		)
		for name in sorted(filenames):
			path = Path(dirpath) / name
			if path.is_file():
				yield path


def process_file(source: Path, config: RunConfig, echo: bool = True) -> FileResult:
	dest = destination_for(source, config)
	try:
		if dest.exists() and dest.samefile(source):
			raise ConversionError(f"refusing to overwrite source {source}")
		sidecar = convert_image(source, dest, config)
	except ConversionError as exc:
		logger.error("[convert] %s", exc)
		return FileResult(source=source, destination=dest, error=str(exc))
	except Exception as exc:
		logger.error("[convert] %s: unexpected error: %s", source, exc)
		return FileResult(source=source, destination=dest, error=f"{source}: {exc}")
	if echo:
		print(display_path(dest), flush=True)
	return FileResult(source=source, destination=dest, sidecar=sidecar)


def walk_tree(config: RunConfig, echo: bool = True) -> RunSummary:
	"""
	Convert every accepted file under config.source_root, one at a time.

	With echo set, each written destination is printed to stdout.
	"""
	summary = RunSummary()
	for path in iter_source_files(config, summary.walk_errors):
		if not is_accepted(path):
			continue
		summary.results.append(process_file(path, config, echo))
	for err in summary.walk_errors:
		logger.error("[walk] %s", err)
	return summary
