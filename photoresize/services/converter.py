from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from photoresize.services.errors import ConversionError, MetadataError
from photoresize.services.image_utils import open_image, resize_exact
from photoresize.services.metadata import extract_exif, write_sidecar
from photoresize.services.run_config import RunConfig

logger = logging.getLogger(__name__)


def sidecar_path(dest: Path) -> Path:
	return dest.with_name(dest.name + ".json")


def _write_exif_sidecar(source: Path, dest: Path) -> Optional[Path]:
	try:
		payload = extract_exif(source)
	except MetadataError as exc:
		logger.warning("[exif] could not read data from %s: %s", source, exc)
		return None
	if not payload:
		return None
	out_path = sidecar_path(dest)
	try:
		return write_sidecar(payload, out_path)
	except OSError as exc:
		logger.warning("[exif] could not write json %s: %s", out_path, exc)
		return None


def convert_image(source: Path, dest: Path, config: RunConfig) -> Optional[Path]:
	"""
	Resize one image to the configured resolution and write it to dest.

	The EXIF sidecar is best-effort and is written before the image, so a file
	that fails to decode may still leave a sidecar behind. Returns the sidecar
	path when one was written; raises ConversionError if the image itself could
	not be produced.
	"""
	sidecar = _write_exif_sidecar(source, dest)

	try:
		img = open_image(source)
	except Exception as exc:
		raise ConversionError(f"could not decode {source}: {exc}") from exc

	try:
		resized = resize_exact(img, config.width, config.height)
		data = config.encoder.encode(resized)
	except Exception as exc:
		raise ConversionError(f"could not encode {source} as {config.encoder.format}: {exc}") from exc
	finally:
		img.close()

	try:
		dest.parent.mkdir(parents=True, exist_ok=True)
		with dest.open("wb") as f:
			f.write(data)
	except OSError as exc:
		raise ConversionError(f"could not write {dest}: {exc}") from exc
	logger.debug("[convert] %s -> %s (%dx%d)", source, dest, config.width, config.height)
	return sidecar
