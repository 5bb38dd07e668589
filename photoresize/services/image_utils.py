from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import rawpy
from PIL import Image

logger = logging.getLogger(__name__)

RAW_EXTENSIONS = {".cr2"}

# Modes Pillow can Lanczos-resample and every output encoder can store.
_RESAMPLE_MODES = {"L", "LA", "RGB", "RGBA"}
_HIGH_DEPTH_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N", "F"}


def open_image(path: Path) -> Image.Image:
	"""
	Decode an image fully into memory.

	Raw camera files go through rawpy first (demosaiced to 8-bit RGB); if that
	fails, Pillow gets a try, which covers CR2 files Pillow reads as TIFF.
	"""
	if path.suffix.lower() in RAW_EXTENSIONS:
		try:
			with rawpy.imread(str(path)) as raw:
				rgb = raw.postprocess()
			return Image.fromarray(rgb)
		except Exception as exc:
			logger.debug("[convert] rawpy could not read %s (%s), trying Pillow", path, exc)
	with Image.open(path) as img:
		img.load()
		return img


def to_8bit(img: Image.Image) -> Image.Image:
	arr = np.asarray(img).astype(np.float32)
	scale = 65535.0
	if img.mode == "F" and (arr.size == 0 or float(arr.max()) <= 1.0):
		scale = 1.0
	out = (np.clip(arr / scale, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
	return Image.fromarray(out)


def to_resample_mode(img: Image.Image) -> Image.Image:
	"""Return an image in a mode that resamples with the requested filter."""
	if img.mode in _RESAMPLE_MODES:
		return img
	if img.mode in _HIGH_DEPTH_MODES:
		return to_8bit(img)
	if img.mode == "1":
		return img.convert("L")
	if img.mode in ("P", "PA"):
		has_alpha = img.mode == "PA" or "transparency" in img.info
		return img.convert("RGBA" if has_alpha else "RGB")
	return img.convert("RGB")


def prepare_for_format(img: Image.Image, fmt: str) -> Image.Image:
	# JPEG has no alpha channel
	if fmt == "JPEG":
		if img.mode == "RGBA":
			return img.convert("RGB")
		if img.mode == "LA":
			return img.convert("L")
	return img


def resize_exact(img: Image.Image, width: int, height: int) -> Image.Image:
	"""Stretch to exactly width x height; aspect ratio is not preserved."""
	img = to_resample_mode(img)
	if img.size == (width, height):
		return img.copy()
	return img.resize((width, height), Image.Resampling.LANCZOS)
