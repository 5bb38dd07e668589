from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import piexif

from photoresize.services.errors import MetadataError

# piexif IFD key -> section of piexif.TAGS; the thumbnail IFD ("1st") is skipped
_IFDS = {
	"0th": "Image",
	"Exif": "Exif",
	"GPS": "GPS",
	"Interop": "Interop",
}

_RATIONAL_TYPES = {piexif.TYPES.Rational, piexif.TYPES.SRational}


def _rational_to_str(x: Any) -> str:
	num, den = x
	return f"{num}/{den}"


def _is_rational(x: Any) -> bool:
	return isinstance(x, tuple) and len(x) == 2 and all(isinstance(v, int) for v in x)


def _bytes_to_value(v: bytes) -> str:
	v = v.rstrip(b"\x00")
	try:
		text = v.decode("ascii")
	except UnicodeDecodeError:
		return v.hex()
	if text.isprintable():
		return text
	return v.hex()


def _json_value(value: Any, tag_type: Optional[int]) -> Any:
	if isinstance(value, bytes):
		return _bytes_to_value(value)
	# the stored type can differ from the registered one, so check the shape too
	if tag_type in _RATIONAL_TYPES:
		if _is_rational(value):
			return _rational_to_str(value)
		if isinstance(value, tuple) and value and all(_is_rational(v) for v in value):
			return [_rational_to_str(v) for v in value]
	if isinstance(value, tuple):
		if len(value) == 1:
			return value[0]
		return list(value)
	return value


def exif_to_tags(exif: Dict[str, Any]) -> Dict[str, Any]:
	"""Flatten a piexif.load() result into {tag name: JSON-safe value}."""
	tags: Dict[str, Any] = {}
	for ifd, section in _IFDS.items():
		known = piexif.TAGS.get(section, {})
		for tag_id, value in (exif.get(ifd) or {}).items():
			info = known.get(tag_id)
			name = info["name"] if info else str(tag_id)
			tags[name] = _json_value(value, info["type"] if info else None)
	return tags


def extract_exif(path: Path) -> bytes:
	"""
	Read EXIF tags from a JPEG, TIFF or TIFF-based raw file and return them as
	UTF-8 JSON bytes. Never writes anything.

	Raises MetadataError when the file cannot be opened, has no EXIF block, or
	the block does not decode.
	"""
	try:
		with open(path, "rb") as f:
			data = f.read()
	except OSError as exc:
		raise MetadataError(f"could not open {path}: {exc}") from exc
	try:
		exif = piexif.load(data)
	except Exception as exc:
		raise MetadataError(f"could not decode EXIF in {path}: {exc}") from exc
	try:
		tags = exif_to_tags(exif)
		payload = json.dumps(tags, indent=2).encode("utf-8")
	except (TypeError, ValueError) as exc:
		raise MetadataError(f"could not serialize EXIF from {path}: {exc}") from exc
	if not tags:
		raise MetadataError(f"no EXIF data in {path}")
	return payload


def write_sidecar(payload: bytes, out_path: Path) -> Path:
	out_path.parent.mkdir(parents=True, exist_ok=True)
	with out_path.open("wb") as f:
		f.write(payload)
	return out_path
