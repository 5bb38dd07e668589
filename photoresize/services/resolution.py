from __future__ import annotations

from typing import Tuple

from photoresize.services.errors import ResolutionError

DEFAULT_RESOLUTION = "1920x1080"


def _parse_dimension(token: str, text: str) -> int:
	if not token.isascii() or not token.isdigit():
		raise ResolutionError(f"invalid dimension {token!r} in resolution {text!r}")
	try:
		return int(token)
	except ValueError as exc:
		raise ResolutionError(f"invalid dimension {token!r} in resolution {text!r}") from exc


def parse_resolution(text: str) -> Tuple[int, int]:
	"""
	Parse a "<width>x<height>" string into a (width, height) pair.

	Only the first two "x"-separated tokens are read; anything after them is
	ignored, so "640x480x2" gives (640, 480).
	"""
	parts = (text or "").split("x")
	if len(parts) < 2:
		raise ResolutionError(f"resolution {text!r} is not of the form <width>x<height>")
	width, height = (_parse_dimension(p, text) for p in parts[:2])
	return (width, height)
