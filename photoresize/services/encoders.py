from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, Optional, Tuple

from PIL import Image

from photoresize.services.image_utils import prepare_for_format

JPEG_QUALITY = 95


@dataclass(frozen=True)
class ImageEncoder:
	format: str
	options: Dict[str, Any] = field(default_factory=dict)

	def encode(self, img: Image.Image) -> bytes:
		img = prepare_for_format(img, self.format)
		buf = BytesIO()
		img.save(buf, format=self.format, **self.options)
		return buf.getvalue()


def jpeg_encoder(quality: int = JPEG_QUALITY) -> ImageEncoder:
	return ImageEncoder("JPEG", {"quality": quality})


def tiff_encoder(compression: str) -> ImageEncoder:
	return ImageEncoder("TIFF", {"compression": compression})


def png_encoder() -> ImageEncoder:
	return ImageEncoder("PNG")


# token -> (encoder, file extension)
OUTPUT_TYPES: Dict[str, Tuple[ImageEncoder, str]] = {
	"jpeg": (jpeg_encoder(), "jpeg"),
	"tiff": (tiff_encoder("tiff_adobe_deflate"), "tif"),
	"tiff-lzw": (tiff_encoder("tiff_lzw"), "tif"),
	"tiff-deflate": (tiff_encoder("tiff_adobe_deflate"), "tif"),
	"tiff-none": (tiff_encoder("raw"), "tif"),
	"png": (png_encoder(), "png"),
}

DEFAULT_OUTPUT_TYPE = "jpeg"


def select_encoder(token: Optional[str]) -> Tuple[ImageEncoder, str]:
	"""Map an output type token to (encoder, extension). Unknown tokens fall back to JPEG."""
	return OUTPUT_TYPES.get(token or "", OUTPUT_TYPES[DEFAULT_OUTPUT_TYPE])
