from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import piexif
import pytest
from PIL import Image

from photoresize.services.run_config import RunConfig, build_run_config


def sample_exif() -> bytes:
	return piexif.dump({
		"0th": {
			piexif.ImageIFD.Make: b"Canon",
			piexif.ImageIFD.Model: b"EOS 5D Mark II",
		},
		"Exif": {
			piexif.ExifIFD.ExposureTime: (1, 125),
			piexif.ExifIFD.ISOSpeedRatings: 400,
		},
	})


def make_image(
	path: Path,
	size: Tuple[int, int] = (64, 48),
	fmt: str = "JPEG",
	exif: Optional[bytes] = None,
	mode: str = "RGB",
) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	if mode == "RGB":
		# gradients so resampling has something to do
		ramp = Image.linear_gradient("L").resize(size)
		img = Image.merge("RGB", (ramp, ramp.transpose(Image.Transpose.ROTATE_180), Image.new("L", size, 128)))
	elif mode == "P":
		img = Image.new("RGB", size, (10, 20, 30)).convert("P")
	else:
		img = Image.new(mode, size)
	kwargs = {}
	if exif is not None:
		kwargs["exif"] = exif
	img.save(path, format=fmt, **kwargs)
	return path


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
	src = tmp_path / "src"
	src.mkdir()
	return src


@pytest.fixture
def make_config(tmp_path: Path):
	def _make(source: Path, res: str = "32x16", output_type: str = "png", mirror: bool = False) -> RunConfig:
		return build_run_config(
			source,
			resolution=res,
			output_type=output_type,
			dest_root=tmp_path / "out",
			mirror_tree=mirror,
		)

	return _make


@pytest.fixture(autouse=True)
def _reset_cli_logging():
	yield
	cli_logger = logging.getLogger("photoresize")
	cli_logger.handlers[:] = []
	cli_logger.propagate = True
