import logging
import os
from dataclasses import replace
from pathlib import Path

from PIL import Image, TiffImagePlugin, TiffTags

from photoresize.services import walker
from photoresize.services.walker import destination_for, is_accepted, process_file, walk_tree

from conftest import make_image


def test_accepted_extensions_are_case_insensitive():
	for name in ["a.jpg", "a.JPG", "a.jpeg", "a.Tif", "a.TIFF", "a.cr2", "a.CR2"]:
		assert is_accepted(Path(name))
	for name in ["a.png", "a.txt", "a", ".jpg", "a.jpg.bak"]:
		assert not is_accepted(Path(name))


def test_destination_is_flat_by_default(source_dir, make_config):
	config = make_config(source_dir, output_type="tiff")
	assert destination_for(source_dir / "x" / "y" / "photo.JPG", config) == config.dest_root / "photo.tif"
	assert destination_for(source_dir / "my.holiday.jpeg", config) == config.dest_root / "my.holiday.tif"


def test_destination_mirrors_subdirectories(source_dir, make_config):
	config = make_config(source_dir, mirror=True)
	assert destination_for(source_dir / "x" / "y" / "photo.jpg", config) == config.dest_root / "x" / "y" / "photo.png"


def test_every_accepted_file_is_converted_or_logged(source_dir, make_config, caplog, capsys):
	good = make_image(source_dir / "a.jpg")
	nested = make_image(source_dir / "sub" / "b.TIFF", fmt="TIFF")
	bad = source_dir / "sub" / "c.jpeg"
	bad.write_bytes(b"not an image")
	(source_dir / "notes.txt").write_text("hello")
	config = make_config(source_dir)
	config.dest_root.mkdir()

	with caplog.at_level(logging.INFO):
		summary = walk_tree(config)

	assert summary.total == 3
	assert summary.succeeded == 2
	assert summary.failed == 1
	assert (config.dest_root / "a.png").exists()
	assert (config.dest_root / "b.png").exists()
	assert not (config.dest_root / "c.png").exists()

	failure = [r for r in summary.results if not r.ok][0]
	assert failure.source == bad
	assert any(r.getMessage().startswith("[convert]") and str(bad) in r.getMessage() for r in caplog.records)
	assert not any("notes.txt" in r.getMessage() for r in caplog.records)

	printed = capsys.readouterr().out.splitlines()
	assert printed == [str((config.dest_root / "a.png").resolve()), str((config.dest_root / "b.png").resolve())]
	assert good.exists() and nested.exists()


def test_destination_inside_source_is_not_walked(source_dir, make_config):
	make_image(source_dir / "a.jpg")
	config = make_config(source_dir, output_type="jpeg")
	config = replace(config, dest_root=source_dir / "32x16")
	config.dest_root.mkdir()
	make_image(config.dest_root / "old.jpeg")

	summary = walk_tree(config)

	assert [r.source.name for r in summary.results] == ["a.jpg"]
	assert not (config.dest_root / "old.jpeg.jpeg").exists()


def test_same_name_last_in_traversal_order_wins(source_dir, make_config):
	make_image(source_dir / "one" / "pic.jpg", size=(10, 10))
	make_image(source_dir / "two" / "pic.jpg", size=(10, 10))
	config = make_config(source_dir)

	summary = walk_tree(config)

	assert [r.source for r in summary.results] == [source_dir / "one" / "pic.jpg", source_dir / "two" / "pic.jpg"]
	assert summary.results[0].destination == summary.results[1].destination


def test_mirror_keeps_same_names_apart(source_dir, make_config):
	make_image(source_dir / "one" / "pic.jpg")
	make_image(source_dir / "two" / "pic.jpg")
	config = make_config(source_dir, mirror=True)

	walk_tree(config)

	assert (config.dest_root / "one" / "pic.png").exists()
	assert (config.dest_root / "two" / "pic.png").exists()


def test_outputs_are_identical_across_runs(source_dir, make_config):
	make_image(source_dir / "a.jpg", size=(120, 90))
	make_image(source_dir / "b.tif", size=(90, 120), fmt="TIFF")
	for output_type in ("jpeg", "png", "tiff"):
		config = make_config(source_dir, output_type=output_type)
		walk_tree(config)
		first = {p.name: p.read_bytes() for p in config.dest_root.iterdir()}
		for p in config.dest_root.iterdir():
			p.unlink()
		walk_tree(config)
		second = {p.name: p.read_bytes() for p in config.dest_root.iterdir()}
		assert first == second
		for p in config.dest_root.iterdir():
			p.unlink()


def test_summary_as_dict(source_dir, make_config):
	make_image(source_dir / "a.jpg")
	(source_dir / "b.jpg").write_bytes(b"")
	config = make_config(source_dir)

	data = walk_tree(config).as_dict()

	assert data["total"] == 2
	assert data["succeeded"] == 1
	assert data["failed"] == 1
	assert data["errors"][0]["source"] == str(source_dir / "b.jpg")
	assert data["walk_errors"] == []


def test_cr2_falls_back_to_pillow(source_dir, make_config):
	# a TIFF in disguise: rawpy rejects it, Pillow reads it
	make_image(source_dir / "IMG_0001.CR2", fmt="TIFF")
	config = make_config(source_dir)

	summary = walk_tree(config)

	assert summary.succeeded == 1
	with Image.open(config.dest_root / "IMG_0001.png") as img:
		assert img.size == (32, 16)


def test_unexpected_error_is_recorded_and_walk_continues(source_dir, make_config, caplog, monkeypatch):
	make_image(source_dir / "a.jpg")
	make_image(source_dir / "b.jpg")
	config = make_config(source_dir)
	real_convert = walker.convert_image

	def flaky_convert(source, dest, cfg):
		if source.name == "a.jpg":
			raise TypeError("boom")
		return real_convert(source, dest, cfg)

	monkeypatch.setattr(walker, "convert_image", flaky_convert)
	with caplog.at_level(logging.ERROR):
		summary = walk_tree(config)

	assert [r.ok for r in summary.results] == [False, True]
	assert (config.dest_root / "b.png").exists()
	assert any(r.getMessage().startswith("[convert]") and "a.jpg" in r.getMessage() for r in caplog.records)


def test_short_valued_rational_exif_does_not_stop_walk(source_dir, make_config):
	info = TiffImagePlugin.ImageFileDirectory_v2()
	info.tagtype[318] = TiffTags.SHORT
	info[318] = 5
	Image.new("RGB", (1, 1)).save(source_dir / "a.tif", format="TIFF", tiffinfo=info)
	make_image(source_dir / "b.jpg")
	config = make_config(source_dir)

	summary = walk_tree(config)

	assert summary.succeeded == 2
	assert (config.dest_root / "a.png.json").exists()
	assert (config.dest_root / "b.png").exists()


def test_walk_errors_are_logged_after_the_walk(source_dir, make_config, caplog, monkeypatch):
	make_image(source_dir / "a.jpg")
	config = make_config(source_dir)
	real_walk = os.walk

	def walk_with_error(top, onerror=None, **kwargs):
		onerror(PermissionError(13, "Permission denied", str(source_dir / "locked")))
		return real_walk(top, onerror=onerror, **kwargs)

	monkeypatch.setattr(walker.os, "walk", walk_with_error)
	with caplog.at_level(logging.ERROR):
		summary = walk_tree(config)

	assert summary.succeeded == 1
	assert len(summary.walk_errors) == 1
	messages = [r.getMessage() for r in caplog.records]
	assert messages[-1].startswith("[walk]") and "locked" in messages[-1]


def test_never_overwrites_a_source_file(source_dir, make_config):
	src = make_image(source_dir / "a.jpeg")
	before = src.read_bytes()
	config = replace(make_config(source_dir, output_type="jpeg"), dest_root=source_dir)

	result = process_file(src, config)

	assert not result.ok
	assert "overwrite" in result.error
	assert src.read_bytes() == before
