from __future__ import annotations


class PhotoResizeError(Exception):
	"""Base class for errors raised by the resize pipeline."""


class ResolutionError(PhotoResizeError, ValueError):
	"""Malformed or unusable target resolution. Fatal for a run."""


class SourceError(PhotoResizeError):
	"""Missing or unreadable source root. Fatal for a run."""


class MetadataError(PhotoResizeError):
	"""EXIF could not be read from a file. Never fatal."""


class ConversionError(PhotoResizeError):
	"""A single file could not be decoded, encoded or written."""
