"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    helpers.py                                                                                           *
*        Project: hdrprep                                                                                              *
*        Version: 0.1.0                                                                                                *
*        Created: 2026-10-18                                                                                           *
*        Author:  Jess Mann                                                                                            *
*        Email:   jess.a.mann@gmail.com                                                                                *
*        Copyright (c) 2026 Jess Mann                                                                                  *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    LAST MODIFIED:                                                                                                    *
*                                                                                                                      *
*        2026-10-18     By Jess Mann                                                                                   *
*                                                                                                                      *
*********************************************************************************************************************"""
# Fakes and synthetic images shared by the test modules.
from __future__ import annotations
import threading
import numpy as np

from hdrprep.exceptions import LoadError
from hdrprep.exposure.colorspace import hsl_to_rgb
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.item import ExposureItem
from hdrprep.exposure.pixels import MDR_MAX_VALUE, PackedFrame, PixelFrame, PlanarFrame
from hdrprep.providers.decode.base import DecodeProvider, MetadataProvider


def planar(unit : np.ndarray) -> PlanarFrame:
	"""
	An MDR frame from unit-range samples, (height, width) grey or (height, width, 3) RGB.
	"""
	return PlanarFrame.from_array(np.asarray(unit, dtype=np.float64) * MDR_MAX_VALUE)


def grey_planar(value : float, width : int = 64, height : int = 64) -> PlanarFrame:
	return planar(np.full((height, width), value))


def grey_packed(value : int, width : int = 64, height : int = 64) -> PackedFrame:
	return PackedFrame(np.full((height, width, 3), value, dtype=np.uint8))


def coloured_planar(hue : np.ndarray, saturation : float = 0.8, lightness : float = 0.5) -> PlanarFrame:
	r, g, b = hsl_to_rgb(hue, np.full(hue.shape, saturation), np.full(hue.shape, lightness))
	return planar(np.stack([r, g, b], axis=-1))


def make_set(frames : list[PixelFrame], times : list[float] | None = None) -> ExposureSet:
	exposure_set = ExposureSet()
	times = times or [1.0] * len(frames)
	for index, (frame, exposure_time) in enumerate(zip(frames, times)):
		item = ExposureItem(path=f'exposure_{index}.tif', frame=frame, exposure_time=exposure_time, valid=True)
		exposure_set.append(item)
		if exposure_time <= 0:
			exposure_set.missing_exposure.append(index)
	return exposure_set


class FakeDecoder(DecodeProvider):
	"""
	Hands out copies of prepared frames, and records every decoded path.
	"""

	def __init__(self, frames : dict[str, PixelFrame]) -> None:
		self.frames = frames
		self.calls : list[str] = []
		self._lock = threading.Lock()

	def next(self, path : str) -> PixelFrame:
		with self._lock:
			self.calls.append(path)
		if path not in self.frames:
			raise LoadError(path, 'no such file')
		return self.frames[path].copy()


class FakeMetadata(MetadataProvider):

	def __init__(self, luminance : dict[str, float] | None = None, default : float = 1.0) -> None:
		self.luminance = luminance or {}
		self.default = default

	def next(self, path : str) -> float:
		return self.luminance.get(path, self.default)
