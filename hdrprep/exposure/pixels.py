"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    pixels.py                                                                                            *
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
# Pixel storage for decoded exposures.
#
# Two storage kinds exist: three float planes for wide-range (MDR) inputs, and one interleaved 8-bit array for 8-bit
# (LDR) inputs. Both expose the same accessor, which reads and writes unit-range float samples, so the ghost detection,
# correction and blending code is written once against PixelFrame.
from __future__ import annotations
from abc import ABC, abstractmethod
import numpy as np

# A single 2D float32 channel, indexed [row, column]
PixelPlane = np.ndarray

MDR_MAX_VALUE = 65535.0
LDR_MAX_VALUE = 255.0

Region = tuple[slice, slice]
FULL : Region = (slice(None), slice(None))


class PixelFrame(ABC):
	"""
	Accessor shared by every pixel storage kind.

	Samples read through read() are floats in [0, 1]; samples handed to write() are clipped into [0, 1] and converted
	back to the storage range.
	"""
	max_value : float

	@property
	@abstractmethod
	def width(self) -> int:
		raise NotImplementedError

	@property
	@abstractmethod
	def height(self) -> int:
		raise NotImplementedError

	@property
	def shape(self) -> tuple[int, int]:
		return (self.height, self.width)

	@abstractmethod
	def read(self, region : Region = FULL) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
		"""
		Read the r, g, b samples of a region as float64 arrays in [0, 1].

		Args:
			region (tuple[slice, slice]): (rows, columns). Defaults to the whole frame.
		"""
		raise NotImplementedError

	@abstractmethod
	def write(self, r : np.ndarray, g : np.ndarray, b : np.ndarray, region : Region = FULL) -> None:
		"""
		Write unit-range r, g, b samples into a region.
		"""
		raise NotImplementedError

	@abstractmethod
	def preview(self) -> np.ndarray:
		"""
		An interleaved uint8 (height, width, 3) view of the frame, pixel-aligned with the float samples.
		"""
		raise NotImplementedError

	@abstractmethod
	def to_image(self) -> np.ndarray:
		"""
		An interleaved (height, width, 3) array in the storage sample type, ready for an image writer.
		"""
		raise NotImplementedError

	@abstractmethod
	def copy(self) -> PixelFrame:
		raise NotImplementedError

	@abstractmethod
	def shifted(self, dx : int, dy : int) -> PixelFrame:
		"""
		A copy moved by dx columns and dy rows. Uncovered pixels are black.
		"""
		raise NotImplementedError

	@abstractmethod
	def cropped(self, x0 : int, y0 : int, x1 : int, y1 : int) -> PixelFrame:
		"""
		A copy of the rectangle [x0, x1) x [y0, y1).
		"""
		raise NotImplementedError

	def get_channel(self, x : int, y : int, channel : int) -> float:
		samples = self.read((slice(y, y + 1), slice(x, x + 1)))
		return float(samples[channel][0, 0])

	def set_channel(self, x : int, y : int, channel : int, value : float) -> None:
		region = (slice(y, y + 1), slice(x, x + 1))
		samples = list(self.read(region))
		samples[channel] = np.full((1, 1), value, dtype=np.float64)
		self.write(*samples, region=region)

	def __repr__(self) -> str:
		return f'{self.__class__.__name__}({self.width}x{self.height})'


def shift_array(data : np.ndarray, dx : int, dy : int) -> np.ndarray:
	"""
	Move the first two axes of an array by (dy, dx), filling uncovered entries with zeros.
	"""
	result = np.zeros_like(data)
	height, width = data.shape[:2]
	if abs(dx) >= width or abs(dy) >= height:
		return result

	src_rows = slice(max(0, -dy), height - max(0, dy))
	dst_rows = slice(max(0, dy), height - max(0, -dy))
	src_cols = slice(max(0, -dx), width - max(0, dx))
	dst_cols = slice(max(0, dx), width - max(0, -dx))
	result[dst_rows, dst_cols] = data[src_rows, src_cols]
	return result


class PlanarFrame(PixelFrame):
	"""
	Three float32 planes in linear light, with samples in [0, max_value].
	"""

	def __init__(self, red : PixelPlane, green : PixelPlane, blue : PixelPlane, max_value : float = MDR_MAX_VALUE) -> None:
		planes = [np.asarray(plane, dtype=np.float32) for plane in (red, green, blue)]
		if planes[0].ndim != 2:
			raise ValueError(f'Planes must be 2 dimensional, got shape {planes[0].shape}')
		if any(plane.shape != planes[0].shape for plane in planes):
			raise ValueError(f'Planes have different shapes: {[plane.shape for plane in planes]}')
		if max_value <= 0:
			raise ValueError('max_value must be positive')

		self.planes : list[PixelPlane] = planes
		self.max_value = float(max_value)

	@classmethod
	def from_array(cls, data : np.ndarray, max_value : float = MDR_MAX_VALUE) -> PlanarFrame:
		"""
		Build from an interleaved (height, width, channels) array. Grey images are replicated into three planes.
		"""
		data = np.asarray(data)
		if data.ndim == 2:
			return cls(data, data, data, max_value)
		if data.shape[2] == 1:
			return cls(data[..., 0], data[..., 0], data[..., 0], max_value)
		return cls(data[..., 0], data[..., 1], data[..., 2], max_value)

	@property
	def red(self) -> PixelPlane:
		return self.planes[0]

	@property
	def green(self) -> PixelPlane:
		return self.planes[1]

	@property
	def blue(self) -> PixelPlane:
		return self.planes[2]

	@property
	def width(self) -> int:
		return self.planes[0].shape[1]

	@property
	def height(self) -> int:
		return self.planes[0].shape[0]

	def read(self, region : Region = FULL) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
		r, g, b = (np.clip(plane[region].astype(np.float64) / self.max_value, 0.0, 1.0) for plane in self.planes)
		return r, g, b

	def write(self, r : np.ndarray, g : np.ndarray, b : np.ndarray, region : Region = FULL) -> None:
		for plane, samples in zip(self.planes, (r, g, b)):
			plane[region] = (np.clip(samples, 0.0, 1.0) * self.max_value).astype(np.float32)

	def to_array(self) -> np.ndarray:
		"""
		Interleaved (height, width, 3) float32 copy in the storage range.
		"""
		return np.stack(self.planes, axis=-1)

	def preview(self) -> np.ndarray:
		unit = np.clip(self.to_array() / self.max_value, 0.0, 1.0)
		return np.rint(unit * LDR_MAX_VALUE).astype(np.uint8)

	def to_image(self) -> np.ndarray:
		return np.rint(np.clip(self.to_array(), 0.0, MDR_MAX_VALUE)).astype(np.uint16)

	def copy(self) -> PlanarFrame:
		return PlanarFrame(*(plane.copy() for plane in self.planes), max_value=self.max_value)

	def shifted(self, dx : int, dy : int) -> PlanarFrame:
		return PlanarFrame(*(shift_array(plane, dx, dy) for plane in self.planes), max_value=self.max_value)

	def cropped(self, x0 : int, y0 : int, x1 : int, y1 : int) -> PlanarFrame:
		return PlanarFrame(*(plane[y0:y1, x0:x1].copy() for plane in self.planes), max_value=self.max_value)


class PackedFrame(PixelFrame):
	"""
	An interleaved 8-bit (height, width, 3) RGB image. This is both the storage and the preview.
	"""
	max_value = LDR_MAX_VALUE

	def __init__(self, pixels : np.ndarray) -> None:
		pixels = np.asarray(pixels)
		if pixels.ndim == 2:
			pixels = np.repeat(pixels[..., np.newaxis], 3, axis=2)
		if pixels.ndim != 3 or pixels.shape[2] < 3:
			raise ValueError(f'Expected a (height, width, 3) array, got shape {pixels.shape}')

		# Drop any alpha channel; ghost masks carry alpha separately
		self.pixels : np.ndarray = np.ascontiguousarray(pixels[..., :3], dtype=np.uint8)

	@property
	def width(self) -> int:
		return self.pixels.shape[1]

	@property
	def height(self) -> int:
		return self.pixels.shape[0]

	def read(self, region : Region = FULL) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
		block = self.pixels[region].astype(np.float64) / LDR_MAX_VALUE
		return block[..., 0], block[..., 1], block[..., 2]

	def write(self, r : np.ndarray, g : np.ndarray, b : np.ndarray, region : Region = FULL) -> None:
		block = np.stack([np.clip(samples, 0.0, 1.0) for samples in (r, g, b)], axis=-1)
		self.pixels[region] = np.rint(block * LDR_MAX_VALUE).astype(np.uint8)

	def preview(self) -> np.ndarray:
		return self.pixels

	def to_image(self) -> np.ndarray:
		return self.pixels.copy()

	def copy(self) -> PackedFrame:
		return PackedFrame(self.pixels.copy())

	def shifted(self, dx : int, dy : int) -> PackedFrame:
		return PackedFrame(shift_array(self.pixels, dx, dy))

	def cropped(self, x0 : int, y0 : int, x1 : int, y1 : int) -> PackedFrame:
		return PackedFrame(self.pixels[y0:y1, x0:x1].copy())
