"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    exposureset.py                                                                                       *
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
from __future__ import annotations
import logging
from typing import Iterator
import numpy as np

from hdrprep.exceptions import ExposureSetLockedError, SizeMismatchError, TypeMismatchError
from hdrprep.exposure.item import ExposureItem, InputKind
from hdrprep.exposure.pixels import PixelFrame

logger = logging.getLogger(__name__)


def empty_mask(width : int, height : int) -> np.ndarray:
	"""
	A fully transparent 8-bit alpha mask.
	"""
	return np.zeros((height, width), dtype=np.uint8)


class ExposureSet:
	"""
	The ordered collection of exposures for one HDR, plus a ghost mask per exposure.

	The index of an item in the set is the "exposure index" used everywhere else. All items share one InputKind
	(fixed by the first item added) and identical dimensions. Breaking either rule puts the set in an errored state,
	in which it refuses further mutation until clear_error() is called. Items added before the error stay in place.

	Attributes:
		input_kind (InputKind): LDR or MDR once the first item is added.
		items (list[ExposureItem]): The exposures, in request order.
		ghost_masks (list[np.ndarray]): One uint8 alpha mask per item, same dimensions as the item.
		missing_exposure (list[int]): Indices of items whose exposure time could not be read, in insertion order.
		error (str | None): The reason the set is errored, if it is.
	"""
	input_kind : InputKind
	items : list[ExposureItem]
	ghost_masks : list[np.ndarray]
	missing_exposure : list[int]
	error : str | None

	def __init__(self) -> None:
		self.input_kind = InputKind.UNKNOWN
		self.items = []
		self.ghost_masks = []
		self.missing_exposure = []
		self.error = None

	def __len__(self) -> int:
		return len(self.items)

	def __iter__(self) -> Iterator[ExposureItem]:
		return iter(self.items)

	def __getitem__(self, index : int) -> ExposureItem:
		return self.items[index]

	def __contains__(self, path : object) -> bool:
		return any(item.path == path for item in self.items)

	@property
	def paths(self) -> list[str]:
		return [item.path for item in self.items]

	@property
	def exposure_times(self) -> list[float]:
		return [item.exposure_time for item in self.items]

	@property
	def width(self) -> int:
		return self.items[0].width if self.items else 0

	@property
	def height(self) -> int:
		return self.items[0].height if self.items else 0

	@property
	def errored(self) -> bool:
		return self.error is not None

	def fail(self, reason : str) -> None:
		"""
		Put the set in the errored state.
		"""
		logger.error('Exposure set errored: %s', reason)
		self.error = reason

	def clear_error(self) -> None:
		if self.error:
			logger.debug('Clearing exposure set error: %s', self.error)
		self.error = None

	def ensure_writable(self) -> None:
		if self.errored:
			raise ExposureSetLockedError(f'Exposure set is errored ({self.error}). Call clear_error() first.')

	def check(self, item : ExposureItem) -> None:
		"""
		Verify that an item may join the set, without adding it.

		Raises:
			ExposureSetLockedError: If the set is errored.
			TypeMismatchError: If the item's kind differs from the set's kind.
			SizeMismatchError: If the item's dimensions differ from the existing items'.
		"""
		self.ensure_writable()

		kind = item.kind
		if self.input_kind != InputKind.UNKNOWN and kind != self.input_kind:
			raise TypeMismatchError(f'The image {item.path} is {kind.name} while the previous ones are {self.input_kind.name}.')

		for existing in self.items:
			if (existing.width, existing.height) != (item.width, item.height):
				raise SizeMismatchError(
					f'The image {item.path} has an invalid size: {item.width}x{item.height}, '
					f'expected {existing.width}x{existing.height}.'
				)

	def append(self, item : ExposureItem) -> int:
		"""
		Add a validated item and a transparent ghost mask for it.

		Returns:
			int: The exposure index of the new item.
		"""
		self.check(item)

		if self.input_kind == InputKind.UNKNOWN:
			self.input_kind = item.kind
			logger.debug('Exposure set input kind is %s', self.input_kind.name)

		self.items.append(item)
		self.ghost_masks.append(empty_mask(item.width, item.height))
		return len(self.items) - 1

	def remove(self, index : int) -> ExposureItem:
		"""
		Remove an item, its mask and its pending missing-exposure entry.
		"""
		self.ensure_writable()
		if not 0 <= index < len(self.items):
			raise IndexError(f'No exposure at index {index}')

		item = self.items.pop(index)
		self.ghost_masks.pop(index)
		self.missing_exposure = [
			pending if pending < index else pending - 1
			for pending in self.missing_exposure
			if pending != index
		]

		if not self.items:
			self.input_kind = InputKind.UNKNOWN

		logger.debug('Removed exposure %d (%s)', index, item.path)
		return item

	def apply_shifts(self, shifts : list[tuple[int, int]]) -> None:
		"""
		Shift every frame by its (dx, dy) offset. Zero offsets are skipped.
		"""
		self.ensure_writable()
		if len(shifts) != len(self.items):
			raise ValueError(f'Got {len(shifts)} shifts for {len(self.items)} exposures')

		for item, (dx, dy) in zip(self.items, shifts):
			if dx == 0 and dy == 0:
				continue
			logger.debug('Shifting %s by (%d, %d)', item.path, dx, dy)
			item.frame = item.frame.shifted(dx, dy)

	def replace_frames(self, frames : list[PixelFrame]) -> None:
		"""
		Swap in new pixels for every item, e.g. the output of an external aligner.

		The new frames must all share one size and keep the set's input kind. When the size changes, the ghost masks
		are reset.
		"""
		self.ensure_writable()
		if len(frames) != len(self.items):
			raise ValueError(f'Got {len(frames)} frames for {len(self.items)} exposures')

		for frame in frames:
			if InputKind.of(frame) != self.input_kind:
				raise TypeMismatchError(f'Replacement frame is {InputKind.of(frame).name}, the set is {self.input_kind.name}')
			if frame.shape != frames[0].shape:
				raise SizeMismatchError(f'Replacement frames have different sizes: {frame.shape} and {frames[0].shape}')

		resized = bool(frames) and frames[0].shape != (self.height, self.width)
		for item, frame in zip(self.items, frames):
			item.frame = frame

		if resized:
			logger.debug('Frames resized to %dx%d, resetting ghost masks', self.width, self.height)
			self.clear_masks()

	def crop(self, x0 : int, y0 : int, x1 : int, y1 : int) -> None:
		"""
		Crop every frame and every ghost mask to [x0, x1) x [y0, y1).
		"""
		self.ensure_writable()
		if not (0 <= x0 < x1 <= self.width and 0 <= y0 < y1 <= self.height):
			raise ValueError(f'Crop area ({x0}, {y0}, {x1}, {y1}) is outside of a {self.width}x{self.height} image')

		for item in self.items:
			item.frame = item.frame.cropped(x0, y0, x1, y1)
		self.ghost_masks = [mask[y0:y1, x0:x1].copy() for mask in self.ghost_masks]

	def set_mask(self, index : int, mask : np.ndarray) -> None:
		"""
		Replace the ghost mask of one exposure, e.g. with a hand-painted one.
		"""
		self.ensure_writable()
		if not 0 <= index < len(self.items):
			raise IndexError(f'No exposure at index {index}')

		mask = np.asarray(mask)
		if mask.shape != self.ghost_masks[index].shape:
			raise ValueError(f'Mask shape {mask.shape} does not match {self.ghost_masks[index].shape}')
		self.ghost_masks[index] = mask.astype(np.uint8)

	def clear_masks(self) -> None:
		self.ghost_masks = [empty_mask(item.width, item.height) for item in self.items]

	def __repr__(self) -> str:
		return f'ExposureSet({self.input_kind.name}, {len(self.items)} items, {self.width}x{self.height})'
