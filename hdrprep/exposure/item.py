"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    item.py                                                                                              *
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
import math
from pydantic import BaseModel, ConfigDict

from hdrprep.lib.choices import Choices
from hdrprep.exposure.pixels import PixelFrame, PackedFrame, PlanarFrame


# Sentinel for an exposure time that could not be read from metadata
MISSING_EXPOSURE = -1.0


class InputKind(Choices):
	"""
	Where the samples of an exposure came from. A set only ever holds one kind.
	"""
	UNKNOWN = 'unknown'
	LDR = 'ldr'         # 8-bit origin
	MDR = 'mdr'         # 16-bit / float origin

	@classmethod
	def of(cls, frame : PixelFrame | None) -> InputKind:
		if isinstance(frame, PackedFrame):
			return cls.LDR
		if isinstance(frame, PlanarFrame):
			return cls.MDR
		return cls.UNKNOWN


class ExposureItem(BaseModel):
	"""
	One input exposure.

	Attributes:
		path (str): Identity key, unique within a set.
		frame (PixelFrame): The decoded pixels. None until the loader has decoded the file.
		average_luminance (float): Luminance computed from metadata, -1 when unreadable.
		exposure_time (float): The value used for fusion. Starts as the average luminance, and is shifted by EV
			normalization or replaced by a manual override. -1 when missing.
		valid (bool): False when decoding failed. Invalid items never enter a set.
		error (str): Why decoding failed, if it did.
	"""
	path : str
	frame : PixelFrame | None = None
	average_luminance : float = MISSING_EXPOSURE
	exposure_time : float = MISSING_EXPOSURE
	valid : bool = False
	error : str | None = None

	model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

	@property
	def kind(self) -> InputKind:
		return InputKind.of(self.frame)

	@property
	def width(self) -> int:
		return self.frame.width if self.frame is not None else 0

	@property
	def height(self) -> int:
		return self.frame.height if self.frame is not None else 0

	@property
	def has_exposure_time(self) -> bool:
		return self.exposure_time > 0

	@property
	def ev(self) -> float | None:
		"""
		log2 of the exposure time, or None when it is missing.
		"""
		if not self.has_exposure_time:
			return None
		return math.log2(self.exposure_time)

	def invalidate(self, reason : str) -> None:
		self.valid = False
		self.error = reason
		self.frame = None

	def __str__(self) -> str:
		return self.path
