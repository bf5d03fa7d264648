"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    mtb.py                                                                                               *
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
import cv2
import numpy as np

from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.pixels import PixelFrame
from hdrprep.providers.align.base import AlignmentProvider

logger = logging.getLogger(__name__)


class MTBProvider(AlignmentProvider):
	"""
	Align exposures with OpenCV's median threshold bitmap algorithm, which only finds translations.

	Every exposure is aligned to the first one.
	"""

	def __init__(self, max_bits : int = 6, exclude_range : int = 4, cut : bool = True) -> None:
		self.max_bits = max_bits
		self.exclude_range = exclude_range
		self.cut = cut

	def next(self, exposure_set : ExposureSet) -> list[tuple[int, int]]:
		shifts = self.calculate_shifts([item.frame for item in exposure_set])
		exposure_set.apply_shifts(shifts)
		return shifts

	def calculate_shifts(self, frames : list[PixelFrame]) -> list[tuple[int, int]]:
		"""
		Find the (dx, dy) shift that aligns each frame with the first.

		Returns:
			list[tuple[int, int]]: One shift per frame; (0, 0) for the first.
		"""
		align_mtb = cv2.createAlignMTB(self.max_bits, self.exclude_range, self.cut)
		grays = [self.grayscale(frame) for frame in frames]

		shifts = [(0, 0)]
		for index, gray in enumerate(grays[1:], start=1):
			dx, dy = align_mtb.calculateShift(grays[0], gray)
			logger.debug('Exposure %d shift: (%d, %d)', index, dx, dy)
			shifts.append((int(dx), int(dy)))
		return shifts

	@classmethod
	def grayscale(cls, frame : PixelFrame) -> np.ndarray:
		return cv2.cvtColor(np.ascontiguousarray(frame.preview()), cv2.COLOR_RGB2GRAY)
