"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    debevec.py                                                                                           *
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

from hdrprep.exposure.pixels import PackedFrame, PixelFrame
from hdrprep.providers.merge.base import FusionConfig, MergeProvider

logger = logging.getLogger(__name__)


class DebevecProvider(MergeProvider):
	"""
	Recover the camera response and fuse 8-bit exposures with OpenCV's Debevec implementation.

	The fusion config is not used: the response is calibrated from the exposures themselves.
	"""

	def __init__(self, samples : int = 70, smoothness : float = 10.0) -> None:
		self.samples = samples
		self.smoothness = smoothness

	def next(self, exposure_times : list[float], config : FusionConfig, frames : list[PixelFrame]) -> np.ndarray | None:
		if not all(isinstance(frame, PackedFrame) for frame in frames):
			raise ValueError('Debevec calibration requires 8-bit exposures')

		images = [cv2.cvtColor(frame.preview(), cv2.COLOR_RGB2BGR) for frame in frames]
		times = np.asarray(exposure_times, dtype=np.float32)

		try:
			response = cv2.createCalibrateDebevec(self.samples, self.smoothness).process(images, times)
			merged = cv2.createMergeDebevec().process(images, times, response)
		except cv2.error as e:
			logger.error('Debevec fusion failed -> %s', e)
			return None

		return cv2.cvtColor(merged, cv2.COLOR_BGR2RGB)
