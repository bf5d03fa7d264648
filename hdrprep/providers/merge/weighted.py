"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    weighted.py                                                                                          *
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
import numpy as np

from hdrprep.exposure.pixels import PixelFrame
from hdrprep.providers.merge.base import FusionConfig, MergeProvider, ResponseCurve, WeightFunction

logger = logging.getLogger(__name__)


def weight(samples : np.ndarray, function : WeightFunction) -> np.ndarray:
	"""
	Trust in each unit-range sample: highest at mid-grey, lowest near black and white.
	"""
	if function == WeightFunction.GAUSSIAN:
		return np.exp(-32.0 * (samples - 0.5) ** 2)
	if function == WeightFunction.PLATEAU:
		return 1.0 - (2.0 * samples - 1.0) ** 12
	return 1.0 - np.abs(2.0 * samples - 1.0)


def linearize(samples : np.ndarray, config : FusionConfig) -> np.ndarray:
	if config.response == ResponseCurve.GAMMA:
		return samples ** config.gamma
	return samples


class WeightedMergeProvider(MergeProvider):
	"""
	Fuse exposures with a per-sample weighted average of their radiance estimates (sample / exposure time).
	"""

	def next(self, exposure_times : list[float], config : FusionConfig, frames : list[PixelFrame]) -> np.ndarray:
		numerator = np.zeros((frames[0].height, frames[0].width, 3), dtype=np.float64)
		denominator = np.zeros_like(numerator)
		fallback = np.zeros_like(numerator)

		for exposure_time, frame in zip(exposure_times, frames):
			samples = np.stack(frame.read(), axis=-1)
			radiance = linearize(samples, config) / exposure_time
			weights = weight(samples, config.weights)

			numerator += weights * radiance
			denominator += weights
			fallback += radiance

		# Samples clipped in every exposure carry no weight; use the plain mean there
		fallback /= len(frames)
		weighted = np.divide(numerator, denominator, out=fallback, where=denominator > 0)

		logger.debug('Radiance range: %f - %f', float(weighted.min()), float(weighted.max()))
		return weighted.astype(np.float32)
