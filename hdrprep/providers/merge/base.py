"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    base.py                                                                                              *
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
from abc import ABC, abstractmethod
import logging
import numpy as np
from pydantic import BaseModel, field_validator

from hdrprep.exceptions import MissingExposureError
from hdrprep.exposure.pixels import PixelFrame
from hdrprep.lib.choices import Choices
from hdrprep.providers.base import Provider

logger = logging.getLogger(__name__)


class WeightFunction(Choices):
	TRIANGULAR = 'triangular'
	GAUSSIAN = 'gaussian'
	PLATEAU = 'plateau'


class ResponseCurve(Choices):
	LINEAR = 'linear'
	GAMMA = 'gamma'


class FusionConfig(BaseModel):
	"""
	How exposures are fused into a radiance map.

	Attributes:
		weights (WeightFunction): How much to trust a sample, depending on how close it is to the extremes.
		response (ResponseCurve): The camera response used to linearize samples.
		gamma (float): Exponent of the GAMMA response.
	"""
	weights : WeightFunction = WeightFunction.TRIANGULAR
	response : ResponseCurve = ResponseCurve.LINEAR
	gamma : float = 2.2

	@field_validator('weights', mode='before')
	def validate_weights(cls, value):
		if isinstance(value, str):
			return WeightFunction(value.lower())
		return value

	@field_validator('response', mode='before')
	def validate_response(cls, value):
		if isinstance(value, str):
			return ResponseCurve(value.lower())
		return value

	@field_validator('gamma')
	def validate_gamma(cls, value : float) -> float:
		if value <= 0:
			raise ValueError('gamma must be positive.')
		return value


class MergeProvider(Provider, ABC):
	"""
	This service provider fuses the exposures of a set into one HDR radiance map.
	"""

	def run(self, exposure_times : list[float], config : FusionConfig, frames : list[PixelFrame]) -> np.ndarray | None:
		"""
		Fuse frames into an HDR image.

		Args:
			exposure_times (list[float]): One positive exposure time per frame.
			config (FusionConfig): The fusion settings.
			frames (list[PixelFrame]): Aligned frames of identical size.

		Returns:
			np.ndarray | None: A float32 (height, width, 3) RGB radiance map, or None if fusion failed.

		Raises:
			ValueError: If there are no frames, or a different number of exposure times.
			MissingExposureError: If any exposure time is not positive.
		"""
		if not frames:
			raise ValueError('No exposures to fuse')
		if len(exposure_times) != len(frames):
			raise ValueError(f'Got {len(exposure_times)} exposure times for {len(frames)} exposures')

		missing = [index for index, exposure_time in enumerate(exposure_times) if exposure_time <= 0]
		if missing:
			raise MissingExposureError(missing)

		logger.debug('Fusing %d exposures with %s', len(frames), config)
		return self.next(exposure_times, config, frames)

	@abstractmethod
	def next(self, exposure_times : list[float], config : FusionConfig, frames : list[PixelFrame]) -> np.ndarray | None:
		raise NotImplementedError("MergeProvider.next() must be implemented in a subclass.")
