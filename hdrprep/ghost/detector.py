"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    detector.py                                                                                          *
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
# Automatic ghost detection.
#
# Every exposure is compared against a reference exposure cell by cell. After compensating for the EV difference
# between the two, the log-ratio of their samples should be close to zero; cells where too many pixels stray from that
# are flagged as ghosted.
from __future__ import annotations
import logging
import numpy as np
from pydantic import BaseModel, ConfigDict

from hdrprep.config import DEFAULT_THRESHOLD, GRID_SIZE, OUTLIER_FACTOR
from hdrprep.exceptions import MissingExposureError
from hdrprep.exposure.colorspace import average_lightness, rgb_to_hsl
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.pixels import PixelFrame
from hdrprep.ghost.grid import PatchGrid

logger = logging.getLogger(__name__)


class GhostDetectionResult(BaseModel):
	"""
	Attributes:
		reference_index (int): The exposure whose hue deviates most from the others.
		grid (PatchGrid): Flags accumulated over every comparison against the reference.
		scale_factors (list[float]): avg_lightness[i] / avg_lightness[reference], per exposure.
		hue_errors (list[float]): Mean squared hue deviation from the cross-exposure mean, per exposure.
		average_lightness (list[float]): Mean HSL lightness, per exposure.
	"""
	reference_index : int
	grid : PatchGrid
	scale_factors : list[float]
	hue_errors : list[float]
	average_lightness : list[float]

	model_config = ConfigDict(arbitrary_types_allowed=True)


class GhostDetector:
	grid_size : int
	outlier_factor : float

	def __init__(self, grid_size : int = GRID_SIZE, outlier_factor : float = OUTLIER_FACTOR) -> None:
		self.grid_size = grid_size
		self.outlier_factor = outlier_factor

	def detect(self, exposure_set : ExposureSet, threshold : float = DEFAULT_THRESHOLD) -> GhostDetectionResult:
		"""
		Pick a reference exposure and flag the grid cells that look ghosted.

		Args:
			exposure_set (ExposureSet): A consistent set with known exposure times. It is only read.
			threshold (float): Fraction of outlier pixels above which a cell is flagged.

		Returns:
			GhostDetectionResult: The reference index, the flagged grid and the scale factors.

		Raises:
			DegenerateGridError: If the image is smaller than the grid in either axis.
			MissingExposureError: If any exposure has no exposure time.
			ValueError: If the set is empty.
		"""
		if not len(exposure_set):
			raise ValueError('Cannot detect ghosts in an empty exposure set')

		grid = PatchGrid(exposure_set.width, exposure_set.height, self.grid_size)

		missing = [index for index, item in enumerate(exposure_set) if not item.has_exposure_time]
		if missing:
			raise MissingExposureError(missing)

		frames = [item.frame for item in exposure_set]

		hue_errors = self.hue_errors(frames)
		for index, error in enumerate(hue_errors):
			logger.debug('HE[%d]: %f', index, error)

		# First maximum wins
		reference = int(np.argmax(hue_errors))
		logger.debug('Reference exposure: %d (%s)', reference, exposure_set[reference].path)

		lightness = [average_lightness(*frame.read()) for frame in frames]
		for index, value in enumerate(lightness):
			logger.debug('Average lightness of exposure %d: %f', index, value)
		scale_factors = self.scale_factors(lightness, reference)

		times = exposure_set.exposure_times
		reference_samples = frames[reference].read(grid.covered)
		for index, frame in enumerate(frames):
			if index == reference:
				continue
			delta_ev = float(np.log(times[reference]) - np.log(times[index]))
			flags = self.outlier_flags(grid, reference_samples, frame.read(grid.covered), delta_ev, threshold)
			grid.accumulate(flags)

		logger.debug('Flagged %.2f%% of patches', grid.flagged_fraction * 100.0)

		return GhostDetectionResult(
			reference_index=reference,
			grid=grid,
			scale_factors=scale_factors,
			hue_errors=[float(error) for error in hue_errors],
			average_lightness=lightness,
		)

	@classmethod
	def hue_errors(cls, frames : list[PixelFrame]) -> np.ndarray:
		"""
		Mean squared deviation of each exposure's hue from the per-pixel mean hue of all exposures.

		The mean needs every exposure converted before any deviation can be computed.
		"""
		hues = np.stack([rgb_to_hsl(*frame.read())[0] for frame in frames])
		mean_hue = hues.mean(axis=0)
		return ((mean_hue[np.newaxis] - hues) ** 2).mean(axis=(1, 2))

	@classmethod
	def scale_factors(cls, lightness : list[float], reference : int) -> list[float]:
		if lightness[reference] <= 0:
			logger.warning('Reference exposure %d is black, using unit scale factors', reference)
			return [1.0 for _ in lightness]
		return [value / lightness[reference] for value in lightness]

	def outlier_flags(self,
					  grid : PatchGrid,
					  reference : tuple[np.ndarray, np.ndarray, np.ndarray],
					  other : tuple[np.ndarray, np.ndarray, np.ndarray],
					  delta_ev : float,
					  threshold : float) -> np.ndarray:
		"""
		Flag the cells where the fraction of outlier pixels is above threshold.

		A pixel is an outlier when the EV-compensated log-ratio of any channel exceeds outlier_factor * |delta_ev|.

		Args:
			grid (PatchGrid): Supplies the cell layout. Not modified.
			reference: r, g, b samples of the reference over the grid's covered region.
			other: r, g, b samples of the compared exposure over the same region.
			delta_ev (float): ln(t_reference) - ln(t_other).
			threshold (float): Outlier fraction above which a cell is flagged.

		Returns:
			np.ndarray: (grid_size, grid_size) booleans.
		"""
		limit = self.outlier_factor * abs(delta_ev)
		outlier = np.zeros(reference[0].shape, dtype=bool)

		# Black samples give infinite logs; inf - inf is nan, which is never an outlier
		with np.errstate(divide='ignore', invalid='ignore'):
			for ref_channel, other_channel in zip(reference, other):
				if delta_ev < 0:
					log_ratio = np.log(ref_channel) - np.log(other_channel) - delta_ev
				else:
					log_ratio = np.log(other_channel) - np.log(ref_channel) + delta_ev
				outlier |= np.abs(log_ratio) > limit

		return grid.cell_means(outlier.astype(np.float64)) > threshold
