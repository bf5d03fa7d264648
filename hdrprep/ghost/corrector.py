"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    corrector.py                                                                                         *
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

from hdrprep.exposure.colorspace import hsl_to_rgb, lightness, rgb_to_hsl
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.ghost.grid import PatchGrid

logger = logging.getLogger(__name__)

# Ceiling of HSL lightness and of each channel in unit range
MAX_LIGHTNESS = 1.0
MAX_RGB = 1.0


class GhostCorrector:
	"""
	Replace the flagged cells of every non-reference exposure with the reference content, rescaled to that
	exposure's brightness. Hue and saturation come from the reference unchanged.
	"""

	def correct(self, exposure_set : ExposureSet, reference_index : int, grid : PatchGrid, scale_factors : list[float]) -> int:
		"""
		Mutate the flagged cells of every exposure except the reference, in place.

		Cells whose reference average lightness is black or saturated are skipped, since no meaningful rescale
		exists for them.

		Returns:
			int: The number of cells rewritten, over all exposures.

		Raises:
			ExposureSetLockedError: If the set is errored.
			ValueError: If there is not one scale factor per exposure.
		"""
		exposure_set.ensure_writable()
		if len(scale_factors) != len(exposure_set):
			raise ValueError(f'Got {len(scale_factors)} scale factors for {len(exposure_set)} exposures')

		reference = exposure_set[reference_index].frame
		rewritten = 0

		for row, column in grid.flagged_cells():
			region = grid.cell(row, column)
			r, g, b = reference.read(region)

			average = float(np.mean(lightness(r, g, b)))
			if average >= MAX_LIGHTNESS or average <= 0:
				logger.debug('Skipping cell (%d, %d): reference lightness %f', row, column, average)
				continue

			hue, saturation, light = rgb_to_hsl(r, g, b)
			for index, item in enumerate(exposure_set):
				if index == reference_index:
					continue

				scaled = np.minimum(light * scale_factors[index], MAX_LIGHTNESS)
				r2, g2, b2 = (np.clip(channel, 0.0, MAX_RGB) for channel in hsl_to_rgb(hue, saturation, scaled))
				item.frame.write(r2, g2, b2, region)
				rewritten += 1

		logger.debug('Rewrote %d cells', rewritten)
		return rewritten
