"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    blender.py                                                                                           *
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

from hdrprep.exposure.colorspace import average_lightness, hsl_to_rgb, max_lightness, rgb_to_hsl
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.pixels import PixelFrame

logger = logging.getLogger(__name__)


class ManualBlender:
	"""
	Composite one exposure into another wherever an anti-ghosting mask is painted.
	"""

	def blend(self, target : PixelFrame, source : PixelFrame, auto_mask : np.ndarray, good_mask : np.ndarray) -> int:
		"""
		Blend source into target, in place.

		The source is first brought to the target's brightness by scaling its lightness with the global ratio
		avg_lightness(target) / avg_lightness(source), capped at the highest lightness of either image. Each pixel is
		then lerped with the good-region alpha when that is nonzero, and the auto alpha otherwise. Pixels transparent
		in both masks are left untouched.

		Args:
			target (PixelFrame): The exposure to repair.
			source (PixelFrame): The exposure whose content is trusted.
			auto_mask (np.ndarray): uint8 (height, width) alpha, usually the target's ghost mask.
			good_mask (np.ndarray): uint8 (height, width) alpha, usually the source's ghost mask.

		Returns:
			int: The number of pixels changed.
		"""
		if target.shape != source.shape or auto_mask.shape != target.shape or good_mask.shape != target.shape:
			raise ValueError(
				f'Cannot blend {source.shape} into {target.shape} with masks {auto_mask.shape} and {good_mask.shape}'
			)

		active = (good_mask > 0) | (auto_mask > 0)
		if not active.any():
			return 0

		alpha = np.where(good_mask > 0, good_mask, auto_mask).astype(np.float64) / 255.0

		target_samples = target.read()
		source_samples = source.read()

		target_lightness = average_lightness(*target_samples)
		source_lightness = average_lightness(*source_samples)
		scale = target_lightness / source_lightness if source_lightness > 0 else 1.0
		ceiling = max(max_lightness(*target_samples), max_lightness(*source_samples))
		logger.debug('Blending with lightness scale %f, ceiling %f', scale, ceiling)

		hue, saturation, light = rgb_to_hsl(*source_samples)
		scaled = hsl_to_rgb(hue, saturation, np.minimum(light * scale, ceiling))

		blended = [
			np.where(active, (1.0 - alpha) * original + alpha * np.clip(replacement, 0.0, 1.0), original)
			for original, replacement in zip(target_samples, scaled)
		]
		target.write(*blended)
		return int(np.count_nonzero(active))

	def apply(self, exposure_set : ExposureSet, good_index : int) -> None:
		"""
		Blend the good exposure into every other exposure of the set, using each exposure's ghost mask as the auto
		mask and the good exposure's mask as the good-region mask.

		Raises:
			ExposureSetLockedError: If the set is errored.
			IndexError: If good_index is not a position in the set.
		"""
		exposure_set.ensure_writable()
		if not 0 <= good_index < len(exposure_set):
			raise IndexError(f'No exposure at index {good_index}')

		good = exposure_set[good_index]
		good_mask = exposure_set.ghost_masks[good_index]
		for index, item in enumerate(exposure_set):
			if index == good_index:
				continue
			changed = self.blend(item.frame, good.frame, exposure_set.ghost_masks[index], good_mask)
			logger.debug('Blended %d pixels of %s into %s', changed, good.path, item.path)
