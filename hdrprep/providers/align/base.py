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
from typing import Any
import logging

from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.providers.base import Provider

logger = logging.getLogger(__name__)


class AlignmentProvider(Provider, ABC):
	"""
	This service provider aligns the exposures of a set with each other.
	"""

	def run(self, exposure_set : ExposureSet) -> Any:
		"""
		Align every exposure of the set, in place.

		Args:
			exposure_set (ExposureSet): The set to align. Left untouched if alignment fails.

		Returns:
			Whatever next() reports, e.g. the shifts that were applied.
		"""
		if len(exposure_set) < 2:
			logger.debug('Fewer than two exposures, nothing to align.')
			return None

		exposure_set.ensure_writable()
		return self.next(exposure_set)

	@abstractmethod
	def next(self, exposure_set : ExposureSet) -> Any:
		"""
		Align the exposures of a set that holds at least two of them.
		"""
		raise NotImplementedError("AlignmentProvider.next() must be implemented in a subclass.")
