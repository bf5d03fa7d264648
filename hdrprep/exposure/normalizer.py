"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    normalizer.py                                                                                        *
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
import logging

from hdrprep.config import EV_LIMIT
from hdrprep.exceptions import SizeMismatchError, TypeMismatchError
from hdrprep.exposure.item import ExposureItem
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.events import ExposureListener
from hdrprep.exposure.loader import LoadReport

logger = logging.getLogger(__name__)


class ExposureNormalizer:
	"""
	Merge freshly loaded items into a set, one at a time, and keep exposure values in a sane range.

	Loading is parallel, but merging is not: items are checked and appended sequentially so the set's invariants
	(one input kind, one size) and its missing-exposure list are only ever touched by one writer.
	"""
	listener : ExposureListener
	ev_limit : float

	def __init__(self, listener : ExposureListener | None = None, ev_limit : float = EV_LIMIT) -> None:
		self.listener = listener or ExposureListener()
		self.ev_limit = ev_limit

	def merge(self, exposure_set : ExposureSet, report : LoadReport) -> list[int]:
		"""
		Merge the items of a finished load batch. A cancelled batch merges nothing.

		Returns:
			list[int]: The exposure indices of the merged items.

		Raises:
			TypeMismatchError, SizeMismatchError: As add_items().
		"""
		if report.cancelled:
			logger.debug('Load batch was cancelled, nothing to merge')
			return []

		indices = self.add_items(exposure_set, report.items)
		self.listener.loading_finished(report.requested, len(indices), list(exposure_set.missing_exposure))
		return indices

	def add_items(self, exposure_set : ExposureSet, items : list[ExposureItem]) -> list[int]:
		"""
		Check and append items in order, then normalize the EV range of the whole set.

		Args:
			exposure_set (ExposureSet): The set to add to.
			items (list[ExposureItem]): Decoded, valid items.

		Returns:
			list[int]: The exposure indices of the appended items.

		Raises:
			TypeMismatchError: If an item's kind differs from the set's. The set is errored, and no later item of
				the batch is added.
			SizeMismatchError: If an item's dimensions differ. Same consequences.
			ExposureSetLockedError: If the set was already errored.
		"""
		indices = []
		for item in items:
			try:
				exposure_set.check(item)
			except (TypeMismatchError, SizeMismatchError) as e:
				exposure_set.fail(str(e))
				self.listener.loading_error(str(e))
				raise

			index = exposure_set.append(item)
			indices.append(index)

			if not item.has_exposure_time:
				logger.warning('No usable exposure metadata in %s', item.path)
				exposure_set.missing_exposure.append(index)

			self.listener.file_loaded(index, item.path, item.exposure_time)

		self.check_ev_values(exposure_set)
		return indices

	def check_ev_values(self, exposure_set : ExposureSet) -> float:
		"""
		Shift all known exposure times so every EV lies within [-ev_limit, ev_limit].

		The shift is uniform in log2 space, so the EV spacing between exposures is preserved. When the highest EV is
		above the limit the set is shifted down; otherwise, when the lowest is below -limit, it is shifted up.

		Returns:
			float: The EV offset that was subtracted (0 when nothing changed).
		"""
		known = [(index, item) for index, item in enumerate(exposure_set) if item.has_exposure_time]
		if not known:
			return 0.0

		evs = [math.log2(item.exposure_time) for _, item in known]
		max_ev = max(evs)
		min_ev = min(evs)

		if max_ev > self.ev_limit:
			offset = max_ev - self.ev_limit
		elif min_ev < -self.ev_limit:
			offset = min_ev + self.ev_limit
		else:
			return 0.0

		logger.info('EV values out of range [%s, %s], shifting by %.3f', min_ev, max_ev, -offset)
		for (index, item), ev in zip(known, evs):
			item.exposure_time = 2.0 ** (ev - offset)
			self.listener.exposure_time_changed(index, item.exposure_time)

		return offset

	def set_ev(self, exposure_set : ExposureSet, new_ev : float, index : int) -> None:
		"""
		Manually set the EV of one exposure.

		If that exposure had no exposure time, one entry is dropped from the set's missing-exposure list. It is always
		the oldest entry, whichever index was set: the list is only used to report how many exposures are still
		pending.

		Raises:
			IndexError: If index is not a position in the set. Negative indices are rejected.
			ExposureSetLockedError: If the set is errored.
		"""
		exposure_set.ensure_writable()
		if not 0 <= index < len(exposure_set):
			raise IndexError(f'No exposure at index {index}')

		item = exposure_set[index]

		if not item.has_exposure_time and exposure_set.missing_exposure:
			exposure_set.missing_exposure.pop(0)

		item.exposure_time = 2.0 ** new_ev
		logger.debug('Exposure %d set to %s EV', index, new_ev)
		self.listener.exposure_time_changed(index, item.exposure_time)
