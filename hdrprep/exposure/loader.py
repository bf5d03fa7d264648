"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    loader.py                                                                                            *
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
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
import queue
import threading
import logging
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from hdrprep.exceptions import LoadError
from hdrprep.lib.script import Script
from hdrprep.exposure.item import ExposureItem
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.events import ExposureListener
from hdrprep.providers.decode.base import DecodeProvider, MetadataProvider

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while waiting for workers
POLL_INTERVAL = 0.05

CANCELLED = 'cancelled'


class LoadFailure(BaseModel):
	index : int
	path : str
	reason : str


class LoadReport(BaseModel):
	"""
	The outcome of one load batch.

	Attributes:
		requested (int): Number of paths the caller asked for.
		skipped (list[str]): Paths that were already in the set (or repeated in the request), and not decoded again.
		items (list[ExposureItem]): Successfully decoded items, in request order. Empty when cancelled.
		failures (list[LoadFailure]): Items that could not be decoded.
		cancelled (bool): Whether the batch was cancelled. Nothing from a cancelled batch is merged.
	"""
	requested : int = 0
	skipped : list[str] = Field(default_factory=list)
	items : list[ExposureItem] = Field(default_factory=list)
	failures : list[LoadFailure] = Field(default_factory=list)
	cancelled : bool = False

	model_config = ConfigDict(arbitrary_types_allowed=True)

	@property
	def loaded(self) -> int:
		return len(self.items)


class ExposureLoader(Script):
	"""
	Decode a batch of files in parallel.

	Decoding runs on a bounded thread pool. Workers never touch shared state: each finished task posts its result onto
	a completion queue, and the thread that called load() drains that queue, updating counters and emitting every
	notification. That thread is the only writer.
	"""
	decoder : DecodeProvider
	metadata : MetadataProvider
	listener : ExposureListener = Field(default_factory=ExposureListener)

	_cancel : threading.Event = PrivateAttr(default_factory=threading.Event)

	def cancel(self) -> None:
		"""
		Stop the running batch. Safe to call from any thread.
		"""
		logger.info('Cancelling exposure loading')
		self._cancel.set()

	@property
	def cancelled(self) -> bool:
		return self._cancel.is_set()

	def schedule(self, paths : list[str], exposure_set : ExposureSet | None = None) -> tuple[list[ExposureItem], list[str]]:
		"""
		Create an item for every path that is not in the set yet.

		Paths are compared by exact string equality. A path repeated within the request is scheduled once.

		Returns:
			tuple[list[ExposureItem], list[str]]: The scheduled items, and the skipped paths.
		"""
		known = set(exposure_set.paths) if exposure_set is not None else set()
		items : list[ExposureItem] = []
		skipped : list[str] = []
		for path in paths:
			logger.debug('Checking %s', path)
			if path in known:
				skipped.append(path)
				continue
			logger.debug('Schedule loading for %s', path)
			known.add(path)
			items.append(ExposureItem(path=path))
		return items, skipped

	def load_item(self, item : ExposureItem) -> ExposureItem:
		"""
		Decode one item. Runs on a worker thread, and only touches the item it was given.
		"""
		if self._cancel.is_set():
			item.invalidate(CANCELLED)
			return item

		logger.debug('Loading data for %s', item.path)
		try:
			item.frame = self.decoder.run(item.path)
		except LoadError as e:
			item.invalidate(e.reason or str(e))
			return item

		item.average_luminance = self.metadata.run(item.path)
		item.exposure_time = item.average_luminance
		item.valid = True

		if self._cancel.is_set():
			# Finished after cancellation; it will be discarded, so release the pixels now
			item.invalidate(CANCELLED)
		return item

	def load(self, paths : list[str], exposure_set : ExposureSet | None = None) -> LoadReport:
		"""
		Decode every path not already present in the set.

		The set itself is not modified; pass the report's items to an ExposureNormalizer to merge them.

		Args:
			paths (list[str]): Candidate files.
			exposure_set (ExposureSet, optional): The set the items will join, used to skip known paths.

		Returns:
			LoadReport: Valid items in request order, plus failures.
		"""
		self._cancel.clear()
		items, skipped = self.schedule(paths, exposure_set)
		report = LoadReport(requested=len(paths), skipped=skipped)

		if not items:
			logger.debug('Nothing to load, %d path(s) already present', len(skipped))
			return report

		completions : queue.Queue[tuple[int, ExposureItem | BaseException]] = queue.Queue()

		self.listener.progress_started()
		self.listener.progress_range(0, len(items))

		executor = ThreadPoolExecutor(max_workers=self.max_threads, thread_name_prefix='hdrprep-load')
		try:
			for index, item in enumerate(items):
				future = executor.submit(self.load_item, item)
				future.add_done_callback(partial(self._complete, completions, index))

			done = 0
			while done < len(items) and not self._cancel.is_set():
				try:
					index, outcome = completions.get(timeout=POLL_INTERVAL)
				except queue.Empty:
					continue

				done += 1
				item = items[index]
				if isinstance(outcome, BaseException):
					logger.debug('Loading %s raised', item.path, exc_info=outcome)
					item.invalidate(str(outcome) or outcome.__class__.__name__)

				if not item.valid:
					report.failures.append(LoadFailure(index=index, path=item.path, reason=item.error or 'unknown error'))
					self.listener.load_failed(item.path, item.error or 'unknown error')

				self.listener.progress_value(done)
		finally:
			# After a cancel, don't wait for decodes still in flight; their results are discarded
			executor.shutdown(wait=not self._cancel.is_set(), cancel_futures=True)
			self.listener.progress_finished()

		if self._cancel.is_set():
			logger.info('Loading cancelled, no exposures merged')
			report.cancelled = True
			report.failures = []
			return report

		logger.debug('Data loaded ... move to internal structure!')
		report.items = [item for item in items if item.valid]
		logger.debug('Read %d out of %d', report.loaded, report.requested)
		return report

	@staticmethod
	def _complete(completions : queue.Queue, index : int, future : Future) -> None:
		# Runs on the worker thread: hand the result to the coordinator, nothing else
		if future.cancelled():
			return
		error = future.exception()
		completions.put((index, error if error is not None else future.result()))
