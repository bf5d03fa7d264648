"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    events.py                                                                                            *
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
# Notifications emitted by the pipeline.
#
# The computational core never talks to a presentation layer directly. It calls an ExposureListener, whose methods are
# all no-ops by default; subclasses override what they care about. Every notification is emitted from the coordinating
# thread, never from a worker.
from __future__ import annotations
import logging
from tqdm import tqdm

logger = logging.getLogger(__name__)


class ExposureListener:
	"""
	Receives progress and state-change notifications. Override the methods you need.
	"""

	def progress_started(self) -> None:
		pass

	def progress_range(self, minimum : int, maximum : int) -> None:
		pass

	def progress_value(self, value : int) -> None:
		pass

	def progress_finished(self) -> None:
		pass

	def load_failed(self, path : str, message : str) -> None:
		pass

	def loading_error(self, message : str) -> None:
		"""
		A set-wide consistency failure (type or size mismatch) halted the batch.
		"""

	def file_loaded(self, index : int, path : str, exposure_time : float) -> None:
		pass

	def loading_finished(self, requested : int, loaded : int, missing : list[int]) -> None:
		"""
		A batch was merged into the set. `missing` lists the indices still lacking an exposure time.
		"""

	def exposure_time_changed(self, index : int, exposure_time : float) -> None:
		pass

	def alignment_output(self, line : str) -> None:
		pass

	def alignment_finished(self, exit_code : int | None) -> None:
		pass


class LoggingListener(ExposureListener):
	"""
	Writes every notification to the log.
	"""

	def load_failed(self, path : str, message : str) -> None:
		logger.error('Cannot load %s: %s', path, message)

	def loading_error(self, message : str) -> None:
		logger.error(message)

	def file_loaded(self, index : int, path : str, exposure_time : float) -> None:
		logger.debug('Exposure %d loaded from %s (exposure time %s)', index, path, exposure_time)

	def loading_finished(self, requested : int, loaded : int, missing : list[int]) -> None:
		logger.info('Read %d out of %d', loaded, requested)
		if missing:
			logger.warning('Exposure time missing for exposure(s) %s. Set them manually before fusion.', missing)

	def exposure_time_changed(self, index : int, exposure_time : float) -> None:
		logger.debug('Exposure time of %d changed to %s', index, exposure_time)

	def alignment_output(self, line : str) -> None:
		logger.debug(line)

	def alignment_finished(self, exit_code : int | None) -> None:
		if exit_code == 0:
			logger.info('Alignment finished')
		else:
			logger.error('Alignment exited with code %s', exit_code)


class ProgressListener(LoggingListener):
	"""
	Logs like LoggingListener, and draws a progress bar while files load.
	"""
	_bar : tqdm | None = None

	def __init__(self, description : str = 'Loading exposures...') -> None:
		self.description = description
		self._bar = None

	def progress_started(self) -> None:
		self._bar = tqdm(desc=self.description, ncols=100)

	def progress_range(self, minimum : int, maximum : int) -> None:
		if self._bar is not None:
			self._bar.reset(total=maximum - minimum)

	def progress_value(self, value : int) -> None:
		if self._bar is not None:
			self._bar.n = value
			self._bar.refresh()

	def progress_finished(self) -> None:
		if self._bar is not None:
			self._bar.close()
			self._bar = None
