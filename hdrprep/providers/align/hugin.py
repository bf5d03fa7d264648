"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    hugin.py                                                                                             *
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
# Alignment through Hugin's align_image_stack.
#
# The exposures are written to TIFF files in a temporary directory, align_image_stack runs there as a child process,
# and its aligned_NNNN.tif output is decoded back into the set. The child process runs in the background: start()
# returns an AlignmentJob that can be cancelled, and whose wait() relays the process output to the listener.
from __future__ import annotations
from pathlib import Path
import queue
import subprocess
import threading
import time
import logging
import imageio.v3 as iio

from hdrprep.config import ALIGN_TIMEOUT, DEFAULT_AIS_OPTIONS
from hdrprep.exceptions import AlignmentError, AlignmentInProgressError
from hdrprep.exposure.events import ExposureListener
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.providers.align.base import AlignmentProvider
from hdrprep.providers.decode.base import DecodeProvider
from hdrprep.providers.decode.imageio import ImageioProvider

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1
INPUT_PREFIX = 'hdrprep_input_'
DEBUG_FILE = 'hugin_debug_optim_results.txt'

# Marks the end of the output stream
_EOF = object()


class AlignmentJob:
	"""
	One running align_image_stack process.

	Output lines are collected by a reader thread, and handed to the listener by whichever thread calls wait().
	Completion is reported to the listener exactly once.
	"""
	command : list[str]
	cwd : Path
	listener : ExposureListener
	exit_code : int | None

	def __init__(self, command : list[str], cwd : Path, listener : ExposureListener | None = None) -> None:
		self.command = command
		self.cwd = cwd
		self.listener = listener or ExposureListener()
		self.exit_code = None
		self._process : subprocess.Popen | None = None
		self._reader : threading.Thread | None = None
		self._lines : queue.Queue = queue.Queue()
		self._cancelled = False
		self._finished = False

	@property
	def running(self) -> bool:
		return self._process is not None and not self._finished

	@property
	def cancelled(self) -> bool:
		return self._cancelled

	def start(self) -> AlignmentJob:
		logger.debug('Running: %s', ' '.join(self.command))
		self._process = subprocess.Popen(
			self.command,
			cwd=self.cwd,
			stdout=subprocess.PIPE,
			stderr=subprocess.STDOUT,
			text=True,
		)
		self._reader = threading.Thread(target=self._read_output, name='hdrprep-align', daemon=True)
		self._reader.start()
		return self

	def _read_output(self) -> None:
		try:
			for line in self._process.stdout:
				self._lines.put(line.rstrip('\n'))
		finally:
			self._lines.put(_EOF)

	def cancel(self) -> None:
		"""
		Kill the child process. wait() then reports it as failed.
		"""
		if self._process is not None and self._process.poll() is None:
			logger.info('Cancelling alignment')
			self._cancelled = True
			self._process.kill()

	def wait(self, timeout : float | None = ALIGN_TIMEOUT) -> int | None:
		"""
		Relay the process output to the listener until it exits.

		Args:
			timeout (float, optional): Seconds before the process is killed. None waits forever.

		Returns:
			int | None: The exit code. Negative when the process was killed by a signal.
		"""
		if self._process is None:
			raise AlignmentError(None, 'Alignment was never started')
		if self._finished:
			return self.exit_code

		deadline = time.monotonic() + timeout if timeout is not None else None
		while True:
			if deadline is not None and time.monotonic() > deadline and not self._cancelled:
				logger.error('Alignment timed out after %s seconds', timeout)
				self.cancel()
			try:
				line = self._lines.get(timeout=POLL_INTERVAL)
			except queue.Empty:
				continue
			if line is _EOF:
				break
			self.listener.alignment_output(line)

		self.exit_code = self._process.wait()
		self._process.stdout.close()
		self._finished = True
		self.listener.alignment_finished(self.exit_code)
		return self.exit_code


class HuginProvider(AlignmentProvider):
	"""
	Align exposures with align_image_stack.

	Args:
		temp_dir (Path): Where inputs and aligned outputs are written. Everything written there is removed again.
		options (list[str]): align_image_stack options. An output prefix is added with -a when missing.
		crop (bool): Pass -C, so the aligned images are cropped to the area covered by all of them.
		listener (ExposureListener): Receives the process output and completion.
		decoder (DecodeProvider): Reads the aligned files back.
		executable (str): The align_image_stack binary.
		timeout (float): Seconds before a run is killed.
	"""
	def __init__(self,
				 temp_dir : Path | str,
				 options : list[str] | None = None,
				 crop : bool = False,
				 listener : ExposureListener | None = None,
				 decoder : DecodeProvider | None = None,
				 executable : str = 'align_image_stack',
				 timeout : float | None = ALIGN_TIMEOUT) -> None:
		self.temp_dir = Path(temp_dir)
		self.options = list(options if options is not None else DEFAULT_AIS_OPTIONS)
		self.crop = crop
		self.listener = listener or ExposureListener()
		self.decoder = decoder or ImageioProvider()
		self.executable = executable
		self.timeout = timeout
		self._job : AlignmentJob | None = None

	@property
	def prefix(self) -> str:
		if '-a' in self.options:
			index = self.options.index('-a')
			if index + 1 < len(self.options):
				return self.options[index + 1]
		return 'aligned_'

	@property
	def job(self) -> AlignmentJob | None:
		return self._job

	def input_files(self, count : int) -> list[Path]:
		return [self.temp_dir / f'{INPUT_PREFIX}{index:04d}.tif' for index in range(count)]

	def output_files(self, count : int) -> list[Path]:
		return [self.temp_dir / f'{self.prefix}{index:04d}.tif' for index in range(count)]

	def command(self, inputs : list[Path]) -> list[str]:
		command = [self.executable, *self.options]
		if '-a' not in self.options:
			command += ['-a', self.prefix]
		if self.crop:
			command.append('-C')
		return command + [path.name for path in inputs]

	def start(self, exposure_set : ExposureSet) -> AlignmentJob:
		"""
		Write the inputs and launch align_image_stack in the background.

		Raises:
			AlignmentInProgressError: If a previous job is still running.
			FileNotFoundError: If align_image_stack is not installed.
		"""
		if self._job is not None and self._job.running:
			raise AlignmentInProgressError('An alignment is already running for this set')

		self.temp_dir.mkdir(parents=True, exist_ok=True)
		inputs = self.input_files(len(exposure_set))
		for item, path in zip(exposure_set, inputs):
			logger.debug('Writing %s for alignment', path)
			iio.imwrite(path, item.frame.to_image())

		job = AlignmentJob(self.command(inputs), self.temp_dir, self.listener)
		try:
			job.start()
		except OSError:
			self.remove_temp_files(len(exposure_set))
			raise

		self._job = job
		return job

	def cancel(self) -> None:
		if self._job is not None:
			self._job.cancel()

	def finish(self, exposure_set : ExposureSet, job : AlignmentJob) -> None:
		"""
		Wait for a job, then decode its output into the set. Temporary files are removed either way.

		Raises:
			AlignmentError: If the process was cancelled or exited with a non-zero code. The set is unchanged.
		"""
		try:
			exit_code = job.wait(self.timeout)
			if job.cancelled or exit_code != 0:
				raise AlignmentError(exit_code, f'align_image_stack failed with exit code {exit_code}')

			frames = [self.decoder.run(str(path)) for path in self.output_files(len(exposure_set))]
			exposure_set.replace_frames(frames)
		finally:
			self.remove_temp_files(len(exposure_set))

	def next(self, exposure_set : ExposureSet) -> None:
		self.finish(exposure_set, self.start(exposure_set))

	def remove_temp_files(self, count : int) -> None:
		for path in [*self.input_files(count), *self.output_files(count), self.temp_dir / DEBUG_FILE]:
			if path.exists():
				logger.debug('Removing %s', path)
				path.unlink()
