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
from typing import Any, Optional
from pathlib import Path
import shutil
import subprocess
import logging

logger = logging.getLogger(__name__)


class Provider(ABC):
	"""
	An external collaborator of the pipeline: a decoder, an aligner, a fusion algorithm, or a metadata tool.
	"""

	@abstractmethod
	def next(self, *args, **kwargs) -> Any:
		"""
		Perform the provider's work for a single input. This method should be implemented in a subclass.
		"""
		raise NotImplementedError(f"{self.__class__.__name__}.next() must be implemented in a subclass.")

	def subprocess(self, command : list[str], cwd : Optional[Path | str] = None, check : bool = True, timeout : Optional[float] = None) -> tuple[str, str]:
		"""
		Run a subprocess, logging the command and its output.

		Args:
			command (list[str]):
				The command to run. If the executable is not on the PATH as given, shutil.which() is tried.
			cwd (Path, optional):
				The working directory to run the command in. Defaults to None.
			check (bool, optional):
				Whether to raise an exception if the command fails. Defaults to True.
			timeout (float, optional):
				Seconds to wait before giving up. Defaults to no limit.

		Returns:
			tuple[str, str]: The output of the command, and the error str from the command.

		Raises:
			subprocess.CalledProcessError:
				If the command fails, and check is True.
				Otherwise, the error is logged, and the error message is returned.
			FileNotFoundError:
				If the executable cannot be found.
		"""
		command = [str(part) for part in command]
		if not shutil.which(command[0]) and not Path(command[0]).exists():
			raise FileNotFoundError(f"Command '{command[0]}' not found.")

		logger.debug('Running: %s', ' '.join(command))
		try:
			output = subprocess.run(command, cwd=cwd, capture_output=True, text=True, check=check, timeout=timeout)
		except subprocess.CalledProcessError as e:
			logger.error('Command failed: %s', command)
			logger.error('Error message: %s', e.stderr)
			logger.error('Output: %s', e.stdout)
			raise

		if output.stdout:
			logger.debug(output.stdout)

		if output.returncode != 0:
			logger.error('Command failed: %s', command)
			logger.error('Error message: %s', output.stderr)
		elif output.stderr:
			logger.debug(output.stderr)

		return output.stdout, output.stderr
