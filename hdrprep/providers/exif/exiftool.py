"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    exiftool.py                                                                                          *
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
from pathlib import Path
import subprocess
import logging

from hdrprep.providers.base import Provider

logger = logging.getLogger(__name__)


class ExiftoolProvider(Provider):
	"""
	Copy capture metadata from an original exposure onto a file derived from it.
	"""

	def __init__(self, executable : str = 'exiftool') -> None:
		self.executable = executable

	def run(self, pairs : list[tuple[Path | str, Path | str]]) -> int:
		"""
		Copy metadata for several (source, destination) pairs.

		Returns:
			int: How many copies succeeded.
		"""
		return sum(1 for source, destination in pairs if self.next(source, destination) is not None)

	def next(self, source : Path | str, destination : Path | str) -> Path | None:
		"""
		Copy all tags from source to destination, overwriting destination in place.

		Returns:
			Path | None: The destination, or None if the copy failed.
		"""
		command = [self.executable, '-overwrite_original', '-TagsFromFile', str(source), '-all', str(destination)]
		try:
			self.subprocess(command)
		except FileNotFoundError as e:
			logger.warning('Cannot copy EXIF data to %s -> %s', destination, e)
			return None
		except subprocess.CalledProcessError as e:
			logger.error('Failed to copy EXIF data from %s to %s -> %s', source, destination, e)
			return None

		return Path(destination)
