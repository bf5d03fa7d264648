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
import logging

from hdrprep.providers.base import Provider
from hdrprep.exposure.pixels import PixelFrame

logger = logging.getLogger(__name__)


class DecodeProvider(Provider, ABC):
	"""
	Turns an image file into pixels.
	"""

	def run(self, path : str) -> PixelFrame:
		return self.next(path)

	@abstractmethod
	def next(self, path : str) -> PixelFrame:
		"""
		Decode a single file.

		Args:
			path (str): The file to decode.

		Returns:
			PixelFrame: A PackedFrame for 8-bit files, a PlanarFrame for anything wider.

		Raises:
			LoadError: If the file cannot be decoded.
		"""
		raise NotImplementedError("DecodeProvider.next() must be implemented in a subclass.")


class MetadataProvider(Provider, ABC):
	"""
	Reads the capture metadata used to derive an exposure time.
	"""

	def run(self, path : str) -> float:
		return self.next(path)

	@abstractmethod
	def next(self, path : str) -> float:
		"""
		Compute the average luminance of a file from its metadata.

		Returns:
			float: The average luminance, or -1 if the metadata is missing or unreadable.
		"""
		raise NotImplementedError("MetadataProvider.next() must be implemented in a subclass.")
