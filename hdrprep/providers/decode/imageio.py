"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    imageio.py                                                                                           *
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
import logging
import numpy as np
import imageio.v3 as iio
import rawpy

from hdrprep.exceptions import LoadError
from hdrprep.exposure.pixels import PixelFrame, PackedFrame, PlanarFrame, MDR_MAX_VALUE
from hdrprep.providers.decode.base import DecodeProvider

logger = logging.getLogger(__name__)

RAW_EXTENSIONS = {'arw', 'nef', 'cr2', 'cr3', 'dng', 'raf', 'orf', 'rw2', 'pef', 'srw'}


class ImageioProvider(DecodeProvider):
	"""
	Decode image files with imageio, and camera RAW files with rawpy.

	8-bit files become LDR PackedFrames. 16-bit, float and RAW files become MDR PlanarFrames with samples in
	[0, 65535].
	"""

	def next(self, path : str) -> PixelFrame:
		extension = Path(path).suffix.lower().lstrip('.')
		try:
			if extension in RAW_EXTENSIONS:
				return self.read_raw(path)
			return self.from_array(iio.imread(path))
		except LoadError:
			raise
		except (OSError, ValueError, RuntimeError, rawpy.LibRawError) as e:
			raise LoadError(path, str(e)) from e

	def read_raw(self, path : str) -> PlanarFrame:
		"""
		Demosaic a RAW file into linear 16-bit RGB.
		"""
		with rawpy.imread(path) as raw:
			rgb = raw.postprocess(output_bps=16, gamma=(1, 1), no_auto_bright=True, use_camera_wb=True)
		return PlanarFrame.from_array(rgb, max_value=MDR_MAX_VALUE)

	@classmethod
	def from_array(cls, data : np.ndarray) -> PixelFrame:
		"""
		Wrap a decoded array in the frame matching its sample type.
		"""
		data = np.asarray(data)
		if data.ndim == 3 and data.shape[2] > 3:
			data = data[..., :3]
		if data.ndim not in (2, 3):
			raise ValueError(f'Unsupported image shape {data.shape}')

		if data.dtype == np.uint8:
			return PackedFrame(data)

		if data.dtype == np.uint16:
			return PlanarFrame.from_array(data.astype(np.float32), max_value=MDR_MAX_VALUE)

		if np.issubdtype(data.dtype, np.floating):
			# Float files are taken to be unit range
			return PlanarFrame.from_array(np.clip(data, 0.0, None).astype(np.float32) * MDR_MAX_VALUE, max_value=MDR_MAX_VALUE)

		raise ValueError(f'Unsupported sample type {data.dtype}')
