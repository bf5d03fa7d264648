"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    exceptions.py                                                                                        *
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


class HdrPrepError(Exception):
	pass


class LoadError(HdrPrepError):
	"""
	A single exposure could not be decoded. Never fatal to the batch it belongs to.
	"""
	def __init__(self, path : str, reason : str = '') -> None:
		self.path = path
		self.reason = reason
		super().__init__(f'Cannot load {path}: {reason}' if reason else f'Cannot load {path}')


class ExposureSetError(HdrPrepError):
	"""
	The exposure set is (or would become) inconsistent.
	"""


class TypeMismatchError(ExposureSetError):
	pass


class SizeMismatchError(ExposureSetError):
	pass


class ExposureSetLockedError(ExposureSetError):
	"""
	The set is in an errored state and refuses mutation until clear_error() is called.
	"""


class MissingExposureError(HdrPrepError):
	def __init__(self, indices : list[int]) -> None:
		self.indices = list(indices)
		super().__init__(f'Exposure time missing for exposure(s) {self.indices}')


class AlignmentError(HdrPrepError):
	def __init__(self, exit_code : int | None, message : str = '') -> None:
		self.exit_code = exit_code
		super().__init__(message or f'Alignment exited with code {exit_code}')


class AlignmentInProgressError(HdrPrepError):
	pass


class DegenerateGridError(HdrPrepError):
	"""
	The image is smaller than the patch grid in at least one axis.
	"""
	def __init__(self, width : int, height : int, grid_size : int) -> None:
		self.width = width
		self.height = height
		self.grid_size = grid_size
		super().__init__(f'Grid of {grid_size}x{grid_size} is too fine for a {width}x{height} image')


class UnexpectedStateError(HdrPrepError, RuntimeError):
	"""
	The application has reached an unexpected state.
	"""
