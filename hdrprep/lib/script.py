"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    script.py                                                                                            *
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
from abc import ABC
import os
from pydantic import BaseModel, ConfigDict, field_validator


class Script(BaseModel, ABC):
	"""
	Base for the long-running, multi-threaded parts of the pipeline.
	"""

	max_threads : int = 0

	model_config = ConfigDict(arbitrary_types_allowed=True)

	@field_validator("max_threads", mode="before")
	def validate_max_threads(cls, value):
		# Sensible default
		if not value:
			# Between 1 and 4 threads. Decoding is IO bound, and more than 4 readers stresses the disk.
			return max(1, min(4, round((os.cpu_count() or 2) / 2)))

		if value < 1:
			raise ValueError("max_threads must be a positive integer.")

		return value
