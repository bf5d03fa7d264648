"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    config.py                                                                                            *
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
import os
import tempfile
import logging
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Cells per axis of the patch grid used for automatic anti-ghosting
GRID_SIZE = 40
# Exposure values are kept inside [-EV_LIMIT, EV_LIMIT]
EV_LIMIT = 10.0
# A pixel is an outlier when its log-ratio residual exceeds this fraction of |deltaEV|
OUTLIER_FACTOR = 0.7
# Fraction of outlier pixels above which a cell is flagged
DEFAULT_THRESHOLD = 0.5
MAX_THREADS = 4
ALIGN_TIMEOUT = 300         # 5 minutes
DEFAULT_AIS_OPTIONS = ['-v', '-a', 'aligned_']
ENV_PREFIX = 'HDRPREP_'


class Settings(BaseModel):
	"""
	Runtime settings for the pipeline, read from HDRPREP_* environment variables (and a .env file).
	"""
	grid_size : int = GRID_SIZE
	threshold : float = DEFAULT_THRESHOLD
	max_threads : int = MAX_THREADS
	temp_dir : Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
	align_image_stack_options : list[str] = Field(default_factory=lambda: list(DEFAULT_AIS_OPTIONS))
	exiftool : str = 'exiftool'

	@field_validator('grid_size')
	def validate_grid_size(cls, value : int) -> int:
		if value < 1:
			raise ValueError('grid_size must be a positive integer.')
		return value

	@field_validator('threshold')
	def validate_threshold(cls, value : float) -> float:
		if not 0.0 <= value <= 1.0:
			raise ValueError('threshold must be a fraction between 0 and 1.')
		return value

	@field_validator('max_threads', mode='before')
	def validate_max_threads(cls, value):
		if not value:
			return max(1, min(MAX_THREADS, os.cpu_count() or 1))
		if int(value) < 1:
			raise ValueError('max_threads must be a positive integer.')
		return value

	@field_validator('align_image_stack_options', mode='before')
	def split_options(cls, value):
		if isinstance(value, str):
			return value.split()
		return value

	@classmethod
	def from_env(cls, **overrides) -> Settings:
		"""
		Build settings from the environment. Keyword arguments that are not None win over the environment.
		"""
		load_dotenv()

		values = {}
		for field in cls.model_fields:
			env_value = os.getenv(f'{ENV_PREFIX}{field.upper()}')
			if env_value is not None:
				values[field] = env_value

		# Shorter, friendlier name for the align_image_stack options
		if (ais_options := os.getenv(f'{ENV_PREFIX}AIS_OPTIONS')) is not None:
			values['align_image_stack_options'] = ais_options

		values.update({key: value for key, value in overrides.items() if value is not None})
		logger.debug('Settings loaded: %s', values)
		return cls(**values)
