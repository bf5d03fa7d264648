"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    exif.py                                                                                              *
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
from decimal import Decimal
from enum import Enum
import logging
import exifread
import exifread.utils

from hdrprep.providers.decode.base import MetadataProvider

logger = logging.getLogger(__name__)

# Reflected-light meter calibration constant
METER_CALIBRATION = 12.07488


class ExifTag(str, Enum):
	EXPOSURE_TIME = 'EXIF ExposureTime'
	F_NUMBER = 'EXIF FNumber'
	ISO = 'EXIF ISOSpeedRatings'


class ExifreadProvider(MetadataProvider):
	"""
	Derive the average luminance of an exposure from its EXIF tags:

		exposure_time * iso / (f_number^2 * 12.07488)
	"""

	def next(self, path : str) -> float:
		try:
			with open(path, 'rb') as image_file:
				tags = exifread.process_file(image_file, details=False)
		except OSError as e:
			logger.warning('Unable to read EXIF data from %s: %s', path, e)
			return -1.0

		exposure_time = self.number(tags, ExifTag.EXPOSURE_TIME)
		f_number = self.number(tags, ExifTag.F_NUMBER)
		iso = self.number(tags, ExifTag.ISO)

		if not exposure_time or not f_number or not iso:
			logger.warning('Missing exposure metadata in %s (time=%s, f=%s, iso=%s)', path, exposure_time, f_number, iso)
			return -1.0

		return float(exposure_time * iso / (f_number * f_number * Decimal(str(METER_CALIBRATION))))

	@classmethod
	def number(cls, tags : dict, key : ExifTag) -> Decimal | None:
		"""
		Read a numeric tag as a Decimal, converting ratios.
		"""
		value = tags.get(key.value)
		if value is None:
			return None

		values = getattr(value, 'values', value)
		if isinstance(values, (list, tuple)):
			if not values:
				return None
			values = values[0]

		if isinstance(values, exifread.utils.Ratio):
			if values.denominator == 0:
				return None
			return Decimal(values.numerator) / Decimal(values.denominator)

		try:
			return Decimal(str(values))
		except ArithmeticError:
			logger.debug('Tag %s has a non numeric value: %s', key.value, values)
			return None
