"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    choices.py                                                                                           *
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
from enum import Enum
from typing import Any


class Choices(Enum):
	"""
	String-valued enum that compares equal to its value, so CLI arguments and settings can be matched directly.
	"""

	@classmethod
	def values(cls) -> list[str]:
		return [item.value for item in cls]

	@classmethod
	def names(cls) -> list[str]:
		return [item.name for item in cls]

	@classmethod
	def has_value(cls, value : str) -> bool:
		return value in cls.values()

	def __eq__(self, value : Any) -> bool:
		if isinstance(value, str):
			return self.value == value
		return super().__eq__(value)

	def __hash__(self) -> int:
		# Needed, because overriding __eq__ removes the default hash
		return hash(self.value)

	def __str__(self) -> str:
		return self.value
