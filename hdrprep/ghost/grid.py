"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    grid.py                                                                                              *
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
from typing import Iterator
import numpy as np

from hdrprep.config import GRID_SIZE
from hdrprep.exceptions import DegenerateGridError


class PatchGrid:
	"""
	A grid_size x grid_size partition of a frame, with one "ghosted" flag per cell.

	Cells are floor(width / grid_size) x floor(height / grid_size) pixels. Pixels past the last full cell on the
	right and bottom borders belong to no cell and are never read.

	Attributes:
		flags (np.ndarray): (grid_size, grid_size) booleans, indexed [row, column].
	"""
	grid_size : int
	cell_width : int
	cell_height : int
	flags : np.ndarray

	def __init__(self, width : int, height : int, grid_size : int = GRID_SIZE) -> None:
		if grid_size < 1:
			raise ValueError('grid_size must be a positive integer')

		self.grid_size = grid_size
		self.width = width
		self.height = height
		self.cell_width = width // grid_size
		self.cell_height = height // grid_size
		if self.cell_width == 0 or self.cell_height == 0:
			raise DegenerateGridError(width, height, grid_size)

		self.flags = np.zeros((grid_size, grid_size), dtype=bool)

	@property
	def covered(self) -> tuple[slice, slice]:
		"""
		The (rows, columns) region covered by whole cells.
		"""
		return (slice(0, self.grid_size * self.cell_height), slice(0, self.grid_size * self.cell_width))

	@property
	def flagged_count(self) -> int:
		return int(np.count_nonzero(self.flags))

	@property
	def flagged_fraction(self) -> float:
		return self.flagged_count / float(self.grid_size * self.grid_size)

	def cell(self, row : int, column : int) -> tuple[slice, slice]:
		"""
		The (rows, columns) pixel region of one cell.
		"""
		return (
			slice(row * self.cell_height, (row + 1) * self.cell_height),
			slice(column * self.cell_width, (column + 1) * self.cell_width),
		)

	def flagged_cells(self) -> Iterator[tuple[int, int]]:
		for row, column in zip(*np.nonzero(self.flags)):
			yield int(row), int(column)

	def cell_means(self, samples : np.ndarray) -> np.ndarray:
		"""
		Average a per-pixel array over each cell.

		Args:
			samples (np.ndarray): Array covering exactly the `covered` region.

		Returns:
			np.ndarray: (grid_size, grid_size) averages.
		"""
		blocks = samples.reshape(self.grid_size, self.cell_height, self.grid_size, self.cell_width)
		return blocks.mean(axis=(1, 3))

	def accumulate(self, flags : np.ndarray) -> None:
		"""
		OR the flags from one exposure comparison into the grid.

		A cell ends up flagged if it was an outlier against any compared exposure; which comparison flagged it is
		not recorded.
		"""
		self.flags |= np.asarray(flags, dtype=bool)

	def to_mask(self) -> np.ndarray:
		"""
		Paint the flagged cells into a (height, width) uint8 alpha mask: 255 in flagged cells, 0 elsewhere.
		"""
		mask = np.zeros((self.height, self.width), dtype=np.uint8)
		for row, column in self.flagged_cells():
			mask[self.cell(row, column)] = 255
		return mask

	def __repr__(self) -> str:
		return f'PatchGrid({self.grid_size}x{self.grid_size}, cell {self.cell_width}x{self.cell_height}, {self.flagged_count} flagged)'
