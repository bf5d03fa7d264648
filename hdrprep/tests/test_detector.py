"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    test_detector.py                                                                                     *
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
import unittest
import numpy as np

from hdrprep.exceptions import DegenerateGridError, MissingExposureError
from hdrprep.ghost.detector import GhostDetector
from hdrprep.ghost.grid import PatchGrid
from hdrprep.tests.helpers import coloured_planar, grey_packed, grey_planar, make_set, planar


def moving_object_set(noise : float = 0.0):
	"""
	Two grey exposures one stop apart, except for a dark object in cell (1, 2) of the second. Without noise they
	agree everywhere else.
	"""
	rng = np.random.default_rng(3)
	dark = np.full((80, 80), 0.2) + rng.uniform(-noise, noise, size=(80, 80))
	bright = dark * 2.0 + rng.uniform(-noise, noise, size=(80, 80))
	bright[20:40, 40:60] = 0.05
	return make_set([planar(dark), planar(bright)], [1.0, 2.0])


class TestPatchGrid(unittest.TestCase):

	def test_cell_extent(self):
		grid = PatchGrid(85, 83, 4)
		self.assertEqual((grid.cell_width, grid.cell_height), (21, 20))
		self.assertEqual(grid.covered, (slice(0, 80), slice(0, 84)))
		self.assertEqual(grid.cell(1, 2), (slice(20, 40), slice(42, 63)))

	def test_degenerate(self):
		with self.assertRaises(DegenerateGridError):
			PatchGrid(10, 10, 40)
		with self.assertRaises(DegenerateGridError):
			PatchGrid(100, 39, 40)

	def test_accumulate_is_or(self):
		grid = PatchGrid(4, 4, 2)
		grid.accumulate(np.array([[True, False], [False, False]]))
		grid.accumulate(np.array([[False, False], [False, True]]))
		grid.accumulate(np.zeros((2, 2), dtype=bool))

		self.assertEqual(list(grid.flagged_cells()), [(0, 0), (1, 1)])
		self.assertEqual(grid.flagged_count, 2)
		self.assertAlmostEqual(grid.flagged_fraction, 0.5)

	def test_cell_means(self):
		grid = PatchGrid(4, 4, 2)
		samples = np.zeros((4, 4))
		samples[0, 0] = 1.0
		np.testing.assert_allclose(grid.cell_means(samples), [[0.25, 0.0], [0.0, 0.0]])

	def test_to_mask(self):
		grid = PatchGrid(5, 4, 2)
		grid.accumulate(np.array([[False, True], [False, False]]))
		mask = grid.to_mask()

		self.assertEqual(mask.shape, (4, 5))
		self.assertEqual(mask.dtype, np.uint8)
		self.assertTrue((mask[0:2, 2:4] == 255).all())
		self.assertEqual(int(mask.sum()), 4 * 255)


class TestGhostDetector(unittest.TestCase):

	def test_identical_exposures_flag_nothing(self):
		exposure_set = make_set([grey_packed(128), grey_packed(128)], [1.0, 1.0])
		result = GhostDetector(grid_size=40).detect(exposure_set, 0.5)

		self.assertEqual(result.grid.flagged_count, 0)
		self.assertEqual(result.reference_index, 0)
		self.assertEqual(result.scale_factors, [1.0, 1.0])

	def test_reference_is_most_different_hue(self):
		rng = np.random.default_rng(11)
		hue = rng.uniform(0.1, 0.4, size=(48, 48))
		exposure_set = make_set(
			[coloured_planar(hue), coloured_planar(hue), coloured_planar(hue + 0.3)],
			[1.0, 1.0, 1.0],
		)

		result = GhostDetector(grid_size=8).detect(exposure_set, 0.5)

		self.assertEqual(result.reference_index, 2)
		self.assertGreater(result.hue_errors[2], result.hue_errors[0])
		self.assertGreater(result.hue_errors[2], result.hue_errors[1])
		self.assertAlmostEqual(result.hue_errors[0], result.hue_errors[1])

	def test_moving_object_is_flagged(self):
		result = GhostDetector(grid_size=4).detect(moving_object_set(), 0.5)

		self.assertEqual(result.reference_index, 0)
		self.assertEqual(list(result.grid.flagged_cells()), [(1, 2)])

	def test_scale_factors(self):
		exposure_set = moving_object_set()
		result = GhostDetector(grid_size=4).detect(exposure_set, 0.5)

		self.assertEqual(result.scale_factors[0], 1.0)
		self.assertAlmostEqual(result.scale_factors[1], result.average_lightness[1] / result.average_lightness[0])
		self.assertGreater(result.scale_factors[1], 1.5)

	def test_black_reference_gives_unit_scale(self):
		exposure_set = make_set([grey_planar(0.0, 8, 8), grey_planar(0.0, 8, 8)], [1.0, 1.0])
		result = GhostDetector(grid_size=2).detect(exposure_set, 0.5)
		self.assertEqual(result.scale_factors, [1.0, 1.0])

	def test_threshold_is_monotonic(self):
		exposure_set = moving_object_set(noise=0.15)
		detector = GhostDetector(grid_size=8)

		counts = [detector.detect(exposure_set, threshold).grid.flagged_count for threshold in (0.0, 0.05, 0.1, 0.25, 0.5, 0.75, 0.99)]

		self.assertEqual(counts, sorted(counts, reverse=True))
		self.assertGreater(counts[0], counts[-1])

	def test_degenerate_grid(self):
		exposure_set = make_set([grey_packed(100, 10, 10), grey_packed(120, 10, 10)], [1.0, 2.0])
		with self.assertRaises(DegenerateGridError):
			GhostDetector(grid_size=40).detect(exposure_set, 0.5)

	def test_missing_exposure_time(self):
		exposure_set = make_set([grey_packed(100), grey_packed(120)], [1.0, -1.0])
		with self.assertRaises(MissingExposureError) as context:
			GhostDetector().detect(exposure_set)
		self.assertEqual(context.exception.indices, [1])

	def test_empty_set(self):
		with self.assertRaises(ValueError):
			GhostDetector().detect(make_set([]))


if __name__ == '__main__':
	unittest.main()
