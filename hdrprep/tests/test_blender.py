"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    test_blender.py                                                                                      *
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

from hdrprep.exceptions import ExposureSetLockedError
from hdrprep.exposure.colorspace import lightness
from hdrprep.ghost.blender import ManualBlender
from hdrprep.tests.helpers import grey_planar, make_set, planar


class TestManualBlender(unittest.TestCase):

	def setUp(self):
		self.blender = ManualBlender()
		self.target = grey_planar(0.5, 8, 8)
		source = np.full((8, 8), 0.25)
		source[0:4, 0:4] = 0.75
		self.source = planar(source)
		# avg(target) / avg(source) = 0.5 / 0.375
		self.scale = 0.5 / 0.375
		self.empty = np.zeros((8, 8), dtype=np.uint8)

	def test_no_mask_changes_nothing(self):
		changed = self.blender.blend(self.target, self.source, self.empty, self.empty)
		self.assertEqual(changed, 0)
		np.testing.assert_allclose(self.target.read()[0], 0.5)

	def test_auto_mask(self):
		auto = self.empty.copy()
		auto[0:2, 0:2] = 128

		changed = self.blender.blend(self.target, self.source, auto, self.empty)

		self.assertEqual(changed, 4)
		alpha = 128 / 255.0
		# The source peaks at 0.75, which caps the rescaled lightness
		expected = (1 - alpha) * 0.5 + alpha * min(0.75 * self.scale, 0.75)
		r, g, b = self.target.read()
		np.testing.assert_allclose(r[0:2, 0:2], expected, atol=1e-6)
		np.testing.assert_allclose(g[0:2, 0:2], expected, atol=1e-6)
		np.testing.assert_allclose(r[2:, :], 0.5, atol=1e-6)

	def test_good_mask_takes_priority(self):
		auto = self.empty.copy()
		good = self.empty.copy()
		auto[6, 6] = 255
		good[6, 6] = 64
		auto[7, 7] = 255

		changed = self.blender.blend(self.target, self.source, auto, good)

		self.assertEqual(changed, 2)
		alpha = 64 / 255.0
		r = self.target.read()[0]
		self.assertAlmostEqual(float(r[6, 6]), (1 - alpha) * 0.5 + alpha * 0.25 * self.scale, places=5)
		# Full auto alpha replaces the pixel outright
		self.assertAlmostEqual(float(r[7, 7]), 0.25 * self.scale, places=5)

	def test_lightness_capped_at_brightest_input(self):
		target = grey_planar(0.5, 8, 8)
		dark = np.full((8, 8), 0.05)
		dark[3, 3] = 0.5
		full = np.full((8, 8), 255, dtype=np.uint8)

		self.blender.blend(target, planar(dark), full, self.empty)

		blended = lightness(*target.read())
		self.assertAlmostEqual(float(blended.max()), 0.5, places=5)
		self.assertAlmostEqual(float(blended[3, 3]), 0.5, places=5)
		scale = 0.5 / float(dark.mean())
		self.assertAlmostEqual(float(blended[0, 0]), 0.05 * scale, places=5)

	def test_source_is_untouched(self):
		auto = np.full((8, 8), 255, dtype=np.uint8)
		self.blender.blend(self.target, self.source, auto, self.empty)
		np.testing.assert_allclose(self.source.read()[0][0, 0], 0.75, atol=1e-6)

	def test_shape_mismatch(self):
		with self.assertRaises(ValueError):
			self.blender.blend(self.target, grey_planar(0.5, 4, 4), self.empty, self.empty)

	def test_apply(self):
		exposure_set = make_set([grey_planar(0.4, 8, 8), grey_planar(0.2, 8, 8), grey_planar(0.6, 8, 8)])
		exposure_set.ghost_masks[0][0:4, :] = 255

		self.blender.apply(exposure_set, 1)

		first = exposure_set[0].frame.read()[0]
		# The good exposure is scaled to the target's brightness before blending
		np.testing.assert_allclose(first, 0.4, atol=1e-6)
		np.testing.assert_allclose(exposure_set[2].frame.read()[0], 0.6, atol=1e-6)
		np.testing.assert_allclose(exposure_set[1].frame.read()[0], 0.2, atol=1e-6)

	def test_apply_with_structure(self):
		good = np.full((8, 8), 0.2)
		good[0, 0] = 0.6
		exposure_set = make_set([grey_planar(0.4, 8, 8), planar(good)])
		exposure_set.ghost_masks[0][0, 0] = 255

		self.blender.apply(exposure_set, 1)

		scale = 0.4 / float(good.mean())
		r = exposure_set[0].frame.read()[0]
		self.assertAlmostEqual(float(r[0, 0]), min(0.6 * scale, 0.6), places=5)
		self.assertAlmostEqual(float(r[0, 1]), 0.4, places=5)

	def test_apply_on_errored_set(self):
		exposure_set = make_set([grey_planar(0.4, 8, 8), grey_planar(0.2, 8, 8)])
		exposure_set.ghost_masks[0][:, :] = 255
		exposure_set.fail('broken')

		with self.assertRaises(ExposureSetLockedError):
			self.blender.apply(exposure_set, 1)
		np.testing.assert_allclose(exposure_set[0].frame.read()[0], 0.4, atol=1e-6)

	def test_apply_bad_index(self):
		exposure_set = make_set([grey_planar(0.4, 8, 8)])
		with self.assertRaises(IndexError):
			self.blender.apply(exposure_set, 3)


if __name__ == '__main__':
	unittest.main()
