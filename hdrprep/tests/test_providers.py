"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    test_providers.py                                                                                    *
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
import io
import os
import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch
import numpy as np
import imageio.v3 as iio
from exifread.utils import Ratio

from hdrprep.exceptions import AlignmentError, AlignmentInProgressError, LoadError, MissingExposureError
from hdrprep.exposure.events import ExposureListener
from hdrprep.exposure.pixels import PackedFrame, PlanarFrame, shift_array
from hdrprep.providers.align import HuginProvider, MTBProvider
from hdrprep.providers.base import Provider
from hdrprep.providers.decode import ExifreadProvider, ImageioProvider
from hdrprep.providers.decode.exif import METER_CALIBRATION
from hdrprep.providers.exif import ExiftoolProvider
from hdrprep.providers.merge import DebevecProvider, FusionConfig, WeightFunction, WeightedMergeProvider
from hdrprep.tests.helpers import FakeDecoder, grey_packed, grey_planar, make_set, planar


class Tag:
	"""
	Stands in for an exifread IfdTag.
	"""
	def __init__(self, *values):
		self.values = list(values)


class FakeProcess:

	def __init__(self, output : str, exit_code : int) -> None:
		self.stdout = io.StringIO(output)
		self.exit_code = exit_code
		self.killed = False

	def poll(self):
		return self.exit_code

	def wait(self):
		return self.exit_code

	def kill(self):
		self.killed = True


class TestProviderBase(unittest.TestCase):

	class EchoProvider(Provider):
		def next(self, *args, **kwargs):
			return None

	def test_missing_executable(self):
		with patch('shutil.which', return_value=None):
			with self.assertRaises(FileNotFoundError):
				self.EchoProvider().subprocess(['definitely-not-installed-hdrprep'])

	@patch('shutil.which', return_value='/usr/bin/tool')
	@patch('subprocess.run')
	def test_subprocess_output(self, mock_run, mock_which):
		mock_run.return_value = subprocess.CompletedProcess(['tool'], 0, stdout='out', stderr='')
		self.assertEqual(self.EchoProvider().subprocess(['tool', '-v']), ('out', ''))
		self.assertEqual(mock_run.call_args[0][0], ['tool', '-v'])

	@patch('shutil.which', return_value='/usr/bin/tool')
	@patch('subprocess.run', side_effect=subprocess.CalledProcessError(2, ['tool'], 'out', 'err'))
	def test_subprocess_failure(self, mock_run, mock_which):
		with self.assertRaises(subprocess.CalledProcessError):
			self.EchoProvider().subprocess(['tool'])


class TestImageioProvider(unittest.TestCase):

	def setUp(self):
		self.temp_dir = tempfile.mkdtemp()
		self.provider = ImageioProvider()

	def tearDown(self):
		shutil.rmtree(self.temp_dir)

	def test_from_array(self):
		self.assertIsInstance(ImageioProvider.from_array(np.zeros((4, 4, 3), dtype=np.uint8)), PackedFrame)
		self.assertIsInstance(ImageioProvider.from_array(np.zeros((4, 4, 4), dtype=np.uint8)), PackedFrame)

		wide = ImageioProvider.from_array(np.full((4, 4, 3), 65535, dtype=np.uint16))
		self.assertIsInstance(wide, PlanarFrame)
		self.assertAlmostEqual(wide.get_channel(0, 0, 0), 1.0)

		floating = ImageioProvider.from_array(np.full((4, 4, 3), 0.5, dtype=np.float32))
		self.assertIsInstance(floating, PlanarFrame)
		self.assertAlmostEqual(floating.get_channel(1, 1, 2), 0.5, places=5)

		with self.assertRaises(ValueError):
			ImageioProvider.from_array(np.zeros((4, 4, 3), dtype=np.int64))

	def test_decode_png(self):
		path = os.path.join(self.temp_dir, 'exposure.png')
		pixels = np.zeros((6, 5, 3), dtype=np.uint8)
		pixels[2, 3] = [10, 20, 30]
		iio.imwrite(path, pixels)

		frame = self.provider.run(path)

		self.assertIsInstance(frame, PackedFrame)
		self.assertEqual(frame.shape, (6, 5))
		self.assertEqual(frame.pixels[2, 3].tolist(), [10, 20, 30])

	def test_missing_file(self):
		with self.assertRaises(LoadError) as context:
			self.provider.run(os.path.join(self.temp_dir, 'missing.png'))
		self.assertIn('missing.png', context.exception.path)


class TestExifreadProvider(unittest.TestCase):

	def setUp(self):
		handle, self.path = tempfile.mkstemp(suffix='.jpg')
		os.close(handle)

	def tearDown(self):
		os.remove(self.path)

	def test_average_luminance(self):
		tags = {
			'EXIF ExposureTime': Tag(Ratio(1, 100)),
			'EXIF FNumber': Tag(Ratio(4, 1)),
			'EXIF ISOSpeedRatings': Tag(100),
		}
		with patch('exifread.process_file', return_value=tags):
			luminance = ExifreadProvider().run(self.path)

		self.assertAlmostEqual(luminance, 0.01 * 100 / (16 * METER_CALIBRATION))

	def test_missing_tag(self):
		tags = {'EXIF ExposureTime': Tag(Ratio(1, 100)), 'EXIF FNumber': Tag(Ratio(4, 1))}
		with patch('exifread.process_file', return_value=tags):
			self.assertEqual(ExifreadProvider().run(self.path), -1.0)

	def test_unreadable_file(self):
		self.assertEqual(ExifreadProvider().run('/non/existent/file.jpg'), -1.0)


class TestExiftoolProvider(unittest.TestCase):

	def test_copy(self):
		provider = ExiftoolProvider()
		with patch.object(ExiftoolProvider, 'subprocess', return_value=('', '')) as mock_subprocess:
			result = provider.next('original.arw', 'derived.tiff')

		self.assertEqual(result, Path('derived.tiff'))
		command = mock_subprocess.call_args[0][0]
		self.assertEqual(command[0], 'exiftool')
		self.assertIn('-TagsFromFile', command)
		self.assertEqual(command[-3:], ['original.arw', '-all', 'derived.tiff'])

	def test_failure_returns_none(self):
		error = subprocess.CalledProcessError(1, ['exiftool'], '', 'bad file')
		with patch.object(ExiftoolProvider, 'subprocess', side_effect=error):
			self.assertIsNone(ExiftoolProvider().next('a.jpg', 'b.tiff'))

		with patch.object(ExiftoolProvider, 'subprocess', side_effect=FileNotFoundError('exiftool')):
			self.assertIsNone(ExiftoolProvider().next('a.jpg', 'b.tiff'))

	def test_run(self):
		with patch.object(ExiftoolProvider, 'next', side_effect=[Path('b'), None]):
			self.assertEqual(ExiftoolProvider().run([('a', 'b'), ('c', 'd')]), 1)


class TestMTBProvider(unittest.TestCase):

	def test_shift_is_found(self):
		rng = np.random.default_rng(1)
		blocks = rng.integers(0, 256, size=(16, 16), dtype=np.uint8)
		base = np.kron(blocks, np.ones((8, 8), dtype=np.uint8))
		moved = shift_array(base, 3, 2)

		shifts = MTBProvider().calculate_shifts([PackedFrame(base), PackedFrame(moved)])

		self.assertEqual(shifts[0], (0, 0))
		self.assertEqual(shifts[1], (-3, -2))

	def test_run_applies_shifts(self):
		exposure_set = make_set([grey_packed(10, 8, 8), grey_packed(20, 8, 8)])
		with patch.object(MTBProvider, 'calculate_shifts', return_value=[(0, 0), (2, 0)]):
			shifts = MTBProvider().run(exposure_set)

		self.assertEqual(shifts, [(0, 0), (2, 0)])
		self.assertEqual(int(exposure_set[1].frame.pixels[0, 0, 0]), 0)
		self.assertEqual(int(exposure_set[1].frame.pixels[0, 2, 0]), 20)

	def test_single_exposure(self):
		self.assertIsNone(MTBProvider().run(make_set([grey_packed(10, 8, 8)])))


class TestHuginProvider(unittest.TestCase):

	def setUp(self):
		self.temp_dir = Path(tempfile.mkdtemp())
		self.listener = MagicMock(spec=ExposureListener)
		self.exposure_set = make_set([grey_packed(10, 8, 8), grey_packed(20, 8, 8)])
		self.aligned = {
			str(self.temp_dir / 'aligned_0000.tif'): grey_packed(11, 6, 6),
			str(self.temp_dir / 'aligned_0001.tif'): grey_packed(21, 6, 6),
		}
		self.provider = HuginProvider(self.temp_dir, crop=True, listener=self.listener, decoder=FakeDecoder(self.aligned))

	def tearDown(self):
		shutil.rmtree(self.temp_dir)

	def touch_outputs(self):
		for path in [*self.aligned, self.temp_dir / 'hugin_debug_optim_results.txt']:
			Path(path).write_text('x')

	def test_command(self):
		command = self.provider.command(self.provider.input_files(2))
		self.assertEqual(command[0], 'align_image_stack')
		self.assertIn('-C', command)
		self.assertEqual(command[command.index('-a') + 1], 'aligned_')
		self.assertEqual(command[-2:], ['hdrprep_input_0000.tif', 'hdrprep_input_0001.tif'])

	def test_success(self):
		self.touch_outputs()
		process = FakeProcess('Optimizing\nDone\n', 0)
		with patch('subprocess.Popen', return_value=process) as mock_popen:
			self.provider.run(self.exposure_set)

		self.assertEqual(mock_popen.call_args[1]['cwd'], self.temp_dir)
		self.assertEqual([call[0][0] for call in self.listener.alignment_output.call_args_list], ['Optimizing', 'Done'])
		self.listener.alignment_finished.assert_called_once_with(0)

		self.assertEqual((self.exposure_set.width, self.exposure_set.height), (6, 6))
		self.assertEqual(int(self.exposure_set[1].frame.pixels[0, 0, 0]), 21)
		self.assertEqual(self.exposure_set.ghost_masks[0].shape, (6, 6))
		self.assertEqual(list(self.temp_dir.iterdir()), [])

	def test_failure_leaves_set_alone(self):
		self.touch_outputs()
		with patch('subprocess.Popen', return_value=FakeProcess('error\n', 1)):
			with self.assertRaises(AlignmentError) as context:
				self.provider.run(self.exposure_set)

		self.assertEqual(context.exception.exit_code, 1)
		self.listener.alignment_finished.assert_called_once_with(1)
		self.assertEqual((self.exposure_set.width, self.exposure_set.height), (8, 8))
		self.assertEqual(list(self.temp_dir.iterdir()), [])

	def test_single_instance(self):
		self.provider._job = MagicMock(running=True)
		with self.assertRaises(AlignmentInProgressError):
			self.provider.start(self.exposure_set)

	def test_cancel(self):
		process = FakeProcess('', -9)
		process.poll = MagicMock(return_value=None)
		with patch('subprocess.Popen', return_value=process):
			job = self.provider.start(self.exposure_set)
			self.provider.cancel()
			with self.assertRaises(AlignmentError):
				self.provider.finish(self.exposure_set, job)

		self.assertTrue(process.killed)
		self.assertTrue(job.cancelled)
		self.assertFalse(job.running)


class TestMergeProviders(unittest.TestCase):

	def test_weighted_merge_recovers_radiance(self):
		frames = [grey_planar(0.2, 8, 8), grey_planar(0.4, 8, 8)]
		hdr = WeightedMergeProvider().run([1.0, 2.0], FusionConfig(), frames)

		self.assertEqual(hdr.shape, (8, 8, 3))
		self.assertEqual(hdr.dtype, np.float32)
		np.testing.assert_allclose(hdr, 0.2, atol=1e-5)

	def test_weighted_merge_clipped_samples(self):
		frames = [grey_planar(1.0, 4, 4), grey_planar(1.0, 4, 4)]
		hdr = WeightedMergeProvider().run([1.0, 4.0], FusionConfig(weights='triangular'), frames)
		np.testing.assert_allclose(hdr, (1.0 + 0.25) / 2, atol=1e-6)

	def test_weight_functions(self):
		frames = [grey_planar(0.3, 4, 4), grey_planar(0.6, 4, 4)]
		for weights in WeightFunction:
			hdr = WeightedMergeProvider().run([1.0, 2.0], FusionConfig(weights=weights), frames)
			np.testing.assert_allclose(hdr, 0.3, atol=1e-5)

	def test_missing_exposure_time(self):
		with self.assertRaises(MissingExposureError):
			WeightedMergeProvider().run([1.0, -1.0], FusionConfig(), [grey_planar(0.2, 4, 4)] * 2)

	def test_length_mismatch(self):
		with self.assertRaises(ValueError):
			WeightedMergeProvider().run([1.0], FusionConfig(), [grey_planar(0.2, 4, 4)] * 2)
		with self.assertRaises(ValueError):
			WeightedMergeProvider().run([], FusionConfig(), [])

	def test_fusion_config(self):
		config = FusionConfig(weights='GAUSSIAN', response='gamma', gamma=1.8)
		self.assertEqual(config.weights, WeightFunction.GAUSSIAN)
		self.assertEqual(config.response, 'gamma')
		with self.assertRaises(ValueError):
			FusionConfig(gamma=0)

	def test_debevec(self):
		rng = np.random.default_rng(9)
		radiance = rng.uniform(0.05, 1.0, size=(32, 32, 3))
		times = [0.25, 1.0, 4.0]
		frames = [PackedFrame(np.clip(radiance * t * 64, 0, 255).astype(np.uint8)) for t in times]

		hdr = DebevecProvider().run(times, FusionConfig(), frames)

		self.assertEqual(hdr.shape, (32, 32, 3))
		self.assertTrue(np.isfinite(hdr).all())

	def test_debevec_requires_ldr(self):
		with self.assertRaises(ValueError):
			DebevecProvider().run([1.0, 2.0], FusionConfig(), [planar(np.full((4, 4), 0.2))] * 2)


if __name__ == '__main__':
	unittest.main()
