"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    hdr.py                                                                                               *
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
import argparse
import sys
import logging
from pathlib import Path
from typing import Any, Optional
import cv2
import numpy as np
import imageio.v3 as iio
from pydantic import Field, PrivateAttr

from hdrprep.config import Settings
from hdrprep.exceptions import HdrPrepError, UnexpectedStateError
from hdrprep.lib.choices import Choices
from hdrprep.lib.logs import setup_logging
from hdrprep.lib.script import Script
from hdrprep.exposure.events import ExposureListener, LoggingListener, ProgressListener
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.loader import ExposureLoader, LoadReport
from hdrprep.exposure.normalizer import ExposureNormalizer
from hdrprep.ghost import GhostCorrector, GhostDetectionResult, GhostDetector, ManualBlender
from hdrprep.providers import align, decode, exif, merge

logger = logging.getLogger(__name__)


class AlignMethod(Choices):
	NONE = 'none'
	MTB = 'mtb'
	AIS = 'ais'


class MergeMethod(Choices):
	WEIGHTED = 'weighted'
	DEBEVEC = 'debevec'


class HDRWorkflow(Script):
	"""
	Owns one exposure set and drives it through loading, alignment, anti-ghosting and fusion.

	Every stage works on the set exclusively; stages never run concurrently.

	Args:
		settings (Settings): Grid size, threshold, temp dir and external tool options.
		listener (ExposureListener): Receives progress and state notifications.
		decoder (DecodeProvider): Turns files into pixels.
		metadata (MetadataProvider): Reads the average luminance of files.
		merge_provider (MergeProvider): Fuses the exposures.
		exif_provider (ExiftoolProvider): Copies metadata onto saved files. None disables the copy.
		fusion (FusionConfig): Passed to the merge provider.
	"""
	settings : Settings = Field(default_factory=Settings)
	listener : ExposureListener = Field(default_factory=LoggingListener)
	decoder : decode.DecodeProvider = Field(default_factory=decode.ImageioProvider)
	metadata : decode.MetadataProvider = Field(default_factory=decode.ExifreadProvider)
	merge_provider : merge.MergeProvider = Field(default_factory=merge.WeightedMergeProvider)
	exif_provider : Optional[exif.ExiftoolProvider] = Field(default_factory=exif.ExiftoolProvider)
	fusion : merge.FusionConfig = Field(default_factory=merge.FusionConfig)

	_exposure_set : ExposureSet = PrivateAttr(default_factory=ExposureSet)
	_loader : ExposureLoader = PrivateAttr()
	_normalizer : ExposureNormalizer = PrivateAttr()
	_aligner : Optional[align.HuginProvider] = PrivateAttr(default=None)
	_hdr : Optional[np.ndarray] = PrivateAttr(default=None)

	def model_post_init(self, __context : Any) -> None:
		self._loader = ExposureLoader(
			decoder=self.decoder,
			metadata=self.metadata,
			listener=self.listener,
			max_threads=self.max_threads,
		)
		self._normalizer = ExposureNormalizer(self.listener)

	@property
	def exposure_set(self) -> ExposureSet:
		return self._exposure_set

	@property
	def hdr(self) -> np.ndarray | None:
		return self._hdr

	def load_files(self, paths : list[str]) -> LoadReport:
		"""
		Decode the given files in parallel and merge the new ones into the set.

		Raises:
			TypeMismatchError, SizeMismatchError: If a file does not match the set. Files merged before it stay.
			ExposureSetLockedError: If the set is errored.
		"""
		self._exposure_set.ensure_writable()
		report = self._loader.load(paths, self._exposure_set)
		self._normalizer.merge(self._exposure_set, report)
		return report

	def cancel(self) -> None:
		"""
		Cancel a running load or alignment. Safe to call from another thread.
		"""
		self._loader.cancel()
		if self._aligner is not None:
			self._aligner.cancel()

	def remove_file(self, index : int) -> None:
		self._exposure_set.remove(index)
		self._hdr = None

	def set_ev(self, index : int, ev : float) -> None:
		self._normalizer.set_ev(self._exposure_set, ev, index)

	def align(self, method : AlignMethod | str = AlignMethod.NONE, crop : bool = False) -> None:
		"""
		Align the exposures of the set.

		Args:
			method (AlignMethod): MTB (in process) or AIS (align_image_stack). NONE does nothing.
			crop (bool): Crop the result to the area covered by every exposure.

		Raises:
			AlignmentError: If align_image_stack fails. The set is unchanged.
			AlignmentInProgressError: If an alignment is already running.
		"""
		if method == AlignMethod.NONE:
			return

		if method == AlignMethod.MTB:
			shifts = align.MTBProvider().run(self._exposure_set)
			if crop and shifts:
				self.crop_to_shifts(shifts)
			return

		if method == AlignMethod.AIS:
			self._aligner = align.HuginProvider(
				self.settings.temp_dir,
				options=self.settings.align_image_stack_options,
				crop=crop,
				listener=self.listener,
				decoder=self.decoder,
			)
			self._aligner.run(self._exposure_set)
			return

		raise ValueError(f'Unknown alignment method: {method}')

	def crop(self, x0 : int, y0 : int, x1 : int, y1 : int) -> None:
		logger.info('Cropping exposures to (%d, %d) - (%d, %d)', x0, y0, x1, y1)
		self._exposure_set.crop(x0, y0, x1, y1)

	def crop_to_shifts(self, shifts : list[tuple[int, int]]) -> None:
		"""
		Crop away the borders that a shift left black in at least one exposure.
		"""
		x0 = max(max(dx for dx, _ in shifts), 0)
		y0 = max(max(dy for _, dy in shifts), 0)
		x1 = self._exposure_set.width + min(min(dx for dx, _ in shifts), 0)
		y1 = self._exposure_set.height + min(min(dy for _, dy in shifts), 0)
		if (x0, y0, x1, y1) == (0, 0, self._exposure_set.width, self._exposure_set.height):
			return
		self.crop(x0, y0, x1, y1)

	def auto_antighost(self, threshold : float | None = None) -> GhostDetectionResult:
		"""
		Detect ghosted cells, correct them, and store them as ghost masks of the corrected exposures.

		Raises:
			DegenerateGridError: If the image is smaller than the grid.
			MissingExposureError: If any exposure time is unknown.
		"""
		threshold = self.settings.threshold if threshold is None else threshold
		detector = GhostDetector(self.settings.grid_size)
		result = detector.detect(self._exposure_set, threshold)

		GhostCorrector().correct(self._exposure_set, result.reference_index, result.grid, result.scale_factors)

		mask = result.grid.to_mask()
		for index in range(len(self._exposure_set)):
			if index != result.reference_index:
				self._exposure_set.set_mask(index, mask)

		logger.info(
			'Anti-ghosting: reference exposure %d, %d of %d patches corrected',
			result.reference_index, result.grid.flagged_count, result.grid.grid_size ** 2
		)
		return result

	def antighost(self, good_index : int) -> None:
		"""
		Blend the painted ghost masks, taking content from the exposure at good_index.
		"""
		ManualBlender().apply(self._exposure_set, good_index)

	def create_hdr(self) -> np.ndarray:
		"""
		Fuse the exposures into a radiance map.

		Raises:
			MissingExposureError: If any exposure time is unknown.
			UnexpectedStateError: If the merge provider failed.
		"""
		exposure_set = self._exposure_set
		frames = [item.frame for item in exposure_set]
		hdr = self.merge_provider.run(exposure_set.exposure_times, self.fusion, frames)
		if hdr is None:
			raise UnexpectedStateError('The merge provider did not produce an HDR image')

		self._hdr = hdr
		return hdr

	def save_exposures(self, prefix : str) -> list[Path]:
		"""
		Write every exposure to <prefix>_<index>.tiff, and copy the original metadata onto it.
		"""
		saved = []
		for index, item in enumerate(self._exposure_set):
			path = Path(f'{prefix}_{index}.tiff')
			logger.debug('Saving exposure %d to %s', index, path)
			iio.imwrite(path, item.frame.to_image())
			if self.exif_provider is not None:
				self.exif_provider.next(item.path, path)
			saved.append(path)
		return saved

	def save_hdr(self, path : Path | str) -> Path:
		"""
		Write the fused radiance map. The format follows the extension (.hdr, or .exr where OpenCV supports it).
		"""
		if self._hdr is None:
			raise UnexpectedStateError('No HDR image has been created yet')

		path = Path(path)
		if not cv2.imwrite(str(path), cv2.cvtColor(self._hdr, cv2.COLOR_RGB2BGR)):
			raise OSError(f'OpenCV could not write {path}')

		if self.exif_provider is not None and len(self._exposure_set):
			self.exif_provider.next(self._exposure_set[0].path, path)

		logger.info('HDR saved to %s', path)
		return path

	def cleanup(self) -> None:
		"""
		Remove anything an interrupted alignment left behind.
		"""
		if self._aligner is not None:
			self._aligner.remove_temp_files(len(self._exposure_set))

	def run(self,
			paths : list[str],
			output : Path | str,
			align_method : AlignMethod | str = AlignMethod.NONE,
			crop : bool = False,
			antighost : bool = False,
			ev_overrides : dict[int, float] | None = None,
			exposures_prefix : str | None = None) -> bool:
		"""
		Run the whole pipeline.

		Returns:
			bool: Whether the HDR was saved.
		"""
		try:
			report = self.load_files(paths)
			if len(self._exposure_set) < 2:
				logger.error('At least two exposures are needed, %d loaded', report.loaded)
				return False

			for index, ev in (ev_overrides or {}).items():
				self.set_ev(index, ev)

			self.align(align_method, crop)
			if antighost:
				self.auto_antighost()
			if exposures_prefix:
				self.save_exposures(exposures_prefix)

			self.create_hdr()
			self.save_hdr(output)
		except (HdrPrepError, OSError, ValueError, IndexError) as e:
			logger.error('HDR workflow failed: %s', e)
			return False
		finally:
			self.cleanup()

		logger.info('HDR workflow completed successfully.')
		return True


def parse_ev(value : str) -> tuple[int, float]:
	"""
	Parse an INDEX=EV override.
	"""
	try:
		index, ev = value.split('=', 1)
		return int(index), float(ev)
	except ValueError as e:
		raise argparse.ArgumentTypeError(f'Expected INDEX=EV, got "{value}"') from e


def main(argv : list[str] | None = None):
	"""
	Entry point for the application.
	"""
	parser = argparse.ArgumentParser(description='Prepare a bracket of exposures and fuse them into an HDR image.')
	parser.add_argument('paths',                nargs = '+',                    help = 'The exposures to fuse.')
	parser.add_argument('--output', '-o',       type = str, default = 'hdr.hdr', help = 'Where to write the HDR image.')
	parser.add_argument('--align', '-a',        type = str, default = AlignMethod.NONE.value,
												choices = AlignMethod.values(), help = 'How to align the exposures.')
	parser.add_argument('--crop',               action = 'store_true',          help = 'Crop aligned exposures to their common area.')
	parser.add_argument('--antighost',          action = 'store_true',          help = 'Detect and correct ghosts automatically.')
	parser.add_argument('--threshold', '-t',    type = float, default = None,   help = 'Fraction of outlier pixels above which a patch is ghosted.')
	parser.add_argument('--grid-size', '-g',    type = int, default = None,     help = 'Number of patches per axis.')
	parser.add_argument('--ev',                 type = parse_ev, action = 'append', default = [],
												metavar = 'INDEX=EV',           help = 'Set the EV of one exposure. May be repeated.')
	parser.add_argument('--merge', '-m',        type = str, default = MergeMethod.WEIGHTED.value,
												choices = MergeMethod.values(), help = 'The fusion algorithm.')
	parser.add_argument('--weights', '-w',      type = str, default = merge.WeightFunction.TRIANGULAR.value,
												choices = merge.WeightFunction.values(), help = 'Weight function for weighted fusion.')
	parser.add_argument('--save-exposures',     type = str, default = None, metavar = 'PREFIX',
																				help = 'Also save the prepared exposures as PREFIX_<index>.tiff.')
	parser.add_argument('--threads',            type = int, default = None,     help = 'Number of decoding threads.')
	parser.add_argument('--verbose', '-v',      action = 'store_true',          help = 'Log debug messages.')

	args = parser.parse_args(argv)
	setup_logging(args.verbose)

	try:
		settings = Settings.from_env(grid_size=args.grid_size, threshold=args.threshold, max_threads=args.threads)
	except ValueError as e:
		logger.error('Invalid settings: %s', e)
		sys.exit(1)

	merge_provider = merge.DebevecProvider() if args.merge == MergeMethod.DEBEVEC else merge.WeightedMergeProvider()
	workflow = HDRWorkflow(
		settings=settings,
		max_threads=settings.max_threads,
		listener=ProgressListener(),
		merge_provider=merge_provider,
		exif_provider=exif.ExiftoolProvider(settings.exiftool),
		fusion=merge.FusionConfig(weights=args.weights),
	)
	result = workflow.run(
		args.paths,
		args.output,
		align_method=args.align,
		crop=args.crop,
		antighost=args.antighost,
		ev_overrides=dict(args.ev),
		exposures_prefix=args.save_exposures,
	)

	# Exit with the appropriate code
	if result:
		logger.info('Create HDR successful')
		sys.exit(0)

	logger.error('Create HDR failed')
	sys.exit(1)


if __name__ == '__main__':
	try:
		main()
	except KeyboardInterrupt:
		pass
