"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    test_imports.py                                                                                      *
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
import subprocess
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


class TestImports(unittest.TestCase):
	"""
	Each package must import on its own, in a fresh interpreter, whatever was imported before it.
	"""

	def assertImports(self, statement : str):
		result = subprocess.run([sys.executable, '-c', statement], cwd=ROOT, capture_output=True, text=True, check=False)
		self.assertEqual(result.returncode, 0, result.stderr)

	def test_decode_providers(self):
		self.assertImports('from hdrprep.providers.decode import ImageioProvider, ExifreadProvider')

	def test_decode_base(self):
		self.assertImports('import hdrprep.providers.decode.base')

	def test_loader_and_normalizer(self):
		self.assertImports('from hdrprep.exposure.normalizer import ExposureNormalizer')
		self.assertImports('from hdrprep.exposure.loader import ExposureLoader')

	def test_packages(self):
		for package in ('hdrprep.exposure', 'hdrprep.ghost', 'hdrprep.providers', 'hdrprep.workflows'):
			with self.subTest(package=package):
				self.assertImports(f'import {package}')


if __name__ == '__main__':
	unittest.main()
