"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    colorspace.py                                                                                        *
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
# HSL conversions on unit-range samples.
#
# Both directions are vectorized over numpy arrays; scalars work too and come back as 0-d arrays. Hue is normalized to
# [0, 1). Degenerate pixels (lightness <= 0, or no chroma) get hue and saturation of exactly 0.
from __future__ import annotations
import numpy as np

ArrayLike = np.ndarray | float


def rgb_to_hsl(r : ArrayLike, g : ArrayLike, b : ArrayLike) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
	"""
	Convert RGB samples in [0, 1] to hue, saturation and lightness.

	Args:
		r, g, b: Channel samples of identical shape.

	Returns:
		tuple[np.ndarray, np.ndarray, np.ndarray]: (hue, saturation, lightness)
	"""
	r = np.asarray(r, dtype=np.float64)
	g = np.asarray(g, dtype=np.float64)
	b = np.asarray(b, dtype=np.float64)

	value = np.maximum(np.maximum(r, g), b)
	minv = np.minimum(np.minimum(r, g), b)
	lightness = (value + minv) / 2.0
	delta = value - minv

	chromatic = (lightness > 0.0) & (delta > 0.0)
	denominator = np.where(lightness <= 0.5, value + minv, 2.0 - value - minv)
	denominator = np.where(chromatic, denominator, 1.0)
	safe_delta = np.where(chromatic, delta, 1.0)

	saturation = np.where(chromatic, delta / denominator, 0.0)

	r2 = (value - r) / safe_delta
	g2 = (value - g) / safe_delta
	b2 = (value - b) / safe_delta

	hue = np.where(
		r == value,
		np.where(g == minv, 5.0 + b2, 1.0 - g2),
		np.where(
			g == value,
			np.where(b == minv, 1.0 + r2, 3.0 - b2),
			np.where(r == minv, 3.0 + g2, 5.0 - r2),
		),
	) / 6.0
	# Pure red lands on 6/6; wrap it back onto sextant 0
	hue = np.where(hue >= 1.0, hue - 1.0, hue)
	hue = np.where(chromatic, hue, 0.0)

	return hue, saturation, lightness


def hsl_to_rgb(h : ArrayLike, s : ArrayLike, l : ArrayLike) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
	"""
	Convert hue, saturation and lightness back to RGB. Inverse of rgb_to_hsl.

	Returns:
		tuple[np.ndarray, np.ndarray, np.ndarray]: (r, g, b)
	"""
	h = np.asarray(h, dtype=np.float64)
	s = np.asarray(s, dtype=np.float64)
	l = np.asarray(l, dtype=np.float64)

	value = np.where(l <= 0.5, l * (1.0 + s), l + s - l * s)
	positive = value > 0.0
	safe_value = np.where(positive, value, 1.0)

	minv = l + l - value
	sv = (value - minv) / safe_value
	h6 = h * 6.0
	sextant = np.floor(h6).astype(np.int64)
	fract = h6 - sextant
	vsf = value * sv * fract
	mid1 = minv + vsf
	mid2 = value - vsf

	cases = [sextant == index for index in range(6)]
	r = np.select(cases, [value, mid2, minv, minv, mid1, value])
	g = np.select(cases, [mid1, value, value, mid2, minv, minv])
	b = np.select(cases, [minv, minv, mid1, value, value, mid2])

	# Grey, black and out of range hues stay at the lightness
	keep = positive & (sextant >= 0) & (sextant <= 5)
	r = np.where(keep, r, l)
	g = np.where(keep, g, l)
	b = np.where(keep, b, l)

	return r, g, b


def lightness(r : ArrayLike, g : ArrayLike, b : ArrayLike) -> np.ndarray:
	"""
	The HSL lightness only, without paying for hue and saturation.
	"""
	r = np.asarray(r, dtype=np.float64)
	g = np.asarray(g, dtype=np.float64)
	b = np.asarray(b, dtype=np.float64)
	return (np.maximum(np.maximum(r, g), b) + np.minimum(np.minimum(r, g), b)) / 2.0


def average_lightness(r : ArrayLike, g : ArrayLike, b : ArrayLike) -> float:
	return float(np.mean(lightness(r, g, b)))


def max_lightness(r : ArrayLike, g : ArrayLike, b : ArrayLike) -> float:
	return float(np.max(lightness(r, g, b)))
