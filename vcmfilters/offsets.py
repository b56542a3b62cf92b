"""Offset tables for lines, rectangles and discs, and statistics over them.

Offsets index a plane stored row by row with the given pitch, so the point
(x, y) relative to an origin lies at origin + y * pitch + x.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .formats import FilterError


def _cdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def linear_offsets(pitch: int, xcoord: int, ycoord: int) -> list[int]:
    """Offsets of a digital line through the origin from -(x, y) to (x, y).

    The line has 2 * max(|x|, |y|) + 1 points, one per step along the longer
    axis, with the shorter axis rounded to the nearest pixel.
    """
    absx, absy = abs(xcoord), abs(ycoord)
    if absx < absy:
        npoints = 2 * absy + 1
        half = npoints // 2
        if xcoord == 0:
            return [(i - half) * pitch for i in range(npoints)]
        sy = _cdiv(absy, ycoord)
        sx = _cdiv(absx, xcoord)
        return [
            sy * (i - half) * pitch + sx * _cdiv((i - half) * absx + absy // 2, absy)
            for i in range(npoints)
        ]
    npoints = 2 * absx + 1
    half = npoints // 2
    if ycoord == 0:
        return [i - half for i in range(npoints)]
    sx = _cdiv(absx, xcoord)
    sy = _cdiv(absy, ycoord)
    return [
        sx * (i - half) + sy * pitch * _cdiv((i - half) * absy + absx // 2, absx)
        for i in range(npoints)
    ]


def rect_grid_offsets(pitch: int, xgrid: int, ygrid: int = 0, coffset: int = 0) -> list[int]:
    """Offsets of an xgrid x ygrid rectangle from its top left corner plus coffset.

    A ygrid of 0 makes the grid square.
    """
    if xgrid < 0 or ygrid < 0:
        raise FilterError("grid sizes must not be negative")
    if ygrid == 0:
        ygrid = xgrid
    return [h * pitch + w + coffset for h in range(ygrid) for w in range(xgrid)]


def circular_offsets(pitch: int, rad: int, coffset: int = 0) -> list[int]:
    """Offsets of the points of a disc of radius rad about its centre plus coffset."""
    if rad < 0:
        raise FilterError("radius must not be negative")
    rsq = rad * rad
    return [
        h * pitch + w + coffset
        for h in range(-rad, rad + 1)
        for w in range(-rad, rad + 1)
        if h * h + w * w <= rsq
    ]


def _samples(data: np.ndarray, origin: int, offsets: Sequence[int]) -> np.ndarray:
    if len(offsets) == 0:
        raise FilterError("at least one offset is needed")
    flat = np.asarray(data).ravel()
    index = origin + np.asarray(offsets, dtype=np.intp)
    return flat[index].astype(np.float64)


def mean_value(data: np.ndarray, origin: int, offsets: Sequence[int]) -> float:
    """Mean of the samples of data (taken flat) at origin + each offset."""
    return float(_samples(data, origin, offsets).mean())


def variance(data: np.ndarray, origin: int, offsets: Sequence[int], avg: float) -> float:
    """Mean squared deviation from avg of the samples at origin + each offset."""
    values = _samples(data, origin, offsets)
    return float(((avg - values) ** 2).mean())