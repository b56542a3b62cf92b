"""Marking and copying pixels with four-fold symmetry about a centre.

Every call touches the four points (cx +/- dw, cy +/- dh) of a plane at once,
which is how radially symmetric corrections are applied to a frame. Planes are
two-dimensional arrays indexed as [row, column].
"""

from __future__ import annotations

from typing import Any

import numpy as np

_QUADRANTS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def _check_position(plane: np.ndarray, row: int, col: int) -> None:
    height, width = plane.shape
    if not (0 <= row < height and 0 <= col < width):
        raise IndexError(
            f"position (x={col}, y={row}) lies outside the {width}x{height} plane"
        )


def _put(plane: np.ndarray, row: int, col: int, value: Any) -> None:
    _check_position(plane, row, col)
    plane[row, col] = value


def _get(plane: np.ndarray, row: int, col: int) -> Any:
    _check_position(plane, row, col)
    return plane[row, col]


def paint_4fold(
    plane: np.ndarray, cx: int, cy: int, dw: int, dh: int, value: Any
) -> None:
    """Set the four points (cx +/- dw, cy +/- dh) of plane to value.

    Raises IndexError if any of the points lies outside the plane.
    """
    for sy, sx in _QUADRANTS:
        _put(plane, cy + sy * dh, cx + sx * dw, value)


def paint_4fold_checked(
    plane: np.ndarray,
    cx: int,
    cy: int,
    dw: int,
    dh: int,
    sw: int,
    sh: int,
    value: Any,
) -> None:
    """Like paint_4fold, skipping quadrants whose reach (sw, sh) leaves the plane."""
    height, width = plane.shape
    rows = []
    if sh + cy < height:
        rows.append(1)
    if cy - dh >= 0:
        rows.append(-1)
    cols = []
    if sw + cx < width:
        cols.append(1)
    if cx - sw >= 0:
        cols.append(-1)
    for sy in rows:
        for sx in cols:
            _put(plane, cy + sy * dh, cx + sx * dw, value)


def copy_4fold(
    dst: np.ndarray,
    src: np.ndarray,
    cx: int,
    cy: int,
    dw: int,
    dh: int,
    sw: int,
    sh: int,
) -> None:
    """Copy src at (cx +/- sw, cy +/- sh) to dst at (cx +/- dw, cy +/- dh), sign for sign."""
    for sy, sx in _QUADRANTS:
        value = _get(src, cy + sy * sh, cx + sx * sw)
        _put(dst, cy + sy * dh, cx + sx * dw, value)


def copy_4fold_checked(
    dst: np.ndarray,
    src: np.ndarray,
    cx: int,
    cy: int,
    dw: int,
    dh: int,
    sw: int,
    sh: int,
) -> None:
    """Like copy_4fold, skipping quadrants whose source point leaves src."""
    height, width = src.shape
    rows = []
    if sh + cy < height:
        rows.append(1)
    if cy - sh >= 0:
        rows.append(-1)
    cols = []
    if sw + cx < width:
        cols.append(1)
    if cx - sw >= 0:
        cols.append(-1)
    for sy in rows:
        for sx in cols:
            value = _get(src, cy + sy * sh, cx + sx * sw)
            _put(dst, cy + sy * dh, cx + sx * dw, value)