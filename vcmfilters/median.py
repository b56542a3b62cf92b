"""Adaptive median filter that removes impulse noise while keeping edges.

For every pixel a square grid, starting at 3 x 3, is examined. When the grid
median lies strictly between the grid minimum and maximum, the pixel is kept
if it too lies strictly between them, and is replaced by the median if not.
When the median sits at an extreme, the grid grows by two, up to the largest
size the frame borders and ``max_grid`` allow. Grids whose spread is within
half a percent of the sample range are treated as uniform and left alone.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .formats import ColorFamily, FilterError, Frame, SampleType, VideoFormat

_MIN_GRID = 3
_FLOAT_LIMITS = (-0.5, 1.0)


def ring_offsets(max_grid: int) -> list[tuple[int, int]]:
    """Return (row, column) offsets covering a max_grid x max_grid square.

    The centre comes first, then each ring of the 3 x 3, 5 x 5, ... grids in
    turn, so the first g * g entries always cover the g x g grid.
    """
    if max_grid < 1 or max_grid % 2 == 0:
        raise FilterError("grid size must be a positive odd number")
    offsets = [(0, 0)]
    for grid in range(3, max_grid + 1, 2):
        half = grid // 2
        for i in range(-half, half):
            offsets.append((half, i))
            offsets.append((-half, -i))
            offsets.append((i, -half))
            offsets.append((-i, half))
    return offsets


def adaptive_median_plane(
    src: np.ndarray, min_grid: int, max_grid: int, lo: float, hi: float
) -> np.ndarray:
    """Filter one plane and return the result as a new array.

    lo and hi are the smallest and largest legal sample values; hi also sets
    the spread below which a grid counts as uniform.
    """
    src = np.asarray(src)
    if src.ndim != 2:
        raise FilterError("a plane must be a two-dimensional array")
    if min_grid < _MIN_GRID or min_grid % 2 == 0 or min_grid > max_grid:
        raise FilterError("min_grid must be an odd number from 3 to max_grid")
    offsets = np.array(ring_offsets(max_grid), dtype=np.intp)

    if src.dtype.kind == "f":
        work = src.astype(np.float32)
        lo, hi = np.float32(lo), np.float32(hi)
        tol = np.float32(hi) * np.float32(0.005)
    else:
        work = src.astype(np.int64)
        lo, hi = int(lo), int(hi)
        tol = int(np.float32(hi) * np.float32(0.005))

    result = src.copy()
    height, width = src.shape
    row_index = np.arange(height)[:, None]
    col_index = np.arange(width)[None, :]
    border = np.minimum(
        np.minimum(row_index, height - 1 - row_index),
        np.minimum(col_index, width - 1 - col_index),
    )
    active = border >= min_grid // 2

    for grid in range(min_grid, max_grid + 1, 2):
        active &= border >= grid // 2
        rows, cols = np.nonzero(active)
        if rows.size == 0:
            break
        full = grid * grid
        values = work[rows[:, None] + offsets[:full, 0], cols[:, None] + offsets[:full, 1]]

        low = np.minimum(values.min(axis=1), hi)
        high = np.maximum(values.max(axis=1), lo)
        uniform = high - low <= tol

        # The last grid entry is left out of the median selection.
        median = np.partition(values[:, : full - 1], full // 2, axis=1)[:, full // 2]
        inside = (median > low) & (median < high)

        centre = work[rows, cols]
        keep = (centre > low) & (centre < high)
        replace = ~uniform & inside & ~keep
        result[rows[replace], cols[replace]] = median[replace]

        done = uniform | inside
        active[rows[done], cols[done]] = False

    return result


class AdaptiveMedian:
    """Adaptive median filter over the selected planes of a frame."""

    def __init__(
        self,
        fmt: VideoFormat,
        max_grid: int = 5,
        planes: Sequence[int] | None = None,
    ) -> None:
        if fmt.color_family not in (ColorFamily.RGB, ColorFamily.YUV, ColorFamily.GRAY):
            raise FilterError("Median: RGB, YUV and Gray color formats only for input allowed")
        if fmt.sample_type is SampleType.FLOAT and fmt.bits_per_sample == 16:
            raise FilterError("Median: Half float formats not allowed")
        if max_grid < 3 or max_grid > 11 or max_grid % 2 == 0:
            raise FilterError("Median: maxgrid value can be odd number 3 to 11 only")

        if planes is None:
            chroma = 0 if fmt.color_family is ColorFamily.YUV else 1
            flags = (1, chroma, chroma)
        else:
            planes = list(planes)
            if len(planes) < 3:
                raise FilterError(
                    "Median: values of each of 3 planes as one or zero must be specified"
                )
            flags = tuple(planes[:3])
            if any(flag not in (0, 1) for flag in flags):
                raise FilterError(
                    "Median: value of each of 3 planes as one or zero must be specified"
                )
        if not any(flags):
            raise FilterError("Median: At least one of plane must be set to 1")

        self.fmt = fmt
        self.max_grid = max_grid
        self.planes = tuple(bool(flag) for flag in flags)

    def _limits(self) -> tuple[float, float]:
        if self.fmt.is_integer:
            return 0, self.fmt.max_value
        return _FLOAT_LIMITS

    def process(self, frame: Frame) -> Frame:
        """Return a filtered copy of frame."""
        if frame.fmt != self.fmt:
            raise FilterError("Median: frame format differs from the filter's format")
        lo, hi = self._limits()
        out = frame.copy()
        for index, plane in enumerate(frame.planes):
            if self.fmt.color_family is ColorFamily.RGB or self.planes[index]:
                out.planes[index] = adaptive_median_plane(
                    plane, _MIN_GRID, self.max_grid, lo, hi
                )
        return out