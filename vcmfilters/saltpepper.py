"""Removal of salt (isolated bright) and pepper (isolated dark) pixels.

A pixel counts as salt when, even after lowering it by the tolerance, it is
still brighter than all eight of its neighbours, and as pepper when, even after
raising it by the tolerance, it is still darker than all of them. Such a pixel
is replaced by the average of its neighbours, or by their maximum (salt) or
minimum (pepper). Border pixels are never changed.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .formats import ColorFamily, FilterError, Frame, VideoFormat

_NEIGHBOURS = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)

SALT = 1
PEPPER = 2
BOTH = 3


def _neighbour_views(data: np.ndarray) -> list[np.ndarray]:
    height, width = data.shape
    return [
        data[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]
        for dy, dx in _NEIGHBOURS
    ]


def _check_planes(dst: np.ndarray, src: np.ndarray) -> None:
    if src.ndim != 2:
        raise FilterError("a plane must be a two-dimensional array")
    if dst.shape != src.shape:
        raise FilterError("destination and source planes differ in size")


def _clean(dst: np.ndarray, src: np.ndarray, tol: float, average: bool, salt: bool) -> None:
    src = np.asarray(src)
    _check_planes(dst, src)
    height, width = src.shape
    if height < 3 or width < 3:
        return

    centre = src[1:-1, 1:-1]
    if src.dtype.kind in "ui":
        # Samples are unsigned, so the shifted value wraps like the sample type.
        modulus = int(np.iinfo(src.dtype).max) + 1
        tol = int(tol)
        shifted = centre.astype(np.int64) + (-tol if salt else tol)
        val = shifted % modulus
        neighbours = [n.astype(np.int64) for n in _neighbour_views(src)]
    else:
        tol32 = np.float32(tol)
        base = centre.astype(np.float32)
        val = base - tol32 if salt else base + tol32
        neighbours = [n.astype(np.float32) for n in _neighbour_views(src)]

    mask = np.ones(centre.shape, dtype=bool)
    for neighbour in neighbours:
        mask &= (neighbour < val) if salt else (neighbour > val)
    if not mask.any():
        return

    if average:
        total = np.zeros(centre.shape, dtype=np.float32)
        for neighbour in neighbours:
            total += neighbour.astype(np.float32)
        replacement = total / np.float32(8)
        if dst.dtype.kind in "ui":
            replacement = np.trunc(replacement)
    else:
        stack = np.stack(neighbours)
        replacement = stack.max(axis=0) if salt else stack.min(axis=0)

    inner = dst[1:-1, 1:-1]
    inner[mask] = replacement[mask].astype(dst.dtype)


def desalt(dst: np.ndarray, src: np.ndarray, tol: float, average: bool) -> None:
    """Replace salt pixels of src in dst, in place, leaving other pixels alone."""
    _clean(dst, src, tol, average, salt=True)


def depepper(dst: np.ndarray, src: np.ndarray, tol: float, average: bool) -> None:
    """Replace pepper pixels of src in dst, in place, leaving other pixels alone."""
    _clean(dst, src, tol, average, salt=False)


class SaltPepper:
    """Salt and pepper removal over the planes of a frame.

    planes holds, per plane, 0 for no processing, 1 for salt only, 2 for
    pepper only and 3 for both; missing entries default to 3. tol is a
    tolerance from 0 to 5, in half percents of the sample range.
    """

    def __init__(
        self,
        fmt: VideoFormat,
        planes: Sequence[int] | None = None,
        tol: int = 3,
        avg: bool = True,
    ) -> None:
        if fmt.color_family is ColorFamily.COMPAT:
            raise FilterError("saltPepper: Compat format not allowed.")
        given = list(planes) if planes is not None else []
        modes = []
        for index in range(3):
            mode = given[index] if index < len(given) else BOTH
            if not 0 <= mode <= 3:
                raise FilterError(
                    "saltPepper: planes array  can have values of 0 to 3 only. "
                    "0 for no process, 1 for salt only, 2 for pepper only and 3 for both"
                )
            modes.append(int(mode))
        if not any(modes) or (fmt.color_family is ColorFamily.GRAY and modes[0] == 0):
            raise FilterError(
                "saltPepper: all planes have values of 0. At least one plane "
                "must be non zero with a valid value."
            )
        if not 0 <= tol <= 5:
            raise FilterError("saltPepper: tol can have value of 0 to 5")

        self.fmt = fmt
        self.planes = tuple(modes)
        self.tol = int(tol)
        self.avg = bool(avg)

    def _tolerance(self, plane: int) -> float:
        if self.fmt.is_integer:
            return (int(self.fmt.max_value) * self.tol) // 200
        if self.fmt.color_family is ColorFamily.RGB or plane == 0:
            top = 1.0
        else:
            top = 0.5
        return top * self.tol / 200

    def process(self, frame: Frame) -> Frame:
        """Return a copy of frame with salt and pepper removed."""
        if frame.fmt != self.fmt:
            raise FilterError("saltPepper: frame format differs from the filter's format")
        out = frame.copy()
        for index, src in enumerate(frame.planes):
            mode = self.planes[index]
            if mode == 0:
                continue
            tol = self._tolerance(index)
            if mode in (SALT, BOTH):
                desalt(out.planes[index], src, tol, self.avg)
            if mode in (PEPPER, BOTH):
                depepper(out.planes[index], src, tol, self.avg)
        return out