"""Gentle removal of greenish or reddish noise by limited Gaussian smoothing.

Each plane is blurred with a separable Gaussian; a pixel takes the blurred
value unless that moves it further than the allowed limits, in which case it
only moves by the limit.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .formats import ColorFamily, FilterError, Frame, VideoFormat

_E = 2.71828
_TWO_PI = 6.2831853


def gaussian_kernel(rad: int, strength: int) -> np.ndarray:
    """Return the 2 * rad + 1 Gaussian weights with standard deviation strength."""
    if rad < 0:
        raise FilterError("veed: radius must not be negative")
    if strength <= 0:
        raise FilterError("veed: strength must be positive")
    size = 2 * rad + 1
    norm = strength * math.sqrt(_TWO_PI)
    return np.array(
        [
            _E ** (-(0.5 * (i - size // 2) * (i - size // 2)) / (strength * strength)) / norm
            for i in range(size)
        ],
        dtype=np.float32,
    )


def _store(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    if dtype.kind in "ui":
        info = np.iinfo(dtype)
        values = np.clip(np.trunc(values), info.min, info.max)
    return values.astype(dtype)


def veed_plane(
    dst: np.ndarray, src: np.ndarray, kernel: np.ndarray, low: float, high: float
) -> None:
    """Smooth src into dst in place, leaving a border of len(kernel) // 2 untouched.

    A pixel more than low above the smoothed value drops by low, one more than
    high below it rises by high, and any other takes the smoothed value.
    """
    src = np.asarray(src)
    if src.ndim != 2 or dst.shape != src.shape:
        raise FilterError("destination and source must be planes of the same size")
    kernel = np.asarray(kernel, dtype=np.float32).ravel()
    span = kernel.size
    if span == 0:
        raise FilterError("veed: kernel must not be empty")
    half = span // 2
    height, width = src.shape
    cols = width - 2 * half
    rows = height - 2 * half
    if cols <= 0:
        return

    data = src.astype(np.float32)
    horizontal = np.zeros((height, cols), dtype=np.float32)
    for i, weight in enumerate(kernel):
        horizontal += data[:, i : i + cols] * weight
    work = src.copy()
    work[:, half : half + cols] = _store(horizontal, src.dtype)
    if rows <= 0:
        return

    workf = work.astype(np.float32)
    smooth = np.zeros((rows, cols), dtype=np.float32)
    for i, weight in enumerate(kernel):
        smooth += workf[i : i + rows, half : half + cols] * weight

    centre = data[half : half + rows, half : half + cols]
    if src.dtype.kind in "ui":
        low_v, high_v = int(low), int(high)
    else:
        low_v, high_v = np.float32(low), np.float32(high)
    result = np.where(
        centre - smooth > low_v,
        centre - low_v,
        np.where(smooth - centre > high_v, centre + high_v, smooth),
    )
    dst[half : half + rows, half : half + cols] = _store(result, dst.dtype)


class Veed:
    """Limited Gaussian smoothing over the selected planes of a frame.

    planes flags which planes are processed (any non-zero value counts as
    on); plimit and mlimit are per-plane limits from 0 to 10 in half percents
    of the sample range. Missing entries take their defaults.
    """

    def __init__(
        self,
        fmt: VideoFormat,
        strength: int = 5,
        rad: int = 5,
        planes: Sequence[int] | None = None,
        plimit: Sequence[int] | None = None,
        mlimit: Sequence[int] | None = None,
    ) -> None:
        if fmt.color_family is ColorFamily.COMPAT:
            raise FilterError("veed: Compat format not accepted.")
        if not 1 <= rad <= 8:
            raise FilterError("veed: rad value can be 1 to 8 only")
        if not 1 <= strength <= 8:
            raise FilterError("veed: str value can be 1 to 8 only")
        edge = _E ** (-(0.5 * (rad * rad) / (strength * strength)) / (strength * math.sqrt(_TWO_PI)))
        if edge < 2.0 / 255:
            raise FilterError(
                "veed: Either decrease rad or increase str to prevent wasteful processing."
            )

        def pick(values: Sequence[int] | None, index: int, default: int) -> int:
            given = list(values) if values is not None else []
            return int(given[index]) if index < len(given) else default

        flags, plus, minus = [], [], []
        for index in range(3):
            flags.append(1 if pick(planes, index, 1) else 0)
            p = pick(plimit, index, 3)
            if not 0 <= p <= 10:
                raise FilterError("veed: plimit values can be 0 to 10 only")
            m = pick(mlimit, index, 3)
            if not 0 <= m <= 10:
                raise FilterError("veed: mlimit values can be 0 to 10 only")
            plus.append(p)
            minus.append(m)
        if not any(flags) or (fmt.color_family is ColorFamily.GRAY and flags[0] == 0):
            raise FilterError(
                "veed: values of all planes are zero. At least one should be set to 1"
            )

        self.fmt = fmt
        self.strength = strength
        self.rad = rad
        self.planes = tuple(bool(f) for f in flags)
        self.plimit = tuple(plus)
        self.mlimit = tuple(minus)
        self.kernel = gaussian_kernel(rad, strength)

    def _limits(self, plane: int) -> tuple[float, float]:
        if self.fmt.is_integer:
            scale = 1 << self.fmt.bits_per_sample
            return (scale * self.mlimit[plane]) // 200, (scale * self.plimit[plane]) // 200
        # Float limits are whole-number quotients, which leave float samples unchanged.
        return float(self.mlimit[plane] // 200), float(self.plimit[plane] // 200)

    def process(self, frame: Frame) -> Frame:
        """Return a smoothed copy of frame."""
        if frame.fmt != self.fmt:
            raise FilterError("veed: frame format differs from the filter's format")
        out = frame.copy()
        for index, plane in enumerate(frame.planes):
            if not self.planes[index]:
                continue
            low, high = self._limits(index)
            veed_plane(out.planes[index], plane, self.kernel, low, high)
        return out