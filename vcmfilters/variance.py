"""Adaptive noise filtering driven by local and global variance.

A global variance is measured in a window of one frame. Each pixel is then
compared with the grid around it: where the grid's variance exceeds the
global one the pixel is likely on an edge and is only pulled slightly toward
the grid mean; elsewhere it is replaced by the grid mean.
"""

from __future__ import annotations

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .formats import ColorFamily, FilterError, Frame, VideoFormat


def _window(plane: np.ndarray, lx: int, wd: int, ty: int, ht: int) -> np.ndarray:
    plane = np.asarray(plane)
    if plane.ndim != 2:
        raise FilterError("a plane must be a two-dimensional array")
    if wd <= 0 or ht <= 0:
        raise FilterError("window must have positive width and height")
    height, width = plane.shape
    if lx < 0 or ty < 0 or lx + wd > width or ty + ht > height:
        raise FilterError("window lies outside the plane")
    return plane[ty : ty + ht, lx : lx + wd].astype(np.float64)


def window_mean(plane: np.ndarray, lx: int, wd: int, ty: int, ht: int) -> float:
    """Mean of the wd x ht window of plane whose top left corner is (lx, ty)."""
    return float(_window(plane, lx, wd, ty, ht).mean())


def window_variance(
    plane: np.ndarray, lx: int, wd: int, ty: int, ht: int, mean: float
) -> float:
    """Mean squared deviation from mean over the given window of plane."""
    values = _window(plane, lx, wd, ty, ht)
    return float(((values - mean) ** 2).mean())


def variance_grid(
    dst: np.ndarray, src: np.ndarray, gvarsq: float, xgrid: int, ygrid: int
) -> None:
    """Filter src into dst in place using xgrid x ygrid grids and global variance gvarsq.

    Each written pixel is the centre of a grid lying wholly inside the plane;
    the last column and row of grid positions are left out, as are borders.
    """
    src = np.asarray(src)
    if src.ndim != 2 or dst.shape != src.shape:
        raise FilterError("destination and source must be planes of the same size")
    if xgrid < 1 or ygrid < 1:
        raise FilterError("grid sizes must be positive")
    height, width = src.shape
    rows, cols = height - ygrid, width - xgrid
    if rows <= 0 or cols <= 0:
        return

    data = src.astype(np.float64)
    windows = sliding_window_view(data, (ygrid, xgrid))[:rows, :cols]
    mean = windows.mean(axis=(-2, -1))
    var = ((windows - mean[..., None, None]) ** 2).mean(axis=(-2, -1))

    cy, cx = ygrid // 2, xgrid // 2
    centre = data[cy : cy + rows, cx : cx + cols]
    edge = var > gvarsq
    safe_var = np.where(edge, var, 1.0)
    result = np.where(edge, centre - gvarsq * (centre - mean) / safe_var, mean)
    if dst.dtype.kind in "ui":
        info = np.iinfo(dst.dtype)
        result = np.clip(np.trunc(result), info.min, info.max)
    dst[cy : cy + rows, cx : cx + cols] = result.astype(dst.dtype)


class Variance:
    """Variance-adaptive noise filter with a global variance measured once."""

    def __init__(
        self,
        fmt: VideoFormat,
        width: int,
        height: int,
        num_frames: int,
        lx: int,
        wd: int,
        ty: int,
        ht: int,
        fn: int = 0,
        uv: bool = True,
        xgrid: int = 5,
        ygrid: int = 5,
    ) -> None:
        if fmt.color_family is ColorFamily.COMPAT:
            raise FilterError(
                "variance: input clip of only constant and other than Compat format allowed"
            )
        if lx < 0 or lx >= width:
            raise FilterError("variance: lx is out of frame")
        if wd <= 0 or lx + wd >= width:
            raise FilterError(
                "variance: invalid wd. wd must be +ve number and lx + wd must be in frame"
            )
        if ty < 0 or ty >= height:
            raise FilterError("variance: ty is out of frame")
        if ht <= 0 or ty + ht >= height:
            raise FilterError(
                "variance: invalid ht. ht must be +ve number and ty + ht must be in frame"
            )
        if fn < 0 or fn >= num_frames:
            raise FilterError("variance: invalid fn. Not within clip")
        if xgrid < 3 or xgrid >= width:
            raise FilterError("variance: invalid xgrid. value must be 3 to width of frame")
        if ygrid < 3 or ygrid >= height:
            raise FilterError("variance: invalid ygrid. value must be 3 to height of frame")

        self.fmt = fmt
        self.width = width
        self.height = height
        self.lx, self.wd, self.ty, self.ht = lx, wd, ty, ht
        self.fn = fn
        self.uv = bool(uv)
        self.xgrid = xgrid
        self.ygrid = ygrid
        self.gvarsq: tuple[float, ...] | None = None

    def _uses_plane(self, plane: int) -> bool:
        family = self.fmt.color_family
        return plane == 0 or family is ColorFamily.RGB or (
            family is ColorFamily.YUV and self.uv
        )

    def measure(self, frame: Frame) -> tuple[float, ...]:
        """Measure and store the global variance of each plane in the window.

        This is meant for frame number fn of the clip. For RGB the window's
        vertical position is counted from the bottom of the frame. Planes that
        are not processed get 0.
        """
        if frame.fmt != self.fmt:
            raise FilterError("variance: frame format differs from the filter's format")
        ty = self.ty
        if self.fmt.color_family is ColorFamily.RGB:
            ty = frame.height - ty - self.ht
        sub_w = (0, self.fmt.sub_sampling_w, self.fmt.sub_sampling_w)
        sub_h = (0, self.fmt.sub_sampling_h, self.fmt.sub_sampling_h)

        values = []
        for index, plane in enumerate(frame.planes):
            if not self._uses_plane(index):
                values.append(0.0)
                continue
            args = (
                self.lx >> sub_w[index],
                self.wd >> sub_w[index],
                ty >> sub_h[index],
                self.ht >> sub_h[index],
            )
            mean = window_mean(plane, *args)
            values.append(window_variance(plane, *args, mean))
        self.gvarsq = tuple(values)
        return self.gvarsq

    def process(self, frame: Frame) -> Frame:
        """Return a filtered copy of frame; measure must have been called first."""
        if frame.fmt != self.fmt:
            raise FilterError("variance: frame format differs from the filter's format")
        if self.gvarsq is None:
            raise FilterError("variance: global variance has not been measured")
        out = frame.copy()
        for index, plane in enumerate(frame.planes):
            if not self._uses_plane(index):
                continue
            gvarsq = self.gvarsq[index]
            if self.fmt.is_integer and gvarsq < 1:
                continue
            variance_grid(out.planes[index], plane, gvarsq, self.xgrid, self.ygrid)
        return out