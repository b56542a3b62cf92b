"""Video formats, frames and the error type shared by the filters."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np


class FilterError(ValueError):
    """Raised when a filter is given arguments or input it cannot handle."""


class ColorFamily(enum.Enum):
    """Colour family of a video format."""

    GRAY = "gray"
    RGB = "rgb"
    YUV = "yuv"
    COMPAT = "compat"


class SampleType(enum.Enum):
    """Whether samples are integers or floating point numbers."""

    INTEGER = "integer"
    FLOAT = "float"


@dataclass(frozen=True)
class VideoFormat:
    """Layout of the samples of a planar video frame."""

    color_family: ColorFamily
    sample_type: SampleType = SampleType.INTEGER
    bits_per_sample: int = 8
    sub_sampling_w: int = 0
    sub_sampling_h: int = 0

    def __post_init__(self) -> None:
        if self.sample_type is SampleType.INTEGER:
            if not 8 <= self.bits_per_sample <= 16:
                raise FilterError("integer samples must have 8 to 16 bits")
        elif self.bits_per_sample not in (16, 32):
            raise FilterError("float samples must have 16 or 32 bits")
        if not (0 <= self.sub_sampling_w <= 4 and 0 <= self.sub_sampling_h <= 4):
            raise FilterError("subsampling must be 0 to 4")
        if self.color_family is not ColorFamily.YUV and (
            self.sub_sampling_w or self.sub_sampling_h
        ):
            raise FilterError("only YUV formats may be subsampled")

    @property
    def num_planes(self) -> int:
        return 1 if self.color_family is ColorFamily.GRAY else 3

    @property
    def bytes_per_sample(self) -> int:
        if self.sample_type is SampleType.FLOAT:
            return self.bits_per_sample // 8
        return 1 if self.bits_per_sample == 8 else 2

    @property
    def dtype(self) -> np.dtype:
        if self.sample_type is SampleType.FLOAT:
            return np.dtype(np.float16 if self.bits_per_sample == 16 else np.float32)
        return np.dtype(np.uint8 if self.bits_per_sample == 8 else np.uint16)

    @property
    def is_integer(self) -> bool:
        return self.sample_type is SampleType.INTEGER

    @property
    def max_value(self) -> float:
        """Largest legal sample value: 2**bits - 1 for integers, 1.0 for floats."""
        if self.is_integer:
            return (1 << self.bits_per_sample) - 1
        return 1.0

    def plane_size(self, plane: int, width: int, height: int) -> tuple[int, int]:
        """Return (width, height) of a plane of a frame of the given size."""
        if not 0 <= plane < self.num_planes:
            raise FilterError(f"plane {plane} does not exist in this format")
        if plane == 0:
            return width, height
        return width >> self.sub_sampling_w, height >> self.sub_sampling_h


@dataclass
class Frame:
    """A planar video frame: one 2-D array (rows, columns) per plane."""

    fmt: VideoFormat
    planes: list[np.ndarray] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.planes) != self.fmt.num_planes:
            raise FilterError(
                f"format needs {self.fmt.num_planes} planes, got {len(self.planes)}"
            )
        self.planes = [np.asarray(p, dtype=self.fmt.dtype) for p in self.planes]
        height, width = self.planes[0].shape
        for index, plane in enumerate(self.planes):
            expected_w, expected_h = self.fmt.plane_size(index, width, height)
            if plane.shape != (expected_h, expected_w):
                raise FilterError(f"plane {index} has wrong dimensions {plane.shape}")

    @classmethod
    def blank(cls, fmt: VideoFormat, width: int, height: int) -> "Frame":
        """Create a frame of zero samples."""
        if width <= 0 or height <= 0:
            raise FilterError("frame dimensions must be positive")
        planes = []
        for index in range(fmt.num_planes):
            pw, ph = fmt.plane_size(index, width, height)
            planes.append(np.zeros((ph, pw), dtype=fmt.dtype))
        return cls(fmt, planes)

    @property
    def width(self) -> int:
        return self.planes[0].shape[1]

    @property
    def height(self) -> int:
        return self.planes[0].shape[0]

    def copy(self) -> "Frame":
        """Return a deep copy whose planes can be changed independently."""
        return Frame(self.fmt, [p.copy() for p in self.planes])