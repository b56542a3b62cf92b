import numpy as np
import pytest

from vcmfilters.formats import (
    ColorFamily,
    FilterError,
    Frame,
    SampleType,
    VideoFormat,
)


def test_plane_zero_has_frame_size():
    fmt = VideoFormat(ColorFamily.YUV, sub_sampling_w=1, sub_sampling_h=1)
    assert fmt.plane_size(0, 64, 48) == (64, 48)


def test_chroma_plane_subsampled():
    fmt = VideoFormat(ColorFamily.YUV, sub_sampling_w=1, sub_sampling_h=1)
    assert fmt.plane_size(1, 64, 48) == (32, 24)
    assert fmt.plane_size(2, 64, 48) == fmt.plane_size(1, 64, 48)


def test_missing_plane_raises():
    fmt = VideoFormat(ColorFamily.GRAY)
    with pytest.raises(FilterError):
        fmt.plane_size(1, 10, 10)


def test_gray_has_single_plane():
    assert VideoFormat(ColorFamily.GRAY).num_planes == 1
    assert VideoFormat(ColorFamily.RGB).num_planes == 3


@pytest.mark.parametrize(
    "sample_type,bits,dtype",
    [
        (SampleType.INTEGER, 8, np.uint8),
        (SampleType.INTEGER, 10, np.uint16),
        (SampleType.INTEGER, 16, np.uint16),
        (SampleType.FLOAT, 32, np.float32),
    ],
)
def test_dtype_matches_sample_layout(sample_type, bits, dtype):
    fmt = VideoFormat(ColorFamily.RGB, sample_type, bits)
    assert fmt.dtype == np.dtype(dtype)
    assert fmt.bytes_per_sample == np.dtype(dtype).itemsize


def test_integer_max_value():
    assert VideoFormat(ColorFamily.GRAY, bits_per_sample=8).max_value == 255
    assert VideoFormat(ColorFamily.GRAY, SampleType.FLOAT, 32).max_value == 1.0


@pytest.mark.parametrize("bits", [7, 17])
def test_bad_integer_depth(bits):
    with pytest.raises(FilterError):
        VideoFormat(ColorFamily.GRAY, SampleType.INTEGER, bits)


def test_subsampled_rgb_rejected():
    with pytest.raises(FilterError):
        VideoFormat(ColorFamily.RGB, sub_sampling_w=1)


def test_blank_frame_shapes():
    fmt = VideoFormat(ColorFamily.YUV, sub_sampling_w=1, sub_sampling_h=1)
    frame = Frame.blank(fmt, 16, 8)
    assert frame.width == 16 and frame.height == 8
    for index, plane in enumerate(frame.planes):
        w, h = fmt.plane_size(index, 16, 8)
        assert plane.shape == (h, w)
        assert not plane.any()


def test_blank_rejects_zero_size():
    with pytest.raises(FilterError):
        Frame.blank(VideoFormat(ColorFamily.GRAY), 0, 4)


def test_copy_is_independent():
    frame = Frame.blank(VideoFormat(ColorFamily.GRAY), 4, 4)
    clone = frame.copy()
    clone.planes[0][1, 1] = 200
    assert frame.planes[0][1, 1] == 0
    assert clone.planes[0][1, 1] == 200


def test_wrong_plane_count_rejected():
    with pytest.raises(FilterError):
        Frame(VideoFormat(ColorFamily.RGB), [np.zeros((2, 2))])


def test_wrong_plane_shape_rejected():
    fmt = VideoFormat(ColorFamily.RGB)
    with pytest.raises(FilterError):
        Frame(fmt, [np.zeros((4, 4)), np.zeros((4, 4)), np.zeros((2, 4))])