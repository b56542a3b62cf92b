import numpy as np
import pytest

from vcmfilters.formats import FilterError
from vcmfilters.offsets import (
    circular_offsets,
    linear_offsets,
    mean_value,
    rect_grid_offsets,
    variance,
)


def test_linear_horizontal_line():
    assert linear_offsets(100, 3, 0) == list(range(-3, 4))


def test_linear_vertical_line():
    assert linear_offsets(100, 0, 2) == [-200, -100, 0, 100, 200]


def test_linear_single_point():
    assert linear_offsets(50, 0, 0) == [0]


@pytest.mark.parametrize("x,y", [(3, 1), (-3, 2), (2, -5), (-4, -7), (5, 5)])
def test_linear_ends_and_middle(x, y):
    pitch = 1000
    offs = linear_offsets(pitch, x, y)
    assert len(offs) == 2 * max(abs(x), abs(y)) + 1
    assert offs[len(offs) // 2] == 0
    assert offs[-1] == y * pitch + x


def test_rect_grid_length_and_corners():
    offs = rect_grid_offsets(20, 4, 3, 7)
    assert len(offs) == 12
    assert offs[0] == 7
    assert offs[-1] == 2 * 20 + 3 + 7


def test_rect_grid_square_when_ygrid_zero():
    assert rect_grid_offsets(10, 3) == rect_grid_offsets(10, 3, 3)


def test_rect_grid_negative_raises():
    with pytest.raises(FilterError):
        rect_grid_offsets(10, -1)


def test_circular_radius_zero():
    assert circular_offsets(10, 0, 5) == [5]


def test_circular_radius_one_is_cross():
    assert sorted(circular_offsets(10, 1)) == [-10, -1, 0, 1, 10]


def test_circular_within_bounding_square():
    pitch = 100
    offs = circular_offsets(pitch, 4)
    square = set(rect_grid_offsets(pitch, 9, 9, -4 * pitch - 4))
    assert set(offs) <= square
    assert 0 in offs


def test_circular_negative_raises():
    with pytest.raises(FilterError):
        circular_offsets(10, -2)


def test_mean_and_variance_constant():
    data = np.full((5, 5), 42, dtype=np.uint8)
    offs = rect_grid_offsets(5, 3, 3)
    avg = mean_value(data, 6, offs)
    assert avg == pytest.approx(42.0)
    assert variance(data, 6, offs, avg) == pytest.approx(0.0)


def test_mean_and_variance_match_numpy():
    rng = np.random.default_rng(3)
    data = rng.integers(0, 256, size=(6, 8)).astype(np.uint8)
    offs = rect_grid_offsets(8, 4, 3, 0)
    origin = 1 * 8 + 2
    block = data[1:4, 2:6].astype(np.float64)
    avg = mean_value(data, origin, offs)
    assert avg == pytest.approx(block.mean())
    assert variance(data, origin, offs, avg) == pytest.approx(block.var())


def test_mean_empty_offsets_raises():
    with pytest.raises(FilterError):
        mean_value(np.zeros(4), 0, [])