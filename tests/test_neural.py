import numpy as np
import pytest

from vcmfilters.formats import ColorFamily, FilterError, Frame, VideoFormat
from vcmfilters.neural import (
    TITLE,
    Neural,
    NeuralModel,
    TrainingResult,
    load_model,
    neighbour_offsets,
    save_model,
    train,
)

GRAY8 = VideoFormat(ColorFamily.GRAY)
RGB8 = VideoFormat(ColorFamily.RGB)


def _gray_frame(size=110, seed=0):
    rng = np.random.default_rng(seed)
    return Frame(GRAY8, [rng.integers(0, 256, (size, size), dtype=np.uint8)])


def _identity_model():
    weights = np.zeros(10, dtype=np.float32)
    weights[4] = 1.0
    return NeuralModel(3, 3, weights)


@pytest.fixture
def trained():
    src = _gray_frame()
    return train(src, src, GRAY8, iterations=12)


def test_neighbour_offsets_order():
    offsets = neighbour_offsets(3, 3)
    assert len(offsets) == 9
    assert offsets[0] == (-1, -1)
    assert offsets[4] == (0, 0)
    assert offsets[-1] == (1, 1)


def test_neighbour_offsets_single_row():
    assert neighbour_offsets(5, 1) == [(0, -2), (0, -1), (0, 0), (0, 1), (0, 2)]


def test_model_rejects_even_product():
    with pytest.raises(FilterError):
        NeuralModel(2, 2, np.zeros(5))


def test_model_rejects_wrong_weight_count():
    with pytest.raises(FilterError):
        NeuralModel(3, 3, np.zeros(9))


def test_training_reduces_error(trained):
    assert isinstance(trained, TrainingResult)
    assert trained.error_sums.shape == (1, 12)
    assert trained.min_error_sum == pytest.approx(trained.error_sums.min())
    assert trained.min_error_sum < trained.error_sums[0, 0]
    assert trained.error_sums[trained.best_set, trained.best_iteration] == pytest.approx(
        trained.min_error_sum
    )
    assert trained.model.weights.size == trained.model.inodes


def test_training_is_repeatable_without_wset():
    src = _gray_frame(seed=3)
    first = train(src, src, GRAY8, iterations=5, best_of=2)
    second = train(src, src, GRAY8, iterations=5, best_of=2)
    assert np.array_equal(first.model.weights, second.model.weights)
    assert first.error_sums.shape == (2, 5)


def test_training_window_too_small():
    src = _gray_frame(size=50)
    with pytest.raises(FilterError):
        train(src, src, GRAY8)


def test_training_bad_points():
    src = _gray_frame()
    with pytest.raises(FilterError):
        train(src, src, GRAY8, xpts=2, ypts=2)


def test_training_bad_best_of():
    src = _gray_frame()
    with pytest.raises(FilterError):
        train(src, src, GRAY8, best_of=11)


def test_training_bad_iterations():
    src = _gray_frame()
    with pytest.raises(FilterError):
        train(src, src, GRAY8, iterations=0)


def test_training_bad_rgb_channel():
    planes = [np.zeros((110, 110), dtype=np.uint8) for _ in range(3)]
    src = Frame(RGB8, planes)
    with pytest.raises(FilterError):
        train(src, src, RGB8, rgb=3)


def test_training_trainer_format_mismatch():
    src = _gray_frame()
    trainer = Frame(VideoFormat(ColorFamily.GRAY, bits_per_sample=10),
                    [np.zeros((110, 110), dtype=np.uint16)])
    with pytest.raises(FilterError):
        train(src, trainer, GRAY8)


def test_save_and_load_round_trip(tmp_path, trained):
    path = tmp_path / "weights.txt"
    save_model(path, trained, GRAY8)
    lines = path.read_text().splitlines()
    assert lines[0] == TITLE
    assert lines[1] == "GREY bitdepth 8"
    loaded = load_model(path, GRAY8)
    assert (loaded.xpts, loaded.ypts) == (trained.model.xpts, trained.model.ypts)
    assert loaded.bias == trained.model.bias
    assert np.array_equal(loaded.weights, trained.model.weights)


def test_load_wrong_bitdepth(tmp_path, trained):
    path = tmp_path / "weights.txt"
    save_model(path, trained, GRAY8)
    with pytest.raises(FilterError):
        load_model(path, VideoFormat(ColorFamily.GRAY, bits_per_sample=10))


def test_load_wrong_title(tmp_path):
    path = tmp_path / "weights.txt"
    path.write_text("something_else\n")
    with pytest.raises(FilterError):
        load_model(path, GRAY8)


def test_load_missing_file(tmp_path):
    with pytest.raises(FilterError):
        load_model(tmp_path / "absent.txt", GRAY8)


def test_load_rgb_file_into_gray(tmp_path):
    path = tmp_path / "weights.txt"
    weights = "\n".join("0" for _ in range(10))
    path.write_text(f"{TITLE}\nRGB bitdepth 8\n3 3 10\nbias 1\n{weights}\n")
    with pytest.raises(FilterError):
        load_model(path, GRAY8)
    assert load_model(path, RGB8).inodes == 10


def test_load_fewer_weights(tmp_path):
    path = tmp_path / "weights.txt"
    path.write_text(f"{TITLE}\nGREY bitdepth 8\n3 3 10\nbias 1\n0\n0\n0\n")
    with pytest.raises(FilterError):
        load_model(path, GRAY8)


def test_load_corrupted_sizes(tmp_path):
    path = tmp_path / "weights.txt"
    path.write_text(f"{TITLE}\nGREY bitdepth 8\n2 2 5\nbias 1\n0 0 0 0 0\n")
    with pytest.raises(FilterError):
        load_model(path, GRAY8)


def test_identity_model_leaves_frame_unchanged():
    frame = _gray_frame(size=20, seed=7)
    out = Neural(GRAY8, _identity_model()).process(frame)
    assert np.array_equal(out.planes[0], frame.planes[0])


def test_bias_only_model_fills_interior_and_clamps():
    frame = _gray_frame(size=12, seed=1)
    weights = np.zeros(10, dtype=np.float32)
    weights[-1] = 300.0
    out = Neural(GRAY8, NeuralModel(3, 3, weights)).process(frame).planes[0]
    assert np.all(out[1:10, 1:10] == 255)
    assert np.array_equal(out[0], frame.planes[0][0])
    assert np.array_equal(out[10], frame.planes[0][10])
    assert np.array_equal(out[:, 10], frame.planes[0][:, 10])


def test_rgb_all_planes_processed():
    planes = [np.full((8, 8), 50, dtype=np.uint8) for _ in range(3)]
    frame = Frame(RGB8, planes)
    weights = np.zeros(10, dtype=np.float32)
    weights[-1] = 200.0
    out = Neural(RGB8, NeuralModel(3, 3, weights)).process(frame)
    for plane in out.planes:
        assert np.all(plane[1:6, 1:6] == 200)
        assert plane[0, 0] == 50


def test_process_rejects_other_format():
    frame = Frame(RGB8, [np.zeros((8, 8), dtype=np.uint8) for _ in range(3)])
    with pytest.raises(FilterError):
        Neural(GRAY8, _identity_model()).process(frame)