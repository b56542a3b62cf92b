"""A single linear neuron trained to map a pixel neighbourhood onto a target.

The neuron is trained with resilient back-propagation on one plane of a frame
and a trainer frame showing the wanted result, then applied to whole frames.
Trained weights can be saved to and read back from a text file.
"""

from __future__ import annotations

import os
import random
import time
from dataclasses import dataclass

import numpy as np

from .formats import ColorFamily, FilterError, Frame, VideoFormat
from .rprop import RpropParams, adjust_weights

TITLE = "vcMod_Neural_xpts_ypts_inodes_and_Weights"
_BIAS = 1.0
_MIN_WINDOW = 10000


def _check_family(fmt: VideoFormat) -> None:
    if fmt.color_family not in (ColorFamily.RGB, ColorFamily.YUV, ColorFamily.GRAY):
        raise FilterError("neural: clips can be RGB or YUV or Gray color formats only")


def _points_ok(xpts: int, ypts: int) -> bool:
    product = xpts * ypts
    return xpts >= 1 and ypts >= 1 and 9 <= product <= 225 and product % 2 == 1


def _check_points(xpts: int, ypts: int) -> None:
    if not _points_ok(xpts, ypts):
        raise FilterError(
            "neural: xpts and ypts must be positive odd numbers "
            "with a product between 9 and 225."
        )


@dataclass
class NeuralModel:
    """Neighbourhood size, bias input and weights (one per point plus the bias)."""

    xpts: int
    ypts: int
    weights: np.ndarray
    bias: float = _BIAS

    def __post_init__(self) -> None:
        _check_points(self.xpts, self.ypts)
        self.weights = np.asarray(self.weights, dtype=np.float32).ravel().copy()
        if self.weights.size != self.inodes:
            raise FilterError(
                f"neural: model needs {self.inodes} weights, got {self.weights.size}"
            )

    @property
    def inodes(self) -> int:
        return self.xpts * self.ypts + 1


@dataclass
class TrainingResult:
    """The best model found and a record of how training went."""

    model: NeuralModel
    min_error_sum: float
    best_set: int
    best_iteration: int
    cases: int
    error_sums: np.ndarray


def neighbour_offsets(xpts: int, ypts: int) -> list[tuple[int, int]]:
    """(row, column) offsets of an xpts x ypts neighbourhood, row by row."""
    return [
        (h, w)
        for h in range(-(ypts // 2), ypts // 2 + 1)
        for w in range(-(xpts // 2), xpts // 2 + 1)
    ]


def _inputs(
    plane: np.ndarray,
    offsets: list[tuple[int, int]],
    row0: int,
    col0: int,
    rows: int,
    cols: int,
    bias: float,
) -> np.ndarray:
    """Input vectors (neighbourhood plus bias) for a block of centre points."""
    data = np.asarray(plane, dtype=np.float32)
    matrix = np.empty((rows * cols, len(offsets) + 1), dtype=np.float32)
    for column, (dy, dx) in enumerate(offsets):
        block = data[row0 + dy : row0 + dy + rows, col0 + dx : col0 + dx + cols]
        matrix[:, column] = block.ravel()
    matrix[:, -1] = bias
    return matrix


def train(
    src: Frame,
    trainer: Frame,
    fmt: VideoFormat,
    xpts: int = 3,
    ypts: int | None = None,
    tlx: int | None = None,
    tty: int | None = None,
    trx: int | None = None,
    tby: int | None = None,
    iterations: int = 200,
    best_of: int = 1,
    wset: bool = False,
    rgb: int = 1,
) -> TrainingResult:
    """Train a neuron so that src's neighbourhoods predict trainer's pixels.

    Training uses the window (tlx, tty) to (trx, tby). The plane is luma, or
    for RGB the one chosen by rgb. best_of random starts are tried and the
    weights with the smallest squared error over all iterations are kept.
    """
    _check_family(fmt)
    if src.fmt != fmt or trainer.fmt != fmt or (src.width, src.height) != (
        trainer.width,
        trainer.height,
    ):
        raise FilterError("neural: input and tclip must have same constant format")
    if ypts is None:
        ypts = xpts
    _check_points(xpts, ypts)

    plane_index = 0
    if fmt.color_family is ColorFamily.RGB:
        if rgb not in (0, 1, 2):
            raise FilterError(
                "neural: rgb value can be 0 for red, 1 for green and 2 for blue "
                "use in training purpose"
            )
        plane_index = 2 - rgb

    width, height = src.width, src.height
    tlx = xpts if tlx is None else tlx
    tty = ypts if tty is None else tty
    trx = width - xpts if trx is None else trx
    tby = height - ypts if tby is None else tby
    if (
        tlx < xpts // 2
        or tty < ypts // 2
        or trx > width - xpts // 2
        or tby > height - ypts // 2
        or trx <= tlx
        or tby <= tty
        or (trx - tlx) * (tby - tty) < _MIN_WINDOW
    ):
        raise FilterError(
            "neural: trainig window should be in frame with borders of xpts/2 "
            "and ypts/2 and have atleast 10000 pixels"
        )
    if iterations < 1:
        raise FilterError(
            "neural: number of iterations iter for trainig should be a "
            "sufficiently large positive number"
        )
    if not 1 <= best_of <= 10:
        raise FilterError("neural: bestof can be 1 to 10 only")
    if wset not in (0, 1):
        raise FilterError("neural: wset can have a value of 0 or 1 only")

    params = RpropParams()
    inodes = xpts * ypts + 1
    offsets = neighbour_offsets(xpts, ypts)
    xcases = max(trx - tlx - xpts + 1, 0)
    ycases = max(tby - tty - ypts + 1, 0)
    cases = xcases * ycases
    row0 = tty + ypts // 2
    col0 = tlx + xpts // 2
    inputs = _inputs(src.planes[plane_index], offsets, row0, col0, ycases, xcases, _BIAS)
    targets = (
        np.asarray(trainer.planes[plane_index], dtype=np.float32)[
            row0 : row0 + ycases, col0 : col0 + xcases
        ]
        .ravel()
    )

    seed = (int(time.time()) & 0xFFFE) + 1 if wset else 1
    rng = random.Random(seed)
    scale = 0.001 / inodes

    weights = np.zeros(inodes, dtype=np.float32)
    grads = (np.zeros(inodes, dtype=np.float32), np.zeros(inodes, dtype=np.float32))
    error_sums = np.zeros((best_of, iterations), dtype=np.float64)
    best_weights: np.ndarray | None = None
    min_esum = 0.0
    best_set = best_iteration = 0

    for b in range(best_of):
        weights[:] = [(rng.random() - 0.5) * scale for _ in range(inodes)]
        delta = np.full(inodes, params.delta_min, dtype=np.float32)
        deltaw = np.zeros(inodes, dtype=np.float32)
        grads[0][:] = 0
        for i in range(iterations):
            old, new = (grads[0], grads[1]) if i % 2 == 0 else (grads[1], grads[0])
            errors = targets - inputs @ weights
            esum = float(np.dot(errors.astype(np.float64), errors.astype(np.float64)))
            new[:] = -(errors @ inputs)
            error_sums[b, i] = esum

            if best_weights is None or min_esum > esum:
                best_weights = weights.copy()
                min_esum = esum
                best_set, best_iteration = b, i

            adjust_weights(old, new, delta, deltaw, weights, params)

    assert best_weights is not None
    model = NeuralModel(xpts, ypts, best_weights, _BIAS)
    return TrainingResult(model, min_esum, best_set, best_iteration, cases, error_sums)


def _family_name(fmt: VideoFormat) -> str:
    if fmt.color_family is ColorFamily.RGB:
        return "RGB"
    if fmt.color_family is ColorFamily.YUV:
        return "YUV"
    return "GREY"


def save_model(path: str | os.PathLike[str], result: TrainingResult, fmt: VideoFormat) -> None:
    """Write the trained weights and the error record to a text file."""
    model = result.model
    lines = [
        TITLE,
        f"{_family_name(fmt)} bitdepth {fmt.bits_per_sample}",
        f"{model.xpts} {model.ypts} {model.inodes}",
        f"bias {model.bias:g}",
    ]
    lines.extend(format(float(w), ".9g") for w in model.weights)
    lines.append("Time Stamp")
    lines.append(str(int(time.time())))
    lines.append(
        f"minimum_esum {result.min_error_sum:g} at_iter {result.best_iteration} "
        f"at_weight_set_no: {result.best_set} for {result.cases} training points"
    )
    lines.append("error_sum_at_each_iteration")
    text = "\n".join(lines)

    parts = []
    for set_no, sums in enumerate(result.error_sums):
        parts.append(f"\nwith_weight_set_No:{set_no}\n")
        for index, value in enumerate(sums):
            if index % 20 == 0:
                parts.append(f"\nerror_sums_atiter:{index}to {index + 19}:-")
            if index % 5 == 0:
                parts.append("\n")
            parts.append(f"{float(value):g} ")

    try:
        with open(path, "w", encoding="ascii") as handle:
            handle.write(text + "".join(parts))
    except OSError as exc:
        raise FilterError("Neural: Could not open output file") from exc


def _token(tokens: list[str], index: int, convert):
    try:
        return convert(tokens[index])
    except (IndexError, ValueError) as exc:
        raise FilterError("Neural: input file is corrupted") from exc


def load_model(path: str | os.PathLike[str], fmt: VideoFormat) -> NeuralModel:
    """Read weights saved by save_model, checking they suit fmt."""
    _check_family(fmt)
    try:
        with open(path, encoding="ascii", errors="replace") as handle:
            tokens = handle.read().split()
    except OSError as exc:
        raise FilterError("Neural: Could not open input file") from exc

    if not tokens or tokens[0] != TITLE:
        raise FilterError("Neural: Incorrect input file")
    family = _token(tokens, 1, str)
    if family == "RGB" and fmt.color_family is not ColorFamily.RGB:
        raise FilterError("Neural: input file was for different colorFamily")
    bitdepth = _token(tokens, 3, int)
    if bitdepth != fmt.bits_per_sample:
        raise FilterError("Neural: input file was for different  bit depth")

    xpts = _token(tokens, 4, int)
    ypts = _token(tokens, 5, int)
    inodes = _token(tokens, 6, int)
    bias = _token(tokens, 8, float)
    product = xpts * ypts
    if product < 9 or product > 225 or product % 2 == 0 or product + 1 != inodes:
        raise FilterError("Neural: input file is corrupted")

    try:
        weights = [float(token) for token in tokens[9 : 9 + inodes]]
    except ValueError as exc:
        raise FilterError("Neural: input file has fewer weights") from exc
    if len(weights) != inodes:
        raise FilterError("Neural: input file has fewer weights")
    try:
        return NeuralModel(xpts, ypts, np.array(weights, dtype=np.float32), bias)
    except FilterError as exc:
        raise FilterError("Neural: input file is corrupted") from exc


class Neural:
    """Applies a trained neuron to every interior pixel of a frame."""

    def __init__(self, fmt: VideoFormat, model: NeuralModel) -> None:
        _check_family(fmt)
        self.fmt = fmt
        self.model = model

    def _filter_plane(self, plane: np.ndarray) -> np.ndarray:
        model = self.model
        height, width = plane.shape
        hy, hx = model.ypts // 2, model.xpts // 2
        rows = height - 2 * hy - 1
        cols = width - 2 * hx - 1
        result = plane.copy()
        if rows <= 0 or cols <= 0:
            return result

        data = np.asarray(plane, dtype=np.float32)
        acc = np.zeros((rows, cols), dtype=np.float32)
        for weight, (dy, dx) in zip(model.weights, neighbour_offsets(model.xpts, model.ypts)):
            acc += weight * data[hy + dy : hy + dy + rows, hx + dx : hx + dx + cols]
        acc += np.float32(model.bias) * model.weights[-1]

        if self.fmt.is_integer:
            values = np.clip(acc, 0, self.fmt.max_value).astype(plane.dtype)
        else:
            values = np.clip(acc, 0.0, 1.0).astype(plane.dtype)
        result[hy : hy + rows, hx : hx + cols] = values
        return result

    def process(self, frame: Frame) -> Frame:
        """Return a copy of frame with luma, or all RGB planes, filtered."""
        if frame.fmt != self.fmt:
            raise FilterError("neural: frame format differs from the filter's format")
        out = frame.copy()
        count = 3 if self.fmt.color_family is ColorFamily.RGB else 1
        for index in range(count):
            out.planes[index] = self._filter_plane(frame.planes[index])
        return out