"""Resilient back-propagation (Rprop) for a single linear neuron."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RpropParams:
    """Step-size limits and growth factors of Rprop."""

    delta_min: float = math.exp(-6.0) * 0.001
    delta_max: float = 5.0 * 0.001
    eta_minus: float = 0.5
    eta_plus: float = 1.2


def sign(value: float) -> int:
    """Return 1, -1 or 0 according to the sign of value."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def weighted_sum(inputs: np.ndarray, weights: np.ndarray) -> float:
    """Output of the linear neuron: the dot product of inputs and weights."""
    inputs = np.asarray(inputs, dtype=np.float32)
    weights = np.asarray(weights, dtype=np.float32)
    if inputs.shape != weights.shape:
        raise ValueError("inputs and weights must have the same length")
    return float(np.dot(inputs, weights))


def accumulate_gradient(error: float, gradient: np.ndarray, inputs: np.ndarray) -> None:
    """Add one case's contribution, -error * input, to the gradient in place."""
    gradient -= np.float32(error) * np.asarray(inputs, dtype=gradient.dtype)


def adjust_weights(
    old_grad: np.ndarray,
    new_grad: np.ndarray,
    delta: np.ndarray,
    deltaw: np.ndarray,
    weights: np.ndarray,
    params: RpropParams,
) -> None:
    """Apply one Rprop step, updating delta, deltaw, weights and new_grad in place.

    Where the gradient kept its sign the step grows, where it flipped the last
    step is undone and the step shrinks, and the gradient is zeroed so the next
    step does not move that weight.
    """
    product = old_grad * new_grad
    same = product > 0
    flipped = product < 0
    unchanged = ~(same | flipped)
    direction = -np.sign(new_grad)

    delta[same] = np.minimum(params.delta_max, delta[same] * params.eta_plus)
    moving = same | unchanged
    deltaw[moving] = direction[moving] * delta[moving]
    weights[moving] += deltaw[moving]

    delta[flipped] = np.maximum(params.delta_min, delta[flipped] * params.eta_minus)
    weights[flipped] -= deltaw[flipped]
    new_grad[flipped] = 0