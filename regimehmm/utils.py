"""Numerical utilities for Gaussian HMM inference.

Provides a stable log-sum-exp, univariate normal densities, a warning-free
log for probabilities that may be exactly zero, and the input validation
helpers used at every public entry point.
"""

from __future__ import annotations

import numbers
from typing import Optional

import numpy as np

from .config import MAX_ABS_OBSERVATION, MIN_OBSERVATIONS, MIN_STATES, PROB_ATOL
from .exceptions import InsufficientData, InvalidParameter

_LOG_2PI = np.log(2.0 * np.pi)


def logsumexp(a: np.ndarray, axis: Optional[int] = None) -> np.ndarray:
    """Compute log(sum(exp(a))) in a numerically stable way.

    The maximum is subtracted before exponentiating. Slices whose entries are
    all ``-inf`` (and empty inputs) evaluate to ``-inf`` rather than NaN, which
    matters when a transition probability is exactly zero.

    Args:
        a: Array of log-values.
        axis: Axis to reduce. If None, reduces over the flattened array.

    Returns:
        Log-sum-exp, with ``axis`` removed from the shape.

    Examples:
        >>> logsumexp(np.array([-10.0, -11.0, -12.0]))
        -9.40760596444438...
        >>> logsumexp(np.array([[1.0, 2.0], [3.0, 4.0]]), axis=0)
        array([3.126928..., 4.126928...])
    """
    a = np.asarray(a, dtype=float)
    if axis is None:
        a = a.ravel()
        if a.size == 0:
            return np.array(-np.inf)
        a_max = np.max(a)
        if not np.isfinite(a_max):
            return np.array(a_max)
        return a_max + np.log(np.sum(np.exp(a - a_max)))

    a_max = np.max(a, axis=axis, keepdims=True)
    shift = np.where(np.isfinite(a_max), a_max, 0.0)
    with np.errstate(divide="ignore"):
        out = np.log(np.sum(np.exp(a - shift), axis=axis, keepdims=True)) + shift
    return np.squeeze(out, axis=axis)


def safe_log(p: np.ndarray) -> np.ndarray:
    """Natural log that maps zero probabilities to ``-inf`` without warnings."""
    with np.errstate(divide="ignore"):
        return np.log(np.asarray(p, dtype=float))


def log_normal_pdf(x: np.ndarray, mean: float, variance: float) -> np.ndarray:
    """Log-density of a univariate normal distribution.

    Args:
        x: Evaluation points (scalar or array).
        mean: Distribution mean.
        variance: Distribution variance, > 0.

    Returns:
        ``log N(x | mean, variance)`` with the shape of ``x``.

    Examples:
        >>> log_normal_pdf(0.0, 0.0, 1.0)
        -0.9189385332046727
    """
    x = np.asarray(x, dtype=float)
    return -0.5 * (_LOG_2PI + np.log(variance) + (x - mean) ** 2 / variance)


def normal_pdf(x: np.ndarray, mean: float, variance: float) -> np.ndarray:
    """Density of a univariate normal distribution (see :func:`log_normal_pdf`)."""
    return np.exp(log_normal_pdf(x, mean, variance))


def floor_variance(variance: float, variance_floor: float) -> float:
    """Clamp ``variance`` so that it stays strictly above ``variance_floor``."""
    if variance > variance_floor:
        return float(variance)
    return float(np.nextafter(variance_floor, np.inf))


def check_observations(obs: np.ndarray, min_length: int = MIN_OBSERVATIONS) -> np.ndarray:
    """Validate an observation sequence and return it as a float64 array.

    Args:
        obs: 1-D sequence of real numbers.
        min_length: Minimum accepted length.

    Returns:
        The observations as a 1-D ``float64`` array. The caller's data is
        never modified.

    Raises:
        InvalidParameter: If ``obs`` is not 1-D, contains NaN/inf, or has a
            value beyond ``MAX_ABS_OBSERVATION`` in magnitude.
        InsufficientData: If ``len(obs) < min_length``.
    """
    try:
        arr = np.asarray(obs, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"observations must be real numbers: {exc}") from exc
    if arr.ndim != 1:
        raise InvalidParameter(f"observations must be a 1D sequence, got shape {arr.shape}")
    if len(arr) < min_length:
        raise InsufficientData(
            f"Need at least {min_length} observations, got {len(arr)}"
        )
    if not np.all(np.isfinite(arr)):
        bad = int(np.flatnonzero(~np.isfinite(arr))[0])
        raise InvalidParameter(f"observations must be finite, got {arr[bad]} at index {bad}")
    if np.any(np.abs(arr) > MAX_ABS_OBSERVATION):
        bad = int(np.argmax(np.abs(arr)))
        raise InvalidParameter(
            f"observations must satisfy |x| <= {MAX_ABS_OBSERVATION:g}, got {arr[bad]} at index {bad}"
        )
    return arr


def check_distribution(p: np.ndarray, name: str, atol: float = PROB_ATOL) -> np.ndarray:
    """Validate a probability vector, or each row of a stochastic matrix.

    Args:
        p: Probability vector of shape (K,) or row-stochastic matrix (K, K).
        name: Name used in error messages.
        atol: Absolute tolerance on each sum.

    Returns:
        ``p`` as a float array.

    Raises:
        InvalidParameter: If any entry is non-finite or negative, or a
            vector/row does not sum to 1 within ``atol``.
    """
    p = np.asarray(p, dtype=float)
    if not np.all(np.isfinite(p)):
        raise InvalidParameter(f"{name} contains non-finite values")
    if np.any(p < 0.0):
        raise InvalidParameter(f"{name} contains negative probabilities")
    sums = np.sum(p, axis=-1)
    if not np.allclose(sums, 1.0, rtol=0.0, atol=atol):
        raise InvalidParameter(f"{name} must sum to 1 (per row), got sums {np.round(sums, 8)}")
    return p


def check_num_states(num_states: int, n_obs: Optional[int] = None) -> int:
    """Validate a state count K against the minimum and the sequence length.

    Raises:
        InvalidParameter: If ``num_states`` is not an integer >= ``MIN_STATES``.
        InsufficientData: If ``n_obs`` is given and smaller than ``num_states``.
    """
    if isinstance(num_states, bool) or not isinstance(num_states, numbers.Integral):
        raise InvalidParameter(f"num_states must be an integer, got {num_states!r}")
    if num_states < MIN_STATES:
        raise InvalidParameter(f"num_states must be >= {MIN_STATES}, got {num_states}")
    if n_obs is not None and n_obs < num_states:
        raise InsufficientData(
            f"Need at least num_states={num_states} observations, got {n_obs}"
        )
    return int(num_states)


__all__ = [
    "logsumexp",
    "safe_log",
    "log_normal_pdf",
    "normal_pdf",
    "floor_variance",
    "check_observations",
    "check_distribution",
    "check_num_states",
]
