"""Draw synthetic state and observation sequences from a parameter set."""

from __future__ import annotations

import numbers
from typing import Optional, Tuple

import numpy as np

from .exceptions import InvalidParameter
from .params import ParameterSet


def sample(
    params: ParameterSet, length: int, rng: Optional[np.random.Generator] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample a hidden state path and the observations it emits.

    Args:
        params: HMM parameters.
        length: Sequence length T >= 1.
        rng: Random number generator. If None, uses default_rng(0).

    Returns:
        Tuple of (states, observations), both shape (T,).
    """
    if isinstance(length, bool) or not isinstance(length, numbers.Integral) or length < 1:
        raise InvalidParameter(f"length must be a positive integer, got {length!r}")
    if rng is None:
        rng = np.random.default_rng(0)

    # rng.choice is stricter about sums than ParameterSet validation
    start_prob = params.start_prob / np.sum(params.start_prob)
    trans_mat = params.trans_mat / np.sum(params.trans_mat, axis=1, keepdims=True)

    states = np.zeros(length, dtype=int)
    states[0] = rng.choice(params.n_states, p=start_prob)
    for t in range(1, length):
        states[t] = rng.choice(params.n_states, p=trans_mat[states[t - 1]])

    means = params.means
    stds = np.sqrt(params.variances)
    observations = rng.normal(means[states], stds[states])

    return states, observations


__all__ = ["sample"]
