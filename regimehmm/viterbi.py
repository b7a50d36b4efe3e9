"""Viterbi decoding of the most likely hidden state path."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .params import ParameterSet
from .utils import check_observations


def viterbi(obs: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, float]:
    """Viterbi algorithm: most likely state sequence in log space.

    Ties in every argmax are broken towards the lowest state index, so the
    path is a deterministic function of the inputs.

    Args:
        obs: Observation sequence, shape (T,), T >= 2.
        params: HMM parameters.

    Returns:
        Tuple of (path, log_prob) where:
        - path: shape (T,), integer states in [0, K)
        - log_prob: joint log-probability of ``path`` and ``obs``

    Raises:
        InsufficientData: If T < 2.
        InvalidParameter: If ``obs`` is not 1-D or has non-finite values.
    """
    obs = check_observations(obs)
    T = len(obs)
    log_b = params.emission_log_likelihoods(obs)
    log_trans = params.log_trans

    log_delta = np.empty((T, params.n_states))
    psi = np.zeros((T, params.n_states), dtype=int)

    log_delta[0] = params.log_start + log_b[0]
    for t in range(1, T):
        # scores[j, k] = log_delta[t-1, j] + log_trans[j, k]
        scores = log_delta[t - 1][:, np.newaxis] + log_trans
        # np.argmax returns the first maximum, i.e. the lowest state index
        psi[t] = np.argmax(scores, axis=0)
        log_delta[t] = scores[psi[t], np.arange(params.n_states)] + log_b[t]

    path = np.empty(T, dtype=int)
    path[T - 1] = int(np.argmax(log_delta[T - 1]))
    log_prob = float(log_delta[T - 1, path[T - 1]])
    for t in range(T - 2, -1, -1):
        path[t] = psi[t + 1, path[t + 1]]

    return path, log_prob


__all__ = ["viterbi"]
