"""Forward-backward algorithm for Gaussian HMMs in log space.

All lattices are kept as log-probabilities so that sequences of thousands of
observations do not underflow.

References:
    Rabiner, L. R. (1989). A tutorial on hidden Markov models and selected
    applications in speech recognition. Proceedings of the IEEE, 77(2), 257-286.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .params import ParameterSet
from .utils import check_observations, logsumexp


@dataclass(frozen=True)
class ForwardBackwardResult:
    """Output of one forward-backward pass.

    Attributes:
        log_alpha: Forward log-probabilities, shape (T, K).
        log_beta: Backward log-probabilities, shape (T, K).
        gamma: Posterior ``P(state_t = k | obs)``, shape (T, K). Rows sum to 1.
        xi: Pairwise posterior ``P(state_t = j, state_{t+1} = k | obs)``,
            shape (T-1, K, K).
        log_likelihood: ``log P(obs)`` under the parameters.
    """

    log_alpha: np.ndarray
    log_beta: np.ndarray
    gamma: np.ndarray
    xi: np.ndarray
    log_likelihood: float


def forward_lattice(
    log_start: np.ndarray, log_trans: np.ndarray, log_b: np.ndarray
) -> np.ndarray:
    """Forward recursion on precomputed log-emissions ``log_b`` (T, K)."""
    T, n_states = log_b.shape
    log_alpha = np.empty((T, n_states))
    log_alpha[0] = log_start + log_b[0]
    for t in range(1, T):
        # log_alpha[t, k] = log_b[t, k] + logsumexp_j(log_alpha[t-1, j] + log_trans[j, k])
        log_alpha[t] = log_b[t] + logsumexp(log_alpha[t - 1][:, np.newaxis] + log_trans, axis=0)
    return log_alpha


def backward_lattice(log_trans: np.ndarray, log_b: np.ndarray) -> np.ndarray:
    """Backward recursion on precomputed log-emissions ``log_b`` (T, K)."""
    T, n_states = log_b.shape
    log_beta = np.empty((T, n_states))
    log_beta[T - 1] = 0.0
    for t in range(T - 2, -1, -1):
        # log_beta[t, j] = logsumexp_k(log_trans[j, k] + log_b[t+1, k] + log_beta[t+1, k])
        log_beta[t] = logsumexp(log_trans + (log_b[t + 1] + log_beta[t + 1])[np.newaxis, :], axis=1)
    return log_beta


def posteriors_from_lattices(
    log_alpha: np.ndarray,
    log_beta: np.ndarray,
    log_trans: np.ndarray,
    log_b: np.ndarray,
) -> ForwardBackwardResult:
    """Combine forward and backward lattices into γ, ξ and the log-likelihood."""
    log_likelihood = float(logsumexp(log_alpha[-1]))

    gamma = np.exp(log_alpha + log_beta - log_likelihood)

    log_xi = (
        log_alpha[:-1, :, np.newaxis]
        + log_trans[np.newaxis, :, :]
        + (log_b[1:] + log_beta[1:])[:, np.newaxis, :]
        - log_likelihood
    )
    xi = np.exp(log_xi)

    return ForwardBackwardResult(
        log_alpha=log_alpha,
        log_beta=log_beta,
        gamma=gamma,
        xi=xi,
        log_likelihood=log_likelihood,
    )


def run_forward_backward(obs: np.ndarray, params: ParameterSet) -> ForwardBackwardResult:
    """Forward-backward pass on already validated observations."""
    log_b = params.emission_log_likelihoods(obs)
    log_trans = params.log_trans
    log_alpha = forward_lattice(params.log_start, log_trans, log_b)
    log_beta = backward_lattice(log_trans, log_b)
    return posteriors_from_lattices(log_alpha, log_beta, log_trans, log_b)


def forward(obs: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, float]:
    """Forward algorithm.

    Args:
        obs: Observation sequence, shape (T,), T >= 2.
        params: HMM parameters.

    Returns:
        Tuple of (log_alpha, log_likelihood) where log_alpha has shape (T, K).

    Raises:
        InsufficientData: If T < 2.
        InvalidParameter: If ``obs`` is not 1-D or has non-finite values.
    """
    obs = check_observations(obs)
    log_b = params.emission_log_likelihoods(obs)
    log_alpha = forward_lattice(params.log_start, params.log_trans, log_b)
    return log_alpha, float(logsumexp(log_alpha[-1]))


def backward(obs: np.ndarray, params: ParameterSet) -> np.ndarray:
    """Backward algorithm; returns log_beta of shape (T, K)."""
    obs = check_observations(obs)
    return backward_lattice(params.log_trans, params.emission_log_likelihoods(obs))


def forward_backward(obs: np.ndarray, params: ParameterSet) -> ForwardBackwardResult:
    """Forward-backward algorithm: lattices, posteriors and log-likelihood.

    Args:
        obs: Observation sequence, shape (T,), T >= 2.
        params: HMM parameters.

    Returns:
        ForwardBackwardResult with γ (T, K) and ξ (T-1, K, K).

    Raises:
        InsufficientData: If T < 2 (transition posteriors are undefined).
        InvalidParameter: If ``obs`` is not 1-D or has non-finite values.
    """
    return run_forward_backward(check_observations(obs), params)


def score(obs: np.ndarray, params: ParameterSet) -> float:
    """Log-likelihood ``log P(obs | params)``."""
    _, log_likelihood = forward(obs, params)
    return log_likelihood


__all__ = [
    "ForwardBackwardResult",
    "forward",
    "backward",
    "forward_backward",
    "score",
    "forward_lattice",
    "backward_lattice",
    "posteriors_from_lattices",
    "run_forward_backward",
]
