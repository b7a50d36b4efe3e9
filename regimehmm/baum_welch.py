"""Baum-Welch (EM) estimation for Gaussian HMMs.

Each iteration runs a forward-backward pass (E-step) and re-estimates the
initial distribution, the transition matrix and the Gaussian emissions from
the posteriors (M-step). Every M-step returns a new :class:`ParameterSet`; the
initial guess passed in is never modified. The estimator draws no random
numbers, so the result is a deterministic function of the initial guess and
the observations.

References:
    Rabiner, L. R. (1989). A tutorial on hidden Markov models and selected
    applications in speech recognition. Proceedings of the IEEE, 77(2), 257-286.
    Bishop, C. M. (2006). Pattern Recognition and Machine Learning, Chapter 13.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

import numpy as np

from .config import FitConfig
from .forward_backward import ForwardBackwardResult, run_forward_backward
from .logging import get_logger
from .params import ParameterSet
from .result import DegenerateState, NonConvergence
from .utils import check_num_states, check_observations

logger = get_logger(__name__)


@dataclass(frozen=True)
class IterationInfo:
    """
    Progress record passed to the iteration callback.

    Args:
        iteration: EM iteration number (1-indexed).
        log_likelihood: Log-likelihood after this iteration's M-step.
        improvement: Gain over the previous log-likelihood.
        params: Parameters after this iteration's M-step.
    """

    iteration: int
    log_likelihood: float
    improvement: float
    params: ParameterSet


class IterationCallback(Protocol):
    """Callable invoked once per EM iteration with an :class:`IterationInfo`."""

    def __call__(self, info: IterationInfo) -> None:
        ...


@dataclass
class EMResult:
    """
    Raw output of :func:`baum_welch`.

    Attributes:
        params: Parameters with the highest log-likelihood seen.
        forward_backward: Forward-backward pass at ``params``.
        log_likelihoods: Initial log-likelihood followed by one value per iteration.
        converged: Whether the tolerance was met.
        n_iter: Number of M-steps performed.
        degenerate_states: First detection of each degenerate state.
        non_convergence: Set when the iteration cap was reached.
    """

    params: ParameterSet
    forward_backward: ForwardBackwardResult
    log_likelihoods: List[float] = field(default_factory=list)
    converged: bool = False
    n_iter: int = 0
    degenerate_states: Tuple[DegenerateState, ...] = ()
    non_convergence: Optional[NonConvergence] = None


def m_step(
    obs: np.ndarray,
    params: ParameterSet,
    fb: ForwardBackwardResult,
    config: FitConfig,
    iteration: int = 0,
) -> Tuple[ParameterSet, List[DegenerateState]]:
    """Re-estimate all parameters from one forward-backward pass.

    - ``start_prob[k] = gamma[0, k]``
    - ``trans_mat[j, k] = sum_t xi[t, j, k] / sum_{t<T-1} gamma[t, j]``; a row
      whose denominator is below ``config.min_state_weight`` keeps its values.
    - mean and variance of state k: weighted by ``gamma[:, k]``; a state with
      total weight below ``config.min_state_weight`` keeps its emission and is
      reported as degenerate.

    Args:
        obs: Validated observations, shape (T,).
        params: Parameters used for the E-step.
        fb: Forward-backward pass of ``obs`` at ``params``.
        config: Fit configuration (variance floor, minimum state weight).
        iteration: Iteration number recorded in diagnostics.

    Returns:
        Tuple of (new_params, degenerate_states).
    """
    gamma, xi = fb.gamma, fb.xi

    start_prob = gamma[0] / np.sum(gamma[0])

    trans_counts = np.sum(xi, axis=0)
    visits = np.sum(gamma[:-1], axis=0)
    trans_mat = np.array(params.trans_mat, copy=True)
    for j in range(params.n_states):
        if visits[j] > config.min_state_weight:
            row = trans_counts[j] / visits[j]
            trans_mat[j] = row / np.sum(row)
        else:
            logger.debug("state %d unvisited at iteration %d; transition row kept", j, iteration)

    emissions = []
    degenerate: List[DegenerateState] = []
    for k, emission in enumerate(params.emissions):
        updated, is_degenerate = emission.reestimate(
            obs, gamma[:, k], config.variance_floor, config.min_state_weight
        )
        if is_degenerate:
            degenerate.append(DegenerateState(k, iteration, float(np.sum(gamma[:, k]))))
        emissions.append(updated)

    return ParameterSet(start_prob, trans_mat, tuple(emissions)), degenerate


def baum_welch(
    obs: np.ndarray,
    initial_params: ParameterSet,
    config: FitConfig,
    callback: Optional[IterationCallback] = None,
) -> EMResult:
    """Fit HMM parameters with the Baum-Welch EM algorithm.

    Stops when an iteration improves the log-likelihood by less than
    ``config.tolerance`` (converged), or after ``config.max_iterations``
    iterations (not converged; a :class:`NonConvergence` diagnostic is attached
    and the best parameters found are still returned).

    Args:
        obs: Observation sequence, shape (T,).
        initial_params: Starting parameters. Not modified.
        config: Tolerance, iteration cap and numerical floors.
        callback: Optional progress hook called after every iteration.

    Returns:
        EMResult with the fitted parameters and diagnostics.

    Raises:
        InsufficientData: If T < 2 or T < number of states.
        InvalidParameter: If ``obs`` is not 1-D or has non-finite values.
    """
    obs = check_observations(obs)
    check_num_states(initial_params.n_states, len(obs))

    params = initial_params
    fb = run_forward_backward(obs, params)
    result = EMResult(params=params, forward_backward=fb, log_likelihoods=[fb.log_likelihood])

    degenerate_seen = {}
    improvement = np.inf

    for iteration in range(1, config.max_iterations + 1):
        params, degenerate = m_step(obs, params, fb, config, iteration)
        for diag in degenerate:
            if diag.state not in degenerate_seen:
                degenerate_seen[diag.state] = diag
                logger.warning(
                    "state %d degenerate at iteration %d (posterior mass %.3g); "
                    "keeping previous emission",
                    diag.state,
                    iteration,
                    diag.weight,
                )

        previous = fb.log_likelihood
        fb = run_forward_backward(obs, params)
        improvement = fb.log_likelihood - previous
        result.log_likelihoods.append(fb.log_likelihood)
        result.n_iter = iteration

        if fb.log_likelihood >= result.forward_backward.log_likelihood:
            result.params = params
            result.forward_backward = fb

        logger.debug(
            "EM iteration %d: log-likelihood %.6f (improvement %.3e)",
            iteration,
            fb.log_likelihood,
            improvement,
        )
        if callback is not None:
            callback(IterationInfo(iteration, fb.log_likelihood, improvement, params))

        if improvement < config.tolerance:
            result.converged = True
            break

    result.degenerate_states = tuple(degenerate_seen.values())

    if not result.converged:
        result.non_convergence = NonConvergence(
            n_iter=result.n_iter,
            last_improvement=float(improvement),
            tolerance=config.tolerance,
        )
        logger.warning(
            "EM did not converge in %d iterations (last improvement %.3e, tolerance %.3e)",
            result.n_iter,
            improvement,
            config.tolerance,
        )

    return result


__all__ = [
    "IterationInfo",
    "IterationCallback",
    "EMResult",
    "m_step",
    "baum_welch",
]
