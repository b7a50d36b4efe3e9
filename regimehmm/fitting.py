"""Top-level entry points: fit, decode, score and multi-start fitting.

Example:
    >>> import numpy as np
    >>> from regimehmm import fit
    >>> rng = np.random.default_rng(0)
    >>> returns = np.concatenate([rng.normal(0.1, 0.1, 200), rng.normal(-0.05, 0.2, 200)])
    >>> result = fit(returns, num_states=2, tolerance=1e-6, max_iterations=200)
    >>> result.converged
    True
    >>> result.posteriors.shape
    (400, 2)
"""

from __future__ import annotations

import numbers
from concurrent.futures import Executor
from functools import partial
from typing import Optional

import numpy as np

from .baum_welch import IterationCallback, baum_welch
from .config import MIN_STATE_WEIGHT, VARIANCE_FLOOR, FitConfig
from .exceptions import InvalidParameter
from .forward_backward import score as _score
from .initialization import quantile_initial_guess, random_initial_guess
from .logging import get_logger
from .params import ParameterSet
from .result import FitResult, FitStatus
from .utils import check_num_states, check_observations
from .viterbi import viterbi

logger = get_logger(__name__)


def fit_with_config(
    observations: np.ndarray,
    num_states: int,
    config: FitConfig,
    initial_guess: Optional[ParameterSet] = None,
    callback: Optional[IterationCallback] = None,
) -> FitResult:
    """Fit a Gaussian HMM using a prepared :class:`FitConfig`.

    See :func:`fit` for the meaning of the arguments.
    """
    num_states = check_num_states(num_states)
    obs = check_observations(observations)
    check_num_states(num_states, len(obs))

    if initial_guess is None:
        initial_guess = quantile_initial_guess(obs, num_states, variance_floor=config.variance_floor)
    elif not isinstance(initial_guess, ParameterSet):
        raise InvalidParameter(
            f"initial_guess must be a ParameterSet, got {type(initial_guess).__name__}"
        )
    elif initial_guess.n_states != num_states:
        raise InvalidParameter(
            f"initial_guess has {initial_guess.n_states} states, expected num_states={num_states}"
        )

    em = baum_welch(obs, initial_guess, config, callback=callback)

    path = viterbi(obs, em.params)[0] if config.viterbi_path else None

    if em.converged:
        status = FitStatus.CONVERGED
        message = f"Converged after {em.n_iter} iterations"
    else:
        status = FitStatus.MAX_ITER
        message = (
            f"Reached max_iterations={config.max_iterations} without meeting "
            f"tolerance={config.tolerance}"
        )

    logger.info(
        "fit K=%d T=%d: %s, log-likelihood %.6f",
        num_states,
        len(obs),
        message,
        em.forward_backward.log_likelihood,
    )

    return FitResult(
        params=em.params,
        posteriors=em.forward_backward.gamma,
        log_likelihoods=np.asarray(em.log_likelihoods),
        converged=em.converged,
        n_iter=em.n_iter,
        status=status,
        message=message,
        degenerate_states=em.degenerate_states,
        non_convergence=em.non_convergence,
        path=path,
    )


def fit(
    observations: np.ndarray,
    num_states: int,
    initial_guess: Optional[ParameterSet] = None,
    *,
    tolerance: float,
    max_iterations: int,
    variance_floor: float = VARIANCE_FLOOR,
    min_state_weight: float = MIN_STATE_WEIGHT,
    viterbi_path: bool = True,
    callback: Optional[IterationCallback] = None,
) -> FitResult:
    """Fit a K-state Gaussian HMM to a univariate sequence with Baum-Welch.

    Args:
        observations: Cleaned real-valued sequence (e.g. log-returns), shape (T,).
        num_states: Number of hidden states K >= 2, with K <= T.
        initial_guess: Starting parameters with ``num_states`` states. If None,
            :func:`regimehmm.initialization.quantile_initial_guess` is used.
        tolerance: Convergence threshold on the log-likelihood improvement.
        max_iterations: Maximum number of EM iterations.
        variance_floor: Lower bound for re-estimated variances.
        min_state_weight: Posterior mass below which a state is left unchanged.
        viterbi_path: Also decode the Viterbi path at the fitted parameters.
        callback: Optional hook called after every EM iteration.

    Returns:
        FitResult with the fitted parameters, posteriors (T, K), log-likelihood
        trajectory, convergence flag, diagnostics and optional Viterbi path.

    Raises:
        InvalidParameter: Invalid ``num_states``, configuration values,
            non-finite observations or a mismatched ``initial_guess``.
        InsufficientData: Fewer than 2 (or fewer than ``num_states``) observations.
    """
    config = FitConfig(
        tolerance=tolerance,
        max_iterations=max_iterations,
        variance_floor=variance_floor,
        min_state_weight=min_state_weight,
        viterbi_path=viterbi_path,
    )
    return fit_with_config(observations, num_states, config, initial_guess, callback)


def decode(observations: np.ndarray, params: ParameterSet) -> np.ndarray:
    """Most likely state path of ``observations`` under ``params`` (Viterbi).

    Args:
        observations: Observation sequence, shape (T,), T >= 2.
        params: HMM parameters.

    Returns:
        Integer array of states, shape (T,).
    """
    path, _ = viterbi(observations, params)
    return path


def score(observations: np.ndarray, params: ParameterSet) -> float:
    """Log-likelihood of ``observations`` under ``params``."""
    return _score(observations, params)


def fit_multistart(
    observations: np.ndarray,
    num_states: int,
    *,
    n_starts: int,
    tolerance: float,
    max_iterations: int,
    rng: Optional[np.random.Generator] = None,
    executor: Optional[Executor] = None,
    variance_floor: float = VARIANCE_FLOOR,
    min_state_weight: float = MIN_STATE_WEIGHT,
    viterbi_path: bool = True,
) -> FitResult:
    """Fit from several initial guesses and keep the best local optimum.

    The first start is the deterministic quantile guess; the remaining
    ``n_starts - 1`` are :func:`random_initial_guess` draws, each from its own
    generator seeded by ``rng``. The fits share no mutable state, so they can
    run on any ``concurrent.futures.Executor``.

    Args:
        observations: Observation sequence, shape (T,).
        num_states: Number of hidden states K >= 2.
        n_starts: Number of independent fits, >= 1.
        tolerance: Convergence threshold on the log-likelihood improvement.
        max_iterations: Maximum number of EM iterations per fit.
        rng: Generator for the random starts. If None, uses default_rng(0).
        executor: Optional executor running the fits; sequential if None.
        variance_floor: Lower bound for re-estimated variances.
        min_state_weight: Posterior mass below which a state is left unchanged.
        viterbi_path: Also decode the Viterbi path of each fit.

    Returns:
        The FitResult with the highest final log-likelihood (earliest start on ties).
    """
    if isinstance(n_starts, bool) or not isinstance(n_starts, numbers.Integral) or n_starts < 1:
        raise InvalidParameter(f"n_starts must be a positive integer, got {n_starts!r}")
    if rng is None:
        rng = np.random.default_rng(0)

    config = FitConfig(
        tolerance=tolerance,
        max_iterations=max_iterations,
        variance_floor=variance_floor,
        min_state_weight=min_state_weight,
        viterbi_path=viterbi_path,
    )
    num_states = check_num_states(num_states)
    obs = check_observations(observations)
    check_num_states(num_states, len(obs))

    guesses = [quantile_initial_guess(obs, num_states, variance_floor=variance_floor)]
    seeds = rng.integers(0, 2**32, size=n_starts - 1)
    for seed in seeds:
        guesses.append(
            random_initial_guess(
                obs, num_states, np.random.default_rng(int(seed)), variance_floor=variance_floor
            )
        )

    run = partial(_fit_from_guess, obs, num_states, config)
    mapper = executor.map if executor is not None else map
    results = list(mapper(run, guesses))

    best = max(range(len(results)), key=lambda i: (results[i].log_likelihood, -i))
    logger.info(
        "multistart K=%d: best of %d starts is #%d (log-likelihood %.6f)",
        num_states,
        n_starts,
        best,
        results[best].log_likelihood,
    )
    return results[best]


def _fit_from_guess(
    obs: np.ndarray, num_states: int, config: FitConfig, guess: ParameterSet
) -> FitResult:
    return fit_with_config(obs, num_states, config, guess)


__all__ = [
    "fit",
    "fit_with_config",
    "fit_multistart",
    "decode",
    "score",
]
