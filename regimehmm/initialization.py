"""Initial parameter guesses for Baum-Welch.

EM only finds a local optimum, so the starting point matters. Two generators
are provided: a deterministic quantile split (the default used by
:func:`regimehmm.fit`) and a randomized guess for multi-start fitting.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .config import VARIANCE_FLOOR
from .exceptions import InvalidParameter
from .params import ParameterSet
from .utils import check_num_states, check_observations, floor_variance


def quantile_initial_guess(
    obs: np.ndarray,
    num_states: int,
    self_transition: float = 0.9,
    variance_floor: float = VARIANCE_FLOOR,
) -> ParameterSet:
    """Deterministic guess from a quantile split of the data.

    The sorted observations are split into ``num_states`` chunks of (nearly)
    equal size; chunk ``k`` gives the mean and variance of state ``k``, so
    states come out ordered by ascending mean. The initial distribution is
    uniform and the transition matrix puts ``self_transition`` on the
    diagonal, spreading the rest evenly.

    Args:
        obs: Observation sequence, shape (T,).
        num_states: Number of hidden states K >= 2.
        self_transition: Diagonal of the transition matrix, in [0, 1].
        variance_floor: Lower bound on the chunk variances.

    Returns:
        A valid ParameterSet.
    """
    obs = check_observations(obs)
    num_states = check_num_states(num_states, len(obs))
    if not 0.0 <= self_transition <= 1.0:
        raise InvalidParameter(f"self_transition must be in [0, 1], got {self_transition}")

    chunks = np.array_split(np.sort(obs), num_states)
    means = np.array([chunk.mean() for chunk in chunks])
    variances = np.array([floor_variance(chunk.var(), variance_floor) for chunk in chunks])

    start_prob = np.full(num_states, 1.0 / num_states)
    trans_mat = np.full((num_states, num_states), (1.0 - self_transition) / (num_states - 1))
    np.fill_diagonal(trans_mat, self_transition)

    return ParameterSet.from_arrays(start_prob, trans_mat, means, variances)


def random_initial_guess(
    obs: np.ndarray,
    num_states: int,
    rng: Optional[np.random.Generator] = None,
    variance_floor: float = VARIANCE_FLOOR,
) -> ParameterSet:
    """Randomized guess for multi-start fitting.

    Means are distinct observations drawn without replacement, every state
    starts from the global variance, and the initial distribution and the
    transition rows are drawn from a flat Dirichlet distribution.

    Args:
        obs: Observation sequence, shape (T,).
        num_states: Number of hidden states K >= 2.
        rng: Random number generator. If None, uses default_rng(0).
        variance_floor: Lower bound on the variance.

    Returns:
        A valid ParameterSet.
    """
    if rng is None:
        rng = np.random.default_rng(0)

    obs = check_observations(obs)
    num_states = check_num_states(num_states, len(obs))

    means = np.sort(rng.choice(obs, size=num_states, replace=False))
    variances = np.full(num_states, floor_variance(float(np.var(obs)), variance_floor))
    start_prob = rng.dirichlet(np.ones(num_states))
    trans_mat = rng.dirichlet(np.ones(num_states), size=num_states)

    return ParameterSet.from_arrays(start_prob, trans_mat, means, variances, normalize=True)


__all__ = ["quantile_initial_guess", "random_initial_guess"]
