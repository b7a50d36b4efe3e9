"""HMM parameter set: initial distribution, transition matrix and emissions.

A :class:`ParameterSet` is immutable. Its arrays are read-only copies and the
Baum-Welch estimator builds a new set at every iteration, so one set can be
shared by concurrent fits or decodes without copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .config import MIN_STATES, PROB_ATOL
from .emission import GaussianEmission
from .exceptions import InvalidParameter
from .utils import check_distribution, safe_log


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class ParameterSet:
    """Parameters of a K-state Gaussian HMM.

    Attributes:
        start_prob: Initial state distribution π, shape (K,).
        trans_mat: Transition matrix A, shape (K, K). Row ``j`` holds
            ``P(state_{t+1} = k | state_t = j)``.
        emissions: Tuple of K :class:`GaussianEmission`, one per state.

    Raises:
        InvalidParameter: On construction, if K < 2, shapes disagree, or π / a
            row of A is not a valid distribution within ``PROB_ATOL``.
    """

    start_prob: np.ndarray
    trans_mat: np.ndarray
    emissions: Tuple[GaussianEmission, ...]

    def __post_init__(self) -> None:
        emissions = tuple(self.emissions)
        if not all(isinstance(e, GaussianEmission) for e in emissions):
            raise InvalidParameter("emissions must be GaussianEmission instances")
        n_states = len(emissions)
        if n_states < MIN_STATES:
            raise InvalidParameter(f"need at least {MIN_STATES} states, got {n_states}")

        start_prob = np.asarray(self.start_prob, dtype=float)
        trans_mat = np.asarray(self.trans_mat, dtype=float)
        if start_prob.shape != (n_states,):
            raise InvalidParameter(f"start_prob shape {start_prob.shape} != ({n_states},)")
        if trans_mat.shape != (n_states, n_states):
            raise InvalidParameter(
                f"trans_mat shape {trans_mat.shape} != ({n_states}, {n_states})"
            )
        check_distribution(start_prob, "start_prob", PROB_ATOL)
        check_distribution(trans_mat, "trans_mat", PROB_ATOL)

        object.__setattr__(self, "start_prob", _frozen(start_prob))
        object.__setattr__(self, "trans_mat", _frozen(trans_mat))
        object.__setattr__(self, "emissions", emissions)

    @classmethod
    def from_arrays(
        cls,
        start_prob: Sequence[float],
        trans_mat: Sequence[Sequence[float]],
        means: Sequence[float],
        variances: Sequence[float],
        normalize: bool = False,
    ) -> "ParameterSet":
        """Build a parameter set from plain arrays.

        Args:
            start_prob: Initial distribution, shape (K,).
            trans_mat: Transition matrix, shape (K, K).
            means: Emission means, shape (K,).
            variances: Emission variances, shape (K,).
            normalize: If True, rescale ``start_prob`` and each row of
                ``trans_mat`` to sum to 1 before validation. Entries must
                still be non-negative and each row must have positive mass.

        Returns:
            A validated ParameterSet.
        """
        means = np.asarray(means, dtype=float)
        variances = np.asarray(variances, dtype=float)
        if means.ndim != 1 or means.shape != variances.shape:
            raise InvalidParameter(
                f"means shape {means.shape} and variances shape {variances.shape} "
                "must be equal and 1D"
            )
        start_prob = np.asarray(start_prob, dtype=float)
        trans_mat = np.asarray(trans_mat, dtype=float)
        if normalize:
            start_prob = _normalize(start_prob, "start_prob")
            trans_mat = _normalize(trans_mat, "trans_mat")
        emissions = tuple(GaussianEmission(m, v) for m, v in zip(means, variances))
        return cls(start_prob, trans_mat, emissions)

    @property
    def n_states(self) -> int:
        return len(self.emissions)

    @property
    def means(self) -> np.ndarray:
        return np.array([e.mean for e in self.emissions])

    @property
    def variances(self) -> np.ndarray:
        return np.array([e.variance for e in self.emissions])

    @property
    def log_start(self) -> np.ndarray:
        return safe_log(self.start_prob)

    @property
    def log_trans(self) -> np.ndarray:
        return safe_log(self.trans_mat)

    def emission_log_likelihoods(self, obs: np.ndarray) -> np.ndarray:
        """Log-emission matrix ``B[t, k] = log N(obs[t] | mean_k, var_k)``, shape (T, K)."""
        obs = np.asarray(obs, dtype=float)
        return np.column_stack([e.log_pdf(obs) for e in self.emissions])

    def replace(self, **changes) -> "ParameterSet":
        """Return a new set with some of ``start_prob``, ``trans_mat``, ``emissions`` replaced."""
        fields = {
            "start_prob": self.start_prob,
            "trans_mat": self.trans_mat,
            "emissions": self.emissions,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"unknown ParameterSet fields: {sorted(unknown)}")
        fields.update(changes)
        return ParameterSet(**fields)

    def permute(self, order: Sequence[int]) -> "ParameterSet":
        """Relabel states so that new state ``i`` is old state ``order[i]``.

        π, the rows and columns of A and the emissions are permuted together,
        so the model describes the same distribution.
        """
        order = np.asarray(order, dtype=int)
        if sorted(order.tolist()) != list(range(self.n_states)):
            raise InvalidParameter(
                f"order must be a permutation of range({self.n_states}), got {order.tolist()}"
            )
        return ParameterSet(
            self.start_prob[order],
            self.trans_mat[np.ix_(order, order)],
            tuple(self.emissions[i] for i in order),
        )

    def sort_by_mean(self) -> "ParameterSet":
        """Relabel states in ascending order of emission mean (stable)."""
        return self.permute(np.argsort(self.means, kind="stable"))

    def allclose(self, other: "ParameterSet", atol: float = 1e-8) -> bool:
        """Element-wise comparison of two sets with the same labelling."""
        if self.n_states != other.n_states:
            return False
        return (
            np.allclose(self.start_prob, other.start_prob, atol=atol)
            and np.allclose(self.trans_mat, other.trans_mat, atol=atol)
            and np.allclose(self.means, other.means, atol=atol)
            and np.allclose(self.variances, other.variances, atol=atol)
        )

    def __repr__(self) -> str:
        return (
            f"ParameterSet(n_states={self.n_states}, "
            f"start_prob={np.round(self.start_prob, 4).tolist()}, "
            f"means={np.round(self.means, 6).tolist()}, "
            f"variances={np.round(self.variances, 6).tolist()})"
        )


def _normalize(p: np.ndarray, name: str) -> np.ndarray:
    if np.any(p < 0.0) or not np.all(np.isfinite(p)):
        raise InvalidParameter(f"{name} must contain finite, non-negative values")
    sums = np.sum(p, axis=-1, keepdims=True)
    if np.any(sums <= 0.0):
        raise InvalidParameter(f"{name} has a row with zero total mass")
    return p / sums


__all__ = ["ParameterSet"]
