"""Fit result and recoverable diagnostics.

:class:`FitResult` is the only object handed to reporting and plotting code.
It is frozen; its arrays are read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from .params import ParameterSet


class FitStatus(Enum):
    """Exit status of the Baum-Welch estimator."""

    CONVERGED = "converged"
    MAX_ITER = "max_iter"


@dataclass(frozen=True)
class DegenerateState:
    """A state received (near) zero posterior mass during an M-step.

    Its emission (and transition row, if also unvisited) kept the values of
    the previous iteration.

    Attributes:
        state: Index of the state.
        iteration: EM iteration (1-indexed) at which it was detected.
        weight: Total posterior responsibility of the state.
    """

    state: int
    iteration: int
    weight: float


@dataclass(frozen=True)
class NonConvergence:
    """EM stopped at ``max_iterations`` before meeting the tolerance.

    Attributes:
        n_iter: Number of EM iterations performed.
        last_improvement: Log-likelihood gain of the final iteration.
        tolerance: The tolerance that was not met.
    """

    n_iter: int
    last_improvement: float
    tolerance: float


Diagnostic = Union[DegenerateState, NonConvergence]


def _readonly(a: Optional[np.ndarray], dtype=float) -> Optional[np.ndarray]:
    if a is None:
        return None
    a = np.array(a, dtype=dtype, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class FitResult:
    """Outcome of fitting a Gaussian HMM to one observation sequence.

    Attributes:
        params: Parameters at which the fit stopped (highest log-likelihood seen).
        posteriors: ``P(state_t = k | obs)`` at ``params``, shape (T, K).
        log_likelihoods: Log-likelihood before the first M-step and after each
            iteration, shape (n_iter + 1,).
        converged: True if the tolerance was met within ``max_iterations``.
        n_iter: Number of EM iterations (M-steps) performed.
        status: Exit status.
        message: Human-readable description of the exit status.
        degenerate_states: States whose responsibilities collapsed, in order
            of detection.
        non_convergence: Set when ``converged`` is False.
        path: Viterbi state path at ``params``, shape (T,), or None.
    """

    params: ParameterSet
    posteriors: np.ndarray
    log_likelihoods: np.ndarray
    converged: bool
    n_iter: int
    status: FitStatus
    message: str
    degenerate_states: Tuple[DegenerateState, ...] = ()
    non_convergence: Optional[NonConvergence] = None
    path: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "posteriors", _readonly(self.posteriors))
        object.__setattr__(self, "log_likelihoods", _readonly(self.log_likelihoods))
        object.__setattr__(self, "path", _readonly(self.path, dtype=int))
        object.__setattr__(self, "degenerate_states", tuple(self.degenerate_states))

    @property
    def log_likelihood(self) -> float:
        """Log-likelihood of the observations at ``params``."""
        return float(np.max(self.log_likelihoods))

    @property
    def n_states(self) -> int:
        return self.params.n_states

    @property
    def state_assignments(self) -> np.ndarray:
        """Per-timestep most probable state under the posteriors (ties -> lowest index)."""
        return np.argmax(self.posteriors, axis=1)

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        """All recoverable diagnostics attached to this result."""
        extra = (self.non_convergence,) if self.non_convergence is not None else ()
        return self.degenerate_states + extra


__all__ = [
    "FitStatus",
    "DegenerateState",
    "NonConvergence",
    "Diagnostic",
    "FitResult",
]
