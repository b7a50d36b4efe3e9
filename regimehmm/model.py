"""Estimator-style interface to the Gaussian HMM engine.

:class:`GaussianHMM` wraps :func:`regimehmm.fit` and friends behind the
``fit`` / ``predict`` / ``predict_proba`` / ``score`` / ``sample`` methods of
the other probabilistic estimators, for callers that prefer to keep a fitted
model object around.
"""

from __future__ import annotations

import numbers
from typing import Optional, Tuple

import numpy as np

from .config import MIN_STATE_WEIGHT, VARIANCE_FLOOR, FitConfig
from .exceptions import InvalidParameter
from .fitting import fit_multistart, fit_with_config
from .forward_backward import forward_backward
from .forward_backward import score as _score
from .params import ParameterSet
from .result import FitResult
from .sampling import sample as _sample
from .utils import check_num_states
from .viterbi import viterbi


class GaussianHMM:
    """Univariate Gaussian hidden Markov model fitted with Baum-Welch.

    Attributes:
        n_states: Number of hidden states.
        params_: Fitted :class:`ParameterSet` (None before :meth:`fit`).
        result_: :class:`FitResult` of the last fit (None before :meth:`fit`).

    Example:
        >>> model = GaussianHMM(n_states=2, tol=1e-6, max_iter=200).fit(returns)
        >>> regimes = model.predict(returns)
    """

    def __init__(
        self,
        n_states: int,
        tol: float,
        max_iter: int,
        variance_floor: float = VARIANCE_FLOOR,
        min_state_weight: float = MIN_STATE_WEIGHT,
        n_init: int = 1,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize the model.

        Args:
            n_states: Number of hidden states, >= 2.
            tol: Convergence tolerance on the log-likelihood improvement.
            max_iter: Maximum EM iterations per fit.
            variance_floor: Lower bound for re-estimated variances.
            min_state_weight: Posterior mass below which a state is left unchanged.
            n_init: Number of starts, >= 1; values above 1 use :func:`fit_multistart`.
            rng: Random number generator for the extra starts and for
                :meth:`sample`. If None, uses default_rng(0).
        """
        self.n_states = check_num_states(n_states)
        if isinstance(n_init, bool) or not isinstance(n_init, numbers.Integral) or n_init < 1:
            raise InvalidParameter(f"n_init must be a positive integer, got {n_init!r}")
        # Validates tol / max_iter / floors eagerly.
        self.config = FitConfig(
            tolerance=tol,
            max_iterations=max_iter,
            variance_floor=variance_floor,
            min_state_weight=min_state_weight,
            viterbi_path=False,
        )
        self.n_init = n_init
        self.rng = rng if rng is not None else np.random.default_rng(0)

        # Set by fit
        self.params_: Optional[ParameterSet] = None
        self.result_: Optional[FitResult] = None

    @property
    def tol(self) -> float:
        return self.config.tolerance

    @property
    def max_iter(self) -> int:
        return self.config.max_iterations

    def _check_fitted(self) -> ParameterSet:
        if self.params_ is None:
            raise ValueError("Model not fitted. Call fit() first.")
        return self.params_

    def fit(self, X: np.ndarray, initial_guess: Optional[ParameterSet] = None) -> "GaussianHMM":
        """Fit the model to one observation sequence.

        Args:
            X: Observations, shape (T,).
            initial_guess: Optional starting parameters (single start only).

        Returns:
            self
        """
        if self.n_init > 1 and initial_guess is None:
            result = fit_multistart(
                X,
                self.n_states,
                n_starts=self.n_init,
                tolerance=self.config.tolerance,
                max_iterations=self.config.max_iterations,
                rng=self.rng,
                variance_floor=self.config.variance_floor,
                min_state_weight=self.config.min_state_weight,
                viterbi_path=False,
            )
        else:
            result = fit_with_config(X, self.n_states, self.config, initial_guess)

        self.result_ = result
        self.params_ = result.params
        return self

    @property
    def startprob_(self) -> np.ndarray:
        return self._check_fitted().start_prob

    @property
    def transmat_(self) -> np.ndarray:
        return self._check_fitted().trans_mat

    @property
    def means_(self) -> np.ndarray:
        return self._check_fitted().means

    @property
    def variances_(self) -> np.ndarray:
        return self._check_fitted().variances

    @property
    def converged_(self) -> bool:
        self._check_fitted()
        return self.result_.converged

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Most likely state path (Viterbi), shape (T,)."""
        path, _ = viterbi(X, self._check_fitted())
        return path

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Posterior state probabilities, shape (T, K)."""
        return forward_backward(X, self._check_fitted()).gamma

    def score(self, X: np.ndarray) -> float:
        """Total log-likelihood of ``X`` under the fitted parameters."""
        return _score(X, self._check_fitted())

    def sample(
        self, n_samples: int, rng: Optional[np.random.Generator] = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Sample (states, observations) from the fitted model.

        Args:
            n_samples: Sequence length.
            rng: Random number generator. If None, uses self.rng.

        Raises:
            ValueError: If model not fitted.
        """
        params = self._check_fitted()
        if rng is None:
            rng = self.rng
        return _sample(params, n_samples, rng)

    def __repr__(self) -> str:
        return (
            f"GaussianHMM(n_states={self.n_states}, tol={self.tol}, "
            f"max_iter={self.max_iter}, n_init={self.n_init})"
        )


__all__ = ["GaussianHMM"]
