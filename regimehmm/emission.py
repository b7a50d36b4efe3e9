"""Gaussian emission model for a single hidden state."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import MIN_STATE_WEIGHT, VARIANCE_FLOOR
from .exceptions import InvalidParameter
from .utils import floor_variance, log_normal_pdf


@dataclass(frozen=True)
class GaussianEmission:
    """Univariate normal emission ``N(mean, variance)`` of one state.

    Attributes:
        mean: Emission mean, finite.
        variance: Emission variance, finite and > 0.
    """

    mean: float
    variance: float

    def __post_init__(self) -> None:
        mean = float(self.mean)
        variance = float(self.variance)
        if not math.isfinite(mean):
            raise InvalidParameter(f"emission mean must be finite, got {mean}")
        if not math.isfinite(variance) or variance <= 0.0:
            raise InvalidParameter(f"emission variance must be finite and > 0, got {variance}")
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "variance", variance)

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)

    def log_pdf(self, x: np.ndarray) -> np.ndarray:
        """Log-density of ``x`` under this emission (vectorized)."""
        return log_normal_pdf(x, self.mean, self.variance)

    def pdf(self, x: np.ndarray) -> np.ndarray:
        """Density of ``x`` under this emission (vectorized)."""
        return np.exp(self.log_pdf(x))

    def reestimate(
        self,
        observations: np.ndarray,
        weights: np.ndarray,
        variance_floor: float = VARIANCE_FLOOR,
        min_weight: float = MIN_STATE_WEIGHT,
    ) -> Tuple["GaussianEmission", bool]:
        """Weighted maximum-likelihood update of mean and variance.

        Args:
            observations: Observation sequence, shape (T,).
            weights: Posterior responsibilities of this state, shape (T,).
            variance_floor: The new variance is kept strictly above this.
            min_weight: If ``sum(weights)`` is below this, the state has no
                observations assigned and is left unchanged.

        Returns:
            Tuple of (emission, degenerate). When ``degenerate`` is True the
            returned emission is ``self``.
        """
        observations = np.asarray(observations, dtype=float)
        weights = np.asarray(weights, dtype=float)
        total = float(np.sum(weights))
        if not total > min_weight:
            return self, True

        mean = float(np.dot(weights, observations) / total)
        variance = float(np.dot(weights, (observations - mean) ** 2) / total)
        return GaussianEmission(mean, floor_variance(variance, variance_floor)), False
