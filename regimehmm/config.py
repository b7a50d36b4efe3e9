"""Numerical constants and the fit configuration container."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from .exceptions import InvalidParameter

# Lower bound applied to re-estimated emission variances.
VARIANCE_FLOOR = 1e-6
# Posterior mass below which a state counts as unvisited during re-estimation.
MIN_STATE_WEIGHT = 1e-10
# Tolerance for probability vectors summing to one.
PROB_ATOL = 1e-6
MIN_STATES = 2
MIN_OBSERVATIONS = 2
# Largest accepted |observation|; squared deviations stay finite below it.
MAX_ABS_OBSERVATION = 1e100


@dataclass(frozen=True)
class FitConfig:
    """
    Configuration for one Baum-Welch fit.

    ``tolerance`` and ``max_iterations`` have no defaults: the stopping rule
    changes the fitted model, so the caller always states it.

    Args:
        tolerance: Stop once the log-likelihood improves by less than this.
            Must be finite and >= 0.
        max_iterations: Maximum number of EM (M-step) iterations. Must be >= 1.
        variance_floor: Lower bound for re-estimated variances. Must be > 0.
        min_state_weight: Posterior mass below which a state's emission and
            transition row are left unchanged. Must be >= 0.
        viterbi_path: Whether :func:`regimehmm.fit` also decodes the Viterbi
            path at the converged parameters.
    """

    tolerance: float
    max_iterations: int
    variance_floor: float = VARIANCE_FLOOR
    min_state_weight: float = MIN_STATE_WEIGHT
    viterbi_path: bool = True

    def __post_init__(self) -> None:
        for name in ("tolerance", "variance_floor", "min_state_weight"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameter(f"{name} must be a real number, got {value!r}")
        if not math.isfinite(self.tolerance) or self.tolerance < 0.0:
            raise InvalidParameter(f"tolerance must be finite and >= 0, got {self.tolerance}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, numbers.Integral):
            raise InvalidParameter(f"max_iterations must be an integer, got {self.max_iterations!r}")
        if self.max_iterations < 1:
            raise InvalidParameter(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not math.isfinite(self.variance_floor) or self.variance_floor <= 0.0:
            raise InvalidParameter(
                f"variance_floor must be finite and > 0, got {self.variance_floor}"
            )
        if not math.isfinite(self.min_state_weight) or self.min_state_weight < 0.0:
            raise InvalidParameter(
                f"min_state_weight must be finite and >= 0, got {self.min_state_weight}"
            )


__all__ = [
    "FitConfig",
    "VARIANCE_FLOOR",
    "MIN_STATE_WEIGHT",
    "PROB_ATOL",
    "MIN_STATES",
    "MIN_OBSERVATIONS",
    "MAX_ABS_OBSERVATION",
]
