"""Error types raised by the regimehmm engine.

Both errors derive from ``ValueError`` so callers that already guard model
construction with ``except ValueError`` keep working. They are raised during
input validation, before any forward-backward or EM computation starts.
Recoverable conditions (non-convergence, degenerate states) are not raised;
they are attached to :class:`regimehmm.result.FitResult` as diagnostics.
"""

from __future__ import annotations


class RegimeHMMError(Exception):
    """Base class for all regimehmm errors."""


class InvalidParameter(RegimeHMMError, ValueError):
    """A parameter or observation value is non-finite or out of its domain.

    Examples: a variance <= 0, a probability vector that does not sum to 1,
    a NaN observation, ``num_states < 2`` or a negative tolerance.
    """


class InsufficientData(RegimeHMMError, ValueError):
    """The observation sequence is too short for the requested computation."""


__all__ = ["RegimeHMMError", "InvalidParameter", "InsufficientData"]
