"""JSON import and export of fitted HMM parameters.

A parameter document looks like::

    {
        "version": "regimehmm-params-1.0",
        "n_states": 2,
        "start_prob": [0.5, 0.5],
        "trans_mat": [[0.95, 0.05], [0.1, 0.9]],
        "means": [-0.05, 0.1],
        "variances": [0.04, 0.01],
        "metadata": {"ticker": "SPY"}
    }

``metadata`` is optional and must be JSON-serializable. A fit result export
adds the log-likelihood trajectory, convergence information, diagnostics and
(optionally) the posteriors and Viterbi path.
"""

from __future__ import annotations

import json
import numbers
from typing import Any, Dict, Optional

from .exceptions import InvalidParameter
from .params import ParameterSet
from .result import FitResult

PARAMS_VERSION = "regimehmm-params-1.0"


def params_to_dict(params: ParameterSet, metadata: Optional[dict] = None) -> dict:
    """
    Convert a ParameterSet to its JSON document.

    Parameters
    ----------
    params : ParameterSet
        Parameters to convert.
    metadata : dict, optional
        Extra JSON-serializable information (data source, fit date, notes).

    Returns
    -------
    dict
        Document following the layout described in the module docstring.
    """
    result: Dict[str, Any] = {
        "version": PARAMS_VERSION,
        "n_states": params.n_states,
        "start_prob": [float(p) for p in params.start_prob],
        "trans_mat": [[float(p) for p in row] for row in params.trans_mat],
        "means": [float(m) for m in params.means],
        "variances": [float(v) for v in params.variances],
    }
    if metadata:
        result["metadata"] = metadata
    return result


def validate_params_dict(obj: dict) -> None:
    """
    Check the structure of a parameter document.

    Only the layout is checked here; probability sums and variance signs are
    validated when the ParameterSet is built.

    Raises
    ------
    InvalidParameter
        If a field is missing, has the wrong type, or has the wrong length.
    """
    if not isinstance(obj, dict):
        raise InvalidParameter("Parameter document must be a dictionary object.")

    if "version" not in obj:
        raise InvalidParameter("Parameter document missing required field 'version'.")
    if obj["version"] != PARAMS_VERSION:
        raise InvalidParameter(
            f"Unsupported version {obj['version']!r}, expected {PARAMS_VERSION!r}."
        )

    if "n_states" not in obj:
        raise InvalidParameter("Parameter document missing required field 'n_states'.")
    n_states = obj["n_states"]
    if isinstance(n_states, bool) or not isinstance(n_states, numbers.Integral):
        raise InvalidParameter("Field 'n_states' must be an integer.")

    for key in ("start_prob", "means", "variances"):
        if key not in obj:
            raise InvalidParameter(f"Parameter document missing required field '{key}'.")
        if not isinstance(obj[key], list) or len(obj[key]) != n_states:
            raise InvalidParameter(f"Field '{key}' must be a list of length {n_states}.")

    if "trans_mat" not in obj:
        raise InvalidParameter("Parameter document missing required field 'trans_mat'.")
    trans_mat = obj["trans_mat"]
    if (
        not isinstance(trans_mat, list)
        or len(trans_mat) != n_states
        or any(not isinstance(row, list) or len(row) != n_states for row in trans_mat)
    ):
        raise InvalidParameter(
            f"Field 'trans_mat' must be a {n_states}x{n_states} list of lists."
        )

    if "metadata" in obj and not isinstance(obj["metadata"], dict):
        raise InvalidParameter("Field 'metadata' must be a dictionary.")


def dict_to_params(obj: dict) -> ParameterSet:
    """
    Build a ParameterSet from its JSON document.

    Raises
    ------
    InvalidParameter
        If the document is malformed or describes invalid parameters.
    """
    validate_params_dict(obj)
    return ParameterSet.from_arrays(
        obj["start_prob"], obj["trans_mat"], obj["means"], obj["variances"]
    )


def fit_result_to_dict(
    result: FitResult, include_posteriors: bool = False, metadata: Optional[dict] = None
) -> dict:
    """
    Convert a FitResult to a JSON-serializable report.

    Parameters
    ----------
    result : FitResult
        Result to export.
    include_posteriors : bool
        Also export the T x K posterior matrix and the Viterbi path.
    metadata : dict, optional
        Extra JSON-serializable information.

    Returns
    -------
    dict
        ``{"params": ..., "log_likelihood": ..., "converged": ..., ...}``.
    """
    report: Dict[str, Any] = {
        "params": params_to_dict(result.params),
        "log_likelihood": result.log_likelihood,
        "log_likelihoods": [float(v) for v in result.log_likelihoods],
        "converged": bool(result.converged),
        "n_iter": int(result.n_iter),
        "status": result.status.value,
        "message": result.message,
        "degenerate_states": [
            {"state": d.state, "iteration": d.iteration, "weight": d.weight}
            for d in result.degenerate_states
        ],
    }
    if result.non_convergence is not None:
        report["non_convergence"] = {
            "n_iter": result.non_convergence.n_iter,
            "last_improvement": result.non_convergence.last_improvement,
            "tolerance": result.non_convergence.tolerance,
        }
    if include_posteriors:
        report["posteriors"] = result.posteriors.tolist()
        if result.path is not None:
            report["path"] = [int(s) for s in result.path]
    if metadata:
        report["metadata"] = metadata
    return report


def dump_params(params: ParameterSet, path: str, metadata: Optional[dict] = None) -> None:
    """
    Write a ParameterSet to a JSON file.

    Parameters
    ----------
    params : ParameterSet
        Parameters to write.
    path : str
        Path to output JSON file.
    metadata : dict, optional
        Extra JSON-serializable information.
    """
    obj = params_to_dict(params, metadata)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def load_params(path: str) -> ParameterSet:
    """
    Load a ParameterSet from a JSON file.

    Raises
    ------
    InvalidParameter
        If the file is not valid JSON or describes invalid parameters.
    FileNotFoundError
        If the file does not exist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Parameter file not found: {path}")
    except json.JSONDecodeError as e:
        raise InvalidParameter(f"Invalid JSON in file {path}: {e}")

    return dict_to_params(obj)


__all__ = [
    "PARAMS_VERSION",
    "params_to_dict",
    "dict_to_params",
    "validate_params_dict",
    "fit_result_to_dict",
    "dump_params",
    "load_params",
]
