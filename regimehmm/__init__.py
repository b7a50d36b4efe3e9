"""regimehmm - Gaussian hidden Markov models for market regime detection.

Fits a K-state univariate Gaussian HMM to a sequence of returns with
Baum-Welch EM, and reports posterior state probabilities and the Viterbi path.
All inference runs in log space.
"""

__version__ = "0.1.0"

# Fitting entry points
from .baum_welch import IterationCallback, IterationInfo, baum_welch, m_step
from .config import FitConfig
from .emission import GaussianEmission

# Errors
from .exceptions import InsufficientData, InvalidParameter, RegimeHMMError

# Forward-backward and decoding
from .fitting import decode, fit, fit_multistart, fit_with_config, score
from .forward_backward import ForwardBackwardResult, backward, forward, forward_backward
from .initialization import quantile_initial_guess, random_initial_guess

# Serialization
from .io import dump_params, fit_result_to_dict, load_params, params_to_dict, dict_to_params

# Logging
from .logging import configure_logging, get_logger, set_log_level
from .model import GaussianHMM
from .params import ParameterSet

# Results and diagnostics
from .result import DegenerateState, FitResult, FitStatus, NonConvergence
from .sampling import sample
from .viterbi import viterbi

__all__ = [
    "__version__",
    # Fitting
    "fit",
    "fit_with_config",
    "fit_multistart",
    "decode",
    "score",
    "baum_welch",
    "m_step",
    "IterationInfo",
    "IterationCallback",
    "FitConfig",
    # Model
    "GaussianHMM",
    "ParameterSet",
    "GaussianEmission",
    "quantile_initial_guess",
    "random_initial_guess",
    "sample",
    # Inference
    "forward",
    "backward",
    "forward_backward",
    "ForwardBackwardResult",
    "viterbi",
    # Results
    "FitResult",
    "FitStatus",
    "DegenerateState",
    "NonConvergence",
    # Errors
    "RegimeHMMError",
    "InvalidParameter",
    "InsufficientData",
    # Serialization
    "params_to_dict",
    "dict_to_params",
    "fit_result_to_dict",
    "dump_params",
    "load_params",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
