"""Public API for modelparams.

This module provides the complete public API: identities, parameters and
registries, model objects, the guess protocol, monotone vectors,
reporting and the calibration adapter.
"""

# Parameters
from .parameters import (
    IdSegment,
    ObjectId,
    Param,
    ParamVector,
    PvectorLocator,
)

# Model objects
from .model_object import (
    ModelObject,
    ModelObjectLike,
    change_model_value,
    is_model_object,
)

# Guess protocol
from .guess import (
    Guess,
    GuessSlot,
    check_unique_ids,
    collect_pvectors,
    guess_layout,
    make_guess,
    n_calibrated_params,
    set_params_from_guess,
    walk,
)

# Monotone vectors
from .vectors import (
    BoundedVector,
    IncreasingVector,
    bounded_increments,
    bounded_values,
)

# Reporting
from .reporting import format_value, param_table, param_tables, report_params

# Calibration
from .calibration import GuessObjective

# Settings
from .settings import Settings

# Errors
from .errors import (
    ModelParamsError,
    NotFoundError,
    DuplicateNameError,
    SizeMismatchError,
    LengthMismatchError,
    LayoutMismatchError,
    OutOfBoundsError,
    NotMonotoneError,
)

# Constants
from .constants import NOT_FOUND, DX_NAME, X0_NAME

# Version
try:
    from importlib.metadata import version
    __version__ = version("model-params")
except Exception:
    __version__ = "0.1.0"

# Public API Export List
__all__ = [
    # Parameters
    "IdSegment",
    "ObjectId",
    "Param",
    "ParamVector",
    "PvectorLocator",

    # Model objects
    "ModelObject",
    "ModelObjectLike",
    "change_model_value",
    "is_model_object",

    # Guess protocol
    "Guess",
    "GuessSlot",
    "check_unique_ids",
    "collect_pvectors",
    "guess_layout",
    "make_guess",
    "n_calibrated_params",
    "set_params_from_guess",
    "walk",

    # Monotone vectors
    "BoundedVector",
    "IncreasingVector",
    "bounded_increments",
    "bounded_values",

    # Reporting
    "format_value",
    "param_table",
    "param_tables",
    "report_params",

    # Calibration
    "GuessObjective",

    # Settings
    "Settings",

    # Errors
    "ModelParamsError",
    "NotFoundError",
    "DuplicateNameError",
    "SizeMismatchError",
    "LengthMismatchError",
    "LayoutMismatchError",
    "OutOfBoundsError",
    "NotMonotoneError",

    # Constants
    "NOT_FOUND",
    "DX_NAME",
    "X0_NAME",

    # Version
    "__version__",
]
