"""A single potentially calibrated model parameter.

A Param holds a fixed-length numeric array (a scalar is an array of length
one that remembers it was given as a scalar), its default, per-element
bounds and a per-element calibration flag. The length is fixed when the
Param is constructed and never changes afterwards.

Bounds are binding only for calibrated elements. Fixed elements may sit
outside their bounds, which only produces a warning: bounds on fixed
values are advisory.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import OutOfBoundsError, SizeMismatchError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, int, Sequence[float], np.ndarray]
FlagLike = Union[bool, Sequence[bool], np.ndarray]


def _as_vector(value: ArrayLike, what: str) -> np.ndarray:
    """Coerce a scalar or 1-d sequence into a fresh float array."""
    arr = np.atleast_1d(np.array(value, dtype=float))
    if arr.ndim != 1:
        raise ValueError(f"{what} must be a scalar or 1-d array, got shape {arr.shape}")
    return arr


def _broadcast(value, n: int, what: str, dtype=float) -> np.ndarray:
    """Broadcast a scalar to length n, or validate an array of length n."""
    if np.ndim(value) == 0:
        return np.full(n, value, dtype=dtype)
    arr = np.array(value, dtype=dtype)
    if arr.ndim != 1 or arr.shape[0] != n:
        raise SizeMismatchError(f"{what} has shape {arr.shape}, expected ({n},)")
    return arr


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.setflags(write=False)
    return view


class Param:
    """One named, bounded, fixed-length parameter.

    Attributes:
        name: Identifier, unique within its ParamVector
        description: Human-readable description used in reports
        symbol: Display symbol (e.g. a LaTeX string)

    Example:
        >>> p = Param("alpha", "Risk aversion", r"\\alpha", 0.3, lb=0.0, ub=1.0, is_calibrated=True)
        >>> p.size, p.is_scalar
        (1, True)
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        symbol: str = "",
        default_value: ArrayLike = 0.0,
        value: Optional[ArrayLike] = None,
        lb: ArrayLike = -np.inf,
        ub: ArrayLike = np.inf,
        is_calibrated: FlagLike = False,
    ):
        if not isinstance(name, str) or not name:
            raise ValueError("Param name must be a non-empty string")
        self.name = name
        self.description = description
        self.symbol = symbol

        self._is_scalar = np.ndim(default_value) == 0
        self._default = _as_vector(default_value, f"Param {name} default_value")
        n = self._default.shape[0]
        if n == 0:
            raise ValueError(f"Param {name} default_value cannot be empty")

        if value is None:
            self._value = self._default.copy()
        else:
            self._value = self._checked_shape(value, "value")

        self._lb = _broadcast(lb, n, f"Param {name} lb")
        self._ub = _broadcast(ub, n, f"Param {name} ub")
        if np.any(self._lb > self._ub):
            raise ValueError(f"Param {name}: lb > ub for elements {np.flatnonzero(self._lb > self._ub).tolist()}")

        self._calibrated = _broadcast(is_calibrated, n, f"Param {name} is_calibrated", dtype=bool)
        self._check_bounds(self._value, "value")

    # ------------------------------------------------------------------
    # Read access

    @property
    def size(self) -> int:
        """Fixed number of elements."""
        return self._default.shape[0]

    def __len__(self) -> int:
        return self.size

    @property
    def is_scalar(self) -> bool:
        """True if the default was given as a scalar."""
        return self._is_scalar

    @property
    def value(self) -> np.ndarray:
        """Current value (read-only view)."""
        return _readonly(self._value)

    @property
    def default_value(self) -> np.ndarray:
        """Default value (read-only view)."""
        return _readonly(self._default)

    @property
    def lb(self) -> np.ndarray:
        """Per-element lower bounds (read-only view)."""
        return _readonly(self._lb)

    @property
    def ub(self) -> np.ndarray:
        """Per-element upper bounds (read-only view)."""
        return _readonly(self._ub)

    @property
    def calibrated_mask(self) -> np.ndarray:
        """Per-element calibration flags (read-only view)."""
        return _readonly(self._calibrated)

    @property
    def is_calibrated(self) -> bool:
        """True if any element is calibrated."""
        return bool(self._calibrated.any())

    @property
    def n_calibrated(self) -> int:
        """Number of calibrated elements."""
        return int(self._calibrated.sum())

    def calibrated_indices(self) -> np.ndarray:
        """Element indices that are calibrated, in increasing order."""
        return np.flatnonzero(self._calibrated)

    def field_value(self) -> Union[float, np.ndarray]:
        """Current value in the form a model object's field holds it.

        Returns a float for scalar params and a fresh array otherwise.
        """
        if self._is_scalar:
            return float(self._value[0])
        return self._value.copy()

    def out_of_bounds(self, value: Optional[ArrayLike] = None) -> np.ndarray:
        """Mask of calibrated elements outside their bounds.

        Args:
            value: Candidate value (defaults to the current value)
        """
        v = self._value if value is None else self._checked_shape(value, "value")
        inside = (self._lb <= v) & (v <= self._ub)
        return self._calibrated & ~inside

    def close_to_bounds(self, rtol: float) -> np.ndarray:
        """Mask of calibrated elements within rtol * (ub - lb) of a bound.

        Elements with an infinite bound on a side are never close on that side.
        """
        width = self._ub - self._lb
        with np.errstate(invalid="ignore"):
            tol = np.where(np.isfinite(width), rtol * width, 0.0)
            near_lb = np.isfinite(self._lb) & (self._value - self._lb <= tol)
            near_ub = np.isfinite(self._ub) & (self._ub - self._value <= tol)
        return self._calibrated & (near_lb | near_ub)

    # ------------------------------------------------------------------
    # Mutation

    def set_value(self, new_value: ArrayLike) -> None:
        """Replace the current value.

        Raises:
            SizeMismatchError: If the shape differs from the fixed length
            OutOfBoundsError: If a calibrated element leaves its bounds
        """
        v = self._checked_shape(new_value, "value")
        self._check_bounds(v, "value")
        self._value = v

    def set_element(self, index: int, value: float) -> None:
        """Write one element without bounds checks (used by guess restore)."""
        self._value[index] = value

    def set_default_value(self, new_default: ArrayLike) -> None:
        """Replace default and current value together."""
        v = self._checked_shape(new_default, "default_value")
        self._check_bounds(v, "default_value")
        self._default = v
        self._value = v.copy()

    def set_calibrated(self, flag: FlagLike) -> None:
        """Change the calibration status of all or individual elements.

        Raises:
            SizeMismatchError: If a per-element flag has the wrong length
            OutOfBoundsError: If a newly calibrated element is out of bounds
        """
        mask = _broadcast(flag, self.size, f"Param {self.name} is_calibrated", dtype=bool)
        bad = mask & ~((self._lb <= self._value) & (self._value <= self._ub))
        if bad.any():
            raise OutOfBoundsError(
                f"Cannot calibrate {self.name}: elements {np.flatnonzero(bad).tolist()} "
                f"are outside bounds"
            )
        self._calibrated = mask

    def reset(self) -> None:
        """Set the current value back to the default."""
        self._value = self._default.copy()

    def copy(self) -> "Param":
        """Independent deep copy."""
        return Param(
            self.name,
            self.description,
            self.symbol,
            self._default[0] if self._is_scalar else self._default.copy(),
            value=self._value.copy(),
            lb=self._lb.copy(),
            ub=self._ub.copy(),
            is_calibrated=self._calibrated.copy(),
        )

    # ------------------------------------------------------------------

    def _checked_shape(self, value: ArrayLike, what: str) -> np.ndarray:
        arr = np.atleast_1d(np.array(value, dtype=float))
        if arr.ndim != 1:
            raise SizeMismatchError(
                f"Param {self.name}: {what} has shape {arr.shape}, expected ({self.size},)"
            )
        if arr.shape != self._default.shape:
            raise SizeMismatchError(
                f"Param {self.name}: {what} has length {arr.shape[0]}, expected {self.size}"
            )
        return arr

    def _check_bounds(self, v: np.ndarray, what: str) -> None:
        inside = (self._lb <= v) & (v <= self._ub)
        bad = self._calibrated & ~inside
        if bad.any():
            idx = np.flatnonzero(bad).tolist()
            raise OutOfBoundsError(
                f"Param {self.name}: calibrated {what} outside bounds at elements {idx}"
            )
        if (~inside).any():
            logger.warning(
                f"Param {self.name}: fixed {what} outside advisory bounds at elements "
                f"{np.flatnonzero(~inside).tolist()}"
            )

    def __repr__(self) -> str:
        status = "calibrated" if self.is_calibrated else "fixed"
        shown = self.field_value()
        return f"Param({self.name}={shown!r}, {status})"
