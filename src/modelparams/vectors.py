"""Monotone vectors represented through increments.

BoundedVector encodes an increasing or decreasing vector with bounds
``[lb, ub]``. Its calibrated quantity is the increment array ``dx`` (each
element in [0, 1]); the public values are derived from the increments,
never stored:

    c = cumsum(dx)
    values[i] = lb + (ub - lb) * c[i] / c[n]          if c[n] > 0
    values[i] = lb + (ub - lb) * i / n                otherwise

Every dx in [0, 1]^n therefore maps to a non-decreasing sequence inside
``[lb, ub]`` whose last element is ``ub``. A decreasing vector is the same
sequence reversed. The special case n == 1 is supported.

IncreasingVector is the unbounded variant: a starting value ``x0`` plus
non-negative increments.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from .constants import DX_NAME, X0_NAME
from .errors import NotMonotoneError, OutOfBoundsError, SizeMismatchError
from .model_object import ModelObject
from .parameters import ObjectId, Param, ParamVector
from .parameters.param import ArrayLike

logger = logging.getLogger(__name__)

Indices = Union[int, slice, Sequence[int], np.ndarray]

# Slack when comparing targets with bounds and with each other
_TOL = 1e-10


def bounded_values(dx: np.ndarray, lb: float, ub: float, is_increasing: bool = True) -> np.ndarray:
    """Forward transform from increments to bounded monotone values."""
    dx = np.asarray(dx, dtype=float)
    n = dx.shape[0]
    if not np.all(np.isfinite(dx)):
        logger.warning(f"Non-finite increments {dx.tolist()}; values are undefined")
        return np.full(n, np.nan)
    c = np.cumsum(dx)
    if n > 0 and c[-1] > 0:
        frac = c / c[-1]
    else:
        frac = np.arange(1, n + 1, dtype=float) / max(n, 1)
    values = lb + (ub - lb) * frac
    # Pin the top element exactly
    if n > 0:
        values[-1] = ub
    return values if is_increasing else values[::-1].copy()


def bounded_increments(target: ArrayLike, lb: float, ub: float, is_increasing: bool = True) -> np.ndarray:
    """Inverse transform from target values to increments.

    Raises:
        NotMonotoneError: If target violates the direction
        OutOfBoundsError: If target leaves [lb, ub]
    """
    t = np.atleast_1d(np.asarray(target, dtype=float))
    if t.ndim != 1 or t.shape[0] == 0:
        raise ValueError(f"Target values must be a non-empty 1-d array, got shape {t.shape}")
    if not np.all(np.isfinite(t)):
        raise ValueError(f"Target values must be finite, got {t.tolist()}")
    ordered = t if is_increasing else t[::-1]
    if np.any(np.diff(ordered) < -_TOL):
        direction = "increasing" if is_increasing else "decreasing"
        raise NotMonotoneError(f"Target values {t.tolist()} are not {direction}")
    t = ordered
    span = ub - lb
    if np.any(t < lb - _TOL * max(1.0, abs(span))) or np.any(t > ub + _TOL * max(1.0, abs(span))):
        raise OutOfBoundsError(f"Target values outside bounds [{lb}, {ub}]")

    dx = np.diff(t, prepend=lb) / span
    return np.clip(dx, 0.0, 1.0)


class BoundedVector(ModelObject):
    """Increasing or decreasing vector with bounds, calibrated via increments.

    Typically constructed with an empty ParamVector and the ``dx`` field set
    to reasonable defaults; ``set_pvector`` then adds the single ``dx``
    parameter. The output length n equals ``len(dx)``.

    Attributes:
        lb: Lower bound of the values
        ub: Upper bound of the values
        is_increasing: Direction of the values
        dx: Increments, synced from the ``dx`` parameter

    Example:
        >>> b = BoundedVector(ObjectId.root("gradient"), lb=1.0, ub=2.0, dx=[0.3, 0.2, 0.5])
        >>> b.set_pvector(description="Gradient", symbol="g(x)")
        >>> b.values().round(6).tolist()
        [1.3, 1.5, 2.0]
    """

    def __init__(
        self,
        obj_id: ObjectId,
        *,
        lb: float,
        ub: float,
        is_increasing: bool = True,
        dx: Optional[ArrayLike] = None,
        pvector: Optional[ParamVector] = None,
    ):
        super().__init__(obj_id, pvector)
        if not lb < ub:
            raise ValueError(f"BoundedVector {obj_id}: lb ({lb}) must be < ub ({ub})")
        self.lb = float(lb)
        self.ub = float(ub)
        self.is_increasing = bool(is_increasing)
        self.dx = None if dx is None else np.atleast_1d(np.array(dx, dtype=float))

    @property
    def n(self) -> int:
        """Output length (0 until dx is set)."""
        return 0 if self.dx is None else self.dx.shape[0]

    def _increment_param(self) -> Optional[Param]:
        return self.pvector.retrieve(DX_NAME)[0]

    def set_pvector(self, *, description: str = "Increments", symbol: str = "dx",
                    is_calibrated: bool = True) -> None:
        """Initialize the ParamVector with the ``dx`` parameter.

        The current ``dx`` becomes the default; bounds are [0, 1] per element.

        Raises:
            ValueError: If dx is missing, empty, or outside [0, 1]
        """
        if self.dx is None or self.dx.ndim != 1 or self.dx.shape[0] == 0:
            raise ValueError(f"BoundedVector {self.obj_id}: dx must be set before set_pvector")
        if np.any(self.dx < 0.0) or np.any(self.dx > 1.0) or not np.all(np.isfinite(self.dx)):
            raise ValueError(f"BoundedVector {self.obj_id}: dx must lie in [0, 1], got {self.dx.tolist()}")

        param = Param(
            DX_NAME, description, symbol, self.dx.copy(),
            lb=0.0, ub=1.0, is_calibrated=is_calibrated,
        )
        if DX_NAME in self.pvector:
            self.pvector.replace(param)
        else:
            self.pvector.append(param)
        self.sync_from_pvector()

    def values(self, indices: Optional[Indices] = None) -> np.ndarray:
        """Derived values, recomputed from dx on every call.

        Args:
            indices: Optional index, slice or index array selecting a subset
        """
        if self.dx is None:
            raise ValueError(f"BoundedVector {self.obj_id}: dx has not been set")
        vals = bounded_values(self.dx, self.lb, self.ub, self.is_increasing)
        if indices is None:
            return vals
        return vals[indices]

    def _set_increments(self, target: ArrayLike) -> np.ndarray:
        dx = bounded_increments(target, self.lb, self.ub, self.is_increasing)
        if self.dx is not None and dx.shape != self.dx.shape:
            raise SizeMismatchError(
                f"BoundedVector {self.obj_id}: {dx.shape[0]} target values for length {self.n}"
            )
        top = np.max(np.atleast_1d(np.asarray(target, dtype=float)))
        if abs(top - self.ub) > _TOL * max(1.0, self.ub - self.lb):
            logger.warning(
                f"BoundedVector {self.obj_id}: largest target {top} is below ub {self.ub}; "
                f"values will be rescaled to end at ub"
            )
        return dx

    def set_default_value(self, target: ArrayLike) -> None:
        """Set the increments (default and current) that reproduce target.

        Raises:
            NotMonotoneError: If target violates the declared direction
            OutOfBoundsError: If target leaves [lb, ub]
            SizeMismatchError: If the length differs from the existing dx
        """
        dx = self._set_increments(target)
        param = self._increment_param()
        if param is None:
            self.dx = dx
            return
        param.set_default_value(dx)
        self.sync_param(param)

    def fix_values(self, target: ArrayLike) -> None:
        """Fix the vector at target values.

        Switches calibration off and sets the increments (default and
        current) so the vector reproduces target from now on.
        """
        dx = self._set_increments(target)
        param = self._increment_param()
        if param is None:
            self.dx = dx
            self.set_pvector(is_calibrated=False)
            return
        param.set_calibrated(False)
        param.set_default_value(dx)
        self.sync_param(param)

    def __repr__(self) -> str:
        direction = "increasing" if self.is_increasing else "decreasing"
        return f"BoundedVector({self.obj_id}, n={self.n}, [{self.lb}, {self.ub}], {direction})"


class IncreasingVector(ModelObject):
    """Increasing vector of fixed length: a start value plus increments.

    ``values = x0 + cumsum([0, dx_1, ..., dx_{n-1}])`` with ``dx >= 0``, so
    the values are non-decreasing by construction. Both ``x0`` and ``dx``
    are calibrated by default.
    """

    def __init__(
        self,
        obj_id: ObjectId,
        x0: float,
        dx: ArrayLike,
        *,
        x0_bounds: tuple = (-np.inf, np.inf),
        dx_ub: float = np.inf,
        is_calibrated: bool = True,
        description: str = "Increasing vector",
        symbol: str = "x",
    ):
        super().__init__(obj_id)
        self.pvector.append(Param(
            X0_NAME, f"{description}: first value", f"{symbol}_0", float(x0),
            lb=x0_bounds[0], ub=x0_bounds[1], is_calibrated=is_calibrated,
        ))
        self.pvector.append(Param(
            DX_NAME, f"{description}: increments", f"d{symbol}",
            np.atleast_1d(np.array(dx, dtype=float)),
            lb=0.0, ub=dx_ub, is_calibrated=is_calibrated,
        ))
        self.sync_from_pvector()

    @property
    def n(self) -> int:
        """Output length."""
        return self.dx.shape[0] + 1

    def values(self, indices: Optional[Indices] = None) -> np.ndarray:
        """Derived values, recomputed on every call."""
        vals = self.x0 + np.concatenate(([0.0], np.cumsum(self.dx)))
        if indices is None:
            return vals
        return vals[indices]

    def __repr__(self) -> str:
        return f"IncreasingVector({self.obj_id}, n={self.n})"
