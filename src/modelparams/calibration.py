"""Adapter between a model-object tree and an external optimizer.

The calibration workflow:
1. build the model-object tree;
2. write a deviation function that solves the model for the parameters
   currently stored in the tree and returns a scalar distance to the data;
3. wrap both in a GuessObjective and hand ``objective``, ``objective.x0``
   and ``objective.bounds`` to any optimizer taking a flat vector.

Each evaluation writes the candidate vector into the tree with
set_params_from_guess, checking it against the layout captured when the
objective was created.
"""

import logging
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .guess import Guess, make_guess, set_params_from_guess
from .model_object import ModelObjectLike

logger = logging.getLogger(__name__)

DeviationFn = Callable[[ModelObjectLike], float]


class GuessObjective:
    """Callable objective ``x -> deviation_fn(root with x applied)``.

    Attributes:
        root: Top of the model-object tree
        deviation_fn: Scalar deviation computed from the tree
        strict: Reject candidate values outside their bounds
        initial: Guess captured at construction
        n_evals: Number of evaluations so far

    Example:
        >>> objective = GuessObjective(model, lambda m: (m.alpha - 0.5) ** 2)
        >>> result = scipy.optimize.minimize(objective, objective.x0, bounds=objective.bounds)
        >>> objective.apply(result.x)
    """

    def __init__(self, root: ModelObjectLike, deviation_fn: DeviationFn, *, strict: bool = False):
        self.root = root
        self.deviation_fn = deviation_fn
        self.strict = strict
        self.initial: Guess = make_guess(root)
        self.n_evals = 0
        if len(self.initial) == 0:
            logger.warning(f"{root.obj_id}: no calibrated parameters, objective is constant")

    @property
    def x0(self) -> np.ndarray:
        """Starting vector (copy of the initial guess values)."""
        return self.initial.values.copy()

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        """(lower, upper) per element."""
        return self.initial.bounds()

    @property
    def dim(self) -> int:
        """Number of calibrated elements."""
        return len(self.initial)

    def apply(self, x: Sequence[float]) -> None:
        """Write x into the tree without evaluating the deviation."""
        set_params_from_guess(self.root, x, strict=self.strict, layout=self.initial.layout)

    def __call__(self, x: Sequence[float]) -> float:
        self.apply(x)
        dev = float(self.deviation_fn(self.root))
        self.n_evals += 1
        logger.debug(f"eval {self.n_evals}: deviation={dev:.6g}")
        return dev

    def __repr__(self) -> str:
        return f"GuessObjective({self.root.obj_id}, dim={self.dim}, n_evals={self.n_evals})"
