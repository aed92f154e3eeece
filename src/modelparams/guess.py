"""Flatten calibrated parameters of a model-object tree into a guess vector.

The guess vector is the flat array an optimizer works on. make_guess walks
the tree and emits every calibrated element; set_params_from_guess walks
the same tree in the same order and writes the elements back.

Traversal order (the contract both functions share):
1. the object's own ParamVector, params in registry order, calibrated
   elements in element order;
2. then each child from ``child_objects()``, recursively.

Positions are also recorded in an explicit layout of GuessSlots so the
restore can verify that every value lands where it was taken from.
Mutating the tree (children, calibration flags, order) between the two
calls is the caller's responsibility; length and layout checks catch what
they can.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

import numpy as np

from .errors import (
    DuplicateNameError,
    LayoutMismatchError,
    LengthMismatchError,
    OutOfBoundsError,
)
from .model_object import ModelObjectLike, is_model_object
from .parameters import ObjectId, Param, PvectorLocator

logger = logging.getLogger(__name__)


class GuessSlot(NamedTuple):
    """Where one guess element belongs."""
    obj_id: ObjectId
    param_name: str
    element_index: int

    def __str__(self) -> str:
        return f"{self.obj_id}: {self.param_name}[{self.element_index}]"


@dataclass(frozen=True)
class Guess:
    """Guess vector with matching bounds and layout.

    Attributes:
        values: Calibrated values in traversal order
        lower_bounds: Lower bound of each element
        upper_bounds: Upper bound of each element
        layout: One GuessSlot per element
    """
    values: np.ndarray
    lower_bounds: np.ndarray
    upper_bounds: np.ndarray
    layout: Tuple[GuessSlot, ...]

    def __len__(self) -> int:
        return len(self.layout)

    def bounds(self) -> List[Tuple[float, float]]:
        """(lower, upper) pairs, the form scipy.optimize accepts."""
        return list(zip(self.lower_bounds.tolist(), self.upper_bounds.tolist()))

    def with_values(self, values: Sequence[float]) -> "Guess":
        """New Guess with the same layout and bounds but different values.

        Raises:
            LengthMismatchError: If the number of values differs
        """
        arr = np.asarray(values, dtype=float)
        if arr.shape != self.values.shape:
            raise LengthMismatchError(f"Expected {len(self)} values, got {arr.shape}")
        return Guess(arr, self.lower_bounds, self.upper_bounds, self.layout)


def walk(root: ModelObjectLike) -> Iterator[ModelObjectLike]:
    """Yield root and all descendants in traversal (pre-order) order.

    Raises:
        TypeError: If a child does not satisfy the model-object protocol
        ValueError: If an object is reached twice (shared child or cycle)
    """
    seen: Set[int] = set()

    def _visit(obj) -> Iterator[ModelObjectLike]:
        if not is_model_object(obj):
            raise TypeError(f"{type(obj).__name__} is not a model object")
        if id(obj) in seen:
            raise ValueError(f"Model object {obj.obj_id} is reachable more than once")
        seen.add(id(obj))
        yield obj
        for child in obj.child_objects():
            yield from _visit(child)

    yield from _visit(root)


def _walk_unique(root: ModelObjectLike) -> Iterator[ModelObjectLike]:
    """walk, raising DuplicateNameError on the first repeated ObjectId."""
    seen: Set[ObjectId] = set()
    for obj in walk(root):
        if obj.obj_id in seen:
            raise DuplicateNameError(f"ObjectId {obj.obj_id} occurs more than once")
        seen.add(obj.obj_id)
        yield obj


def _slots(root: ModelObjectLike) -> Iterator[Tuple[ModelObjectLike, Param, int]]:
    """Yield (object, param, element_index) for every calibrated element.

    Identities must be unique so that a slot names exactly one element.
    """
    for obj in _walk_unique(root):
        for param in obj.pvector:
            for idx in param.calibrated_indices():
                yield obj, param, int(idx)


def collect_pvectors(root: ModelObjectLike) -> PvectorLocator:
    """Collect the ParamVector of every object in traversal order."""
    return PvectorLocator((obj.obj_id, obj.pvector) for obj in walk(root))


def check_unique_ids(root: ModelObjectLike) -> None:
    """Verify that no two objects in the tree share an ObjectId.

    Raises:
        DuplicateNameError: On the first repeated identity
    """
    for obj in _walk_unique(root):
        if obj.pvector.obj_id != obj.obj_id:
            logger.warning(f"ParamVector id {obj.pvector.obj_id} does not match owner {obj.obj_id}")


def n_calibrated_params(root: ModelObjectLike) -> int:
    """Number of calibrated scalar elements in the tree (the guess length)."""
    return sum(obj.pvector.n_calibrated() for obj in walk(root))


def guess_layout(root: ModelObjectLike) -> Tuple[GuessSlot, ...]:
    """Layout make_guess would produce, without the values."""
    return tuple(GuessSlot(obj.obj_id, p.name, i) for obj, p, i in _slots(root))


def make_guess(root: ModelObjectLike) -> Guess:
    """Make the guess vector for root and all nested objects.

    Args:
        root: Top of the model-object tree

    Returns:
        Guess with values, bounds and layout in traversal order
    """
    values: List[float] = []
    lower: List[float] = []
    upper: List[float] = []
    layout: List[GuessSlot] = []
    for obj, param, idx in _slots(root):
        values.append(float(param.value[idx]))
        lower.append(float(param.lb[idx]))
        upper.append(float(param.ub[idx]))
        layout.append(GuessSlot(obj.obj_id, param.name, idx))

    logger.debug(f"make_guess({root.obj_id}): {len(values)} calibrated elements")
    return Guess(
        values=np.array(values, dtype=float),
        lower_bounds=np.array(lower, dtype=float),
        upper_bounds=np.array(upper, dtype=float),
        layout=tuple(layout),
    )


def set_params_from_guess(
    root: ModelObjectLike,
    guess: Union[Guess, Sequence[float], np.ndarray],
    *,
    strict: bool = False,
    layout: Optional[Sequence[GuessSlot]] = None,
) -> None:
    """Write a guess vector back into the tree's params and object fields.

    The guess is consumed in lockstep with the traversal. Nothing is written
    until every element has been matched, so a failed call leaves the tree
    unchanged.

    Args:
        root: Top of the model-object tree (the one make_guess was called on)
        guess: A Guess, or a flat sequence of floats
        strict: If True, reject values outside their parameter's bounds
        layout: Expected slots, as GuessSlots or (obj_id, param_name,
            element_index) tuples; taken from ``guess`` when it is a Guess

    Raises:
        LengthMismatchError: If guess has more or fewer elements than the tree emits
        LayoutMismatchError: If a traversed slot differs from the expected layout
        OutOfBoundsError: In strict mode, if a value violates its bounds
    """
    if isinstance(guess, Guess):
        if layout is None:
            layout = guess.layout
        guess = guess.values
    if layout is not None:
        layout = [GuessSlot(*slot) for slot in layout]
    arr = np.asarray(guess, dtype=float)
    if arr.ndim != 1:
        raise LengthMismatchError(f"Guess must be a 1-d vector, got shape {arr.shape}")
    if layout is not None and len(layout) != arr.shape[0]:
        raise LengthMismatchError(
            f"Guess has {arr.shape[0]} elements but its layout has {len(layout)}"
        )

    # Pair traversal slots with guess elements
    pending = []
    values = iter(arr.tolist())
    n_used = 0
    for obj, param, idx in _slots(root):
        try:
            value = next(values)
        except StopIteration:
            raise LengthMismatchError(
                f"Guess has {arr.shape[0]} elements but the tree has more calibrated elements "
                f"(ran out at {GuessSlot(obj.obj_id, param.name, idx)})"
            ) from None
        if layout is not None:
            expected = layout[n_used]
            reached = GuessSlot(obj.obj_id, param.name, idx)
            if expected != reached:
                raise LayoutMismatchError(
                    f"Guess element {n_used} was taken from {expected} but traversal "
                    f"reached {reached}"
                )
        if strict and not (param.lb[idx] <= value <= param.ub[idx]):
            raise OutOfBoundsError(
                f"Guess element {n_used} = {value} outside bounds "
                f"[{param.lb[idx]}, {param.ub[idx]}] of {GuessSlot(obj.obj_id, param.name, idx)}"
            )
        pending.append((obj, param, idx, value))
        n_used += 1

    leftover = sum(1 for _ in values)
    if leftover:
        raise LengthMismatchError(
            f"Guess has {arr.shape[0]} elements but the tree has only {n_used} calibrated elements"
        )

    for obj, param, idx, value in pending:
        param.set_element(idx, value)
        obj.set_param_value(param.name, idx, value)

    logger.debug(f"set_params_from_guess({root.obj_id}): wrote {n_used} elements")
