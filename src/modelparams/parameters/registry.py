"""ParamVector: the ordered parameter registry owned by one model object.

Every model object owns exactly one ParamVector holding all of its
potentially calibrated parameters. The ParamVector carries the owner's
ObjectId so registries collected from a tree can be matched back to their
objects.

Insertion order is part of the contract: the guess vector is built by
walking registries in this order, so two traversals of an unmodified
registry always see parameters in the same order.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from ..constants import NOT_FOUND
from ..errors import DuplicateNameError, NotFoundError, SizeMismatchError
from .identity import ObjectId
from .param import ArrayLike, FlagLike, Param

logger = logging.getLogger(__name__)


class ParamVector:
    """Insertion-ordered collection of uniquely named Params.

    Attributes:
        obj_id: Identity of the owning model object

    Example:
        >>> pvec = ParamVector(ObjectId.root("utility"))
        >>> pvec.append(Param("sigma", "Curvature", r"\\sigma", 2.0, lb=1.0, ub=5.0, is_calibrated=True))
        >>> pvec.retrieve("sigma")[1]
        0
    """

    def __init__(self, obj_id: ObjectId, params: Optional[List[Param]] = None):
        if not isinstance(obj_id, ObjectId):
            raise TypeError(f"ParamVector requires an ObjectId, got {type(obj_id).__name__}")
        self.obj_id = obj_id
        self._params: Dict[str, Param] = {}
        for p in params or []:
            self.append(p)

    # ------------------------------------------------------------------
    # Lookup

    def retrieve(self, name: str) -> Tuple[Optional[Param], int]:
        """Find a parameter by name.

        Returns:
            (param, index) if found, otherwise (None, NOT_FOUND)
        """
        for i, (pname, p) in enumerate(self._params.items()):
            if pname == name:
                return p, i
        return None, NOT_FOUND

    def __getitem__(self, name: str) -> Param:
        """Get a parameter by name.

        Raises:
            NotFoundError: If no parameter has that name
        """
        try:
            return self._params[name]
        except KeyError:
            raise NotFoundError(self._missing_message(name)) from None

    def __contains__(self, name: str) -> bool:
        return name in self._params

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[Param]:
        return iter(self._params.values())

    def names(self) -> List[str]:
        """Parameter names in registry order."""
        return list(self._params)

    def calibrated(self) -> List[Param]:
        """Params with at least one calibrated element, in registry order."""
        return [p for p in self._params.values() if p.is_calibrated]

    def fixed(self) -> List[Param]:
        """Params with no calibrated element, in registry order."""
        return [p for p in self._params.values() if not p.is_calibrated]

    def n_calibrated(self) -> int:
        """Number of calibrated scalar elements across all params."""
        return sum(p.n_calibrated for p in self._params.values())

    def param_values(self, is_calibrated: Optional[bool] = None) -> Dict[str, Union[float, np.ndarray]]:
        """Current values keyed by name.

        Args:
            is_calibrated: If given, keep only calibrated (True) or fixed (False) params
        """
        out = {}
        for p in self._params.values():
            if is_calibrated is None or p.is_calibrated == is_calibrated:
                out[p.name] = p.field_value()
        return out

    # ------------------------------------------------------------------
    # Mutation

    def append(self, param: Param) -> None:
        """Add a parameter at the end.

        Raises:
            DuplicateNameError: If the name is already present
        """
        if not isinstance(param, Param):
            raise TypeError(f"ParamVector holds Param objects, got {type(param).__name__}")
        if param.name in self._params:
            raise DuplicateNameError(f"Parameter {param.name} already exists in {self.obj_id}")
        self._params[param.name] = param

    def remove(self, name: str) -> Param:
        """Remove a parameter and return it.

        Raises:
            NotFoundError: If no parameter has that name
        """
        if name not in self._params:
            raise NotFoundError(self._missing_message(name))
        return self._params.pop(name)

    def replace(self, param: Param) -> None:
        """Replace the parameter with the same name, keeping its position.

        Raises:
            NotFoundError: If no parameter has that name
            SizeMismatchError: If the new default has a different length
        """
        old = self[param.name]
        if old.size != param.size:
            raise SizeMismatchError(
                f"Cannot replace {param.name} in {self.obj_id}: length {param.size} "
                f"differs from existing length {old.size}"
            )
        self._params[param.name] = param

    def change_calibration_status(self, name: str, flag: FlagLike) -> None:
        """Set whether a parameter (or each of its elements) is calibrated.

        Raises:
            NotFoundError: If no parameter has that name
        """
        self[name].set_calibrated(flag)
        logger.debug(f"{self.obj_id}: {name} calibrated={flag}")

    def change_value(self, name: str, new_value: ArrayLike) -> None:
        """Change the current value of a parameter.

        Raises:
            NotFoundError: If no parameter has that name
            SizeMismatchError: If the shape differs from the fixed length
            OutOfBoundsError: If a calibrated element leaves its bounds
        """
        self[name].set_value(new_value)

    def set_default_value(self, name: str, new_default: ArrayLike) -> None:
        """Change default and current value of a parameter together."""
        self[name].set_default_value(new_default)

    # ------------------------------------------------------------------

    def _missing_message(self, name: str) -> str:
        return f"Unknown parameter: {name} in {self.obj_id}. Available: {self.names()}"

    def __repr__(self) -> str:
        n_cal = len(self.calibrated())
        preview = self.names()[:3]
        if len(self._params) > 3:
            preview.append("...")
        return f"ParamVector({self.obj_id}, {len(self._params)} params{preview}, {n_cal} calibrated)"
