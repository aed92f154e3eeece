"""Model objects: the nodes of a model-object tree.

A model object (a utility function, a production function, a household...)
owns one ParamVector and may contain child model objects. For speed and
readability, each Param also lives in an attribute of the same name on the
object; those attributes are written only by syncing from the ParamVector,
never by hand. The ParamVector is the single source of truth.

Any object satisfying the ModelObjectLike protocol works with the guess
functions; ModelObject is the convenient base class.
"""

import logging
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from .errors import NotFoundError
from .parameters import ObjectId, Param, ParamVector
from .parameters.param import ArrayLike

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelObjectLike(Protocol):
    """Capabilities the guess protocol requires of a model object."""

    obj_id: ObjectId
    pvector: ParamVector

    def child_objects(self) -> Sequence["ModelObjectLike"]:
        """Child model objects in a stable order."""
        ...

    def set_param_value(self, name: str, index: int, value: float) -> None:
        """Sync one element of a parameter into the object's own field."""
        ...


class ModelObject:
    """Base class for model objects.

    Subclasses build their ParamVector in ``__init__``, assign child
    objects as attributes, and call ``sync_from_pvector()`` last so the
    fields mirror the parameter values.

    Child discovery: public attributes are scanned in assignment order;
    model objects and lists/tuples of model objects are children.
    Attributes starting with an underscore are ignored (use them for
    back-references to parents). Override ``child_objects`` for anything
    else, keeping the returned order stable.

    Example:
        >>> class Utility(ModelObject):
        ...     def __init__(self, obj_id):
        ...         super().__init__(obj_id)
        ...         self.pvector.append(Param("sigma", "Curvature", "", 2.0, lb=1.0, ub=5.0, is_calibrated=True))
        ...         self.sync_from_pvector()
        >>> Utility(ObjectId.root("util")).sigma
        2.0
    """

    def __init__(self, obj_id: ObjectId, pvector: Optional[ParamVector] = None):
        if pvector is None:
            pvector = ParamVector(obj_id)
        elif pvector.obj_id != obj_id:
            raise ValueError(f"ParamVector belongs to {pvector.obj_id}, not {obj_id}")
        self.obj_id = obj_id
        self.pvector = pvector

    def child_objects(self) -> List["ModelObject"]:
        """Child model objects in attribute assignment order."""
        children: List[ModelObject] = []
        for key, attr in vars(self).items():
            if key.startswith("_") or key == "pvector":
                continue
            if isinstance(attr, ModelObject):
                children.append(attr)
            elif isinstance(attr, (list, tuple)) and attr and all(isinstance(a, ModelObject) for a in attr):
                children.extend(attr)
        return children

    def set_param_value(self, name: str, index: int, value: float) -> None:
        """Write one element of parameter ``name`` into the field of that name.

        Scalar parameters become float attributes. Array parameters are kept
        in a float numpy array attribute, created from the parameter value if
        the attribute is missing or has the wrong shape.
        """
        param = self.pvector[name]
        if param.is_scalar:
            setattr(self, name, float(value))
            return
        field = getattr(self, name, None)
        if not (isinstance(field, np.ndarray) and field.shape == (param.size,) and field.dtype == float):
            field = np.array(param.value, dtype=float)
            setattr(self, name, field)
        field[index] = value

    def sync_param(self, param: Param) -> None:
        """Copy all elements of one parameter into its field."""
        for i, v in enumerate(param.value):
            self.set_param_value(param.name, i, float(v))

    def sync_from_pvector(self) -> None:
        """Copy every parameter value, fixed or calibrated, into its field."""
        for param in self.pvector:
            self.sync_param(param)

    def change_value(self, name: str, new_value: ArrayLike) -> None:
        """Change a parameter value in the ParamVector and the field together."""
        self.pvector.change_value(name, new_value)
        self.sync_param(self.pvector[name])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.obj_id}, {len(self.pvector)} params)"


def change_model_value(root: ModelObjectLike, obj_id: ObjectId, name: str, new_value: ArrayLike) -> None:
    """Change a parameter value of any object in the tree below root.

    Args:
        root: Top of the model-object tree
        obj_id: Identity of the object owning the parameter
        name: Parameter name
        new_value: New value (same length as the parameter)

    Raises:
        NotFoundError: If no object in the tree has obj_id, or it lacks the parameter
    """
    from .guess import walk

    for obj in walk(root):
        if obj.obj_id == obj_id:
            obj.pvector.change_value(name, new_value)
            param = obj.pvector[name]
            for i, v in enumerate(param.value):
                obj.set_param_value(name, i, float(v))
            logger.debug(f"{obj_id}: changed {name} to {param.value.tolist()}")
            return
    raise NotFoundError(f"No model object with id {obj_id} below {root.obj_id}")


def is_model_object(obj: Any) -> bool:
    """True if obj satisfies the model-object protocol."""
    return isinstance(obj, ModelObjectLike)
