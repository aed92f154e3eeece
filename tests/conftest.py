"""Shared model-object trees for tests."""

import numpy as np
import pytest

from modelparams import BoundedVector, ModelObject, ObjectId, Param


class Utility(ModelObject):
    """Leaf with one calibrated scalar."""

    def __init__(self, obj_id, gamma=0.5, calibrated=True):
        super().__init__(obj_id)
        self.pvector.append(Param(
            "gamma", "Curvature", r"\gamma", gamma, lb=0.0, ub=1.0, is_calibrated=calibrated,
        ))
        self.sync_from_pvector()


class Household(ModelObject):
    """Root with a calibrated scalar, a fixed vector and one child."""

    def __init__(self, obj_id=None):
        obj_id = obj_id or ObjectId.root("household")
        super().__init__(obj_id)
        self.pvector.append(Param(
            "alpha", "Discount factor", r"\alpha", 0.3, lb=0.0, ub=1.0, is_calibrated=True,
        ))
        self.pvector.append(Param(
            "beta", "Endowments", r"\beta", [1.0, 2.0], lb=0.0, ub=5.0, is_calibrated=False,
        ))
        self.utility = Utility(obj_id.child("utility"))
        self.sync_from_pvector()


class Economy(ModelObject):
    """Deeper tree: vector params with mixed flags, a list of children, a bounded vector."""

    def __init__(self):
        obj_id = ObjectId.root("economy")
        super().__init__(obj_id)
        self.pvector.append(Param(
            "tfp", "Productivity", "A", [1.0, 1.1, 1.2], lb=0.5, ub=2.0,
            is_calibrated=[True, False, True],
        ))
        self.households = [Household(obj_id.child("household", i)) for i in range(2)]
        self.thresholds = BoundedVector(
            obj_id.child("thresholds"), lb=1.0, ub=2.0, dx=[0.3, 0.2, 0.5],
        )
        self.thresholds.set_pvector(description="Thresholds", symbol="t")
        self.sync_from_pvector()


def build_household():
    """Factory used by CLI tests."""
    return Household()


@pytest.fixture
def household():
    """Two-level tree from the alpha/beta/gamma scenario."""
    return Household()


@pytest.fixture
def economy():
    """Three-level tree with vectors, lists of children and a bounded vector."""
    return Economy()
