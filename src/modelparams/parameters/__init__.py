"""Parameter system for modelparams.

This module provides identities, parameters, the per-object parameter
registry, and the locator used to find registries in a model tree.
"""

from .identity import IdSegment, ObjectId
from .param import Param
from .registry import ParamVector
from .locator import PvectorLocator

__all__ = [
    # Identity
    "IdSegment",
    "ObjectId",
    # Parameters
    "Param",
    "ParamVector",
    # Locator
    "PvectorLocator",
]
