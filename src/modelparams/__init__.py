"""modelparams: calibrated parameters for nested model objects.

This package keeps track of which parameters of a structural model are
fixed and which are calibrated, flattens the calibrated ones across a tree
of model objects into the vector an optimizer works on, and writes that
vector back.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
