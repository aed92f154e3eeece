"""Global constants for modelparams.

This module centralizes names and defaults shared across the package.
"""

# Sentinel index returned by lookups that found nothing
NOT_FOUND: int = -1

# Name of the increment parameter owned by bounded vectors
DX_NAME: str = "dx"

# Name of the starting value parameter owned by increasing vectors
X0_NAME: str = "x0"

# Relative distance to a bound (as share of the bound range) flagged in reports
CLOSE_TO_BOUNDS_RTOL: float = 0.01

# Format used when rendering parameter values in reports
FLOAT_FORMAT: str = ".4g"
