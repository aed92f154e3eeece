"""Error types for the parameter registry and guess protocol.

Each error also derives from the builtin that a plain lookup or validation
failure would raise, so callers may catch either the specific kind or the
builtin (``KeyError`` for lookups, ``ValueError`` for everything else).
"""


class ModelParamsError(Exception):
    """Base class for all modelparams errors."""


class NotFoundError(ModelParamsError, KeyError):
    """A parameter name or object identity does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable
        return str(self.args[0]) if self.args else ""


class DuplicateNameError(ModelParamsError, ValueError):
    """A parameter name (or object identity) is already taken."""


class SizeMismatchError(ModelParamsError, ValueError):
    """An array does not match a parameter's fixed length."""


class LengthMismatchError(ModelParamsError, ValueError):
    """A guess vector has more or fewer elements than the tree emits."""


class LayoutMismatchError(ModelParamsError, ValueError):
    """A guess slot does not belong where the traversal would put it."""


class OutOfBoundsError(ModelParamsError, ValueError):
    """A calibrated value violates its parameter's bounds."""


class NotMonotoneError(ModelParamsError, ValueError):
    """Target values violate a bounded vector's declared direction."""
