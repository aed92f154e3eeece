"""Project settings read from pyproject.toml.

Settings live in the ``[tool.modelparams]`` table:

    [tool.modelparams]
    strict_bounds = false
    close_to_bounds_rtol = 0.01
    float_format = ".4g"

They supply defaults for the CLI; library functions take explicit arguments.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import tomllib

from .constants import CLOSE_TO_BOUNDS_RTOL, FLOAT_FORMAT


@dataclass(frozen=True)
class Settings:
    """Defaults for guess restoration and reporting.

    Attributes:
        strict_bounds: Reject guess values outside their bounds
        close_to_bounds_rtol: Share of the bound range flagged as close to a bound
        float_format: Format spec for values in reports
    """
    strict_bounds: bool = False
    close_to_bounds_rtol: float = CLOSE_TO_BOUNDS_RTOL
    float_format: str = FLOAT_FORMAT

    def __post_init__(self):
        """Validate settings."""
        if not isinstance(self.strict_bounds, bool):
            raise ValueError(f"strict_bounds must be a bool, got {self.strict_bounds!r}")
        if not (0.0 <= self.close_to_bounds_rtol < 0.5):
            raise ValueError(f"close_to_bounds_rtol must be in [0, 0.5), got {self.close_to_bounds_rtol}")
        try:
            format(1.0, self.float_format)
        except ValueError as e:
            raise ValueError(f"Invalid float_format {self.float_format!r}: {e}") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Build settings from a ``[tool.modelparams]`` mapping.

        Raises:
            ValueError: On unknown keys (catches typos)
        """
        known = {f.name for f in fields(cls)}
        extra = set(data) - known
        if extra:
            raise ValueError(f"Unknown modelparams settings: {sorted(extra)}. Available: {sorted(known)}")
        return cls(**data)

    @classmethod
    def load(cls, root: Optional[Path] = None) -> "Settings":
        """Read settings from ``<root>/pyproject.toml`` (default: cwd).

        Missing file or table yields the defaults.

        Raises:
            tomllib.TOMLDecodeError: If the TOML is malformed
        """
        pyproject_path = Path(root or Path.cwd()) / "pyproject.toml"
        if not pyproject_path.exists():
            return cls()

        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)

        return cls.from_dict(data.get("tool", {}).get("modelparams", {}))
