"""Load user model factories from 'module:symbol' or 'path.py:symbol'.

Model files usually live in a project next to the modules they import, so
both forms search the project root (and a model file's own directory)
while the import runs. sys.path is restored afterwards.
"""

from __future__ import annotations
from importlib import import_module, util
from pathlib import Path
import os
import sys
import types
from typing import Any, List, Optional


def _with_search_path(dirs: List[Path], load):
    """Run load() with dirs at the front of sys.path."""
    added = [str(d) for d in dirs if str(d) not in sys.path]
    sys.path[:0] = added
    try:
        return load()
    finally:
        for p in added:
            if p in sys.path:
                sys.path.remove(p)


def _load_file(pyfile: str, root: Path) -> types.ModuleType:
    """Execute a model file; relative paths are taken from the project root.

    Raises:
        ModuleNotFoundError: If the file does not exist or cannot be loaded
    """
    py = Path(pyfile)
    if not py.is_absolute():
        py = root / py
    py = py.resolve()
    if not py.is_file():
        raise ModuleNotFoundError(f"No such model file: {py}")
    spec = util.spec_from_file_location(py.stem, py)
    if spec is None or spec.loader is None:
        raise ModuleNotFoundError(f"Could not load module from {py}")
    mod = util.module_from_spec(spec)
    _with_search_path([py.parent, root], lambda: spec.loader.exec_module(mod))
    return mod


def load_symbol(qualified: str, project_root: Optional[str] = None) -> Any:
    """Load a symbol from 'pkg.mod:Symbol' or './file.py:Symbol'.

    Module paths are imported normally first; if that fails, the import is
    retried with the project root (default: cwd) on sys.path.

    Raises:
        ValueError: If the string has no ':' separator
        ModuleNotFoundError: If the module or file cannot be imported
        AttributeError: If the module has no such symbol
    """
    module_part, sep, symbol = qualified.partition(":")
    if not sep or not module_part or not symbol:
        raise ValueError(f"Expected 'module_or_file:Symbol' format, got: {qualified}")

    root = Path(project_root or os.getcwd()).resolve()
    if module_part.endswith(".py") or "/" in module_part or "\\" in module_part:
        mod = _load_file(module_part, root)
    else:
        try:
            mod = import_module(module_part)
        except ModuleNotFoundError:
            mod = _with_search_path([root], lambda: import_module(module_part))

    if not hasattr(mod, symbol):
        raise AttributeError(f"Module {module_part} has no attribute '{symbol}'")
    return getattr(mod, symbol)
