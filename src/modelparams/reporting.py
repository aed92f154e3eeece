"""Parameter tables and plain-text reports.

Read-only consumers of the registry: nothing here mutates parameters.
Tables are polars DataFrames, one row per parameter, grouped by model
object. Intended for reporting during or after a calibration run, not for
typesetting.
"""

import sys
from typing import Dict, List, Optional, TextIO, Union

import numpy as np
import polars as pl

from .constants import CLOSE_TO_BOUNDS_RTOL, FLOAT_FORMAT
from .guess import walk
from .model_object import ModelObjectLike
from .parameters import ObjectId, Param, ParamVector

TABLE_SCHEMA = {
    "name": pl.Utf8,
    "description": pl.Utf8,
    "symbol": pl.Utf8,
    "value": pl.Utf8,
    "lb": pl.Utf8,
    "ub": pl.Utf8,
    "close_to_bounds": pl.Boolean,
}


def format_value(value: Union[float, np.ndarray], float_format: str = FLOAT_FORMAT) -> str:
    """Render a scalar as a number and an array as ``[a, b, ...]``."""
    if np.ndim(value) == 0:
        return format(float(value), float_format)
    return "[" + ", ".join(format(float(v), float_format) for v in np.asarray(value)) + "]"


def _bound_text(bound: np.ndarray, float_format: str) -> str:
    if np.all(bound == bound[0]):
        return format_value(bound[0], float_format)
    return format_value(bound, float_format)


def _selected(pvec: ParamVector, is_calibrated: bool) -> List[Param]:
    return pvec.calibrated() if is_calibrated else pvec.fixed()


def param_table(
    pvec: ParamVector,
    is_calibrated: bool,
    *,
    rtol: float = CLOSE_TO_BOUNDS_RTOL,
    float_format: str = FLOAT_FORMAT,
) -> pl.DataFrame:
    """Table of calibrated (or fixed) parameters of one ParamVector.

    Args:
        pvec: The registry to tabulate
        is_calibrated: Report calibrated (True) or fixed (False) params
        rtol: Share of the bound range flagged as close to a bound
        float_format: Format spec for numbers

    Returns:
        DataFrame with columns name, description, symbol, value, lb, ub,
        close_to_bounds, in registry order
    """
    rows = []
    for p in _selected(pvec, is_calibrated):
        rows.append({
            "name": p.name,
            "description": p.description,
            "symbol": p.symbol,
            "value": format_value(p.field_value(), float_format),
            "lb": _bound_text(p.lb, float_format),
            "ub": _bound_text(p.ub, float_format),
            "close_to_bounds": bool(p.close_to_bounds(rtol).any()),
        })
    return pl.DataFrame(rows, schema=TABLE_SCHEMA)


def param_tables(
    root: ModelObjectLike,
    is_calibrated: bool,
    *,
    rtol: float = CLOSE_TO_BOUNDS_RTOL,
    float_format: str = FLOAT_FORMAT,
) -> Dict[ObjectId, pl.DataFrame]:
    """One parameter table per model object, keyed by ObjectId.

    Objects without matching parameters are left out. Keys follow
    traversal order.
    """
    tables: Dict[ObjectId, pl.DataFrame] = {}
    for obj in walk(root):
        table = param_table(obj.pvector, is_calibrated, rtol=rtol, float_format=float_format)
        if table.height > 0:
            tables[obj.obj_id] = table
    return tables


def _table_lines(title: str, table: pl.DataFrame, close_to_bounds: bool) -> List[str]:
    lines = [title]
    for row in table.iter_rows(named=True):
        line = f"  {row['description']} ({row['name']}): {row['value']}"
        if close_to_bounds and row["close_to_bounds"]:
            line += "  *"
        lines.append(line)
    return lines


def report_params(
    target: Union[ParamVector, ModelObjectLike],
    is_calibrated: bool,
    *,
    io: Optional[TextIO] = None,
    close_to_bounds: bool = False,
    rtol: float = CLOSE_TO_BOUNDS_RTOL,
    float_format: str = FLOAT_FORMAT,
) -> List[str]:
    """Report calibrated (or fixed) parameters, one block per object.

    Each row reads ``"description (name): value"``. With close_to_bounds,
    rows whose calibrated elements sit near a bound end with ``*``.

    Args:
        target: A ParamVector, or the root of a model-object tree
        is_calibrated: Report calibrated (True) or fixed (False) params
        io: Stream to write to (default: stdout)
        close_to_bounds: Mark parameters close to their bounds
        rtol: Share of the bound range counted as close
        float_format: Format spec for numbers

    Returns:
        The report lines that were written
    """
    if isinstance(target, ParamVector):
        tables = {target.obj_id: param_table(target, is_calibrated, rtol=rtol, float_format=float_format)}
    else:
        tables = param_tables(target, is_calibrated, rtol=rtol, float_format=float_format)

    kind = "Calibrated" if is_calibrated else "Fixed"
    lines: List[str] = []
    for obj_id, table in tables.items():
        if table.height == 0:
            continue
        lines.extend(_table_lines(f"{kind} parameters of {obj_id}", table, close_to_bounds))
    if not lines:
        lines.append(f"No {kind.lower()} parameters")

    stream = io if io is not None else sys.stdout
    for line in lines:
        print(line, file=stream)
    return lines
