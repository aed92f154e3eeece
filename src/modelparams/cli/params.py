"""Commands that inspect and update a model's parameters.

MODEL is 'module:factory' or 'path/to/file.py:factory', where factory is a
model-object class or function that builds the root model object when
called without arguments (or is a ready-made model object).
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from ..errors import ModelParamsError
from ..guess import Guess, GuessSlot, make_guess, set_params_from_guess
from ..model_object import ModelObjectLike, is_model_object
from ..parameters import ObjectId
from ..reporting import report_params
from ..settings import Settings
from ..utils import load_symbol


def _load_settings(project_root: Optional[str]) -> Settings:
    try:
        return Settings.load(Path(project_root) if project_root else None)
    except ValueError as e:
        typer.echo(f"Error: invalid [tool.modelparams] settings: {e}", err=True)
        raise typer.Exit(1)


def _build_model(model: str, project_root: Optional[str]) -> ModelObjectLike:
    """Import MODEL and build the root model object."""
    try:
        factory = load_symbol(model, project_root=project_root)
    except (ModuleNotFoundError, AttributeError, ValueError) as e:
        typer.echo(f"Error: Could not import model '{model}': {e}", err=True)
        raise typer.Exit(1)

    try:
        root = factory if is_model_object(factory) else factory()
    except TypeError as e:
        typer.echo(f"Error: Could not build model from '{model}': {e}", err=True)
        raise typer.Exit(1)
    if not is_model_object(root):
        typer.echo(f"Error: '{model}' did not produce a model object (got {type(root).__name__})", err=True)
        raise typer.Exit(1)
    return root


def guess_to_dict(guess: Guess) -> Dict[str, Any]:
    """JSON-serializable form of a Guess."""
    return {
        "values": guess.values.tolist(),
        "lower_bounds": guess.lower_bounds.tolist(),
        "upper_bounds": guess.upper_bounds.tolist(),
        "layout": [
            {
                "object": str(slot.obj_id),
                "segments": [list(seg) for seg in slot.obj_id.segments],
                "param": slot.param_name,
                "index": slot.element_index,
            }
            for slot in guess.layout
        ],
    }


def _layout_from_dict(entries: List[Dict[str, Any]]) -> List[GuessSlot]:
    return [
        GuessSlot(
            ObjectId.from_segments((name, index) for name, index in e["segments"]),
            e["param"],
            int(e["index"]),
        )
        for e in entries
    ]


def guess_command(
    model: str = typer.Argument(..., help="Model factory (e.g., models.household:build_model)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root for imports and settings"),
):
    """Print the guess vector, bounds and layout of a model as JSON."""
    root = _build_model(model, project_root)
    text = json.dumps(guess_to_dict(make_guess(root)), indent=2)
    if output:
        Path(output).write_text(text + "\n")
        typer.echo(f"Wrote guess to {output}")
    else:
        typer.echo(text)


def report_command(
    model: str = typer.Argument(..., help="Model factory (e.g., models.household:build_model)"),
    fixed: bool = typer.Option(False, "--fixed", help="Report fixed instead of calibrated parameters"),
    close_to_bounds: bool = typer.Option(False, "--close-to-bounds", help="Mark values near their bounds"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root for imports and settings"),
):
    """Print a parameter report for a model."""
    settings = _load_settings(project_root)
    root = _build_model(model, project_root)
    report_params(
        root, not fixed,
        close_to_bounds=close_to_bounds,
        rtol=settings.close_to_bounds_rtol,
        float_format=settings.float_format,
    )


def apply_command(
    model: str = typer.Argument(..., help="Model factory (e.g., models.household:build_model)"),
    guess_file: str = typer.Argument(..., help="JSON guess (list of values, or output of 'guess')"),
    strict: Optional[bool] = typer.Option(None, "--strict/--no-strict", help="Reject values outside bounds"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root for imports and settings"),
):
    """Write a saved guess into a freshly built model and report the result."""
    settings = _load_settings(project_root)
    if strict is None:
        strict = settings.strict_bounds
    root = _build_model(model, project_root)

    try:
        data = json.loads(Path(guess_file).read_text())
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: Could not read guess file {guess_file}: {e}", err=True)
        raise typer.Exit(1)

    if isinstance(data, dict):
        values = data.get("values", [])
        layout = _layout_from_dict(data["layout"]) if "layout" in data else None
    else:
        values, layout = data, None

    try:
        set_params_from_guess(root, values, strict=strict, layout=layout)
    except ModelParamsError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Applied {len(values)} values")
    report_params(root, True, rtol=settings.close_to_bounds_rtol, float_format=settings.float_format)
