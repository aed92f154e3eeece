"""Utility helpers for modelparams."""

from .imports import load_symbol

__all__ = ["load_symbol"]
