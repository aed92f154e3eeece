"""Command line interface for modelparams."""
