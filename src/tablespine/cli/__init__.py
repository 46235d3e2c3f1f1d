"""Typer command line: ``tablespine serve`` and ``tablespine tables``."""
