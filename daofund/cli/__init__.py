from __future__ import annotations
"""
daofund.cli
===========

Command-line entry points. `daofund.cli.ledger:app` is the Typer application
behind the `daofund` console script.
"""


__all__ = ["ledger"]
