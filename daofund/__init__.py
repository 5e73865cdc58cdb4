from __future__ import annotations
"""
daofund - pooled-fund governance ledger.

Participants contribute value during a fixed window and become
voting-weighted investors; investors propose disbursements and vote on them;
an admin executes proposals that reached quorum once their voting window has
closed. Submodules are lazily imported to keep import time minimal.

Public surface (lazily loaded):
- config, errors, metrics, clock
- daotypes, treasury, ledger, scenario
- rpc, cli
"""


from typing import List

__version__ = "0.1.0"

__all__: List[str] = [
    "__version__",
    # lazily importable subpackages/modules
    "config",
    "errors",
    "metrics",
    "clock",
    "daotypes",
    "treasury",
    "ledger",
    "scenario",
    "rpc",
    "cli",
]

# --- Lazy module loader (PEP 562) -------------------------------------------------
import importlib


_lazy_modules = set(__all__) - {"__version__"}


def __getattr__(name: str):
    if name in _lazy_modules:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(set(globals().keys()) | _lazy_modules)


def get_version() -> str:
    """Return the daofund package version string."""
    return __version__
