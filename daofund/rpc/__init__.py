from __future__ import annotations
"""
daofund.rpc
===========

Transport bindings for the governance ledger: a JSON-RPC method table and a
FastAPI REST router over the same callables.
"""


RPC_PREFIX = "/dao"

from .methods import build_rest_router, dispatch, make_methods  # noqa: E402
from .mount import create_app, mount_dao, register_jsonrpc  # noqa: E402

__all__ = [
    "RPC_PREFIX",
    "make_methods",
    "dispatch",
    "build_rest_router",
    "mount_dao",
    "create_app",
    "register_jsonrpc",
]
