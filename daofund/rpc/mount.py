from __future__ import annotations

"""
daofund.rpc.mount
-----------------

Helpers to mount the ledger's RPC surface into an existing FastAPI app and/or
to register the JSON-RPC methods with your dispatcher.

Typical usage (REST + JSON-RPC):
    from fastapi import FastAPI
    from daofund.rpc.mount import mount_dao
    app = FastAPI()
    mount_dao(app, ledger, prefix="/dao")

Typical usage (JSON-RPC with a third-party dispatcher):
    from daofund.rpc.mount import register_jsonrpc
    register_jsonrpc(dispatcher, ledger)
"""

from typing import Any, Dict, Protocol

from daofund.ledger.governance import GovernanceLedger

from .methods import build_rest_router, dispatch, make_methods


class _JsonRpcDispatcherLike(Protocol):
    """Minimal protocol to support common JSON-RPC dispatchers."""
    def add(self, method: str, func: Any) -> None: ...
    def register(self, method: str, func: Any) -> None: ...


def mount_dao(
    app: Any,
    ledger: GovernanceLedger,
    *,
    prefix: str = "/dao",
    rpc_path: str = "/rpc",
    metrics_path: str | None = "/metrics",
) -> None:
    """
    Mount REST endpoints under `prefix`, a JSON-RPC 2.0 endpoint at `rpc_path`
    and (unless `metrics_path` is None) Prometheus metrics.
    """
    from fastapi import Body

    app.include_router(build_rest_router(ledger), prefix=prefix, tags=["dao"])

    methods = make_methods(ledger)

    @app.post(rpc_path)
    def jsonrpc_endpoint(body: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        return dispatch(methods, body)

    if metrics_path is not None:
        from daofund.metrics import mount_fastapi

        mount_fastapi(app, path=metrics_path)


def create_app(ledger: GovernanceLedger, *, prefix: str = "/dao"):
    """Return a standalone FastAPI app serving one ledger."""
    from fastapi import FastAPI

    from daofund import __version__

    app = FastAPI(title="daofund governance ledger", version=__version__)
    app.state.ledger = ledger
    mount_dao(app, ledger, prefix=prefix)
    return app


def register_jsonrpc(dispatcher: _JsonRpcDispatcherLike, ledger: GovernanceLedger) -> None:
    """
    Register JSON-RPC methods on a dispatcher exposing either `add(name, fn)`
    or `register(name, fn)`.
    """
    methods = make_methods(ledger)
    for name, fn in methods.items():
        if hasattr(dispatcher, "add"):
            dispatcher.add(name, fn)
        else:
            dispatcher.register(name, fn)


__all__ = ["mount_dao", "create_app", "register_jsonrpc"]
