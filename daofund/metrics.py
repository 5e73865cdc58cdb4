from __future__ import annotations

"""
Prometheus metrics for the governance ledger.

We expose counters and gauges covering:
- contributions and plain deposits (count and amount)
- proposals created, votes cast, proposals executed
- admin withdrawals
- rejected transitions by error code
- failed treasury payouts
- current total shares and available funds

This module is dependency-light and can be mounted into any ASGI app
or FastAPI app via the helpers at the bottom.
"""


from typing import Optional

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, generate_latest)

# Use a dedicated registry so embedding apps can choose to merge or expose it directly.
REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   op: "contribute" | "deposit" | "create_proposal" | "vote" | "execute_proposal" | "withdraw"
#   code: DAOError.code, e.g. "DAO_NOT_INVESTOR"
# ────────────────────────────────────────────────────────────────────────────────

CONTRIBUTIONS = Counter(
    "daofund_contributions_total",
    "Total accepted contributions.",
    registry=REGISTRY,
)

CONTRIBUTED_AMOUNT = Counter(
    "daofund_contributed_amount_total",
    "Sum of accepted contribution amounts (smallest unit).",
    registry=REGISTRY,
)

DEPOSITED_AMOUNT = Counter(
    "daofund_deposited_amount_total",
    "Sum of plain deposits that grant no shares (smallest unit).",
    registry=REGISTRY,
)

PROPOSALS_CREATED = Counter(
    "daofund_proposals_created_total",
    "Total proposals created.",
    registry=REGISTRY,
)

VOTES_CAST = Counter(
    "daofund_votes_cast_total",
    "Total votes cast across all proposals.",
    registry=REGISTRY,
)

PROPOSALS_EXECUTED = Counter(
    "daofund_proposals_executed_total",
    "Total proposals executed.",
    registry=REGISTRY,
)

PAID_OUT_AMOUNT = Counter(
    "daofund_paid_out_amount_total",
    "Sum paid out by the treasury, by path.",
    labelnames=("path",),  # path: "proposal" | "withdraw"
    registry=REGISTRY,
)

REJECTIONS = Counter(
    "daofund_rejections_total",
    "Rejected transitions by operation and error code.",
    labelnames=("op", "code"),
    registry=REGISTRY,
)

PAYOUT_FAILURES = Counter(
    "daofund_payout_failures_total",
    "Treasury payouts that failed (state was left untouched).",
    labelnames=("path",),
    registry=REGISTRY,
)

TOTAL_SHARES = Gauge(
    "daofund_total_shares",
    "Sum of all investor contributions.",
    registry=REGISTRY,
)

AVAILABLE_FUNDS = Gauge(
    "daofund_available_funds",
    "Funds neither paid out by execution nor withdrawn.",
    registry=REGISTRY,
)

# ────────────────────────────────────────────────────────────────────────────────
# Recording helpers
# ────────────────────────────────────────────────────────────────────────────────


def record_contribution(amount: int) -> None:
    CONTRIBUTIONS.inc()
    CONTRIBUTED_AMOUNT.inc(amount)


def record_deposit(amount: int) -> None:
    DEPOSITED_AMOUNT.inc(amount)


def record_proposal_created() -> None:
    PROPOSALS_CREATED.inc()


def record_vote() -> None:
    VOTES_CAST.inc()


def record_execution(amount: int) -> None:
    PROPOSALS_EXECUTED.inc()
    PAID_OUT_AMOUNT.labels(path="proposal").inc(amount)


def record_withdrawal(amount: int) -> None:
    PAID_OUT_AMOUNT.labels(path="withdraw").inc(amount)


def record_rejection(op: str, code: str) -> None:
    """Increment the rejection counter for an operation/error code pair."""
    REJECTIONS.labels(op=op, code=code).inc()


def record_payout_failure(path: str) -> None:
    PAYOUT_FAILURES.labels(path=path).inc()


def set_totals(total_shares: int, available_funds: int) -> None:
    """Refresh the state gauges after a committed transition."""
    TOTAL_SHARES.set(total_shares)
    AVAILABLE_FUNDS.set(available_funds)


# ────────────────────────────────────────────────────────────────────────────────
# ASGI/FastAPI mounting helpers
# ────────────────────────────────────────────────────────────────────────────────


def make_prometheus_asgi_app(registry: Optional[CollectorRegistry] = None):
    """
    Return a minimal ASGI app that serves Prometheus metrics at '/'.
    No external web framework required.
    """
    reg = registry or REGISTRY

    async def app(scope, receive, send):  # type: ignore[override]
        if scope["type"] != "http" or (scope.get("path") or "/") != "/":
            await send({"type": "http.response.start", "status": 404, "headers": []})
            await send({"type": "http.response.body", "body": b"Not Found"})
            return
        payload = generate_latest(reg)
        headers = [
            (b"content-type", CONTENT_TYPE_LATEST.encode("ascii")),
            (b"cache-control", b"no-cache, no-store, must-revalidate"),
        ]
        await send({"type": "http.response.start", "status": 200, "headers": headers})
        await send({"type": "http.response.body", "body": payload})

    return app


def mount_fastapi(
    app, path: str = "/metrics", registry: Optional[CollectorRegistry] = None
) -> None:
    """
    Mount a GET {path} endpoint on a FastAPI app to serve metrics.

    Usage:
        from fastapi import FastAPI
        from daofund.metrics import mount_fastapi
        app = FastAPI()
        mount_fastapi(app)
    """
    from fastapi import Response

    reg = registry or REGISTRY

    @app.get(path)
    def _metrics():
        return Response(generate_latest(reg), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "CONTRIBUTIONS",
    "CONTRIBUTED_AMOUNT",
    "DEPOSITED_AMOUNT",
    "PROPOSALS_CREATED",
    "VOTES_CAST",
    "PROPOSALS_EXECUTED",
    "PAID_OUT_AMOUNT",
    "REJECTIONS",
    "PAYOUT_FAILURES",
    "TOTAL_SHARES",
    "AVAILABLE_FUNDS",
    "record_contribution",
    "record_deposit",
    "record_proposal_created",
    "record_vote",
    "record_execution",
    "record_withdrawal",
    "record_rejection",
    "record_payout_failure",
    "set_totals",
    "make_prometheus_asgi_app",
    "mount_fastapi",
]
