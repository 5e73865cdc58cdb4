from __future__ import annotations

"""
daofund.rpc.methods
-------------------

JSON-RPC style method implementations for the governance ledger.

Exposed methods (bind via `make_methods`):
  • dao.contribute
  • dao.deposit
  • dao.createProposal
  • dao.vote
  • dao.executeProposal
  • dao.withdrawEther
  • dao.getInvestor
  • dao.getProposal
  • dao.listProposals
  • dao.getState

Design:
  - Transport-agnostic: `make_methods` returns a dict of callables that a
    JSON-RPC dispatcher can register; `build_rest_router` exposes the same
    callables as FastAPI REST endpoints.
  - Caller identity is an explicit `caller` parameter. Authenticating it is
    the host's job; nothing here verifies signatures.
  - `now` is optional everywhere; when omitted the ledger reads its clock.
"""

from typing import Any, Callable, Dict, Optional

from daofund.errors import DAOError, InvalidAmount, NotFound
from daofund.ledger.governance import GovernanceLedger

# JSON-RPC error codes: -32602 for malformed params, -32004 for unknown
# resources, -32010 for business rejections (details carry the DAO code).
RPC_INVALID_PARAMS = -32602
RPC_NOT_FOUND = -32004
RPC_REJECTED = -32010


def rpc_error_code(err: DAOError) -> int:
    if isinstance(err, InvalidAmount):
        return RPC_INVALID_PARAMS
    if isinstance(err, NotFound):
        return RPC_NOT_FOUND
    return RPC_REJECTED


def http_status(err: DAOError) -> int:
    if isinstance(err, InvalidAmount):
        return 400
    if isinstance(err, NotFound):
        return 404
    return 409


# ---- Helpers ---------------------------------------------------------------

def _coerce_int(value: Any, name: str, *, minimum: int = 0) -> int:
    # ints and decimal-digit strings only; floats are refused even when integral
    if isinstance(value, int) and not isinstance(value, bool):
        iv = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        iv = int(value)
    else:
        raise InvalidAmount(field=name, value=value, message=f"invalid {name}: must be an integer")
    if iv < minimum:
        raise InvalidAmount(field=name, value=value, message=f"invalid {name}: must be >= {minimum}")
    return iv


def _opt_int(value: Any, name: str) -> Optional[int]:
    return None if value is None else _coerce_int(value, name)


# ---- JSON-RPC method factory ----------------------------------------------

def make_methods(ledger: GovernanceLedger) -> Dict[str, Callable[..., Any]]:
    """
    Build a mapping of JSON-RPC method name -> callable.
    Each callable returns plain JSON-serializable structures and raises
    DAOError on rejection.
    """

    def dao_contribute(*, caller: str, amount: Any, now: Any = None) -> Dict[str, Any]:
        ledger.contribute(caller, _coerce_int(amount, "amount"), now=_opt_int(now, "now"))
        return ledger.get_investor(caller).to_dict()

    def dao_deposit(*, caller: str, amount: Any, now: Any = None) -> Dict[str, Any]:
        ledger.deposit(caller, _coerce_int(amount, "amount"), now=_opt_int(now, "now"))
        return {"availableFunds": ledger.available_funds}

    def dao_create_proposal(
        *, caller: str, name: str, amount: Any, recipient: str, now: Any = None
    ) -> Dict[str, Any]:
        pid = ledger.create_proposal(
            caller, name, _coerce_int(amount, "amount"), recipient, now=_opt_int(now, "now")
        )
        return {"proposalId": pid}

    def dao_vote(*, caller: str, proposalId: Any, now: Any = None) -> Dict[str, Any]:
        pid = _coerce_int(proposalId, "proposalId")
        ledger.vote(caller, pid, now=_opt_int(now, "now"))
        return ledger.get_proposal(pid).to_dict()

    def dao_execute_proposal(*, caller: str, proposalId: Any, now: Any = None) -> Dict[str, Any]:
        pid = _coerce_int(proposalId, "proposalId")
        ledger.execute_proposal(caller, pid, now=_opt_int(now, "now"))
        return ledger.get_proposal(pid).to_dict()

    def dao_withdraw_ether(*, caller: str, amount: Any, recipient: str, now: Any = None) -> Dict[str, Any]:
        ledger.withdraw_ether(
            caller, _coerce_int(amount, "amount"), recipient, now=_opt_int(now, "now")
        )
        return {"availableFunds": ledger.available_funds}

    def dao_get_investor(*, investorId: str) -> Dict[str, Any]:
        return ledger.get_investor(investorId).to_dict()

    def dao_get_proposal(*, proposalId: Any) -> Dict[str, Any]:
        return ledger.get_proposal(_coerce_int(proposalId, "proposalId")).to_dict()

    def dao_list_proposals(*, offset: Any = 0, limit: Any = 100) -> Dict[str, Any]:
        off = _coerce_int(offset, "offset")
        lim = _coerce_int(limit, "limit", minimum=1)
        items = [p.to_dict() for p in ledger.list_proposals(offset=off, limit=lim)]
        return {"items": items, "nextOffset": off + len(items)}

    def dao_get_state() -> Dict[str, Any]:
        snap = ledger.snapshot()
        return {
            "admin": ledger.admin,
            "quorum": ledger.quorum,
            "contributionEnd": snap["contribution_end"],
            "totalShares": snap["total_shares"],
            "availableFunds": snap["available_funds"],
            "treasuryBalance": snap["treasury_balance"],
            "proposalCount": len(snap["proposals"]),
        }

    # Map JSON-RPC names → callables
    return {
        "dao.contribute": dao_contribute,
        "dao.deposit": dao_deposit,
        "dao.createProposal": dao_create_proposal,
        "dao.vote": dao_vote,
        "dao.executeProposal": dao_execute_proposal,
        "dao.withdrawEther": dao_withdraw_ether,
        "dao.getInvestor": dao_get_investor,
        "dao.getProposal": dao_get_proposal,
        "dao.listProposals": dao_list_proposals,
        "dao.getState": dao_get_state,
    }


def dispatch(methods: Dict[str, Callable[..., Any]], body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply one JSON-RPC 2.0 request object and return the response object.
    Params must be by-name (a JSON object).
    """
    rid = body.get("id")
    method = body.get("method")

    def err(code: int, message: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        e: Dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            e["data"] = data
        return {"jsonrpc": "2.0", "id": rid, "error": e}

    fn = methods.get(method) if isinstance(method, str) else None
    if fn is None:
        return err(-32601, "method not found")
    params = body.get("params") or {}
    if not isinstance(params, dict):
        return err(RPC_INVALID_PARAMS, "params must be an object")
    try:
        result = fn(**params)
    except TypeError as e:
        return err(RPC_INVALID_PARAMS, f"invalid params: {e}")
    except DAOError as e:
        return err(rpc_error_code(e), e.message, e.to_dict())
    return {"jsonrpc": "2.0", "id": rid, "result": result}


# ---- REST adapter (FastAPI) ------------------------------------------------

def build_rest_router(ledger: GovernanceLedger):
    """
    Return a FastAPI APIRouter exposing the ledger as REST endpoints.
    Mount path suggestion: "/dao".
    """
    from fastapi import APIRouter, Body, HTTPException, Query

    router = APIRouter()
    methods = make_methods(ledger)

    def call(name: str, /, **kwargs: Any) -> Any:
        try:
            return methods[name](**kwargs)
        except DAOError as e:
            raise HTTPException(status_code=http_status(e), detail=e.to_dict()) from e

    @router.get("/state")
    def http_get_state():
        return call("dao.getState")

    @router.get("/investors/{investor_id}")
    def http_get_investor(investor_id: str):
        return call("dao.getInvestor", investorId=investor_id)

    @router.get("/proposals")
    def http_list_proposals(
        offset: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
    ):
        return call("dao.listProposals", offset=offset, limit=limit)

    @router.get("/proposals/{proposal_id}")
    def http_get_proposal(proposal_id: int):
        return call("dao.getProposal", proposalId=proposal_id)

    @router.post("/contributions")
    def http_contribute(body: Dict[str, Any] = Body(...)):
        return call("dao.contribute", caller=body.get("caller"), amount=body.get("amount"), now=body.get("now"))

    @router.post("/deposits")
    def http_deposit(body: Dict[str, Any] = Body(...)):
        return call("dao.deposit", caller=body.get("caller"), amount=body.get("amount"), now=body.get("now"))

    @router.post("/proposals")
    def http_create_proposal(body: Dict[str, Any] = Body(...)):
        return call(
            "dao.createProposal",
            caller=body.get("caller"),
            name=body.get("name"),
            amount=body.get("amount"),
            recipient=body.get("recipient"),
            now=body.get("now"),
        )

    @router.post("/proposals/{proposal_id}/votes")
    def http_vote(proposal_id: int, body: Dict[str, Any] = Body(...)):
        return call("dao.vote", caller=body.get("caller"), proposalId=proposal_id, now=body.get("now"))

    @router.post("/proposals/{proposal_id}/execute")
    def http_execute(proposal_id: int, body: Dict[str, Any] = Body(...)):
        return call("dao.executeProposal", caller=body.get("caller"), proposalId=proposal_id, now=body.get("now"))

    @router.post("/withdrawals")
    def http_withdraw(body: Dict[str, Any] = Body(...)):
        return call(
            "dao.withdrawEther",
            caller=body.get("caller"),
            amount=body.get("amount"),
            recipient=body.get("recipient"),
            now=body.get("now"),
        )

    return router


__all__ = [
    "RPC_INVALID_PARAMS",
    "RPC_NOT_FOUND",
    "RPC_REJECTED",
    "rpc_error_code",
    "http_status",
    "make_methods",
    "dispatch",
    "build_rest_router",
]
