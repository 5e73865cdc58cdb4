from __future__ import annotations

"""
Scenario replay.

A scenario is a config plus an ordered list of steps applied to a fresh ledger
backed by an InMemoryTreasury and a ManualClock. It is the host-side driver used
by `daofund replay` and handy for reproducing a sequence of calls.

File format (JSON or YAML):

    config: {quorum_percent: 50, contribution_period: 2000, voting_period: 2000, admin: admin}
    start: 0                       # deployment timestamp (default 0)
    steps:
      - {op: contribute, caller: alice, amount: 100}
      - {op: advance, seconds: 2001}
      - {op: create_proposal, caller: alice, name: P1, amount: 50, recipient: dave}
      - {op: vote, caller: bob, proposal_id: 0}
      - {op: execute_proposal, caller: admin, proposal_id: 0, expect: DAO_TOO_EARLY}
      - {op: fail_next_payouts, n: 1}

Ledger ops: contribute, deposit, create_proposal, vote, execute_proposal,
withdraw_ether. Harness ops: advance (seconds), fail_next_payouts (n).
Any step may carry `now` and `expect` ("ok" or a DAOError code). Ledger ops
receive `now` directly, so one earlier than a committed step is a
DAO_CLOCK_SKEW outcome; a step that succeeds moves the clock forward to its
`now`. A step whose outcome differs from `expect` is a mismatch.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from daofund.clock import ManualClock
from daofund.config import DAOConfig, from_mapping
from daofund.errors import DAOError
from daofund.ledger.governance import GovernanceLedger
from daofund.treasury.memory import InMemoryTreasury

try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - yaml is optional
    yaml = None  # type: ignore

log = logging.getLogger(__name__)

OK = "ok"


@dataclass
class StepOutcome:
    index: int
    op: str
    ok: bool
    code: str = OK
    message: str = ""
    result: Any = None
    expected: Optional[str] = None

    @property
    def mismatch(self) -> bool:
        return self.expected is not None and self.expected != self.code

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"index": self.index, "op": self.op, "ok": self.ok, "code": self.code}
        if self.message:
            d["message"] = self.message
        if self.result is not None:
            d["result"] = self.result
        if self.expected is not None:
            d["expected"] = self.expected
            d["mismatch"] = self.mismatch
        return d


@dataclass
class Scenario:
    config: DAOConfig
    steps: List[Dict[str, Any]]
    start: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Scenario":
        steps = data.get("steps") or []
        if not isinstance(steps, list) or not all(isinstance(s, dict) for s in steps):
            raise ValueError("scenario 'steps' must be a list of mappings")
        for i, s in enumerate(steps):
            if "op" not in s:
                raise ValueError(f"step {i} has no 'op'")
        return cls(
            config=from_mapping(dict(data.get("config") or {})),
            steps=[dict(s) for s in steps],
            start=int(data.get("start", 0)),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "Scenario":
        p = Path(path)
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() in (".yaml", ".yml"):
            if yaml is None:
                raise RuntimeError("YAML scenario requested but PyYAML is not installed.")
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"scenario file {p} must contain a mapping at top level")
        return cls.from_mapping(data)


@dataclass
class ScenarioResult:
    outcomes: List[StepOutcome] = field(default_factory=list)
    snapshot: Dict[str, Any] = field(default_factory=dict)
    credited: Dict[str, int] = field(default_factory=dict)

    @property
    def mismatches(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.mismatch]

    @property
    def rejections(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcomes": [o.to_dict() for o in self.outcomes],
            "snapshot": self.snapshot,
            "credited": dict(sorted(self.credited.items())),
        }


class ScenarioRunner:
    """Applies scenario steps one at a time against a fresh ledger."""

    def __init__(self, scenario: Scenario) -> None:
        self.scenario = scenario
        self.clock = ManualClock(start=scenario.start)
        self.treasury = InMemoryTreasury()
        self.ledger = GovernanceLedger(scenario.config, self.treasury, clock=self.clock)
        self._ops: Dict[str, Callable[[Dict[str, Any], Optional[int]], Any]] = {
            "contribute": lambda s, now: self.ledger.contribute(s["caller"], s["amount"], now=now),
            "deposit": lambda s, now: self.ledger.deposit(s["caller"], s["amount"], now=now),
            "create_proposal": lambda s, now: self.ledger.create_proposal(
                s["caller"], s["name"], s["amount"], s["recipient"], now=now
            ),
            "vote": lambda s, now: self.ledger.vote(s["caller"], s["proposal_id"], now=now),
            "execute_proposal": lambda s, now: self.ledger.execute_proposal(s["caller"], s["proposal_id"], now=now),
            "withdraw_ether": lambda s, now: self.ledger.withdraw_ether(
                s["caller"], s["amount"], s["recipient"], now=now
            ),
            "advance": lambda s, now: self.clock.advance(int(s["seconds"])),
            "fail_next_payouts": lambda s, now: self.treasury.fail_next_payouts(int(s.get("n", 1))),
        }

    def apply(self, index: int, step: Dict[str, Any]) -> StepOutcome:
        op = str(step["op"])
        expected = step.get("expect")
        fn = self._ops.get(op)
        if fn is None:
            raise ValueError(f"step {index}: unknown op {op!r}")
        # `now` goes to the ledger as-is so a stale one is reported as DAO_CLOCK_SKEW
        now = step.get("now")
        try:
            result = fn(step, now)
        except KeyError as e:
            raise ValueError(f"step {index} ({op}) is missing field {e.args[0]!r}") from e
        except DAOError as e:
            log.debug("scenario: step=%d op=%s rejected code=%s", index, op, e.code)
            return StepOutcome(index, op, ok=False, code=e.code, message=e.message, expected=expected)
        if isinstance(now, int) and now > self.clock.now():
            self.clock.set(now)
        return StepOutcome(index, op, ok=True, result=result, expected=expected)

    def run(self, *, stop_on_error: bool = False) -> ScenarioResult:
        out = ScenarioResult()
        for i, step in enumerate(self.scenario.steps):
            outcome = self.apply(i, step)
            out.outcomes.append(outcome)
            if stop_on_error and (outcome.mismatch or (not outcome.ok and outcome.expected is None)):
                break
        out.snapshot = self.ledger.snapshot()
        out.credited = {p.recipient: self.treasury.credited(p.recipient) for p in self.treasury.payouts()}
        return out


def run_scenario(scenario: Scenario, *, stop_on_error: bool = False) -> ScenarioResult:
    return ScenarioRunner(scenario).run(stop_on_error=stop_on_error)


__all__ = ["Scenario", "ScenarioRunner", "ScenarioResult", "StepOutcome", "run_scenario", "OK"]
