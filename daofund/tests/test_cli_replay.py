from __future__ import annotations

import json

import pytest

from typer.testing import CliRunner

from daofund.cli.ledger import app
from daofund.scenario import Scenario, run_scenario

SCENARIO = {
    "config": {"quorum_percent": 50, "contribution_period": 2000, "voting_period": 2000, "admin": "acct0"},
    "start": 1000,
    "steps": [
        {"op": "contribute", "caller": "acct1", "amount": 100},
        {"op": "contribute", "caller": "acct2", "amount": 100},
        {"op": "contribute", "caller": "acct3", "amount": 100},
        {"op": "advance", "seconds": 2001},
        {"op": "contribute", "caller": "acct4", "amount": 100, "expect": "DAO_WINDOW_CLOSED"},
        {"op": "create_proposal", "caller": "acct1", "name": "P1", "amount": 50, "recipient": "acct4"},
        {"op": "vote", "caller": "acct2", "proposal_id": 0},
        {"op": "vote", "caller": "acct3", "proposal_id": 0},
        {"op": "execute_proposal", "caller": "acct0", "proposal_id": 0, "expect": "DAO_TOO_EARLY"},
        {"op": "advance", "seconds": 2001},
        {"op": "fail_next_payouts", "n": 1},
        {"op": "execute_proposal", "caller": "acct0", "proposal_id": 0, "expect": "DAO_PAYOUT_FAILED"},
        {"op": "execute_proposal", "caller": "acct0", "proposal_id": 0, "expect": "ok"},
        {"op": "withdraw_ether", "caller": "acct0", "amount": 50, "recipient": "acct4"},
    ],
}


@pytest.fixture
def scenario_file(tmp_path):
    p = tmp_path / "scenario.json"
    p.write_text(json.dumps(SCENARIO))
    return p


def test_run_scenario_in_process():
    result = run_scenario(Scenario.from_mapping(SCENARIO))

    assert not result.mismatches
    assert [o.code for o in result.rejections] == ["DAO_WINDOW_CLOSED", "DAO_TOO_EARLY", "DAO_PAYOUT_FAILED"]
    assert result.snapshot["available_funds"] == 200
    assert result.snapshot["proposals"][0]["executed"] is True
    assert result.credited == {"acct4": 100}


def test_explicit_now_moves_clock():
    data = {
        "config": {"contribution_period": 10},
        "steps": [
            {"op": "contribute", "caller": "a", "amount": 1, "now": 9},
            {"op": "contribute", "caller": "a", "amount": 1, "now": 10, "expect": "DAO_WINDOW_CLOSED"},
        ],
    }
    result = run_scenario(Scenario.from_mapping(data))
    assert not result.mismatches


def test_stale_now_is_reported_as_clock_skew():
    data = {
        "config": {"contribution_period": 100},
        "steps": [
            {"op": "contribute", "caller": "a", "amount": 5, "now": 50},
            {"op": "contribute", "caller": "b", "amount": 5, "now": 40, "expect": "DAO_CLOCK_SKEW"},
            {"op": "contribute", "caller": "b", "amount": 5},
        ],
    }
    result = run_scenario(Scenario.from_mapping(data))

    assert not result.mismatches
    assert [o.ok for o in result.outcomes] == [True, False, True]
    assert result.snapshot["total_shares"] == 10


def test_unknown_op_is_a_scenario_error():
    with pytest.raises(ValueError):
        run_scenario(Scenario.from_mapping({"steps": [{"op": "mint", "amount": 1}]}))


def test_cli_replay_json(scenario_file):
    runner = CliRunner()
    r = runner.invoke(app, ["replay", str(scenario_file), "--json", "--log-level", "ERROR"])
    assert r.exit_code == 0, r.output
    data = json.loads(r.output)
    assert data["snapshot"]["total_shares"] == 300
    assert data["credited"] == {"acct4": 100}


def test_cli_replay_text(scenario_file):
    runner = CliRunner()
    r = runner.invoke(app, ["replay", str(scenario_file), "--log-level", "ERROR"])
    assert r.exit_code == 0, r.output
    assert "available_funds  200" in r.output
    assert "executed" in r.output


def test_cli_replay_mismatch_exits_nonzero(tmp_path):
    data = dict(SCENARIO)
    data["steps"] = [{"op": "vote", "caller": "x", "proposal_id": 0, "expect": "ok"}]
    p = tmp_path / "bad.json"
    p.write_text(json.dumps(data))

    r = CliRunner().invoke(app, ["replay", str(p)])
    assert r.exit_code == 1
    assert "DAO_NOT_FOUND" in r.output


def test_cli_strict_stops_on_unexpected_rejection(tmp_path):
    data = dict(SCENARIO)
    data["steps"] = [
        {"op": "withdraw_ether", "caller": "acct1", "amount": 1, "recipient": "x"},
        {"op": "contribute", "caller": "acct1", "amount": 5},
    ]
    p = tmp_path / "strict.json"
    p.write_text(json.dumps(data))

    r = CliRunner().invoke(app, ["replay", str(p), "--strict", "--json"])
    assert r.exit_code == 1
    out = json.loads(r.output)
    assert len(out["outcomes"]) == 1
    assert out["snapshot"]["total_shares"] == 0


def test_cli_rejects_unknown_log_level(scenario_file):
    r = CliRunner().invoke(app, ["replay", str(scenario_file), "--log-level", "verbose"])
    assert r.exit_code == 2
    assert r.exception is None or isinstance(r.exception, SystemExit)
    assert "--log-level" in r.output


def test_cli_config(monkeypatch):
    monkeypatch.setenv("DAOFUND_QUORUM_PERCENT", "70")
    r = CliRunner().invoke(app, ["config"])
    assert r.exit_code == 0
    assert json.loads(r.output)["quorum_percent"] == 70
