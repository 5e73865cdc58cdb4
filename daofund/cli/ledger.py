from __future__ import annotations

"""
daofund.cli.ledger
------------------

Drive a governance ledger from the command line.

- `replay`: apply a scenario file (JSON/YAML) to a fresh ledger backed by an
  in-memory treasury and print each step's outcome plus the final state.
- `config`: print the effective configuration (defaults, $DAOFUND_CONFIG_FILE,
  DAOFUND_* environment).

Examples
--------
# Human-readable report
python -m daofund.cli.ledger replay scenario.yaml

# JSON report, exit non-zero at the first unexpected rejection
python -m daofund.cli.ledger replay scenario.json --json --strict

# Effective config
python -m daofund.cli.ledger config
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import typer

from daofund import config as dao_config
from daofund.scenario import Scenario, ScenarioResult, run_scenario

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

app = typer.Typer(
    name="daofund",
    add_completion=False,
    no_args_is_help=True,
    help="Replay and inspect pooled-fund governance ledgers.",
)


# -------------------- rendering --------------------

def _render_outcomes(result: ScenarioResult) -> None:
    for o in result.outcomes:
        if o.mismatch:
            typer.secho(f"[{o.index:>3}] {o.op:<18} {o.code}  (expected {o.expected})", fg=typer.colors.RED)
        elif o.ok:
            extra = f" -> {o.result}" if o.result is not None else ""
            typer.echo(f"[{o.index:>3}] {o.op:<18} ok{extra}")
        else:
            typer.secho(f"[{o.index:>3}] {o.op:<18} {o.code}: {o.message}", fg=typer.colors.YELLOW)


def _render_snapshot(snap: Dict[str, Any], credited: Dict[str, int]) -> None:
    typer.secho("State:", bold=True)
    typer.echo(f"  total_shares     {snap['total_shares']}")
    typer.echo(f"  available_funds  {snap['available_funds']}")
    typer.echo(f"  treasury_balance {snap['treasury_balance']}")
    typer.echo(f"  contribution_end {snap['contribution_end']}")
    typer.secho("Investors:", bold=True)
    for inv_id, inv in snap["investors"].items():
        typer.echo(f"  {inv_id:<20} shares={inv['shares']}")
    typer.secho("Proposals:", bold=True)
    rows: List[Dict[str, Any]] = snap["proposals"]
    if not rows:
        typer.echo("  (none)")
    for p in rows:
        flag = "executed" if p["executed"] else "open"
        typer.echo(
            f"  #{p['id']:<3} {p['name']!r:<24} amount={p['amount']:<8} "
            f"votes={p['votes']:<8} end={p['end']:<12} {flag}"
        )
    if credited:
        typer.secho("Paid out:", bold=True)
        for rcpt, amt in sorted(credited.items()):
            typer.echo(f"  {rcpt:<20} {amt}")


# -------------------- commands --------------------

@app.command("replay")
def cmd_replay(
    scenario_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario file (.json/.yaml)."),
    json_out: bool = typer.Option(False, "--json", help="Output JSON."),
    strict: bool = typer.Option(False, "--strict", help="Stop and exit 1 at the first unexpected rejection."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(
            f"expected one of {', '.join(LOG_LEVELS)}, got {log_level!r}", param_hint="--log-level"
        )
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        scenario = Scenario.from_file(scenario_path)
    except (ValueError, RuntimeError) as e:
        typer.secho(f"invalid scenario: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    try:
        result = run_scenario(scenario, stop_on_error=strict)
    except ValueError as e:
        typer.secho(f"invalid scenario: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    if json_out:
        typer.echo(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    else:
        _render_outcomes(result)
        _render_snapshot(result.snapshot, result.credited)

    unexpected = [o for o in result.rejections if o.expected is None]
    if result.mismatches or (strict and unexpected):
        raise typer.Exit(code=1)


@app.command("config")
def cmd_config() -> None:
    try:
        cfg = dao_config.load()
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        typer.secho(f"invalid configuration: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    typer.echo(dao_config.pretty(cfg))


def get_app() -> typer.Typer:
    return app


if __name__ == "__main__":
    app()
