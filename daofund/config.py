from __future__ import annotations
"""
daofund.config — construction-time configuration for the governance ledger

Covers:
- Quorum, as a percentage (0..100) of total contributed shares
- Contribution period (seconds after deployment during which contributions are accepted)
- Voting period (seconds after proposal creation during which votes are accepted)
- Admin principal (the only identity allowed to execute proposals and withdraw)

All values are fixed for the lifetime of a ledger instance; the ledger keeps its
own copy taken at construction.

Environment overrides (all optional; sensible defaults provided):

  DAOFUND_QUORUM_PERCENT=50
  DAOFUND_CONTRIBUTION_PERIOD=2
  DAOFUND_VOTING_PERIOD=2
  DAOFUND_ADMIN=admin

You can also load from a JSON or YAML file via `DAOFUND_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""


from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional
import json
import os
from pathlib import Path

try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - yaml is optional
    yaml = None  # type: ignore


PERCENT_SCALE = 100


@dataclass(frozen=True)
class DAOConfig:
    """Ledger configuration. Periods are in seconds."""
    quorum_percent: int = 50
    contribution_period: int = 2
    voting_period: int = 2
    admin: str = "admin"

    def validate(self) -> None:
        for name, v in (("quorum_percent", self.quorum_percent),
                        ("contribution_period", self.contribution_period),
                        ("voting_period", self.voting_period)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise ValueError(f"{name} must be an int (got {v!r}).")
        if not (0 <= self.quorum_percent <= PERCENT_SCALE):
            raise ValueError(f"quorum_percent must be between 0 and {PERCENT_SCALE} (got {self.quorum_percent}).")
        if self.contribution_period < 0 or self.voting_period < 0:
            raise ValueError("contribution_period and voting_period must be non-negative seconds.")
        if not isinstance(self.admin, str) or not self.admin:
            raise ValueError(f"admin must be a non-empty identity (got {self.admin!r}).")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def from_env(base: Optional[DAOConfig] = None, prefix: str = "DAOFUND_") -> DAOConfig:
    """
    Build a DAOConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or DAOConfig()

    new_cfg = replace(
        cfg,
        quorum_percent=_getenv_int(f"{prefix}QUORUM_PERCENT", cfg.quorum_percent),
        contribution_period=_getenv_int(f"{prefix}CONTRIBUTION_PERIOD", cfg.contribution_period),
        voting_period=_getenv_int(f"{prefix}VOTING_PERIOD", cfg.voting_period),
        admin=os.getenv(f"{prefix}ADMIN") or cfg.admin,
    )
    new_cfg.validate()
    return new_cfg


def from_mapping(data: Dict[str, Any]) -> DAOConfig:
    """Build a DAOConfig from a plain mapping; missing keys take defaults."""
    defaults = DAOConfig()
    cfg = DAOConfig(
        quorum_percent=int(data.get("quorum_percent", defaults.quorum_percent)),
        contribution_period=int(data.get("contribution_period", defaults.contribution_period)),
        voting_period=int(data.get("voting_period", defaults.voting_period)),
        admin=str(data.get("admin", defaults.admin)),
    )
    cfg.validate()
    return cfg


def from_file(path: str | os.PathLike[str]) -> DAOConfig:
    """
    Load configuration from a JSON or YAML file.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        if yaml is None:
            raise RuntimeError("YAML config requested but PyYAML is not installed.")
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    if not isinstance(data, dict):
        raise ValueError(f"config file {p} must contain a mapping at top level")
    return from_mapping(data)


def load() -> DAOConfig:
    """
    Load configuration using the following precedence:
      1) File at $DAOFUND_CONFIG_FILE (JSON/YAML)
      2) Environment variables (DAOFUND_*), applied on top of defaults or file values
    """
    file_path = os.getenv("DAOFUND_CONFIG_FILE")
    base = from_file(file_path) if file_path else DAOConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[DAOConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "PERCENT_SCALE",
    "DAOConfig",
    "from_env",
    "from_mapping",
    "from_file",
    "load",
    "pretty",
]
