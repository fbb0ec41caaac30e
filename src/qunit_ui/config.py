from __future__ import annotations

from enum import Enum
from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator

from qunit_ui.host import DEFAULT_TIMEOUT_MS


class InterfaceType(str, Enum):
    QUNIT = "qunit"
    QUNIT_SPLIT = "qunit-split"
    QUNIT_LEDGER = "qunit-ledger"


class RunConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    interface: InterfaceType = InterfaceType.QUNIT_LEDGER
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    specs: list[str]

    @field_validator("timeout_ms")
    @classmethod
    def timeout_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout_ms must be greater than zero")
        return v

    @field_validator("specs")
    @classmethod
    def expand_spec_patterns(cls, v: list[str]) -> list[str]:
        """Expand ${VAR} references, reporting every unset variable at once."""
        if not v:
            raise ValueError("specs must not be empty")
        expanded: list[str] = []
        missing: list[str] = []
        for pattern in v:
            try:
                expanded.append(expandvars(pattern, nounset=True))
            except Exception:
                # Variable is missing and has no default
                missing.append(f"  {pattern}")
        if missing:
            details = "\n".join(missing)
            raise ValueError(
                f"spec patterns reference unset environment variables:\n{details}"
            )
        return expanded


def load_config(path: Path) -> RunConfig:
    """Load and validate a run config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = RunConfig(**raw)

    # Resolve relative spec patterns relative to config file location
    config.specs = [
        pattern if Path(pattern).is_absolute() else str(config_dir / pattern)
        for pattern in config.specs
    ]

    return config
