from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from statecheck.constants import REPORT_SCHEMA_VERSION
from statecheck.errors import FailureRecord

PropertyStatus = Literal["PASS", "FAIL"]
FailureSource = Literal["example", "generated"]


@dataclass(slots=True)
class ShrinkStats:
    original_len: int
    reduced_len: int
    iterations: int
    seconds: float
    exhausted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_len": self.original_len,
            "reduced_len": self.reduced_len,
            "iterations": self.iterations,
            "seconds": self.seconds,
            "exhausted": self.exhausted,
        }


@dataclass(slots=True)
class Counterexample:
    source: FailureSource
    run_index: int
    commands: list[str]
    commands_repr: list[str]
    failure: FailureRecord
    replay_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "run_index": self.run_index,
            "commands": self.commands,
            "commands_repr": self.commands_repr,
            "failure": self.failure.to_dict(),
            "replay_path": self.replay_path,
        }


@dataclass(slots=True)
class PropertyReport:
    name: str
    status: PropertyStatus
    seed: int
    num_runs: int
    runs_executed: int
    examples_executed: int = 0
    skipped_commands: int = 0
    counterexample: Counterexample | None = None
    shrink_stats: ShrinkStats | None = None
    repro_command: str | None = None
    report_schema_version: str = REPORT_SCHEMA_VERSION
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.status == "PASS"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "report_schema_version": self.report_schema_version,
            "name": self.name,
            "status": self.status,
            "seed": self.seed,
            "num_runs": self.num_runs,
            "runs_executed": self.runs_executed,
            "examples_executed": self.examples_executed,
            "skipped_commands": self.skipped_commands,
            "metadata": self.metadata,
        }
        if self.counterexample is not None:
            payload["counterexample"] = self.counterexample.to_dict()
        if self.shrink_stats is not None:
            payload["shrink_stats"] = self.shrink_stats.to_dict()
        if self.repro_command is not None:
            payload["repro_command"] = self.repro_command
        return payload


__all__ = [
    "Counterexample",
    "FailureSource",
    "PropertyReport",
    "PropertyStatus",
    "ShrinkStats",
]
