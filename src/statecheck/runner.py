"""Sequential runner.

Applies one command sequence to a ``(model, sut)`` pair, strictly one command
at a time:

- the precondition is evaluated against the current model before any side
  effect; a command whose precondition fails is skipped without touching the
  model or the system and without evaluating postconditions;
- ``run`` is awaited in full (model mutation, system action, settle wait and
  postconditions) before the next command is considered;
- the first postcondition violation or adapter error stops the run.
"""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from statecheck.command import CommandSpec, Expectations, describe
from statecheck.constants import RUN_FAILED, RUN_PASSED
from statecheck.errors import FailureRecord, PostconditionViolation

logger = structlog.get_logger(__name__)

RunStatus = Literal["PASSED", "FAILED"]


@dataclass(slots=True)
class InitialState:
    model: Any
    sut: Any


@dataclass(slots=True)
class RunOutcome:
    status: RunStatus
    executed: list[Any] = field(default_factory=list)
    skipped: int = 0
    failure: FailureRecord | None = None

    @property
    def failed(self) -> bool:
        return self.status == RUN_FAILED

    @property
    def failing_prefix_len(self) -> int | None:
        """Length of the input sequence up to and including the failing command."""
        if self.failure is None:
            return None
        return self.failure.step_index + 1


async def run_sequence(
    commands: Sequence[Any],
    *,
    state: InitialState,
    spec: CommandSpec,
    expect: Expectations | None = None,
) -> RunOutcome:
    expect = expect or Expectations()
    outcome = RunOutcome(status=RUN_PASSED)

    for step_index, command in enumerate(commands):
        if not spec.check(command, state.model):
            outcome.skipped += 1
            continue

        description = describe(command)
        expect.begin_step(step_index, description)
        outcome.executed.append(command)
        try:
            result = spec.run(command, state.model, state.sut, expect)
            if inspect.isawaitable(result):
                await result
        except PostconditionViolation as violation:
            outcome.status = RUN_FAILED
            outcome.failure = FailureRecord.from_violation(violation, step_index=step_index, command=description)
        except Exception as exc:
            outcome.status = RUN_FAILED
            outcome.failure = FailureRecord.from_exception(exc, step_index=step_index, command=description)

        if outcome.failure is not None:
            logger.debug(
                "run_failed",
                step_index=step_index,
                command=description,
                failure_class=outcome.failure.failure_class,
            )
            return outcome

    return outcome


__all__ = [
    "InitialState",
    "RunOutcome",
    "RunStatus",
    "run_sequence",
]
