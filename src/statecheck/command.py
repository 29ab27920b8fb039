from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from statecheck.errors import PostconditionViolation

CheckFn = Callable[[Any, Any], bool]
RunFn = Callable[[Any, Any, Any, "Expectations"], "Awaitable[None] | None"]


class Expectations:
    """Assertion context handed to every command application.

    The runner points it at the current step before each apply, so a failed
    postcondition is always attributed to the command that caused it.
    """

    def __init__(self) -> None:
        self.step_index: int | None = None
        self.command: str | None = None
        self.checked: list[str] = []

    def begin_step(self, step_index: int, command: str) -> None:
        self.step_index = step_index
        self.command = command
        self.checked = []

    def fail(self, postcondition: str, message: str, *, expected: Any = None, observed: Any = None) -> None:
        raise PostconditionViolation(
            postcondition,
            message,
            expected=expected,
            observed=observed,
            step_index=self.step_index,
            command=self.command,
        )

    def equal(self, postcondition: str, expected: Any, observed: Any) -> None:
        self.checked.append(postcondition)
        if expected != observed:
            self.fail(
                postcondition,
                f"{postcondition}: expected {expected!r}, observed {observed!r}",
                expected=expected,
                observed=observed,
            )


@dataclass(slots=True, frozen=True)
class CommandSpec:
    """Dispatch functions shared by every command of one property.

    ``check(command, model)`` is the precondition. ``run(command, model, sut,
    expect)`` mutates the model, drives the system and asserts postconditions
    through ``expect``; it may return an awaitable.
    """

    check: CheckFn
    run: RunFn


def describe(command: Any) -> str:
    return str(command)


__all__ = [
    "CheckFn",
    "CommandSpec",
    "Expectations",
    "RunFn",
    "describe",
]
