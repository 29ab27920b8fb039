from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from statecheck.constants import FAILURE_CLASS_ADAPTER, FAILURE_CLASS_POSTCONDITION

if TYPE_CHECKING:
    from statecheck.report.schema import PropertyReport

FailureClass = Literal[
    "POSTCONDITION",
    "ADAPTER",
]

VALID_FAILURE_CLASSES = {
    FAILURE_CLASS_POSTCONDITION,
    FAILURE_CLASS_ADAPTER,
}


class StatecheckError(Exception):
    """Base class for errors raised by the engine."""


class ConfigError(StatecheckError, ValueError):
    pass


class PostconditionViolation(StatecheckError, AssertionError):
    """Observable state of the system diverged from the model."""

    def __init__(
        self,
        postcondition: str,
        message: str,
        *,
        expected: Any = None,
        observed: Any = None,
        step_index: int | None = None,
        command: str | None = None,
    ) -> None:
        super().__init__(message)
        self.postcondition = postcondition
        self.message = message
        self.expected = expected
        self.observed = observed
        self.step_index = step_index
        self.command = command


class PropertyFailed(StatecheckError, AssertionError):
    def __init__(self, report: PropertyReport) -> None:
        from statecheck.report.renderers import render_text

        super().__init__(render_text(report))
        self.report = report


@dataclass(slots=True, frozen=True)
class FailureRecord:
    code: str
    message: str
    failure_class: FailureClass
    step_index: int
    command: str
    postcondition: str | None = None
    expected: Any | None = None
    observed: Any | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "failure_class": self.failure_class,
            "step_index": self.step_index,
            "command": self.command,
            "details": self.details,
        }
        if self.postcondition is not None:
            payload["postcondition"] = self.postcondition
        if self.expected is not None:
            payload["expected"] = self.expected
        if self.observed is not None:
            payload["observed"] = self.observed
        return payload

    @classmethod
    def from_violation(cls, violation: PostconditionViolation, *, step_index: int, command: str) -> FailureRecord:
        return cls(
            code="POSTCONDITION_VIOLATED",
            message=violation.message,
            failure_class=FAILURE_CLASS_POSTCONDITION,
            step_index=step_index,
            command=command,
            postcondition=violation.postcondition,
            expected=violation.expected,
            observed=violation.observed,
        )

    @classmethod
    def from_exception(cls, exc: BaseException, *, step_index: int, command: str) -> FailureRecord:
        return cls(
            code="ADAPTER_FAULT",
            message=f"{type(exc).__name__}: {exc}",
            failure_class=FAILURE_CLASS_ADAPTER,
            step_index=step_index,
            command=command,
            details={"exception_type": type(exc).__name__},
        )


__all__ = [
    "VALID_FAILURE_CLASSES",
    "ConfigError",
    "FailureClass",
    "FailureRecord",
    "PostconditionViolation",
    "PropertyFailed",
    "StatecheckError",
]
