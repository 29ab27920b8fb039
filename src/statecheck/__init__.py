"""Model-based property testing: random command sequences checked against a shadow model."""

from statecheck.arbitrary import Arbitrary, constant, integers, nat, sampled_from, text
from statecheck.command import CommandSpec, Expectations
from statecheck.driver import DriverSettings, PropertySpec, assert_property, check_property, replay
from statecheck.errors import FailureRecord, PostconditionViolation, PropertyFailed
from statecheck.generator import CommandGenerator, CommandVariant
from statecheck.report import PropertyReport
from statecheck.runner import InitialState, RunOutcome, run_sequence

__version__ = "0.1.0"

__all__ = [
    "Arbitrary",
    "CommandGenerator",
    "CommandSpec",
    "CommandVariant",
    "DriverSettings",
    "Expectations",
    "FailureRecord",
    "InitialState",
    "PostconditionViolation",
    "PropertyFailed",
    "PropertyReport",
    "PropertySpec",
    "RunOutcome",
    "__version__",
    "assert_property",
    "check_property",
    "constant",
    "integers",
    "nat",
    "replay",
    "run_sequence",
    "sampled_from",
    "text",
]
