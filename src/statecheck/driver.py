"""Property driver.

Runs a property ``num_runs`` times against fresh ``(model, sut)`` pairs,
shrinks the first failing command sequence and reports the smallest one that
still fails, together with the seed and shrink path that reproduce it.
"""

from __future__ import annotations

import asyncio
import inspect
import secrets
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from statecheck.command import CommandSpec, describe
from statecheck.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_NUM_RUNS,
    DEFAULT_SHRINK_MAX_ITERATIONS,
    DEFAULT_SHRINK_MAX_SECONDS,
)
from statecheck.errors import PropertyFailed
from statecheck.generator import CommandGenerator
from statecheck.report.schema import Counterexample, FailureSource, PropertyReport, ShrinkStats
from statecheck.runner import InitialState, RunOutcome, run_sequence
from statecheck.shrink import replay_path, shrink_sequence

logger = structlog.get_logger(__name__)

SetupFn = Callable[[], "InitialState | Awaitable[InitialState]"]
TeardownFn = Callable[[Any], "Awaitable[None] | None"]


@dataclass(slots=True)
class PropertySpec:
    name: str
    generator: CommandGenerator
    setup: SetupFn
    commands: CommandSpec
    teardown: TeardownFn | None = None
    examples: list[list[Any]] = field(default_factory=list)
    target: str | None = None


@dataclass(slots=True)
class DriverSettings:
    num_runs: int = DEFAULT_NUM_RUNS
    seed: int | None = None
    max_commands: int | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    shrink_max_seconds: float = DEFAULT_SHRINK_MAX_SECONDS
    shrink_max_iterations: int = DEFAULT_SHRINK_MAX_ITERATIONS
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.num_runs < 0:
            raise ValueError("num_runs must be >= 0")
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.max_commands is not None and self.max_commands < 0:
            raise ValueError("max_commands must be >= 0")


@dataclass(slots=True)
class ReplayResult:
    commands: list[Any]
    outcome: RunOutcome


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _initial_state(spec: PropertySpec) -> InitialState:
    state = await _resolve(spec.setup())
    if isinstance(state, InitialState):
        return state
    if isinstance(state, tuple) and len(state) == 2:
        model, sut = state
        return InitialState(model=model, sut=sut)
    raise TypeError(f"setup() for {spec.name} must return InitialState or a (model, sut) tuple")


async def execute(spec: PropertySpec, commands: Sequence[Any]) -> RunOutcome:
    """One run on a fresh ``(model, sut)`` pair; the system is always torn down."""
    state = await _initial_state(spec)
    try:
        return await run_sequence(commands, state=state, spec=spec.commands)
    finally:
        if spec.teardown is not None:
            await _resolve(spec.teardown(state.sut))


def format_replay_path(prefix_len: int, path: Sequence[int]) -> str:
    return ":".join(str(part) for part in (prefix_len, *path))


def parse_replay_path(raw: str) -> tuple[int | None, list[int]]:
    stripped = raw.strip()
    if not stripped:
        return None, []
    try:
        parts = [int(part) for part in stripped.split(":")]
    except ValueError as exc:
        raise ValueError(f"Invalid replay path: {raw!r}") from exc
    if any(part < 0 for part in parts):
        raise ValueError(f"Invalid replay path: {raw!r}")
    return parts[0], parts[1:]


def _effective_generator(spec: PropertySpec, max_commands: int | None) -> CommandGenerator:
    if max_commands is None:
        return spec.generator
    return spec.generator.with_max_commands(max_commands)


def build_repro_command(
    *,
    target: str,
    seed: int,
    source: FailureSource,
    run_index: int,
    path: str,
    max_commands: int,
) -> str:
    selector = f"--example {run_index}" if source == "example" else f"--run-index {run_index}"
    return (
        f"statecheck replay {target} --seed {seed} {selector} "
        f"--path {path} --max-commands {max_commands}"
    )


async def _report_failure(
    *,
    spec: PropertySpec,
    settings: DriverSettings,
    generator: CommandGenerator,
    report: PropertyReport,
    source: FailureSource,
    run_index: int,
    commands: list[Any],
    outcome: RunOutcome,
) -> PropertyReport:
    assert outcome.failure is not None
    prefix_len = outcome.failing_prefix_len or len(commands)
    failing = commands[:prefix_len]
    final_outcome = outcome
    last_failed: RunOutcome | None = None

    async def failing_prefix(candidate: list[Any]) -> int | None:
        nonlocal last_failed
        candidate_outcome = await execute(spec, candidate)
        if candidate_outcome.failed:
            last_failed = candidate_outcome
        return candidate_outcome.failing_prefix_len

    shrink_path: list[int] = []
    if await failing_prefix(failing) is not None:
        result = await shrink_sequence(
            failing,
            fails=failing_prefix,
            shrink_command=generator.shrink_command,
            max_seconds=settings.shrink_max_seconds,
            max_iterations=settings.shrink_max_iterations,
        )
        report.shrink_stats = ShrinkStats(
            original_len=len(commands),
            reduced_len=result.reduced_len,
            iterations=result.iterations,
            seconds=result.seconds,
            exhausted=result.exhausted,
        )
        failing = result.reduced_commands
        shrink_path = result.path
        assert last_failed is not None
        final_outcome = last_failed
        rerun = await execute(spec, failing)
        if rerun.failed:
            final_outcome = rerun
        else:
            logger.warning("shrunk_failure_not_reproducible", property=spec.name, run_index=run_index)
            report.metadata["flaky"] = True
    else:
        logger.warning("failure_not_reproducible", property=spec.name, run_index=run_index)
        report.metadata["flaky"] = True

    assert final_outcome.failure is not None
    path = format_replay_path(prefix_len, shrink_path)
    report.status = "FAIL"
    report.counterexample = Counterexample(
        source=source,
        run_index=run_index,
        commands=[describe(command) for command in failing],
        commands_repr=[repr(command) for command in failing],
        failure=final_outcome.failure,
        replay_path=path,
    )
    if spec.target is not None:
        report.repro_command = build_repro_command(
            target=spec.target,
            seed=report.seed,
            source=source,
            run_index=run_index,
            path=path,
            max_commands=generator.max_commands,
        )
    logger.info(
        "property_failed",
        property=spec.name,
        run_index=run_index,
        source=source,
        reduced_len=len(failing),
        postcondition=final_outcome.failure.postcondition,
    )
    return report


async def _execute_batch(spec: PropertySpec, sequences: Sequence[list[Any]]) -> list[RunOutcome]:
    """Run sequences concurrently; an error in one run cancels its siblings."""
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(execute(spec, sequence)) for sequence in sequences]
    except ExceptionGroup as errors:
        raise errors.exceptions[0]
    return [task.result() for task in tasks]


async def check_property(spec: PropertySpec, settings: DriverSettings | None = None) -> PropertyReport:
    settings = settings or DriverSettings()
    seed = settings.seed if settings.seed is not None else secrets.randbelow(2**31)
    generator = _effective_generator(spec, settings.max_commands)
    report = PropertyReport(
        name=spec.name,
        status="PASS",
        seed=seed,
        num_runs=settings.num_runs,
        runs_executed=0,
        metadata={"max_commands": generator.max_commands, "concurrency": settings.concurrency},
    )

    for example_index, example in enumerate(spec.examples):
        commands = list(example)
        outcome = await execute(spec, commands)
        report.examples_executed += 1
        report.skipped_commands += outcome.skipped
        if outcome.failed:
            return await _report_failure(
                spec=spec,
                settings=settings,
                generator=generator,
                report=report,
                source="example",
                run_index=example_index,
                commands=commands,
                outcome=outcome,
            )

    for batch_start in range(0, settings.num_runs, settings.concurrency):
        run_indices = range(batch_start, min(settings.num_runs, batch_start + settings.concurrency))
        sequences = [generator.sequence_for_run(seed, run_index) for run_index in run_indices]
        outcomes = await _execute_batch(spec, sequences)

        for run_index, commands, outcome in zip(run_indices, sequences, outcomes, strict=True):
            report.runs_executed += 1
            report.skipped_commands += outcome.skipped
            if outcome.failed:
                return await _report_failure(
                    spec=spec,
                    settings=settings,
                    generator=generator,
                    report=report,
                    source="generated",
                    run_index=run_index,
                    commands=commands,
                    outcome=outcome,
                )
            if settings.verbose:
                logger.info(
                    "run_passed",
                    property=spec.name,
                    run_index=run_index,
                    commands=len(commands),
                    skipped=outcome.skipped,
                )

    logger.info("property_passed", property=spec.name, runs=report.runs_executed, seed=seed)
    return report


async def replay(
    spec: PropertySpec,
    *,
    seed: int | None = None,
    run_index: int | None = None,
    example_index: int | None = None,
    path: str = "",
    max_commands: int | None = None,
) -> ReplayResult:
    generator = _effective_generator(spec, max_commands)
    if example_index is not None:
        if not 0 <= example_index < len(spec.examples):
            raise ValueError(f"{spec.name} has no example #{example_index}")
        commands = list(spec.examples[example_index])
    else:
        if seed is None or run_index is None:
            raise ValueError("replay needs seed and run_index, or example_index")
        commands = generator.sequence_for_run(seed, run_index)

    prefix_len, shrink_path = parse_replay_path(path)
    if prefix_len is not None:
        commands = commands[:prefix_len]

    async def failing_prefix(candidate: list[Any]) -> int | None:
        return (await execute(spec, candidate)).failing_prefix_len

    commands = await replay_path(commands, shrink_path, generator.shrink_command, truncate=failing_prefix)
    outcome = await execute(spec, commands)
    return ReplayResult(commands=commands, outcome=outcome)


def assert_property(spec: PropertySpec, settings: DriverSettings | None = None) -> PropertyReport:
    report = asyncio.run(check_property(spec, settings))
    if not report.passed:
        raise PropertyFailed(report)
    return report


__all__ = [
    "DriverSettings",
    "PropertySpec",
    "ReplayResult",
    "SetupFn",
    "TeardownFn",
    "assert_property",
    "build_repro_command",
    "check_property",
    "execute",
    "format_replay_path",
    "parse_replay_path",
    "replay",
]
