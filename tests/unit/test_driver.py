from __future__ import annotations

import asyncio

import pytest
from fruit_form import StaleMoveForm

from statecheck.driver import (
    DriverSettings,
    PropertySpec,
    assert_property,
    check_property,
    execute,
    format_replay_path,
    parse_replay_path,
    replay,
)
from statecheck.errors import PropertyFailed
from statecheck.fieldarray import AddField, ChangeValue, FieldArrayForm, Move, field_array_property
from statecheck.fieldarray.commands import FIELD_ARRAY_COMMANDS, POSTCONDITION_VALUES, field_array_variants
from statecheck.generator import CommandGenerator
from statecheck.report import render_text
from statecheck.shrink import iter_candidates


class TrackingFactory:
    def __init__(self, form_type: type[FieldArrayForm] = FieldArrayForm) -> None:
        self.form_type = form_type
        self.forms: list[FieldArrayForm] = []

    def __call__(self) -> FieldArrayForm:
        form = self.form_type()
        self.forms.append(form)
        return form


def _stale_spec(**kwargs: object) -> PropertySpec:
    return field_array_property(name="stale", form_factory=StaleMoveForm, **kwargs)  # type: ignore[arg-type]


def test_correct_form_passes_all_runs() -> None:
    report = asyncio.run(check_property(field_array_property(), DriverSettings(num_runs=50, seed=3)))

    assert report.status == "PASS"
    assert report.runs_executed == 50
    assert report.seed == 3
    assert report.counterexample is None
    assert report.shrink_stats is None
    assert "all 50 runs passed" in render_text(report)


def test_zero_runs_pass_trivially() -> None:
    report = asyncio.run(check_property(field_array_property(), DriverSettings(num_runs=0, seed=1)))
    assert report.passed
    assert report.runs_executed == 0


def test_random_seed_is_recorded_when_not_given() -> None:
    report = asyncio.run(check_property(field_array_property(), DriverSettings(num_runs=1)))
    assert isinstance(report.seed, int)


def test_every_run_gets_a_fresh_form_that_is_torn_down() -> None:
    factory = TrackingFactory()
    spec = field_array_property(form_factory=factory)
    asyncio.run(check_property(spec, DriverSettings(num_runs=10, seed=9)))

    assert len(factory.forms) == 10
    assert len({id(form) for form in factory.forms}) == 10
    assert all(form.disposed for form in factory.forms)


def test_explicit_example_is_shrunk_to_minimal_counterexample() -> None:
    spec = _stale_spec(
        examples=[[Move(1, 0), ChangeValue(0, "apple")]],
        target="fruit_form:stale_move_form",
    )
    report = asyncio.run(check_property(spec, DriverSettings(num_runs=10, seed=1)))

    assert report.status == "FAIL"
    assert report.examples_executed == 1
    assert report.runs_executed == 0
    counterexample = report.counterexample
    assert counterexample is not None
    assert counterexample.source == "example"
    assert counterexample.run_index == 0
    assert counterexample.commands == ["move 1 to 0", "change value at 0 to a"]
    assert counterexample.replay_path == "2:5:5"
    assert counterexample.failure.postcondition == POSTCONDITION_VALUES
    assert counterexample.failure.step_index == 1
    assert counterexample.failure.expected == ["a", ""]
    assert counterexample.failure.observed == ["", "a"]
    assert report.shrink_stats is not None
    assert report.shrink_stats.original_len == 2
    assert report.repro_command is not None
    assert "--example 0 --path 2:5:5" in report.repro_command


def test_generated_failure_is_found_shrunk_and_locally_minimal() -> None:
    factory = TrackingFactory(StaleMoveForm)
    spec = field_array_property(form_factory=factory)
    report = asyncio.run(check_property(spec, DriverSettings(num_runs=200, seed=1234)))

    assert report.status == "FAIL"
    counterexample = report.counterexample
    assert counterexample is not None
    assert counterexample.source == "generated"
    assert counterexample.failure.postcondition == POSTCONDITION_VALUES
    assert report.shrink_stats is not None
    assert not report.shrink_stats.exhausted
    assert report.shrink_stats.reduced_len <= report.shrink_stats.original_len
    assert all(form.disposed for form in factory.forms)

    result = asyncio.run(
        replay(spec, seed=report.seed, run_index=counterexample.run_index, path=counterexample.replay_path)
    )
    assert result.outcome.failed
    assert [str(command) for command in result.commands] == counterexample.commands

    for candidate in iter_candidates(result.commands, spec.generator.shrink_command):
        assert not asyncio.run(execute(spec, candidate)).failed


def test_failures_are_deterministic_for_a_seed() -> None:
    settings = DriverSettings(num_runs=200, seed=77)
    first = asyncio.run(check_property(_stale_spec(), settings))
    second = asyncio.run(check_property(_stale_spec(), settings))

    assert first.counterexample is not None
    assert second.counterexample is not None
    assert first.counterexample.to_dict() == second.counterexample.to_dict()
    assert first.runs_executed == second.runs_executed


def test_concurrent_runs_report_the_same_counterexample() -> None:
    sequential = asyncio.run(check_property(_stale_spec(), DriverSettings(num_runs=200, seed=5)))
    concurrent = asyncio.run(check_property(_stale_spec(), DriverSettings(num_runs=200, seed=5, concurrency=8)))

    assert sequential.counterexample is not None
    assert concurrent.counterexample is not None
    assert concurrent.counterexample.run_index == sequential.counterexample.run_index
    assert concurrent.counterexample.commands == sequential.counterexample.commands


def test_non_reproducible_failure_is_reported_as_flaky() -> None:
    class DroppedClickForm(FieldArrayForm):
        def click_add(self) -> None:
            if self.count() >= 2:
                return
            super().click_add()

    built: list[FieldArrayForm] = []

    def factory() -> FieldArrayForm:
        form = DroppedClickForm() if not built else FieldArrayForm()
        built.append(form)
        return form

    spec = field_array_property(form_factory=factory, examples=[[AddField()]])
    report = asyncio.run(check_property(spec, DriverSettings(num_runs=5, seed=1)))

    assert report.status == "FAIL"
    assert report.metadata["flaky"] is True
    assert report.shrink_stats is None
    assert report.counterexample is not None
    assert report.counterexample.commands == ["add field"]


def test_failure_record_matches_shrunk_commands_when_rerun_passes() -> None:
    example = [Move(1, 0), ChangeValue(0, "apple")]
    counting = TrackingFactory(StaleMoveForm)
    counted_spec = field_array_property(form_factory=counting, examples=[example])
    asyncio.run(check_property(counted_spec, DriverSettings(num_runs=0)))
    last_build = len(counting.forms) - 1

    built: list[FieldArrayForm] = []

    def fixed_on_last_build() -> FieldArrayForm:
        form = FieldArrayForm() if len(built) == last_build else StaleMoveForm()
        built.append(form)
        return form

    spec = field_array_property(form_factory=fixed_on_last_build, examples=[example])
    report = asyncio.run(check_property(spec, DriverSettings(num_runs=0)))

    assert len(built) == len(counting.forms)
    assert report.metadata["flaky"] is True
    counterexample = report.counterexample
    assert counterexample is not None
    assert counterexample.commands == ["move 1 to 0", "change value at 0 to a"]
    assert counterexample.failure.command in counterexample.commands
    assert counterexample.failure.command == "change value at 0 to a"
    assert counterexample.failure.step_index == 1
    assert counterexample.failure.expected == ["a", ""]


def test_setup_error_in_a_concurrent_batch_cancels_and_tears_down_siblings() -> None:
    built: list[FieldArrayForm] = []

    def breaks_on_second_form() -> FieldArrayForm:
        if len(built) == 1:
            raise RuntimeError("form factory broke")
        form = FieldArrayForm()
        built.append(form)
        return form

    spec = field_array_property(form_factory=breaks_on_second_form)
    with pytest.raises(RuntimeError, match="form factory broke"):
        asyncio.run(check_property(spec, DriverSettings(num_runs=8, seed=1, concurrency=4)))

    assert len(built) == 1
    assert built[0].disposed


def test_setup_may_return_a_plain_tuple() -> None:
    spec = PropertySpec(
        name="tuple-setup",
        generator=CommandGenerator(field_array_variants(0), max_commands=5),
        setup=lambda: ([], FieldArrayForm()),
        commands=FIELD_ARRAY_COMMANDS,
    )
    report = asyncio.run(check_property(spec, DriverSettings(num_runs=5, seed=2)))
    assert report.passed


def test_assert_property_raises_with_report() -> None:
    spec = _stale_spec(examples=[[Move(1, 0), ChangeValue(0, "apple")]])
    with pytest.raises(PropertyFailed) as excinfo:
        assert_property(spec, DriverSettings(num_runs=1, seed=1))

    assert excinfo.value.report.status == "FAIL"
    assert "Minimal counterexample" in str(excinfo.value)


def test_replay_of_example_without_path_runs_it_unchanged() -> None:
    spec = _stale_spec(examples=[[Move(1, 0), ChangeValue(0, "apple")]])
    result = asyncio.run(replay(spec, example_index=0))
    assert result.outcome.failed
    assert result.commands == [Move(1, 0), ChangeValue(0, "apple")]

    with pytest.raises(ValueError, match="no example"):
        asyncio.run(replay(spec, example_index=3))
    with pytest.raises(ValueError, match="seed and run_index"):
        asyncio.run(replay(spec))


def test_replay_path_format_roundtrip_and_validation() -> None:
    assert format_replay_path(4, [0, 3]) == "4:0:3"
    assert parse_replay_path("4:0:3") == (4, [0, 3])
    assert parse_replay_path("") == (None, [])
    with pytest.raises(ValueError, match="Invalid replay path"):
        parse_replay_path("4:x")


def test_settings_validation() -> None:
    with pytest.raises(ValueError, match="concurrency"):
        DriverSettings(concurrency=0)
    with pytest.raises(ValueError, match="num_runs"):
        DriverSettings(num_runs=-1)
