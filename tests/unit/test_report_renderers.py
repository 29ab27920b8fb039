from __future__ import annotations

import json
from pathlib import Path

from statecheck.errors import FailureRecord
from statecheck.report import Counterexample, PropertyReport, ShrinkStats, render_markdown, render_text, write_reports


def _failing_report() -> PropertyReport:
    return PropertyReport(
        name="fruit-form",
        status="FAIL",
        seed=7,
        num_runs=100,
        runs_executed=12,
        skipped_commands=4,
        counterexample=Counterexample(
            source="generated",
            run_index=11,
            commands=["move 1 to 0", "change value at 0 to a"],
            commands_repr=["Move(from_index=1, to_index=0)", "ChangeValue(index=0, value='a')"],
            failure=FailureRecord(
                code="POSTCONDITION_VIOLATED",
                message="correct_values: expected ['a', ''], observed ['', 'a']",
                failure_class="POSTCONDITION",
                step_index=1,
                command="change value at 0 to a",
                postcondition="correct_values",
                expected=["a", ""],
                observed=["", "a"],
            ),
            replay_path="6:0:2",
        ),
        shrink_stats=ShrinkStats(original_len=9, reduced_len=2, iterations=31, seconds=0.01),
        repro_command="statecheck replay props:fruit_form --seed 7 --run-index 11 --path 6:0:2 --max-commands 10",
    )


def test_render_text_for_passing_report() -> None:
    report = PropertyReport(name="fruit-form", status="PASS", seed=3, num_runs=100, runs_executed=100)
    assert render_text(report) == "Property fruit-form: all 100 runs passed (seed=3)"


def test_render_text_for_failing_report() -> None:
    text = render_text(_failing_report())

    assert "FAILED after 12 run(s) (seed=7)" in text
    assert "Failing run: 11, replay path: 6:0:2" in text
    assert "  0. move 1 to 0" in text
    assert "  1. change value at 0 to a" in text
    assert "Violated: correct_values at step 1 (change value at 0 to a)" in text
    assert "Shrunk 9 -> 2 command(s) in 31 attempt(s)" in text
    assert "Reproduce: statecheck replay" in text


def test_render_markdown_contains_sections() -> None:
    markdown = render_markdown(_failing_report())

    assert "## Statecheck Report: fruit-form" in markdown
    assert "Counterexample found" in markdown
    assert "| 1 | `change value at 0 to a` |" in markdown
    assert "### Shrink" in markdown
    assert "| 9 | 2 | 31 | 0.01 |" in markdown


def test_write_reports_outputs_json_and_markdown(tmp_path: Path) -> None:
    json_path = tmp_path / "out" / "latest.json"
    md_path = tmp_path / "out" / "latest.md"
    write_reports(_failing_report(), json_path=json_path, md_path=md_path)

    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data["status"] == "FAIL"
    assert data["counterexample"]["failure"]["postcondition"] == "correct_values"
    assert data["counterexample"]["replay_path"] == "6:0:2"
    assert data["shrink_stats"]["reduced_len"] == 2
    assert "Statecheck Report" in md_path.read_text(encoding="utf-8")
