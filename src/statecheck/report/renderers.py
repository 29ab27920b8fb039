from __future__ import annotations

import json
from pathlib import Path

from statecheck.report.schema import PropertyReport


def _failure_lines(report: PropertyReport) -> list[str]:
    counterexample = report.counterexample
    if counterexample is None:
        return []
    failure = counterexample.failure
    violated = failure.postcondition or failure.code
    return [
        f"Violated: {violated} at step {failure.step_index} ({failure.command})",
        f"Reason: {failure.message}",
    ]


def render_text(report: PropertyReport) -> str:
    if report.passed:
        return f"Property {report.name}: all {report.runs_executed} runs passed (seed={report.seed})"

    counterexample = report.counterexample
    lines = [f"Property {report.name}: FAILED after {report.runs_executed} run(s) (seed={report.seed})"]
    if counterexample is not None:
        if counterexample.source == "example":
            lines.append(f"Failing example: #{counterexample.run_index}")
        else:
            lines.append(f"Failing run: {counterexample.run_index}, replay path: {counterexample.replay_path}")
        lines.append("Minimal counterexample:")
        for index, description in enumerate(counterexample.commands):
            lines.append(f"  {index}. {description}")
        lines.extend(_failure_lines(report))
    if report.shrink_stats is not None:
        stats = report.shrink_stats
        lines.append(
            f"Shrunk {stats.original_len} -> {stats.reduced_len} command(s) in {stats.iterations} attempt(s)"
        )
    if report.repro_command:
        lines.append(f"Reproduce: {report.repro_command}")
    return "\n".join(lines)


def render_markdown(report: PropertyReport) -> str:
    lines: list[str] = []
    lines.append(f"## Statecheck Report: {report.name}")
    lines.append("")
    status = "All runs passed" if report.passed else "Counterexample found"
    lines.append(f"- Status: **{status}**")
    lines.append(f"- Seed: `{report.seed}`")
    lines.append(f"- Runs: **{report.runs_executed}** / {report.num_runs}")
    if report.examples_executed:
        lines.append(f"- Explicit examples: **{report.examples_executed}**")
    lines.append(f"- Skipped commands (precondition false): {report.skipped_commands}")

    counterexample = report.counterexample
    if counterexample is not None:
        lines.append("")
        lines.append("### Minimal counterexample")
        lines.append("")
        lines.append("| Step | Command |")
        lines.append("|---:|---|")
        for index, description in enumerate(counterexample.commands):
            lines.append(f"| {index} | `{description}` |")
        lines.append("")
        lines.append("### Failure")
        lines.append("")
        for line in _failure_lines(report):
            lines.append(f"- {line}")
        if counterexample.source == "generated":
            lines.append(f"- Replay: run `{counterexample.run_index}`, path `{counterexample.replay_path}`")

    if report.shrink_stats is not None:
        stats = report.shrink_stats
        lines.append("")
        lines.append("### Shrink")
        lines.append("")
        lines.append("| Original | Reduced | Attempts | Seconds |")
        lines.append("|---:|---:|---:|---:|")
        lines.append(f"| {stats.original_len} | {stats.reduced_len} | {stats.iterations} | {stats.seconds} |")

    if report.repro_command:
        lines.append("")
        lines.append(f"Reproduce with: `{report.repro_command}`")
    lines.append("")
    return "\n".join(lines)


def write_reports(report: PropertyReport, json_path: Path, md_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    md_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(report.to_dict(), indent=2, sort_keys=True, default=repr), encoding="utf-8")
    md_path.write_text(render_markdown(report), encoding="utf-8")


__all__ = ["render_markdown", "render_text", "write_reports"]
