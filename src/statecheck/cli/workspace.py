"""State directory and report path helpers shared by the CLI commands."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from statecheck.constants import REPORTS_DIR, STATE_DIR
from statecheck.report import PropertyReport, write_reports


@dataclass(slots=True)
class _StatePaths:
    root: Path
    state: Path
    reports: Path


def _state_paths(project_root: Path) -> _StatePaths:
    return _StatePaths(
        root=project_root,
        state=project_root / STATE_DIR,
        reports=project_root / REPORTS_DIR,
    )


def latest_report_path(project_root: Path, *, as_json: bool) -> Path:
    paths = _state_paths(project_root)
    return paths.reports / ("latest.json" if as_json else "latest.md")


def save_latest_report(project_root: Path, report: PropertyReport) -> tuple[Path, Path]:
    json_path = latest_report_path(project_root, as_json=True)
    md_path = latest_report_path(project_root, as_json=False)
    write_reports(report, json_path=json_path, md_path=md_path)
    return json_path, md_path


def read_latest_report(project_root: Path, *, as_json: bool) -> str:
    path = latest_report_path(project_root, as_json=as_json)
    if not path.exists():
        raise FileNotFoundError(f"No report found at {path}")
    return path.read_text(encoding="utf-8")


__all__ = ["latest_report_path", "read_latest_report", "save_latest_report"]
