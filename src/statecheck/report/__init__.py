from statecheck.report.renderers import render_markdown, render_text, write_reports
from statecheck.report.schema import Counterexample, PropertyReport, ShrinkStats

__all__ = [
    "Counterexample",
    "PropertyReport",
    "ShrinkStats",
    "render_markdown",
    "render_text",
    "write_reports",
]
