from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path

import typer

from statecheck.cli.workspace import latest_report_path, read_latest_report, save_latest_report
from statecheck.config import StatecheckConfig, load_config
from statecheck.constants import DEFAULT_CONFIG_FILE, EXIT_INTERNAL_ERROR, EXIT_PROPERTY_FAILED, EXIT_SUCCESS
from statecheck.driver import check_property, replay
from statecheck.loader import load_target
from statecheck.log import configure_logging
from statecheck.report import render_text


def _version_callback(value: bool) -> None:
    if value:
        from statecheck import __version__

        typer.echo(f"statecheck {__version__}")
        raise typer.Exit()


app = typer.Typer(add_completion=False, help="Model-based property testing for stateful systems")


@app.callback(invoke_without_command=True)
def _main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit."
    ),
) -> None:
    pass


def _fail(message: str) -> typer.Exit:
    typer.echo(f"ERROR: {message}", err=True)
    return typer.Exit(EXIT_INTERNAL_ERROR)


def _load_config(project_root: Path, config_path: Path | None) -> StatecheckConfig:
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return load_config(config_path)
    return load_config(project_root / DEFAULT_CONFIG_FILE)


@app.command()
def run(
    target: str | None = typer.Argument(None, help="Property as module:attribute (defaults to config target)"),
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    config_path: Path | None = typer.Option(None, "--config", help="Config file (default: statecheck.yaml)"),
    num_runs: int | None = typer.Option(None, "--num-runs", min=0, help="Number of generated runs"),
    seed: int | None = typer.Option(None, "--seed", min=0, help="Base random seed"),
    max_commands: int | None = typer.Option(None, "--max-commands", min=0, help="Maximum commands per run"),
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Runs executed concurrently"),
    verbose: bool = typer.Option(False, "--verbose", help="Log every run"),
) -> None:
    """Check a property and write the latest report."""
    project_root = project_root.resolve()
    try:
        config = _load_config(project_root, config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(str(exc)) from exc

    overrides = {
        key: value
        for key, value in {
            "num_runs": num_runs,
            "seed": seed,
            "max_commands": max_commands,
            "concurrency": concurrency,
        }.items()
        if value is not None
    }
    config = replace(config, verbose=config.verbose or verbose, **overrides)
    configure_logging(level="INFO" if config.verbose else "WARNING")

    resolved_target = target or config.target
    if not resolved_target:
        raise _fail("No target provided. Pass module:attribute or set `target` in statecheck.yaml.")

    try:
        spec = load_target(resolved_target, project_root)
        report = asyncio.run(check_property(spec, config.to_settings()))
    except Exception as exc:
        raise _fail(str(exc)) from exc

    save_latest_report(project_root, report)
    typer.echo(render_text(report))
    typer.echo(f"Latest report: {latest_report_path(project_root, as_json=False)}")
    raise typer.Exit(EXIT_SUCCESS if report.passed else EXIT_PROPERTY_FAILED)


@app.command(name="replay")
def replay_command(
    target: str = typer.Argument(..., help="Property as module:attribute"),
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    seed: int | None = typer.Option(None, "--seed", min=0, help="Base seed of the failing check"),
    run_index: int | None = typer.Option(None, "--run-index", min=0, help="Index of the failing generated run"),
    example: int | None = typer.Option(None, "--example", min=0, help="Index of the failing explicit example"),
    path: str = typer.Option("", "--path", help="Replay path from the report (prefix:shrink steps)"),
    max_commands: int | None = typer.Option(None, "--max-commands", min=0, help="Max commands used by the check"),
) -> None:
    """Re-execute one recorded counterexample deterministically."""
    configure_logging(level="WARNING")
    try:
        spec = load_target(target, project_root.resolve())
        result = asyncio.run(
            replay(
                spec,
                seed=seed,
                run_index=run_index,
                example_index=example,
                path=path,
                max_commands=max_commands,
            )
        )
    except Exception as exc:
        raise _fail(str(exc)) from exc

    typer.echo("Commands:")
    for index, command in enumerate(result.commands):
        typer.echo(f"  {index}. {command}")
    failure = result.outcome.failure
    if failure is None:
        typer.echo("Replay passed: the sequence no longer fails.")
        raise typer.Exit(EXIT_SUCCESS)

    typer.echo(f"Replay failed at step {failure.step_index} ({failure.command}): {failure.message}")
    raise typer.Exit(EXIT_PROPERTY_FAILED)


@app.command()
def report(
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of Markdown"),
) -> None:
    """Print the latest report."""
    try:
        content = read_latest_report(project_root.resolve(), as_json=as_json)
    except FileNotFoundError as exc:
        typer.echo(f"ERROR: {exc}. Run `statecheck run` first to generate a report.", err=True)
        raise typer.Exit(EXIT_INTERNAL_ERROR) from exc

    if as_json:
        parsed = json.loads(content)
        typer.echo(json.dumps(parsed, indent=2, sort_keys=True))
    else:
        typer.echo(content)
    typer.echo(f"Source: {latest_report_path(project_root.resolve(), as_json=as_json)}")
    raise typer.Exit(EXIT_SUCCESS)
