from __future__ import annotations

from pathlib import Path

import typer

from qunit_ui.config import InterfaceType

app = typer.Typer(name="qunit-ui", help="Run QUnit-style spec files")


@app.command()
def run(
    specs: list[str] | None = typer.Argument(
        None, help="Spec files, directories or glob patterns"
    ),
    config: str | None = typer.Option(
        None, "--config", "-c", help="Path to run YAML config"
    ),
    interface: InterfaceType | None = typer.Option(
        None, "--interface", "-i", help="Interface used to load spec files"
    ),
    timeout: int | None = typer.Option(
        None, "--timeout", min=1, help="Per-test timeout in milliseconds"
    ),
    output_dir: str = typer.Option("runs", help="Output directory for run results"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    open_report: bool = typer.Option(
        False, "--open", help="Open report.html in browser after run"
    ),
):
    """Run spec files and write junit.xml and report.html."""
    from qunit_ui.config import RunConfig, load_config
    from qunit_ui.errors import QUnitUIError
    from qunit_ui.reporting.junit import generate_report
    from qunit_ui.runner import Runner

    if config is not None:
        config_path = Path(config)
        if not config_path.exists():
            typer.echo(f"Error: config file not found: {config}", err=True)
            raise typer.Exit(1)
        try:
            run_config = load_config(config_path)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    elif specs:
        run_config = RunConfig(specs=specs)
    else:
        typer.echo("Error: pass spec files or --config", err=True)
        raise typer.Exit(1)

    # Command line arguments override the config file
    if specs and config is not None:
        run_config.specs = list(specs)
    if interface is not None:
        run_config.interface = interface
    if timeout is not None:
        run_config.timeout_ms = timeout

    runner = Runner(config=run_config, output_dir=Path(output_dir), verbose=verbose)

    try:
        run_dir = runner.execute()
    except (ValueError, FileNotFoundError, QUnitUIError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(run_dir)

    summary = runner.summary()
    typer.echo(
        f"{summary['passed']} passed, {summary['failed']} failed, {summary['total']} total"
    )
    typer.echo(f"Run complete: {run_dir}")
    typer.echo(f"Report: {report_path}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    if open_report:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())

    if summary["failed"]:
        raise typer.Exit(1)


@app.command()
def report(
    run_dir: str = typer.Argument(help="Path to run output directory"),
    open_report: bool = typer.Option(
        False, "--open", help="Open report.html in browser after generating"
    ),
):
    """Regenerate HTML report from a previous run."""
    from qunit_ui.reporting.junit import generate_report

    run_path = Path(run_dir)
    if not run_path.exists() or not (run_path / "junit.xml").exists():
        typer.echo(f"Error: not a valid run directory: {run_dir}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(run_path)
    typer.echo(f"Report generated: {report_path}")

    if open_report:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())


@app.command()
def interfaces():
    """List the available interfaces."""
    from qunit_ui.interfaces import available_interfaces

    for name in available_interfaces():
        typer.echo(name)


@app.command()
def init(
    dir: str = typer.Option(
        "qunit-ui", "--dir", help="Directory to initialize the spec project in"
    ),
):
    """Initialize a new spec project with an example config and spec file."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    config_file = project_dir / "qunit-ui.yaml"
    if config_file.exists():
        typer.echo(f"qunit-ui.yaml already exists in {dir}, skipping.")
        return

    config_file.write_text("""\
interface: qunit-ledger
timeout_ms: 2000
specs:
  - specs/*_spec.py
""")

    specs_dir = project_dir / "specs"
    specs_dir.mkdir(parents=True, exist_ok=True)
    (specs_dir / "example_spec.py").write_text('''\
module("example")


def is_even(value, message=None):
    QUnit.push(value % 2 == 0, value % 2, 0, message)


QUnit.assert_.isEven = is_even


@test("arithmetic", 3)
def arithmetic(assert_):
    assert_.ok(1 + 1 == 2, "addition works")
    assert_.deepEqual({"a": [1, 2]}, {"a": [1, 2]}, "dicts compare deeply")
    assert_.isEven(4, "4 is even")
''')

    typer.echo(f"Initialized spec project in {dir}:")
    typer.echo("  qunit-ui.yaml          - example run config")
    typer.echo("  specs/example_spec.py  - example spec file")
