from pathlib import Path

from typer.testing import CliRunner

from qunit_ui.cli import app

runner = CliRunner()

EXAMPLE_SPECS = Path(__file__).resolve().parents[1] / "examples" / "specs"


def _run_dir(output_dir: Path) -> Path:
    (run_dir,) = output_dir.iterdir()
    return run_dir


def test_init_creates_example_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "qunit-ui" / "qunit-ui.yaml").exists()
    assert (tmp_path / "qunit-ui" / "specs" / "example_spec.py").exists()


def test_init_with_custom_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "--dir", "my-specs"])
    assert result.exit_code == 0
    assert (tmp_path / "my-specs" / "qunit-ui.yaml").exists()


def test_init_skips_existing_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "qunit-ui").mkdir()
    (tmp_path / "qunit-ui" / "qunit-ui.yaml").write_text("specs: [x]\n")
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert "already exists" in result.output
    assert not (tmp_path / "qunit-ui" / "specs").exists()


def test_initialized_project_runs_green(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner.invoke(app, ["init"])

    result = runner.invoke(
        app, ["run", "--config", "qunit-ui/qunit-ui.yaml", "--output-dir", "runs"]
    )

    assert result.exit_code == 0, result.output
    assert "3 passed, 0 failed, 3 total" in result.output
    run_dir = _run_dir(tmp_path / "runs")
    assert (run_dir / "report.html").exists()


def test_run_with_failures_exits_nonzero(tmp_path):
    result = runner.invoke(
        app,
        [
            "run",
            str(EXAMPLE_SPECS / "module_name_spec.py"),
            "--output-dir",
            str(tmp_path / "runs"),
        ],
    )

    assert result.exit_code == 1
    assert "3 passed, 3 failed, 6 total" in result.output


def test_run_interface_option_overrides_default(tmp_path):
    result = runner.invoke(
        app,
        [
            "run",
            str(EXAMPLE_SPECS / "deferred_spec.py"),
            "--interface",
            "qunit",
            "--output-dir",
            str(tmp_path / "runs"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "3 passed, 0 failed, 3 total" in result.output


def test_run_without_specs_or_config():
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 1
    assert "pass spec files or --config" in result.output


def test_run_missing_config():
    result = runner.invoke(app, ["run", "--config", "nonexistent.yaml"])
    assert result.exit_code != 0
    assert "config file not found" in result.output


def test_run_invalid_config(tmp_path):
    config = tmp_path / "qunit-ui.yaml"
    config.write_text("interface: qunit-tap\nspecs: [a_spec.py]\n")
    result = runner.invoke(app, ["run", "--config", str(config)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_run_unmatched_specs(tmp_path):
    result = runner.invoke(
        app,
        [
            "run",
            str(tmp_path / "missing_*_spec.py"),
            "--output-dir",
            str(tmp_path / "runs"),
        ],
    )
    assert result.exit_code == 1
    assert "No spec files match" in result.output


def test_report_missing_dir():
    result = runner.invoke(app, ["report", "/tmp/nonexistent-run-dir"])
    assert result.exit_code != 0


def test_report_regenerates_html(tmp_path):
    runner.invoke(
        app,
        [
            "run",
            str(EXAMPLE_SPECS / "module_name_spec.py"),
            "--output-dir",
            str(tmp_path / "runs"),
        ],
    )
    run_dir = _run_dir(tmp_path / "runs")
    (run_dir / "report.html").unlink()

    result = runner.invoke(app, ["report", str(run_dir)])

    assert result.exit_code == 0
    assert (run_dir / "report.html").exists()


def test_interfaces_lists_every_interface():
    result = runner.invoke(app, ["interfaces"])
    assert result.exit_code == 0
    assert result.output.split() == ["qunit", "qunit-ledger", "qunit-split"]


def test_run_open_launches_browser(tmp_path, mocker):
    mock_open = mocker.patch("webbrowser.open")

    result = runner.invoke(
        app,
        [
            "run",
            str(EXAMPLE_SPECS / "deferred_spec.py"),
            "--interface",
            "qunit",
            "--output-dir",
            str(tmp_path / "runs"),
            "--open",
        ],
    )

    assert result.exit_code == 0, result.output
    mock_open.assert_called_once()
    assert mock_open.call_args.args[0].endswith("report.html")
