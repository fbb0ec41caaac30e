from __future__ import annotations

from pathlib import Path

from junitparser import TestCase, TestSuite, JUnitXml, Failure

from qunit_ui.host import TestResult

ROOT_SUITE_NAME = "(root)"


def suite_name(path: list[str]) -> str:
    return " > ".join(path) if path else ROOT_SUITE_NAME


def write_junit(run_dir: Path, results: list[TestResult]) -> Path:
    """Write junit.xml with one suite per spec file and suite path, return path."""
    xml = JUnitXml()

    grouped: dict[tuple[str | None, str], list[TestResult]] = {}
    for result in results:
        key = (result.spec_file, suite_name(result.suite_path))
        grouped.setdefault(key, []).append(result)

    for (spec_file, name), suite_results in grouped.items():
        suite = TestSuite(name)
        if spec_file is not None:
            suite.add_property("file", spec_file)
        for result in suite_results:
            case = TestCase(result.title)
            case.classname = name
            case.time = result.duration_seconds
            if not result.passed:
                case.result = Failure(result.error or "")
            suite.add_testcase(case)

        # Set time after add_testcase (add_testcase resets it via update_statistics)
        suite.time = round(sum(r.duration_seconds for r in suite_results), 4)

        # Use append (not +=) to preserve time
        xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def generate_report(run_dir: Path) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    import yaml
    from jinja2 import Environment, FileSystemLoader

    junit_path = run_dir / "junit.xml"
    report_path = run_dir / "report.html"

    meta: dict = {}
    meta_path = run_dir / "meta.yaml"
    if meta_path.exists():
        meta = yaml.safe_load(meta_path.read_text()) or {}

    xml = JUnitXml.fromfile(str(junit_path))

    suites = []
    for suite in xml:
        cases = []
        for case in suite:
            result = None
            if case.result:
                result = {
                    "status": type(case.result[0]).__name__,
                    "message": case.result[0].message or "",
                }
            cases.append({"name": case.name, "time": case.time, "result": result})
        properties = {p.name: p.value for p in suite.properties()}
        suites.append(
            {
                "name": suite.name,
                "file": properties.get("file"),
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "time": suite.time,
                "cases": cases,
            }
        )

    total_tests = sum(s["tests"] for s in suites)
    total_failures = sum(s["failures"] for s in suites)
    total_errors = sum(s["errors"] for s in suites)

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        suites=suites,
        total_tests=total_tests,
        total_failures=total_failures,
        total_errors=total_errors,
        total_passed=total_tests - total_failures - total_errors,
        run_dir=str(run_dir),
        meta=meta,
    )
    report_path.write_text(html, encoding="utf-8")
    return report_path
