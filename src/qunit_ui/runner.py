from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from qunit_ui.assertions.library import AssertionLibrary
from qunit_ui.config import RunConfig
from qunit_ui.host import Scheduler, Suite, TestResult
from qunit_ui.interfaces import get_interface
from qunit_ui.loader import collect_spec_paths, load_spec
from qunit_ui.verbose import setup_logger


class Runner:
    """Loads QUnit-style spec files through an interface and runs them."""

    def __init__(
        self,
        config: RunConfig,
        output_dir: Path,
        verbose: bool = False,
    ):
        self.config = config
        self.output_dir = output_dir
        self.verbose = verbose
        self.results: list[TestResult] = []
        self._total = 0

    def execute(self) -> Path:
        """Load and run every spec file. Returns the run directory."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        debug_file = run_dir / "debug.log"
        interface_name = self.config.interface.value
        logger = setup_logger(
            debug_file,
            verbose=self.verbose,
            logger_name="qunit_ui_main",
            label=f"{run_id} {interface_name}",
        )
        logger.debug("Starting run")

        root = Suite()
        get_interface(
            interface_name, root, library=AssertionLibrary(), logger=logger
        )

        spec_paths = collect_spec_paths(self.config.specs)
        for path in spec_paths:
            logger.debug(f"Loading spec file {path}")
            try:
                load_spec(path, root)
            except Exception as e:
                logger.error(f"Spec file '{path}' failed to load: {e}")
                raise

        self._total = root.total()
        print(
            f"Running {self._total} test(s) from {len(spec_paths)} spec file(s) "
            f"with the '{interface_name}' interface..."
        )

        scheduler = Scheduler(
            timeout_ms=self.config.timeout_ms,
            logger=logger,
            on_result=self._print_progress,
        )
        self.results = scheduler.run(root)

        summary = self.summary()
        logger.debug(
            f"Run finished: {summary['passed']}/{summary['total']} tests passed"
        )

        self._write_results(run_dir, spec_paths)
        return run_dir

    def summary(self) -> dict[str, int]:
        passed = sum(1 for r in self.results if r.passed)
        return {
            "total": len(self.results),
            "passed": passed,
            "failed": len(self.results) - passed,
        }

    def _print_progress(self, result: TestResult) -> None:
        index = len(self.results) + 1
        self.results.append(result)
        status = "PASS" if result.passed else "FAIL"
        total = max(self._total, index)
        print(f"  [{index}/{total}] {status}  {result.full_title}")
        if not result.passed and result.error:
            print(f"        {result.error}")

    def _write_results(self, run_dir: Path, spec_paths: list[Path]) -> None:
        """Write junit.xml and meta.yaml to the run directory."""
        from qunit_ui.reporting.junit import write_junit

        write_junit(run_dir, self.results)

        try:
            import importlib.metadata

            qunit_ui_version = importlib.metadata.version("qunit-ui")
        except Exception:
            qunit_ui_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "interface": self.config.interface.value,
            "timeout_ms": self.config.timeout_ms,
            "specs": [str(p) for p in spec_paths],
            "summary": self.summary(),
            "qunit_ui_version": qunit_ui_version,
        }

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
