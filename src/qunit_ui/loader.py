"""Locate and evaluate QUnit-style spec files."""

from __future__ import annotations

import glob
from pathlib import Path
from typing import Any, Iterable

from qunit_ui.errors import SpecLoadError
from qunit_ui.host import Suite

SPEC_PATTERNS = ("*_spec.py", "test_*.py")


def collect_spec_paths(patterns: Iterable[str | Path]) -> list[Path]:
    """Expand files, directories and glob patterns into spec file paths.

    Directories contribute the files matching ``SPEC_PATTERNS``. Duplicates
    are dropped; order follows the patterns, sorted within each.
    """
    found: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        pattern = str(pattern)
        path = Path(pattern)
        if path.is_dir():
            matches = sorted(
                p for spec_glob in SPEC_PATTERNS for p in path.rglob(spec_glob)
            )
        elif path.is_file():
            matches = [path]
        else:
            matches = sorted(Path(p) for p in glob.glob(pattern, recursive=True))
        if not matches:
            raise FileNotFoundError(f"No spec files match {pattern!r}")
        for match in matches:
            resolved = match.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(match)
    return found


def load_spec(path: Path, root: Suite) -> dict[str, Any]:
    """Evaluate one spec file against ``root`` and return its namespace."""
    path = Path(path)
    source = path.read_text(encoding="utf-8")
    try:
        code = compile(source, str(path), "exec")
    except SyntaxError as e:
        raise SpecLoadError(str(path), e) from e
    namespace: dict[str, Any] = {"__name__": path.stem, "__file__": str(path)}
    suites_before, tests_before = len(root.suites), len(root.tests)
    root.emit("pre-require", namespace, path)
    try:
        exec(code, namespace)
    except Exception as e:
        raise SpecLoadError(str(path), e) from e
    for node in [*root.suites[suites_before:], *root.tests[tests_before:]]:
        node.file = str(path)
    return namespace
