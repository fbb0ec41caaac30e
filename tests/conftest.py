"""Pytest configuration and fixtures."""

import logging
import textwrap
from pathlib import Path
from types import SimpleNamespace

import pytest

from qunit_ui.assertions.library import AssertionLibrary
from qunit_ui.host import Scheduler, Suite
from qunit_ui.interfaces import get_interface
from qunit_ui.loader import load_spec


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up qunit_ui loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("qunit_ui")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture
def library():
    return AssertionLibrary()


@pytest.fixture
def run_spec(tmp_path):
    """Write a spec file, load it through an interface and run the tree.

    Returns a namespace with ``results``, ``namespace`` (the spec file's
    globals), ``root`` and ``interface``.
    """

    def _run(source, interface="qunit-ledger", timeout_ms=500, run=True):
        path = tmp_path / "inline_spec.py"
        path.write_text(textwrap.dedent(source))
        root = Suite()
        iface = get_interface(interface, root)
        namespace = load_spec(path, root)
        results = Scheduler(timeout_ms=timeout_ms).run(root) if run else []
        return SimpleNamespace(
            results=results, namespace=namespace, root=root, interface=iface
        )

    return _run


EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def module_name_spec():
    """Source of the bundled ``module name`` example spec."""
    return (EXAMPLES_DIR / "specs" / "module_name_spec.py").read_text()
