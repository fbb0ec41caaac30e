"""Assertion library used by QUnit-style spec files."""

from qunit_ui.assertions.base import AssertionCall, AssertionRecord, TestContext
from qunit_ui.assertions.library import (
    BUILTIN_ASSERTIONS,
    AssertionLibrary,
    AssertTable,
    deep_equal,
    describe_failure,
    format_value,
)

__all__ = [
    "BUILTIN_ASSERTIONS",
    "AssertionCall",
    "AssertionLibrary",
    "AssertionRecord",
    "AssertTable",
    "TestContext",
    "deep_equal",
    "describe_failure",
    "format_value",
]
