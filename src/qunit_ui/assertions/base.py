"""Base data structures for the assertion library."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AssertionRecord:
    """One recorded comparison.

    Attributes:
        result: Whether the comparison passed.
        actual: The value under test.
        expected: The value it was compared against.
        message: Optional human-readable description supplied by the caller.
        source: Name of the tracked assertion that produced the record
            (e.g. "deepEqual"), or "push" for a raw push.
    """

    result: bool
    actual: Any
    expected: Any
    message: str | None = None
    source: str = "push"


@dataclass
class TestContext:
    """Per-test bookkeeping: the assertions ledger and the expected count."""

    __test__ = False

    assertions: list[AssertionRecord] = field(default_factory=list)
    expected: int | None = None


@dataclass(frozen=True)
class AssertionCall:
    """A call made through the assertion table, captured for replay."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
