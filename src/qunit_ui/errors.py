"""Exception types raised by the QUnit-style interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qunit_ui.assertions.base import AssertionRecord


class QUnitUIError(Exception):
    """Base class for errors raised by qunit-ui itself."""


class AssertionFailure(AssertionError):
    """A tracked comparison evaluated false."""

    def __init__(self, message: str, record: AssertionRecord | None = None):
        super().__init__(message)
        self.record = record


class AssertionCountMismatch(AssertionFailure):
    """The number of assertions run differs from the one declared with expect()."""

    def __init__(self, expected: int, actual: int, message: str | None = None):
        super().__init__(
            message or f"Expected {expected} assertions but saw {actual}"
        )
        self.expected = expected
        self.actual = actual


class DeferralError(QUnitUIError):
    """start() was called without an outstanding stop()."""


class DeclarationError(QUnitUIError):
    """A test body raised while its assertions were being registered."""

    def __init__(self, title: str, cause: BaseException):
        super().__init__(f"Died on test {title!r}: {type(cause).__name__}: {cause}")
        self.title = title
        self.cause = cause


class SpecLoadError(QUnitUIError):
    """A spec file could not be evaluated."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to load {path}: {type(cause).__name__}: {cause}")
        self.path = path
        self.cause = cause
