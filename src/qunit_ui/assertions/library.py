"""The QUnit-style assertion library: comparison semantics and the ledger."""

from __future__ import annotations

import re
import reprlib
from collections.abc import Mapping, Set
from contextlib import contextmanager
from dataclasses import dataclass
from numbers import Number
from typing import Any, Callable, Iterator, TYPE_CHECKING

from qunit_ui.assertions.base import AssertionCall, AssertionRecord, TestContext

if TYPE_CHECKING:
    from qunit_ui.interception import Interception, OnRecord

BUILTIN_ASSERTIONS = (
    "ok",
    "equal",
    "notEqual",
    "deepEqual",
    "notDeepEqual",
    "strictEqual",
    "notStrictEqual",
    "throws",
)

_VERBS = {
    "ok": "be truthy",
    "equal": "equal",
    "notEqual": "not equal",
    "deepEqual": "deeply equal",
    "notDeepEqual": "not deeply equal",
    "strictEqual": "strictly equal",
    "notStrictEqual": "not strictly equal",
    "throws": "raise",
    "raises": "raise",
}

_repr = reprlib.Repr()
_repr.maxstring = 80
_repr.maxother = 80
_repr.maxlevel = 4


def format_value(value: Any) -> str:
    """Render a value for a failure message, truncating large structures."""
    return _repr.repr(value)


def describe_failure(record: AssertionRecord) -> str:
    """Human-readable description of a failed record."""
    verb = _VERBS.get(record.source, "equal")
    prefix = f"{record.message}: " if record.message else ""
    if record.source == "ok":
        return f"{prefix}expected {format_value(record.actual)} to {verb}"
    if record.source in ("throws", "raises"):
        return f"{prefix}expected block to {verb} {format_value(record.expected)}"
    return (
        f"{prefix}expected {format_value(record.actual)} to {verb} "
        f"{format_value(record.expected)}"
    )


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality that also requires matching container kinds."""
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if set(a) != set(b):
            return False
        return all(deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Set) and isinstance(b, Set):
        return a == b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, Number) and isinstance(b, Number):
        return a == b
    return type(a) is type(b) and a == b


def strict_equal(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def _builtin_assertions(push: Callable[..., AssertionRecord]) -> dict[str, Callable]:
    def ok(value, message=None):
        push(bool(value), value, True, message)

    def equal(actual, expected, message=None):
        push(actual == expected, actual, expected, message)

    def notEqual(actual, expected, message=None):
        push(actual != expected, actual, expected, message)

    def deepEqual(actual, expected, message=None):
        push(deep_equal(actual, expected), actual, expected, message)

    def notDeepEqual(actual, expected, message=None):
        push(not deep_equal(actual, expected), actual, expected, message)

    def strictEqual(actual, expected, message=None):
        push(strict_equal(actual, expected), actual, expected, message)

    def notStrictEqual(actual, expected, message=None):
        push(not strict_equal(actual, expected), actual, expected, message)

    def throws(block, expected=None, message=None):
        # throws(block, "message") is the two-argument QUnit form
        if isinstance(expected, str) and message is None:
            expected, message = None, expected
        actual = None
        result = False
        try:
            block()
        except Exception as exc:
            actual = exc
            if expected is None:
                result = True
            elif isinstance(expected, type) and issubclass(expected, BaseException):
                result = isinstance(exc, expected)
            elif isinstance(expected, re.Pattern):
                result = expected.search(str(exc)) is not None
            elif callable(expected):
                result = bool(expected(exc))
        push(result, actual, expected, message)

    return {
        "ok": ok,
        "equal": equal,
        "notEqual": notEqual,
        "deepEqual": deepEqual,
        "notDeepEqual": notDeepEqual,
        "strictEqual": strictEqual,
        "notStrictEqual": notStrictEqual,
        "throws": throws,
        "raises": throws,
    }


class AssertTable:
    """Named assertion functions.

    Assigning a callable attribute registers a custom assertion. Reading an
    attribute returns a wrapper that routes the call through the library so
    the call is tracked (name and arguments) while it runs.
    """

    def __init__(self, library: AssertionLibrary) -> None:
        object.__setattr__(self, "_library", library)
        object.__setattr__(self, "_fns", {})

    def __setattr__(self, name: str, fn: Callable) -> None:
        if not callable(fn):
            raise TypeError(f"assertion {name!r} must be callable, got {fn!r}")
        self._fns[name] = fn

    def __getattr__(self, name: str) -> Callable:
        if name.startswith("_") or name not in self._fns:
            raise AttributeError(f"no assertion named {name!r}")
        library = self._library

        def tracked(*args, **kwargs):
            return library.call(name, *args, **kwargs)

        tracked.__name__ = tracked.__qualname__ = name
        return tracked

    def __delattr__(self, name: str) -> None:
        try:
            del self._fns[name]
        except KeyError:
            raise AttributeError(f"no assertion named {name!r}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._fns

    def __dir__(self) -> list[str]:
        return sorted(self._fns)

    def names(self) -> list[str]:
        return list(self._fns)

    def raw(self, name: str) -> Callable:
        """The registered function itself, without call tracking."""
        try:
            return self._fns[name]
        except KeyError:
            raise AttributeError(f"no assertion named {name!r}") from None


@dataclass
class _Frame:
    call: AssertionCall
    pushes: int = 0


class AssertionLibrary:
    """Comparison semantics, the current test ledger, and the push entry point."""

    def __init__(self) -> None:
        self.current = TestContext()
        self.assert_ = AssertTable(self)
        self._interception: Interception | None = None
        self._frames: list[_Frame] = []
        for name, fn in _builtin_assertions(self.push).items():
            setattr(self.assert_, name, fn)

    # -- recording ---------------------------------------------------------

    def push(
        self, result: Any, actual: Any, expected: Any, message: str | None = None
    ) -> AssertionRecord:
        """Record a comparison result, through the installed interception if any."""
        interception = self._interception
        if interception is not None and interception.active:
            return interception.record(result, actual, expected, message)
        return self.record(result, actual, expected, message)

    def record(
        self, result: Any, actual: Any, expected: Any, message: str | None = None
    ) -> AssertionRecord:
        """Append a record to the current ledger, bypassing interception."""
        source = "push"
        if self._frames:
            frame = self._frames[0]
            frame.pushes += 1
            source = frame.call.name
        entry = AssertionRecord(
            result=bool(result),
            actual=actual,
            expected=expected,
            message=message,
            source=source,
        )
        self.current.assertions.append(entry)
        return entry

    def expect(self, count: int) -> None:
        self.current.expected = count

    @contextmanager
    def context(self, ctx: TestContext | None = None) -> Iterator[TestContext]:
        """Make ``ctx`` (or a fresh context) current for the duration of the block."""
        previous = self.current
        self.current = ctx if ctx is not None else TestContext()
        try:
            yield self.current
        finally:
            self.current = previous

    # -- call tracking -----------------------------------------------------

    @property
    def active_call(self) -> AssertionCall | None:
        """The outermost assertion call in flight, if any."""
        return self._frames[0].call if self._frames else None

    @property
    def pushes_in_call(self) -> int:
        return self._frames[0].pushes if self._frames else 0

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        fn = self.assert_.raw(name)
        call = AssertionCall(name=name, args=args, kwargs=dict(kwargs))
        interception = self._interception
        if not self._frames and interception is not None and interception.captures(name):
            return interception.capture_call(call, fn)
        return self.invoke(call, fn)

    def invoke(self, call: AssertionCall, fn: Callable | None = None) -> Any:
        """Run an assertion call with tracking, without consulting interception."""
        if fn is None:
            fn = self.assert_.raw(call.name)
        self._frames.append(_Frame(call))
        try:
            return fn(*call.args, **call.kwargs)
        finally:
            self._frames.pop()

    # -- interception ------------------------------------------------------

    def intercept(
        self, on_record: OnRecord, named: tuple[str, ...] | frozenset[str] = ()
    ) -> Interception:
        """Install an interception, restoring any previously installed one first."""
        from qunit_ui.interception import Interception

        if self._interception is not None:
            self._interception.restore()
        interception = Interception(self, on_record, named)
        self._interception = interception
        return interception

    @property
    def interception(self) -> Interception | None:
        return self._interception

    def _release(self, interception: Interception) -> None:
        if self._interception is interception:
            self._interception = None
