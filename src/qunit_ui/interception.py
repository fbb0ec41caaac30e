"""Explicit interception of recorded assertions.

An :class:`Interception` is the capability an interface holds while a test
body registers its assertions. It sits in front of the library's recorder,
lets the original recorder keep the ledger, and hands every record to the
interface's callback. Nothing global is replaced, so there is nothing to
re-install after delegating.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, TYPE_CHECKING

from qunit_ui.assertions.base import AssertionCall, AssertionRecord

if TYPE_CHECKING:
    from qunit_ui.assertions.library import AssertionLibrary

OnRecord = Callable[[AssertionRecord, "AssertionCall | None", int], None]


class Interception:
    def __init__(
        self,
        library: AssertionLibrary,
        on_record: OnRecord,
        named: tuple[str, ...] | frozenset[str] = (),
    ) -> None:
        self._library = library
        self._on_record = on_record
        self.named = frozenset(named)
        self._bypass_depth = 0
        self._restored = False

    @property
    def active(self) -> bool:
        return not self._restored and self._bypass_depth == 0

    @property
    def restored(self) -> bool:
        return self._restored

    def captures(self, name: str) -> bool:
        """Whether calls to the named assertion are captured whole."""
        return self.active and name in self.named

    def record(
        self, result: Any, actual: Any, expected: Any, message: str | None = None
    ) -> AssertionRecord:
        entry = self._library.record(result, actual, expected, message)
        call = self._library.active_call
        ordinal = self._library.pushes_in_call - 1 if call is not None else 0
        self._on_record(entry, call, ordinal)
        return entry

    def capture_call(self, call: AssertionCall, fn: Callable) -> Any:
        """Run a named assertion un-intercepted and report its last record."""
        ledger = self._library.current.assertions
        before = len(ledger)
        with self.bypassed():
            value = self._library.invoke(call, fn)
        produced = ledger[before:]
        if produced:
            self._on_record(produced[-1], call, len(produced) - 1)
        return value

    @contextmanager
    def bypassed(self) -> Iterator[None]:
        self._bypass_depth += 1
        try:
            yield
        finally:
            self._bypass_depth -= 1

    def restore(self) -> None:
        """Detach from the library. Safe to call more than once."""
        if self._restored:
            return
        self._restored = True
        self._library._release(self)

    def __enter__(self) -> Interception:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()
