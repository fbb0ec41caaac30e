"""Per-assertion host tests driven by the assertion ledger.

Only ``push`` is intercepted, so custom assertions registered on
``QUnit.assert_`` are captured exactly like the built-in ones. Each leaf test
replays the original assertion call against a fresh ledger when it runs.
"""

from __future__ import annotations

from typing import ClassVar

from qunit_ui.assertions.base import AssertionCall, AssertionRecord, TestContext
from qunit_ui.assertions.library import describe_failure
from qunit_ui.errors import AssertionCountMismatch, AssertionFailure
from qunit_ui.host import Suite, Test
from qunit_ui.interfaces.split import SplitInterface, leaf_title


class LedgerInterface(SplitInterface):
    name = "qunit-ledger"

    named_captures: ClassVar[tuple[str, ...]] = ()

    def make_leaf(
        self, record: AssertionRecord, call: AssertionCall | None, ordinal: int
    ) -> Test:
        library = self.library
        title = leaf_title(record)
        # bound now; the table may be reassigned before the leaf runs
        fn = library.assert_.raw(call.name) if call is not None else None

        def run() -> None:
            with library.context() as ctx:
                if call is not None:
                    library.invoke(call, fn)
                else:
                    library.record(
                        record.result, record.actual, record.expected, record.message
                    )
            if ordinal >= len(ctx.assertions):
                raise AssertionFailure(
                    f"{title}: assertion was not recorded again when replayed"
                )
            entry = ctx.assertions[ordinal]
            if not entry.result:
                raise AssertionFailure(describe_failure(entry), entry)

        return Test(title, run)

    def after_body(self, suite: Suite, ctx: TestContext) -> None:
        if ctx.expected is None:
            return
        seen = len(ctx.assertions)
        if seen == ctx.expected:
            return
        mismatch = AssertionCountMismatch(
            ctx.expected,
            seen,
            message=f"Expected {ctx.expected} assertions, but {seen} were run",
        )
        self.logger.warning(f"'{suite.full_title()}': {mismatch}")

        def run() -> None:
            raise mismatch

        suite.add_test(Test("Expected assertion count", run))
