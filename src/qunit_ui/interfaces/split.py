"""Split each QUnit test into one host test per assertion.

The QUnit test becomes a host suite. Its body runs while the spec file is
being loaded, and every assertion it makes adds a leaf test to that suite,
so a test with six assertions reports six results.
"""

from __future__ import annotations

from typing import Any, ClassVar

from qunit_ui.assertions.base import AssertionCall, AssertionRecord, TestContext
from qunit_ui.assertions.library import describe_failure
from qunit_ui.errors import AssertionFailure, DeclarationError
from qunit_ui.host import Suite, Test
from qunit_ui.interfaces.base import Body, BaseInterface, call_hook


class SplitInterface(BaseInterface):
    name = "qunit-split"

    # captured per call; anything else is captured per push
    named_captures: ClassVar[tuple[str, ...]] = ("ok", "deepEqual")

    def add_test(
        self, title: str, expected: int | None, body: Body, asynchronous: bool
    ) -> Suite:
        suite = Suite.create(self.current_suite, title)
        table = self.library.assert_
        options = self.options
        self.stops = 1 if asynchronous else 0

        def on_record(
            record: AssertionRecord, call: AssertionCall | None, ordinal: int
        ) -> None:
            suite.add_test(self.make_leaf(record, call, ordinal))

        died = False
        with self.library.context(TestContext(expected=expected)) as ctx:
            with self.library.intercept(on_record, named=self.named_captures):
                try:
                    if options is not None and options.setup is not None:
                        call_hook(options.setup, table)
                    try:
                        call_hook(body, table)
                    finally:
                        if options is not None and options.teardown is not None:
                            call_hook(options.teardown, table)
                except Exception as e:
                    died = True
                    self._add_died(suite, DeclarationError(title, e))

        if self.stops:
            self.logger.warning(
                f"'{suite.full_title()}' finished with {self.stops} unmatched stop() call(s)"
            )
            self.stops = 0
        if not died:
            self.after_body(suite, ctx)
        self.logger.debug(
            f"Registered {len(suite.tests)} assertion test(s) for '{suite.full_title()}'"
        )
        return suite

    def make_leaf(
        self, record: AssertionRecord, call: AssertionCall | None, ordinal: int
    ) -> Test:
        def run() -> None:
            if not record.result:
                raise AssertionFailure(describe_failure(record), record)

        return Test(leaf_title(record), run)

    def after_body(self, suite: Suite, ctx: TestContext) -> None:
        """Hook for checks that need the complete ledger."""

    def _add_died(self, suite: Suite, error: DeclarationError) -> None:
        self.logger.warning(f"{error}")

        def run() -> Any:
            raise error

        suite.add_test(Test("Died on test", run))


def leaf_title(record: AssertionRecord) -> str:
    return record.message or record.source
