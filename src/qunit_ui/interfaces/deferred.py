"""One host test per QUnit test, completed through stop()/start() deferral.

    module("Array")

    def test_length():
        arr = [1, 2, 3]
        ok(len(arr) == 3)

    test("#length", test_length)

    @asyncTest("#later", 1)
    def later():
        def check():
            ok(True)
            start()
        asyncio.get_running_loop().call_later(0.01, check)
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable

from qunit_ui.assertions.base import AssertionCall, AssertionRecord, TestContext
from qunit_ui.assertions.library import describe_failure
from qunit_ui.deferral import Deferral
from qunit_ui.errors import AssertionCountMismatch, AssertionFailure, DeferralError
from qunit_ui.host import Done, Suite, Test, accepts_argument
from qunit_ui.interception import Interception
from qunit_ui.interfaces.base import Body, BaseInterface, ModuleOptions, call_hook


class TestEnvironment(SimpleNamespace):
    """Per-test values copied from the enclosing module's options."""

    __test__ = False


class _RunningTest:
    """Bookkeeping for the test currently executing."""

    def __init__(
        self,
        title: str,
        expected: int | None,
        done: Done,
        teardown: Callable[[], Any] | None = None,
    ) -> None:
        self.title = title
        self.expected = expected
        self.count = 0
        self.in_body = True
        self.finished = False
        self._done = done
        self._teardown = teardown
        self.interception: Interception | None = None
        self.deferral = Deferral(self.complete)

    def on_record(
        self, record: AssertionRecord, call: AssertionCall | None, ordinal: int
    ) -> None:
        self.count += 1
        if record.result:
            return
        failure = AssertionFailure(describe_failure(record), record)
        if self.in_body:
            raise failure
        # raised from an async callback, nobody up the stack reports it
        self.fail(failure)

    def mismatch(self) -> AssertionCountMismatch | None:
        if self.expected and self.expected > 0 and self.expected != self.count:
            return AssertionCountMismatch(self.expected, self.count)
        return None

    def complete(self) -> None:
        if self.finished:
            return
        err = self.run_teardown()
        if err is not None:
            self.fail(err)
            return
        self._finish()
        self._done(self.mismatch())

    def fail(self, err: BaseException) -> None:
        if self.finished:
            return
        self.run_teardown()
        self._finish()
        self._done(err)

    def abort(self) -> None:
        """Stop without reporting; the caller reports the error."""
        if self.finished:
            return
        self.run_teardown()
        self._finish()

    def run_teardown(self) -> BaseException | None:
        """Run the module teardown once, with assertions still intercepted.

        Returns the error it raised, if any, so the caller decides whether it
        becomes the test's failure.
        """
        teardown, self._teardown = self._teardown, None
        if teardown is None:
            return None
        self.in_body = True
        try:
            teardown()
        except Exception as e:
            return e
        finally:
            self.in_body = False
        return None

    def done(self, err: BaseException | None = None) -> None:
        """The completion callback handed to async bodies."""
        if err is not None:
            self.fail(err)
        else:
            self.deferral.settle()

    def _finish(self) -> None:
        self.finished = True
        self.deferral.cancel()
        if self.interception is not None:
            self.interception.restore()


class DeferredInterface(BaseInterface):
    name = "qunit"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.running: _RunningTest | None = None
        self.environment: TestEnvironment | None = None
        self.root.after_each(self._end_test)

    def bindings(self) -> dict[str, Any]:
        context = super().bindings()
        table = self.library.assert_
        for name in table.names():
            context[name] = getattr(table, name)
        context["afterAssertion"] = self.after_assertion
        context["QUnit"].afterAssertion = self.after_assertion
        return context

    def configure_module(self, suite: Suite, options: ModuleOptions) -> None:
        extras = options.extras()

        def fresh_environment() -> None:
            self.environment = TestEnvironment(**extras)

        suite.before_each(fresh_environment)

    def _end_test(self) -> None:
        running, self.running = self.running, None
        # still pending when the scheduler gave up on it (timeout)
        if running is not None:
            running.abort()
        self.environment = None

    def after_assertion(self) -> None:
        """Count an assertion made without going through push()."""
        if self.running is not None:
            self.running.count += 1

    def expect(self, count: int) -> None:
        super().expect(count)
        if self.running is not None:
            self.running.expected = count

    def stop(self) -> None:
        if self.running is None:
            raise DeferralError("stop() called outside of a running test")
        self.running.deferral.stop()

    def start(self) -> None:
        if self.running is None:
            raise DeferralError("cannot call start() when not stopped")
        self.running.deferral.start()

    def add_test(
        self, title: str, expected: int | None, body: Body, asynchronous: bool
    ) -> Test:
        # a body taking an argument wants the done callback
        takes_done = accepts_argument(body)
        if takes_done:
            asynchronous = True
        run = self._wrap(title, expected, body, asynchronous, takes_done, self.options)
        test = Test(title, run)
        return self.current_suite.add_test(test)

    def _wrap(
        self,
        title: str,
        expected: int | None,
        body: Body,
        asynchronous: bool,
        takes_done: bool,
        options: ModuleOptions | None,
    ) -> Callable[[Done], None]:
        setup = options.setup if options is not None else None
        teardown = options.teardown if options is not None else None

        def module_teardown() -> None:
            call_hook(teardown, self.environment)

        def run(done: Done) -> None:
            running = _RunningTest(
                title,
                expected,
                done,
                teardown=module_teardown if teardown is not None else None,
            )
            self.running = running
            if self.environment is None:
                self.environment = TestEnvironment()
            self.library.current = TestContext(expected=expected)
            running.interception = self.library.intercept(running.on_record)

            running.deferral.hold()
            if asynchronous:
                running.deferral.stop()
            try:
                if setup is not None:
                    call_hook(setup, self.environment)
                if takes_done:
                    body(running.done)
                else:
                    body()
            except BaseException:
                running.abort()
                raise
            running.in_body = False
            running.deferral.release()

        run.__name__ = getattr(body, "__name__", "run")
        return run
