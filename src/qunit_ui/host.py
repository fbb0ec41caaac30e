"""Suite/test tree and the scheduler that executes it.

This is the narrow host-runner surface the interfaces build on: suites with
hooks and an event channel, leaf tests taking an optional ``done`` callback,
and an asyncio scheduler that runs the tree and returns one result per test.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable

Hook = Callable[[], Any]
Done = Callable[..., None]

DEFAULT_TIMEOUT_MS = 2000


def accepts_argument(fn: Callable) -> bool:
    """Whether ``fn`` declares at least one positional parameter."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        )
        for p in params
    )


class Test:
    """A leaf test. ``fn`` takes no arguments, or a single ``done`` callback."""

    __test__ = False

    def __init__(self, title: str, fn: Callable, is_async: bool | None = None):
        self.title = title
        self.fn = fn
        self.is_async = accepts_argument(fn) if is_async is None else is_async
        self.parent: Suite | None = None
        self.file: str | None = None

    def spec_file(self) -> str | None:
        if self.file is not None or self.parent is None:
            return self.file
        return self.parent.spec_file()

    def full_title(self) -> str:
        if self.parent is None:
            return self.title
        prefix = self.parent.full_title()
        return f"{prefix} {self.title}" if prefix else self.title

    def __repr__(self) -> str:
        return f"Test({self.full_title()!r})"


class Suite:
    def __init__(self, title: str = "", parent: Suite | None = None):
        self.title = title
        self.parent = parent
        self.suites: list[Suite] = []
        self.tests: list[Test] = []
        self.hooks: dict[str, list[Hook]] = {
            "before_all": [],
            "after_all": [],
            "before_each": [],
            "after_each": [],
        }
        self._listeners: dict[str, list[Callable]] = {}
        self.file: str | None = None

    @classmethod
    def create(cls, parent: Suite, title: str) -> Suite:
        suite = cls(title, parent)
        parent.add_suite(suite)
        return suite

    @property
    def root(self) -> bool:
        return self.parent is None

    def add_suite(self, suite: Suite) -> Suite:
        suite.parent = self
        self.suites.append(suite)
        return suite

    def add_test(self, test: Test) -> Test:
        test.parent = self
        self.tests.append(test)
        return test

    def before_all(self, fn: Hook) -> None:
        self.hooks["before_all"].append(fn)

    def after_all(self, fn: Hook) -> None:
        self.hooks["after_all"].append(fn)

    def before_each(self, fn: Hook) -> None:
        self.hooks["before_each"].append(fn)

    def after_each(self, fn: Hook) -> None:
        self.hooks["after_each"].append(fn)

    def on(self, event: str, fn: Callable) -> None:
        self._listeners.setdefault(event, []).append(fn)

    def emit(self, event: str, *args: Any) -> None:
        for fn in list(self._listeners.get(event, [])):
            fn(*args)

    def path(self) -> list[str]:
        """Titles from the outermost non-root suite down to this one."""
        titles: list[str] = []
        node: Suite | None = self
        while node is not None and not node.root:
            titles.append(node.title)
            node = node.parent
        return list(reversed(titles))

    def full_title(self) -> str:
        return " ".join(self.path())

    def spec_file(self) -> str | None:
        """The spec file that declared this suite, inherited from ancestors."""
        if self.file is not None or self.parent is None:
            return self.file
        return self.parent.spec_file()

    def total(self) -> int:
        return len(self.tests) + sum(s.total() for s in self.suites)

    def __repr__(self) -> str:
        return f"Suite({self.full_title()!r}, tests={len(self.tests)})"


@dataclass
class TestResult:
    __test__ = False

    title: str
    full_title: str
    suite_path: list[str]
    passed: bool
    error: str | None = None
    duration_seconds: float = 0.0
    spec_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _describe_error(exc: BaseException) -> str:
    if isinstance(exc, AssertionError):
        return str(exc) or type(exc).__name__
    return f"{type(exc).__name__}: {exc}"


class Scheduler:
    """Runs a suite tree on one event loop, depth first."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        logger: logging.Logger | None = None,
        on_result: Callable[[TestResult], None] | None = None,
    ):
        self.timeout_ms = timeout_ms
        self.logger = logger or logging.getLogger("qunit_ui")
        self.on_result = on_result

    def run(self, root: Suite) -> list[TestResult]:
        return asyncio.run(self.run_async(root))

    async def run_async(self, root: Suite) -> list[TestResult]:
        results: list[TestResult] = []
        await self._run_suite(root, results)
        return results

    async def _run_suite(self, suite: Suite, results: list[TestResult]) -> None:
        if suite.total() == 0:
            return
        self.logger.debug(f"Entering suite '{suite.full_title() or '<root>'}'")

        try:
            for hook in suite.hooks["before_all"]:
                hook()
        except Exception as e:
            self.logger.error(f"'before all' hook failed in '{suite.full_title()}': {e}")
            self._fail_all(suite, f'"before all" hook: {_describe_error(e)}', results)
            return

        for test in suite.tests:
            self._emit(await self._run_test(test), results)

        for child in suite.suites:
            await self._run_suite(child, results)

        for hook in suite.hooks["after_all"]:
            try:
                hook()
            except Exception as e:
                self.logger.error(
                    f"'after all' hook failed in '{suite.full_title()}': {e}"
                )
                self._emit(
                    TestResult(
                        title='"after all" hook',
                        full_title=f'{suite.full_title()} "after all" hook'.strip(),
                        suite_path=suite.path(),
                        passed=False,
                        error=_describe_error(e),
                        spec_file=suite.spec_file(),
                    ),
                    results,
                )

    def _emit(self, result: TestResult, results: list[TestResult]) -> None:
        results.append(result)
        if self.on_result is not None:
            self.on_result(result)

    def _fail_all(self, suite: Suite, error: str, results: list[TestResult]) -> None:
        for test in suite.tests:
            self._emit(self._result(test, False, error, 0.0), results)
        for child in suite.suites:
            self._fail_all(child, error, results)

    def _chain(self, test: Test) -> list[Suite]:
        chain: list[Suite] = []
        node = test.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        return list(reversed(chain))

    def _result(
        self, test: Test, passed: bool, error: str | None, duration: float
    ) -> TestResult:
        assert test.parent is not None
        return TestResult(
            title=test.title,
            full_title=test.full_title(),
            suite_path=test.parent.path(),
            passed=passed,
            error=error,
            duration_seconds=round(duration, 4),
            spec_file=test.spec_file(),
        )

    async def _run_test(self, test: Test) -> TestResult:
        chain = self._chain(test)
        started = time.perf_counter()

        for suite in chain:
            for hook in suite.hooks["before_each"]:
                try:
                    hook()
                except Exception as e:
                    self.logger.debug(f"'before each' hook failed for '{test.full_title()}': {e}")
                    return self._result(
                        test,
                        False,
                        f'"before each" hook: {_describe_error(e)}',
                        time.perf_counter() - started,
                    )

        error: str | None = None
        try:
            if test.is_async:
                await self._call_async(test)
            else:
                test.fn()
        except Exception as e:
            error = _describe_error(e)

        for suite in reversed(chain):
            for hook in suite.hooks["after_each"]:
                try:
                    hook()
                except Exception as e:
                    self.logger.debug(f"'after each' hook failed for '{test.full_title()}': {e}")
                    if error is None:
                        error = f'"after each" hook: {_describe_error(e)}'

        duration = time.perf_counter() - started
        status = "passed" if error is None else "failed"
        self.logger.debug(f"Test '{test.full_title()}' {status} in {duration:.3f}s")
        return self._result(test, error is None, error, duration)

    async def _call_async(self, test: Test) -> None:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def done(err: BaseException | None = None) -> None:
            if future.done():
                self.logger.warning(f"done() called multiple times in '{test.full_title()}'")
                return
            if err is not None:
                future.set_exception(err)
            else:
                future.set_result(None)

        test.fn(done)
        try:
            await asyncio.wait_for(future, timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise TimeoutError(f"Timeout of {self.timeout_ms}ms exceeded") from None
