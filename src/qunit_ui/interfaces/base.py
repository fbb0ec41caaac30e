from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, ConfigDict

from qunit_ui.assertions.library import AssertionLibrary
from qunit_ui.errors import DeferralError
from qunit_ui.host import Suite, accepts_argument

Body = Callable[..., Any]


class ModuleOptions(BaseModel):
    """Options passed as the second argument of ``module()``.

    ``setup``/``teardown`` are hooks; any other key is test environment data.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    setup: Callable[..., Any] | None = None
    teardown: Callable[..., Any] | None = None

    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


def call_hook(fn: Callable[..., Any], arg: Any) -> Any:
    """Call a setup/teardown hook, passing ``arg`` only if it takes one."""
    if accepts_argument(fn):
        return fn(arg)
    return fn()


class QUnitNamespace:
    """The ``QUnit`` object visible to spec files."""

    def __init__(self, interface: BaseInterface, **bindings: Any) -> None:
        self._interface = interface
        self.__dict__.update(bindings)

    @property
    def environment(self) -> Any:
        return getattr(self._interface, "environment", None)

    def __repr__(self) -> str:
        return f"<QUnit interface={self._interface.name!r}>"


class BaseInterface(ABC):
    """Installs QUnit-style declarations into a spec file's namespace.

    The interface listens for the root suite's ``pre-require`` event and, for
    every spec file, resets the suite stack and fills the namespace with
    ``module``, ``test``, ``asyncTest``, ``expect``, ``start``, ``stop``,
    ``assert_`` and ``QUnit``.
    """

    name: ClassVar[str]

    def __init__(
        self,
        root: Suite,
        library: AssertionLibrary | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.root = root
        self.library = library or AssertionLibrary()
        self.logger = logger or logging.getLogger("qunit_ui")
        # most recently opened first; the root is always last
        self.suites: list[Suite] = [root]
        self.options: ModuleOptions | None = None
        self.stops = 0
        root.on("pre-require", self.pre_require)

    @property
    def current_suite(self) -> Suite:
        return self.suites[0]

    def pre_require(self, namespace: dict[str, Any], path: Path | None = None) -> None:
        self.suites = [self.root]
        self.options = None
        namespace.update(self.bindings())
        self.logger.debug(f"Installed '{self.name}' interface for {path or '<inline>'}")

    def bindings(self) -> dict[str, Any]:
        table = self.library.assert_
        qunit = QUnitNamespace(
            self,
            module=self.module,
            suite=self.module,
            test=self.test,
            asyncTest=self.async_test,
            expect=self.expect,
            start=self.start,
            stop=self.stop,
            push=self.library.push,
            assert_=table,
        )
        return {
            "module": self.module,
            "suite": self.module,
            "test": self.test,
            "asyncTest": self.async_test,
            "expect": self.expect,
            "start": self.start,
            "stop": self.stop,
            "assert_": table,
            "QUnit": qunit,
        }

    # -- declarations ------------------------------------------------------

    def module(self, title: str, options: dict[str, Any] | None = None) -> Suite:
        """Open a new suite as a sibling of the previous module."""
        if len(self.suites) > 1:
            self.suites.pop(0)
        suite = Suite.create(self.suites[0], title)
        self.suites.insert(0, suite)
        self.options = ModuleOptions.model_validate(options or {})
        self.configure_module(suite, self.options)
        return suite

    def test(self, title: str, expected: Any = None, body: Body | None = None) -> Any:
        return self._declare(title, expected, body, asynchronous=False)

    def async_test(
        self, title: str, expected: Any = None, body: Body | None = None
    ) -> Any:
        return self._declare(title, expected, body, asynchronous=True)

    def _declare(
        self, title: str, expected: Any, body: Body | None, asynchronous: bool
    ) -> Any:
        if body is None and callable(expected):
            expected, body = None, expected
        if body is None:
            # used as a decorator: @test("title", 3)
            def register(fn: Body) -> Body:
                self.add_test(title, expected, fn, asynchronous)
                return fn

            return register
        return self.add_test(title, expected, body, asynchronous)

    def expect(self, count: int) -> None:
        self.library.expect(count)

    def stop(self) -> None:
        self.stops += 1

    def start(self) -> None:
        if self.stops <= 0:
            raise DeferralError("cannot call start() when not stopped")
        self.stops -= 1

    # -- revision specific -------------------------------------------------

    def configure_module(self, suite: Suite, options: ModuleOptions) -> None:
        """Attach module options to a freshly created suite."""

    @abstractmethod
    def add_test(
        self, title: str, expected: int | None, body: Body, asynchronous: bool
    ) -> Any:
        """Translate one QUnit test declaration into host suites/tests."""
        ...
