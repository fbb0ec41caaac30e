from __future__ import annotations

import logging

from qunit_ui.assertions.library import AssertionLibrary
from qunit_ui.host import Suite
from qunit_ui.interfaces.base import BaseInterface, ModuleOptions
from qunit_ui.interfaces.deferred import DeferredInterface, TestEnvironment
from qunit_ui.interfaces.ledger import LedgerInterface
from qunit_ui.interfaces.split import SplitInterface

_INTERFACES: dict[str, type[BaseInterface]] = {
    "qunit": DeferredInterface,
    "qunit-split": SplitInterface,
    "qunit-ledger": LedgerInterface,
}


def available_interfaces() -> list[str]:
    return sorted(_INTERFACES)


def get_interface(
    interface_name: str,
    root: Suite,
    library: AssertionLibrary | None = None,
    logger: logging.Logger | None = None,
) -> BaseInterface:
    cls = _INTERFACES.get(interface_name)
    if cls is None:
        raise ValueError(
            f"Unknown interface: {interface_name!r}. "
            f"Available: {', '.join(available_interfaces())}"
        )
    return cls(root, library=library, logger=logger)


__all__ = [
    "BaseInterface",
    "DeferredInterface",
    "LedgerInterface",
    "ModuleOptions",
    "SplitInterface",
    "TestEnvironment",
    "available_interfaces",
    "get_interface",
]
