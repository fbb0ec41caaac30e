"""Deferred completion for tests that call stop()/start()."""

from __future__ import annotations

import asyncio
from typing import Callable

from qunit_ui.errors import DeferralError


class Deferral:
    """Counts outstanding stop() calls and settles once they are all released.

    Reaching zero does not settle right away: a zero-delay check is scheduled
    on the running loop, and the deferral settles only if the count is still
    zero when it runs. Several start() calls arriving back to back in one
    loop turn therefore settle once, after the last of them.

    The implicit hold wrapped around a test body is tracked apart from the
    user's stop() calls, so a stray start() in the body is reported at the
    call site instead of silently cancelling the hold.
    """

    def __init__(
        self,
        on_settle: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._on_settle = on_settle
        self._loop = loop
        self.count = 0
        self._held = False
        self._handle: asyncio.Handle | None = None
        self._settled = False
        self._cancelled = False

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def pending(self) -> bool:
        """Whether a settle check is scheduled."""
        return self._handle is not None

    def hold(self) -> None:
        self._held = True

    def release(self) -> None:
        self._held = False
        self._maybe_schedule()

    def stop(self) -> None:
        self.count += 1

    def start(self) -> None:
        if self.count <= 0:
            raise DeferralError("cannot call start() when not stopped")
        self.count -= 1
        self._maybe_schedule()

    def settle(self) -> None:
        """Fire the settle callback. Only the first call has any effect."""
        if self._settled or self._cancelled:
            return
        self._settled = True
        self._drop_handle()
        self._on_settle()

    def cancel(self) -> None:
        self._cancelled = True
        self._drop_handle()

    def _maybe_schedule(self) -> None:
        if self.count or self._held or self._handle is not None:
            return
        if self._settled or self._cancelled:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_soon(self._check)

    def _check(self) -> None:
        self._handle = None
        if self.count == 0 and not self._held:
            self.settle()

    def _drop_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
