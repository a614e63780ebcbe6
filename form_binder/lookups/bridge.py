"""Run coroutines from synchronous callers on a dedicated event-loop thread."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any, TypeVar


if TYPE_CHECKING:
    from collections.abc import Coroutine
    from concurrent.futures import Future


_T = TypeVar("_T")


class AsyncLoopBridge:
    """Bridge sync calls to async record-store operations on a dedicated loop.

    Safe to call from several threads at once; every coroutine runs on the
    bridge's own loop.
    """

    def __init__(self, name: str = "form-binder-lookup") -> None:
        super().__init__()
        self._loop_ready = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        _ = self._loop_ready.wait()

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._loop_ready.set()
        loop.run_forever()
        loop.close()

    @property
    def running(self) -> bool:
        return self._loop is not None and self._loop.is_running()

    def run(self, coroutine: Coroutine[Any, Any, _T], timeout: float | None = None) -> _T:
        """Run coroutine on the bridge loop and block for its result."""
        if self._loop is None or self._loop.is_closed():
            coroutine.close()
            msg = "lookup bridge loop is not running"
            raise RuntimeError(msg)
        future: Future[_T] = asyncio.run_coroutine_threadsafe(coroutine, self._loop)
        return future.result(timeout)

    def close(self) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        _ = self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
