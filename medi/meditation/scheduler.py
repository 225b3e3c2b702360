"""Cancelable periodic tick sources driving the session timer."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickHandle:
    def __init__(self, interval_sec: float, callback: TickCallback) -> None:
        self.interval_sec = interval_sec
        self.callback = callback
        self.cancelled = False
        self.fired = 0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def active(self) -> bool:
        return not self.cancelled


class Scheduler(Protocol):
    def schedule(self, interval_sec: float, callback: TickCallback) -> TickHandle: ...

    def cancel(self, handle: TickHandle) -> None: ...


def _current_task() -> Optional[asyncio.Task[object]]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def _check_interval(interval_sec: float) -> None:
    if interval_sec <= 0:
        raise ValueError("Tick interval must be positive")


class AsyncioScheduler:
    """Runs each tick source as a task on the event loop.

    Ticks are aimed at absolute deadlines (``start + n * interval``) taken
    from ``loop.time()``, so a slow callback delays one tick instead of
    shifting every following one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: set[TickHandle] = set()

    @property
    def active_handles(self) -> tuple[TickHandle, ...]:
        return tuple(h for h in self._handles if h.active)

    def schedule(self, interval_sec: float, callback: TickCallback) -> TickHandle:
        _check_interval(interval_sec)
        loop = self._loop or asyncio.get_running_loop()
        handle = TickHandle(interval_sec, callback)
        self._handles.add(handle)
        handle._task = loop.create_task(self._run(handle, loop))
        return handle

    def cancel(self, handle: TickHandle) -> None:
        if handle.cancelled:
            return
        handle.cancelled = True
        self._handles.discard(handle)
        task = handle._task
        # A tick canceling its own source just lets the loop exit.
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    async def _run(self, handle: TickHandle, loop: asyncio.AbstractEventLoop) -> None:
        next_at = loop.time() + handle.interval_sec
        try:
            while not handle.cancelled:
                await asyncio.sleep(max(0.0, next_at - loop.time()))
                if handle.cancelled:
                    return
                try:
                    handle.callback()
                except Exception:
                    logger.exception("Tick callback failed; stopping tick source")
                    handle.cancelled = True
                    return
                handle.fired += 1
                next_at += handle.interval_sec
        finally:
            self._handles.discard(handle)


class ManualScheduler:
    """Tick source advanced explicitly, for tests and simulated runs."""

    def __init__(self) -> None:
        self._handles: list[TickHandle] = []

    @property
    def active_handles(self) -> tuple[TickHandle, ...]:
        return tuple(h for h in self._handles if h.active)

    def schedule(self, interval_sec: float, callback: TickCallback) -> TickHandle:
        _check_interval(interval_sec)
        handle = TickHandle(interval_sec, callback)
        self._handles.append(handle)
        return handle

    def cancel(self, handle: TickHandle) -> None:
        handle.cancelled = True
        if handle in self._handles:
            self._handles.remove(handle)

    def advance(self, count: int = 1) -> int:
        """Fire every active tick source ``count`` times; returns callbacks run."""
        fired = 0
        for _ in range(count):
            handles = self.active_handles
            if not handles:
                break
            for handle in handles:
                if handle.cancelled:
                    continue
                handle.callback()
                handle.fired += 1
                fired += 1
        return fired

    def advance_time(self, seconds: float) -> int:
        fired = 0
        for handle in self.active_handles:
            ticks = int(round(seconds / handle.interval_sec))
            for _ in range(ticks):
                if handle.cancelled:
                    break
                handle.callback()
                handle.fired += 1
                fired += 1
        return fired
