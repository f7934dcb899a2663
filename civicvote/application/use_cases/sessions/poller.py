"""Background task running lifecycle passes on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from anyio import to_thread
from sqlalchemy.orm import Session

from civicvote.config import get_settings

from .lifecycle import LifecyclePassReport, run_lifecycle_pass

logger = logging.getLogger(__name__)


class LifecyclePoller:
    """Run :func:`run_lifecycle_pass` periodically in a worker thread.

    Each pass is bounded by a wall-clock guard. A pass that overruns keeps
    running in its thread, and ticks that arrive before it finishes are skipped
    so passes never overlap.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        interval: float | None = None,
        initial_delay: float | None = None,
        timeout: float | None = None,
        pass_runner: Callable[[Session], LifecyclePassReport] = run_lifecycle_pass,
    ) -> None:
        settings = get_settings()
        self._session_factory = session_factory
        self._interval = interval if interval is not None else settings.lifecycle_poll_interval_seconds
        self._initial_delay = (
            initial_delay
            if initial_delay is not None
            else settings.lifecycle_poll_initial_delay_seconds
        )
        self._timeout = timeout if timeout is not None else settings.lifecycle_poll_timeout_seconds
        self._pass_runner = pass_runner
        self._task: asyncio.Task | None = None
        self._inflight: asyncio.Future | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="lifecycle-poller")
        logger.info(
            "Lifecycle poller started (interval %.0fs, first pass in %.0fs)",
            self._interval,
            self._initial_delay,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Lifecycle poller stopped")

    async def run_once(self) -> LifecyclePassReport | None:
        """Run one guarded pass; returns ``None`` if skipped, timed out or failed."""

        if self._inflight is not None and not self._inflight.done():
            logger.warning("Previous lifecycle pass still running; skipping this tick")
            return None
        self._inflight = asyncio.ensure_future(to_thread.run_sync(self._run_pass))
        try:
            return await asyncio.wait_for(asyncio.shield(self._inflight), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error("Lifecycle pass exceeded %.0fs wall-clock guard", self._timeout)
            self._inflight.add_done_callback(_log_late_failure)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Lifecycle pass crashed")
        return None

    def _run_pass(self) -> LifecyclePassReport:
        session = self._session_factory()
        try:
            return self._pass_runner(session)
        finally:
            session.close()

    async def _run(self) -> None:
        await asyncio.sleep(self._initial_delay)
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)


def _log_late_failure(future: asyncio.Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Timed-out lifecycle pass later failed", exc_info=exc)


__all__ = ["LifecyclePoller"]
