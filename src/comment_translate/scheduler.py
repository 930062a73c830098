"""Per-buffer debounced request scheduling.

Each buffer has at most one current cycle: a CycleToken plus, while the
debounce delay runs, an armed timer. Starting a new cycle for a buffer
cancels the old timer and replaces the token, so anything still holding the
old token can tell it has been superseded with a plain identity comparison.

Everything runs on one asyncio event loop. There are no locks; instead every
transition re-checks the token it was started with, because applying a
result can synchronously start a new cycle for the same buffer.
"""

import asyncio
import enum
import itertools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .host import BufferId

logger = logging.getLogger(__name__)


class CycleState(enum.Enum):
    """Where a buffer's hover cycle currently is."""

    IDLE = "idle"
    SCHEDULED = "scheduled"
    AWAITING_RESULT = "awaiting_result"


class CycleOutcome(enum.Enum):
    """How a fired cycle ended."""

    APPLIED = "applied"  # result shown
    DROPPED = "dropped"  # superseded before completion, nothing shown
    FAILED = "failed"  # backend or unexpected failure
    NO_RESULT = "no_result"  # oversize or empty text, popup closed
    CLEARED = "cleared"  # nothing translatable at the cursor


@dataclass(frozen=True, eq=False)
class CycleToken:
    """Opaque identity of one debounce cycle.

    Compared by identity; serial only makes tokens readable in logs.
    """

    buffer_id: BufferId
    serial: int

    def __repr__(self) -> str:
        return f"CycleToken({self.buffer_id!r}#{self.serial})"


CycleCallback = Callable[[BufferId, CycleToken], Awaitable[CycleOutcome]]


@dataclass
class _Cycle:
    token: CycleToken
    handle: asyncio.TimerHandle | None
    state: CycleState


class RequestScheduler:
    """Owns the debounce timer and cancellation token of every buffer.

    Example:
        scheduler = RequestScheduler(delay=0.5, on_fire=invoker.run)
        scheduler.start(buf)   # arms a timer
        scheduler.start(buf)   # supersedes it, only this one fires
        scheduler.cancel(buf)  # nothing fires at all
    """

    def __init__(self, delay: float, on_fire: CycleCallback | None = None) -> None:
        """Initialize scheduler.

        Args:
            delay: Default debounce delay in seconds
            on_fire: Coroutine function run with (buffer_id, token) when a
                timer expires
        """
        self.delay = delay
        self.on_fire = on_fire
        self._cycles: dict[BufferId, _Cycle] = {}
        self._serials = itertools.count(1)
        self._tasks: set[asyncio.Task[CycleOutcome]] = set()

    def _new_token(self, buffer_id: BufferId) -> CycleToken:
        return CycleToken(buffer_id, next(self._serials))

    def start(self, buffer_id: BufferId, delay: float | None = None) -> CycleToken:
        """Start (or restart) the debounce cycle for a buffer.

        Args:
            buffer_id: Buffer to schedule
            delay: Override for the default delay, in seconds

        Returns:
            The new current token for the buffer
        """
        self.cancel(buffer_id)

        token = self._new_token(buffer_id)
        delay = self.delay if delay is None else delay
        handle = asyncio.get_running_loop().call_later(
            delay, self._fire, buffer_id, token
        )
        self._cycles[buffer_id] = _Cycle(token, handle, CycleState.SCHEDULED)
        logger.debug(f"Scheduled {token!r} in {delay:.3f}s")
        return token

    def cancel(self, buffer_id: BufferId) -> bool:
        """Cancel the buffer's timer and discard its token.

        A backend call already in flight is left to finish (its value can
        still be cached) but its token is no longer current.

        Returns:
            True if a cycle was active
        """
        cycle = self._cycles.pop(buffer_id, None)
        if cycle is None:
            return False
        if cycle.handle is not None:
            cycle.handle.cancel()
            cycle.handle = None
        logger.debug(f"Cancelled {cycle.token!r} ({cycle.state.value})")
        return True

    def cancel_all(self) -> None:
        for buffer_id in list(self._cycles):
            self.cancel(buffer_id)

    def shutdown(self) -> None:
        """Cancel every cycle and abort in-flight cycle tasks."""
        self.cancel_all()
        for task in list(self._tasks):
            task.cancel()

    async def join(self) -> None:
        """Wait until every fired cycle task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def is_current(self, buffer_id: BufferId, token: CycleToken) -> bool:
        cycle = self._cycles.get(buffer_id)
        return cycle is not None and cycle.token is token

    def current_token(self, buffer_id: BufferId) -> CycleToken | None:
        cycle = self._cycles.get(buffer_id)
        return cycle.token if cycle else None

    def state(self, buffer_id: BufferId) -> CycleState:
        cycle = self._cycles.get(buffer_id)
        return cycle.state if cycle else CycleState.IDLE

    def finish(self, buffer_id: BufferId, token: CycleToken) -> None:
        """Return the buffer to idle, but only if token is still its current one."""
        if self.is_current(buffer_id, token):
            del self._cycles[buffer_id]

    @property
    def active_buffers(self) -> list[BufferId]:
        return list(self._cycles)

    @property
    def pending(self) -> int:
        """Number of fired cycles still running."""
        return len(self._tasks)

    async def run_now(
        self, buffer_id: BufferId, callback: CycleCallback | None = None
    ) -> CycleOutcome:
        """Run a cycle immediately, superseding any scheduled one.

        Args:
            buffer_id: Buffer to run the cycle for
            callback: Used instead of on_fire for this cycle

        Returns:
            Outcome of the cycle
        """
        self.cancel(buffer_id)
        token = self._new_token(buffer_id)
        self._cycles[buffer_id] = _Cycle(token, None, CycleState.AWAITING_RESULT)
        logger.debug(f"Running {token!r} immediately")
        return await self._run(buffer_id, token, callback or self.on_fire)

    def _fire(self, buffer_id: BufferId, token: CycleToken) -> None:
        cycle = self._cycles.get(buffer_id)
        if cycle is None or cycle.token is not token:
            return
        cycle.handle = None
        cycle.state = CycleState.AWAITING_RESULT
        logger.debug(f"Fired {token!r}")

        task = asyncio.get_running_loop().create_task(
            self._run(buffer_id, token, self.on_fire)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        buffer_id: BufferId,
        token: CycleToken,
        callback: CycleCallback | None,
    ) -> CycleOutcome:
        try:
            if callback is None:
                logger.warning(f"No cycle callback configured, dropping {token!r}")
                return CycleOutcome.DROPPED
            return await callback(buffer_id, token)
        except Exception as e:
            logger.error(f"Unexpected error in {token!r}: {e!r}")
            return CycleOutcome.FAILED
        finally:
            self.finish(buffer_id, token)
