"""Core functionality for comment-translate - wires scheduling, cache and UI."""

import asyncio
import logging
from collections.abc import Coroutine
from functools import partial
from typing import Any

from .backends import BackendRegistry
from .backends.base import TranslationBackend
from .cache.manager import TranslationCacheManager
from .config import AppConfig
from .host import BufferId, HostEvent, SpanLocator, UISink
from .immersive import ImmersiveOrchestrator
from .scheduler import CycleOutcome, CycleToken, RequestScheduler
from .translate.invoker import TranslationInvoker
from .translate.pipeline import TranslationPipeline

logger = logging.getLogger(__name__)


class Translator:
    """Comment translation for one editor host.

    Owns one cache, one scheduler, the hover invoker and the immersive
    orchestrator. The host feeds lifecycle events into handle_event() and
    calls the hover/immersive methods from its commands.

    Example:
        translator = Translator(locator, sink, load_config())
        translator.handle_event(HostEvent.CURSOR_IDLE, buf)   # debounced hover
        await translator.trigger_hover_now(buf)               # explicit hover
        await translator.enable_immersive(buf)
        translator.handle_event(HostEvent.SHUTDOWN)
    """

    def __init__(
        self,
        locator: SpanLocator,
        sink: UISink,
        config: AppConfig | None = None,
        backend: TranslationBackend | None = None,
        cache: TranslationCacheManager | None = None,
    ) -> None:
        """Initialize translator.

        Args:
            locator: Host span locator
            sink: Host UI sink
            config: Configuration (defaults when None)
            backend: Backend override; otherwise resolved from translate.service
            cache: Cache override; otherwise built from the cache config
        """
        self.config = config or AppConfig()
        self.locator = locator
        self.sink = sink

        self.cache = cache or TranslationCacheManager.from_config(self.config.cache)
        self.backend = backend or BackendRegistry.resolve(
            self.config.translate.service
        )
        self.pipeline = TranslationPipeline(
            self.cache, self.backend, self.config.translate, sink
        )

        self.scheduler = RequestScheduler(self.config.hover.delay_seconds)
        self.invoker = TranslationInvoker(
            self.scheduler,
            self.pipeline,
            locator,
            sink,
            hover=self.config.hover,
            targets=self.config.targets,
        )
        self.scheduler.on_fire = self.invoker.run

        self.immersive = ImmersiveOrchestrator(
            self.pipeline,
            locator,
            sink,
            enabled=self.config.immersive.enabled,
            targets=self.config.targets,
        )

        self._tasks: set[asyncio.Task[Any]] = set()

        logger.debug(
            f"Translator initialized with backend "
            f"{getattr(self.backend, 'name', type(self.backend).__name__)}, "
            f"target {self.config.translate.target_language}"
        )

    # === HOVER ===

    def schedule_hover(self, buffer_id: BufferId) -> CycleToken | None:
        """Start or restart the debounced hover cycle for a buffer.

        Returns:
            The cycle token, or None when hover is disabled
        """
        if not self.config.hover.enabled:
            return None
        return self.scheduler.start(buffer_id)

    def cancel_hover(self, buffer_id: BufferId) -> bool:
        return self.scheduler.cancel(buffer_id)

    async def trigger_hover_now(self, buffer_id: BufferId) -> CycleOutcome:
        """Translate the text under the cursor right away, bypassing the debounce."""
        return await self.scheduler.run_now(
            buffer_id, partial(self.invoker.run, explicit=True)
        )

    # === IMMERSIVE ===

    async def enable_immersive(self, buffer_id: BufferId | None = None) -> int:
        return await self.immersive.enable(buffer_id)

    def disable_immersive(self) -> None:
        self.immersive.disable()

    def is_immersive_enabled(self, buffer_id: BufferId | None = None) -> bool:
        return self.immersive.is_enabled(buffer_id)

    async def update_immersive(self, buffer_id: BufferId | None = None) -> int:
        """Refresh the annotations of one buffer, or of every enabled buffer."""
        if buffer_id is None:
            return await self.immersive.update_all()
        return await self.immersive.update(buffer_id)

    # === ONE-SHOT ===

    async def translate(
        self,
        text: str,
        target_lang: str | None = None,
        source_lang: str | None = None,
    ) -> str | None:
        """Translate text through the shared cache and backend."""
        return await self.pipeline.translate(text, target_lang, source_lang)

    # === HOST EVENTS ===

    def handle_event(self, event: HostEvent, buffer_id: BufferId | None = None) -> None:
        """Route a host lifecycle notification.

        Synchronous: async work (immersive updates) is started as a task.
        """
        logger.debug(f"Event {event.value} for buffer {buffer_id!r}")

        if event is HostEvent.SHUTDOWN:
            self.shutdown()
            return

        if buffer_id is None:
            logger.warning(f"Ignoring {event.value} without a buffer")
            return

        if event is HostEvent.CURSOR_IDLE:
            if self.config.hover.auto:
                self.schedule_hover(buffer_id)
        elif event is HostEvent.CURSOR_MOVED:
            self.cancel_hover(buffer_id)
            self._close_popup_if_no_span(buffer_id)
        elif event is HostEvent.BUFFER_LEFT:
            self.cancel_hover(buffer_id)
            self.sink.close_popup()
        elif event is HostEvent.BUFFER_ENTERED:
            self._spawn(self.immersive.on_buffer_entered(buffer_id))
        elif event is HostEvent.BUFFER_SAVED:
            self._spawn(self.immersive.on_buffer_saved(buffer_id))
        elif event is HostEvent.BUFFER_DESTROYED:
            self.cancel_hover(buffer_id)
            self.immersive.forget(buffer_id)

    def _close_popup_if_no_span(self, buffer_id: BufferId) -> None:
        try:
            span = self.invoker.locate(buffer_id)
        except Exception as e:
            logger.error(f"Span lookup failed for {buffer_id!r}: {e!r}")
            span = None
        if span is None:
            self.sink.close_popup()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Background task failed: {task.exception()!r}")

    async def join(self) -> None:
        """Wait for all background work (fired hover cycles, immersive updates)."""
        while self._tasks or self.scheduler.pending:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            await self.scheduler.join()

    def shutdown(self) -> None:
        """Cancel every timer and task, close the popup and clear the cache."""
        self.scheduler.shutdown()
        for task in list(self._tasks):
            task.cancel()
        self.sink.close_popup()
        self.cache.clear()
        logger.info("Translator shut down")
