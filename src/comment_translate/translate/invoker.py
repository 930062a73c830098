"""Hover cycle execution.

One call to TranslationInvoker.run() handles one fired cycle: find the text
under the cursor, translate it through the pipeline, and show the result only
if the cycle's token is still the buffer's current one. A late result from a
superseded cycle is dropped from the UI (the pipeline has already cached it).
"""

import logging

from ..config import HoverConfig, TargetsConfig
from ..host import BufferId, NotifyLevel, Span, SpanLocator, UISink
from ..scheduler import CycleOutcome, CycleToken, RequestScheduler
from .errors import TranslateError
from .pipeline import TranslationPipeline

logger = logging.getLogger(__name__)


def is_comment_kind(kind: str) -> bool:
    return "comment" in kind


class TranslationInvoker:
    """Runs hover cycles for a RequestScheduler."""

    def __init__(
        self,
        scheduler: RequestScheduler,
        pipeline: TranslationPipeline,
        locator: SpanLocator,
        sink: UISink,
        hover: HoverConfig | None = None,
        targets: TargetsConfig | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.pipeline = pipeline
        self.locator = locator
        self.sink = sink
        self.hover = hover or HoverConfig()
        self.targets = targets or TargetsConfig()
        # Cycle whose loading indicator or result the popup is showing
        self._popup_owner: CycleToken | None = None

    def _show_loading(self, token: CycleToken) -> None:
        self._popup_owner = token
        self.sink.show_loading()

    def _show_popup(self, token: CycleToken, text: str) -> None:
        self._popup_owner = token
        self.sink.show_popup(text)

    def _close_popup(self) -> None:
        self._popup_owner = None
        self.sink.close_popup()

    def _release_popup(self, token: CycleToken) -> None:
        """Close the popup of a superseded cycle unless a newer cycle has taken it over."""
        if self._popup_owner is token:
            self._close_popup()

    def locate(self, buffer_id: BufferId) -> Span | None:
        """Span under the cursor, filtered by the enabled targets."""
        span = self.locator.locate(buffer_id)
        if span is None or not span.text:
            return None
        if is_comment_kind(span.kind):
            return span if self.targets.comment else None
        return span if self.targets.string else None

    async def run(
        self, buffer_id: BufferId, token: CycleToken, explicit: bool = False
    ) -> CycleOutcome:
        """Execute one cycle.

        Never raises: every path ends with an outcome, and whenever the token
        is still current the popup is either showing the result or closed.

        Args:
            buffer_id: Buffer the cycle belongs to
            token: The cycle's token, checked against the scheduler before
                every UI side effect
            explicit: True when the user asked for the translation; failures
                are then reported with a notification instead of only logged

        Returns:
            How the cycle ended
        """
        try:
            return await self._run(buffer_id, token, explicit)
        except Exception as e:
            logger.error(f"Hover cycle {token!r} failed unexpectedly: {e!r}")
            if self.scheduler.is_current(buffer_id, token):
                self._close_popup()
            else:
                self._release_popup(token)
            return CycleOutcome.FAILED

    async def _run(
        self, buffer_id: BufferId, token: CycleToken, explicit: bool
    ) -> CycleOutcome:
        def current() -> bool:
            return self.scheduler.is_current(buffer_id, token)

        span = self.locate(buffer_id)
        if span is None:
            if current():
                self._close_popup()
                if explicit:
                    self.sink.notify("No comment or string found", NotifyLevel.INFO)
            return CycleOutcome.CLEARED

        if self.hover.loading and current():
            self._show_loading(token)

        try:
            value = await self.pipeline.translate(span.text, context=span.context)
        except TranslateError as e:
            if not current():
                logger.debug(f"Dropping failure of superseded {token!r}: {e}")
                self._release_popup(token)
                return CycleOutcome.DROPPED
            self._close_popup()
            if explicit:
                self.sink.notify("Translation failed", NotifyLevel.ERROR)
            logger.warning(f"Translation failed: {e}")
            return CycleOutcome.FAILED

        if not current():
            logger.debug(f"Dropping stale result of {token!r}")
            self._release_popup(token)
            return CycleOutcome.DROPPED

        if not value:
            self._close_popup()
            if explicit and value is None:
                self.sink.notify("Text is too long to translate", NotifyLevel.WARN)
            return CycleOutcome.NO_RESULT

        self._show_popup(token, value)
        return CycleOutcome.APPLIED
