"""Immersive mode: keep every comment line of a buffer annotated inline.

Updates run when a buffer is entered or saved, never per keystroke. Each
update bumps the buffer's generation; a translation that completes after a
newer update, a disable, or the buffer's destruction is not applied.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from .config import TargetsConfig
from .host import BufferId, SpanLocator, UISink
from .translate.errors import TranslateError
from .translate.pipeline import TranslationPipeline

logger = logging.getLogger(__name__)


@dataclass
class ImmersiveState:
    """Per-buffer immersive bookkeeping.

    Attributes:
        enabled: Whether the buffer is annotated
        annotations: line -> annotation text currently applied
        generation: Incremented by every update and invalidation
    """

    enabled: bool = False
    annotations: dict[int, str] = field(default_factory=dict)
    generation: int = 0


class ImmersiveOrchestrator:
    """Tracks immersive state per buffer and applies inline translations."""

    def __init__(
        self,
        pipeline: TranslationPipeline,
        locator: SpanLocator,
        sink: UISink,
        enabled: bool = False,
        targets: TargetsConfig | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            pipeline: Translation pipeline shared with hover
            locator: Source of the buffer's comment lines
            sink: Receives line annotations
            enabled: Initial value of the global flag
            targets: Immersive mode only annotates comments; with comments
                disabled, updates annotate nothing
        """
        self.pipeline = pipeline
        self.locator = locator
        self.sink = sink
        self.globally_enabled = enabled
        self.targets = targets or TargetsConfig()
        self._states: dict[BufferId, ImmersiveState] = {}

    def is_enabled(self, buffer_id: BufferId | None = None) -> bool:
        """Global flag without a buffer, else whether that buffer is annotated."""
        if buffer_id is None:
            return self.globally_enabled
        state = self._states.get(buffer_id)
        return state is not None and state.enabled

    def annotations(self, buffer_id: BufferId) -> dict[int, str]:
        state = self._states.get(buffer_id)
        return dict(state.annotations) if state else {}

    @property
    def tracked_buffers(self) -> list[BufferId]:
        return list(self._states)

    async def enable(self, buffer_id: BufferId | None = None) -> int:
        """Turn immersive mode on, and annotate buffer_id if given.

        Returns:
            Number of annotations applied
        """
        if not self.globally_enabled:
            logger.info("Immersive mode enabled")
        self.globally_enabled = True
        if buffer_id is None:
            return 0

        state = self._states.setdefault(buffer_id, ImmersiveState())
        state.enabled = True
        return await self.update(buffer_id)

    def disable(self) -> None:
        """Turn immersive mode off everywhere and clear all annotations."""
        if self.globally_enabled:
            logger.info("Immersive mode disabled")
        self.globally_enabled = False
        # Snapshot: the sink may call back into forget() or enable()
        for buffer_id, state in list(self._states.items()):
            if self._states.get(buffer_id) is not state or not state.enabled:
                continue
            state.enabled = False
            state.generation += 1
            state.annotations.clear()
            self.sink.clear_annotations(buffer_id)

    def forget(self, buffer_id: BufferId) -> None:
        """Drop a destroyed buffer's state; in-flight updates for it are discarded."""
        state = self._states.pop(buffer_id, None)
        if state is None:
            return
        state.generation += 1
        self.sink.clear_annotations(buffer_id)

    async def on_buffer_entered(self, buffer_id: BufferId) -> int:
        if self.globally_enabled and not self.is_enabled(buffer_id):
            return await self.enable(buffer_id)
        if self.is_enabled(buffer_id):
            return await self.update(buffer_id)
        return 0

    async def on_buffer_saved(self, buffer_id: BufferId) -> int:
        if self.is_enabled(buffer_id):
            return await self.update(buffer_id)
        return 0

    def _is_current(
        self, buffer_id: BufferId, state: ImmersiveState, generation: int
    ) -> bool:
        return (
            self._states.get(buffer_id) is state
            and state.enabled
            and state.generation == generation
        )

    async def update(self, buffer_id: BufferId) -> int:
        """Translate every distinct comment of the buffer and annotate its lines.

        Each distinct text is translated once (cache first) and applied to
        all lines carrying it as soon as its translation arrives. Lines
        already showing the same annotation are left alone.

        Returns:
            Number of annotations applied by this update
        """
        state = self._states.get(buffer_id)
        if state is None or not state.enabled:
            return 0

        state.generation += 1
        generation = state.generation

        lines = self.locator.locate_all(buffer_id) if self.targets.comment else {}

        # Annotations on lines that no longer hold a comment can only be
        # removed by clearing the whole buffer and reapplying.
        if set(state.annotations) - set(lines):
            self.sink.clear_annotations(buffer_id)
            state.annotations.clear()

        by_text: dict[str, list[int]] = {}
        for line, text in lines.items():
            if text:
                by_text.setdefault(text, []).append(line)

        logger.debug(
            f"Immersive update of {buffer_id!r}: {len(lines)} lines, "
            f"{len(by_text)} distinct texts"
        )

        applied = await asyncio.gather(
            *(
                self._apply_text(buffer_id, state, generation, text, text_lines)
                for text, text_lines in by_text.items()
            )
        )
        return sum(applied)

    async def update_all(self) -> int:
        """Update every enabled buffer.

        Returns:
            Number of annotations applied across all buffers
        """
        buffers = [
            buffer_id for buffer_id, state in self._states.items() if state.enabled
        ]
        applied = await asyncio.gather(*(self.update(buffer_id) for buffer_id in buffers))
        return sum(applied)

    async def _apply_text(
        self,
        buffer_id: BufferId,
        state: ImmersiveState,
        generation: int,
        text: str,
        lines: list[int],
    ) -> int:
        try:
            translated = await self.pipeline.translate(text)
        except TranslateError as e:
            logger.warning(f"Immersive translation failed: {e}")
            return 0
        except Exception as e:
            logger.error(f"Unexpected error translating for immersive mode: {e!r}")
            return 0

        if not translated:
            return 0

        applied = 0
        for line in lines:
            # Re-checked per line: the sink may start a new update synchronously
            if not self._is_current(buffer_id, state, generation):
                break
            if state.annotations.get(line) == translated:
                continue
            self.sink.set_line_annotation(buffer_id, line, translated)
            state.annotations[line] = translated
            applied += 1
        return applied
