"""Interfaces to the editor host.

The host supplies text spans (which comment or string is under the cursor,
which comments exist in a buffer) and renders results (popups and inline
annotations). comment_translate only talks to the host through the abstract
classes defined here; buffer identities are opaque hashable values.
"""

import enum
from abc import ABC, abstractmethod
from collections.abc import Hashable
from dataclasses import dataclass

BufferId = Hashable


class HostEvent(enum.Enum):
    """Buffer lifecycle notifications delivered by the host."""

    CURSOR_IDLE = "cursor_idle"
    CURSOR_MOVED = "cursor_moved"
    BUFFER_ENTERED = "buffer_entered"
    BUFFER_LEFT = "buffer_left"
    BUFFER_SAVED = "buffer_saved"
    BUFFER_DESTROYED = "buffer_destroyed"
    SHUTDOWN = "shutdown"


class NotifyLevel(enum.Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class TranslateContext:
    """Code surrounding a comment, used to build better prompts.

    Attributes:
        file_name: File name without directory
        file_type: Language of the buffer (e.g. "go", "python")
        function_name: Name of the function the comment belongs to
        function_signature: First line of that function
        struct_or_class: Enclosing struct or class name
        package_or_module: Package or module name
        surrounding_code: A few lines of code around the comment
        node_type: Syntax node type of the span (e.g. "line_comment")
    """

    file_name: str | None = None
    file_type: str | None = None
    function_name: str | None = None
    function_signature: str | None = None
    struct_or_class: str | None = None
    package_or_module: str | None = None
    surrounding_code: str | None = None
    node_type: str | None = None


@dataclass(frozen=True)
class Span:
    """A located piece of translatable text.

    Attributes:
        text: The comment or string text
        kind: Classification reported by the locator ("comment", "string", ...)
        line: 0-indexed line the span starts on, if known
        context: Optional surrounding code context
    """

    text: str
    kind: str
    line: int | None = None
    context: TranslateContext | None = None


class SpanLocator(ABC):
    """Finds translatable text in a buffer."""

    @abstractmethod
    def locate(
        self, buffer_id: BufferId, position: tuple[int, int] | None = None
    ) -> Span | None:
        """Return the span at position (the cursor when None), or None."""

    @abstractmethod
    def locate_all(self, buffer_id: BufferId) -> dict[int, str]:
        """Return every translatable comment of the buffer as line -> text, in line order."""


class UISink(ABC):
    """Renders translation results in the host."""

    @abstractmethod
    def show_popup(self, text: str) -> None:
        """Show a translation in a popup at the cursor, replacing any current one."""

    @abstractmethod
    def close_popup(self) -> None:
        """Close the popup (and any loading indicator); no-op when none is shown."""

    @abstractmethod
    def set_line_annotation(self, buffer_id: BufferId, line: int, text: str) -> None:
        """Show text at the end of line, replacing an earlier annotation there."""

    @abstractmethod
    def clear_annotations(self, buffer_id: BufferId) -> None:
        """Remove every annotation from the buffer."""

    def show_loading(self) -> None:
        """Show a loading indicator until the next show_popup/close_popup."""

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        """Show a user notification."""
