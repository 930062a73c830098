"""Translation pipeline and errors for comment-translate."""

from .errors import BackendFailureError, BackendUnavailableError, TranslateError

__all__ = ["BackendFailureError", "BackendUnavailableError", "TranslateError"]
