"""Custom translation exceptions."""


class TranslateError(Exception):
    """Base exception for translation-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class BackendUnavailableError(TranslateError):
    """Exception raised when a backend cannot be used at all.

    This typically occurs when:
    - The backend's command line tool is not installed
    - The configured service name is unknown
    """

    pass


class BackendFailureError(TranslateError):
    """Exception raised when a translation request fails.

    This typically occurs when:
    - The backend process exits with a non-zero status
    - The HTTP service answers with an error status
    - Network connectivity issues
    - The backend produced no output
    - The backend did not answer within the configured timeout
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
