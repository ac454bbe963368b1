"""Error codes and exceptions for llm-explain.

Every failure surfaced to the user by the CLI is an ExplainError subclass:
- configuration problems (missing key/engine, bad prompt style)
- missing transcript file
- session recorder problems (script not installed, nested sessions)
- model errors (unknown model, provider/network failure)

The transcript parser itself never raises; an absent command is a normal
outcome reported through ExtractedInteraction.command.
"""


class ErrorCode:
    """Standard error codes attached to ExplainError instances."""

    # Client errors
    EMPTY_QUERY = "EMPTY_QUERY"                # Question text is empty
    CONFIG_MISSING = "CONFIG_MISSING"          # setup has not been run
    CONFIG_INVALID = "CONFIG_INVALID"          # Unknown setting value

    # Local resources
    TRANSCRIPT_NOT_FOUND = "TRANSCRIPT_NOT_FOUND"  # No session log on disk
    RECORDER_ERROR = "RECORDER_ERROR"          # script(1) problem

    # Server errors
    MODEL_ERROR = "MODEL_ERROR"                # LLM API error


class ExplainError(Exception):
    """Base exception for llm-explain errors."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(ExplainError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str = "Please run the setup command first.",
                 code: str = ErrorCode.CONFIG_MISSING):
        super().__init__(code, message)


class TranscriptNotFoundError(ExplainError):
    """Raised when the session transcript does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(
            ErrorCode.TRANSCRIPT_NOT_FOUND,
            f'Cannot find terminal log file {path}. Ensure you started a "script" session.',
        )


class RecorderError(ExplainError):
    """Raised when the session recorder cannot start or stop."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.RECORDER_ERROR, message)


class EmptyQueryError(ExplainError):
    """Raised when question text is empty."""

    def __init__(self, message: str = "Query text is empty"):
        super().__init__(ErrorCode.EMPTY_QUERY, message)


class ModelError(ExplainError):
    """Raised when the LLM call fails."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.MODEL_ERROR, message)
