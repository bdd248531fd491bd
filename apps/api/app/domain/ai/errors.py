class AIServiceError(RuntimeError):
    """Base for failures raised by ``AIService.ask``."""

    code = "unknown"


class ConfigurationError(AIServiceError):
    """Invalid setup detected before any request reached the provider."""

    code = "config_error"


class ApiError(AIServiceError):
    """The provider returned a failure or the transport broke (timeouts included)."""

    code = "provider_error"

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out
        if timed_out:
            self.code = "timeout"


class InternalError(AIServiceError):
    """The isolated worker itself failed; a defect here, not at the provider."""

    code = "internal_error"
