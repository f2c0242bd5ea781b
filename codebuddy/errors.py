"""Exception types shared across codebuddy."""


class CodeBuddyError(Exception):
    """Base class for all user-facing codebuddy failures."""


class ConfigurationError(CodeBuddyError, EnvironmentError):
    """The Gemini API key is missing or blank."""


class RequestFailure(CodeBuddyError, RuntimeError):
    """The generation endpoint failed (network, auth, quota, bad response)."""

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.detail = detail or message


class ValidationError(CodeBuddyError, ValueError):
    """Input was rejected before any state was touched."""


class InvalidFormatError(ValidationError):
    """An import file is not a JSON array of templates."""


class NothingToExportError(ValidationError):
    """Export was requested for an empty template library."""


class PreconditionError(CodeBuddyError, ValueError):
    """No code context is available to send."""
