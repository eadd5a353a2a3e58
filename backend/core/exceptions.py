"""Custom exceptions for the agent workspace."""


class AppException(Exception):
    """Base exception for the agent workspace."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code.

        Args:
            message: Exception message
            status_code: HTTP status code
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(AppException):
    """Malformed or unsupported request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize BadRequestError with 400 status code."""
        super().__init__(message, 400)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize NotFoundError with 404 status code."""
        super().__init__(message, 404)


class UnauthorizedError(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize UnauthorizedError with 401 status code."""
        super().__init__(message, 401)


class ForbiddenError(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize ForbiddenError with 403 status code."""
        super().__init__(message, 403)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation failed"):
        """Initialize ValidationError with 422 status code."""
        super().__init__(message, 422)


class ConflictError(AppException):
    """Resource conflict exception."""

    def __init__(self, message: str = "Resource conflict"):
        """Initialize ConflictError with 409 status code."""
        super().__init__(message, 409)


class WorkflowDefinitionError(ValidationError):
    """A workflow step list that cannot be parsed into typed steps."""

    def __init__(self, message: str = "Invalid workflow definition"):
        super().__init__(message)


class StepExecutionError(AppException):
    """A single workflow step failed; aborts the whole run."""

    def __init__(self, message: str, step_index: int = None, step_type: str = None):
        self.step_index = step_index
        self.step_type = step_type
        super().__init__(message, 500)


class AIProviderError(AppException):
    """An AI provider call failed (configuration, transport or API error)."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        # Message without the provider prefix, as shown to API clients
        self.detail = message
        super().__init__(f"{provider}: {message}", 502)
