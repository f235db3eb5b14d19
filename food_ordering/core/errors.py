"""
Error Taxonomy

Every expected failure of the request pipeline is an AppError subclass that
knows its HTTP status and how it is rendered. The application factory
registers one handler for AppError, so these never degrade into a 500.

    AuthenticationError      401  token absent
    InvalidTokenError        403  token malformed, tampered or expired
    StepUpVerificationError  401  admin step-up secret rejected
    AuthorizationError       403  valid identity, insufficient role
    ValidationError          400  field or business rule violated
    NotFoundError            404  referenced record does not exist
    RateLimitError           429  client exceeded its window budget
    ServerError              500  anything unexpected (generic body only)

ConfigurationError is not an HTTP error: it is raised while the application
is being assembled and aborts startup.
"""

from typing import Any, Optional, Sequence


class ConfigurationError(RuntimeError):
    """Security configuration is missing or unsafe; the process must not start."""


class AppError(Exception):
    """
    Base class for failures that map to a structured HTTP response.

    Attributes:
        status_code: HTTP status returned to the client
        message: Client-facing message (never internal detail)
        body_key: Key under which the message is rendered
    """

    status_code: int = 500
    body_key: str = "error"
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        """Render the JSON body sent to the client."""
        return {self.body_key: self.message}

    @property
    def headers(self) -> Optional[dict[str, str]]:
        """Extra response headers, if any."""
        return None


class AuthenticationError(AppError):
    """No usable credentials were presented. The client should re-authenticate."""
    status_code = 401
    default_message = "Access token required"


class InvalidTokenError(AuthenticationError):
    """A token was presented but failed verification."""
    status_code = 403
    default_message = "Invalid or expired token"


class StepUpVerificationError(AuthenticationError):
    """The secondary admin secret did not match."""
    body_key = "message"
    default_message = "Invalid admin password"


class AuthorizationError(AppError):
    """Authenticated, but not allowed. Retrying with the same credentials is pointless."""
    status_code = 403
    body_key = "message"
    default_message = "Access denied"


class ValidationError(AppError):
    """
    One or more validation rules failed.

    Aggregated errors (registration) render as {"errors": [...]}; a single
    fail-fast error (catalog) renders as {"message": "..."}.
    """
    status_code = 400
    body_key = "message"
    default_message = "Validation failed"

    def __init__(self, errors: "str | Sequence[str]", aggregated: bool = False):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        self.aggregated = aggregated
        super().__init__(", ".join(self.errors) or None)

    def to_body(self) -> dict[str, Any]:
        if self.aggregated:
            return {"errors": self.errors}
        return {"message": self.message}


class NotFoundError(AppError):
    status_code = 404
    body_key = "message"
    default_message = "Not found"


class RateLimitError(AppError):
    """
    Client exceeded its request budget for the current window.

    Only the time until the window resets is disclosed, never how many
    attempts remain.
    """
    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after

    @property
    def headers(self) -> Optional[dict[str, str]]:
        if self.retry_after is None:
            return None
        return {"Retry-After": str(max(int(self.retry_after), 0))}


class ServerError(AppError):
    status_code = 500
    default_message = "Internal Server Error"
