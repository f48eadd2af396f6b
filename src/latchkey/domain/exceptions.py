"""Domain errors raised by the authentication flows.

Each error carries a stable ``kind`` and a user-facing ``message``. The HTTP
layer maps them to status codes; nothing else about the failure (store
details, stack traces) is exposed.
"""


class AuthError(Exception):
    """Base exception for authentication and session failures."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConflictError(AuthError):
    """Raised when an email or username is already taken."""

    kind = "Conflict"
    status_code = 409

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UnauthorizedError(AuthError):
    """Raised for bad credentials and invalid, expired, reused or mistyped tokens."""

    kind = "Unauthorized"
    status_code = 401


class NotFoundError(AuthError):
    """Raised when a user vanished between token issuance and use."""

    kind = "NotFound"
    status_code = 404
