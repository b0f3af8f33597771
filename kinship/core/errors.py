"""
Error taxonomy for connection handling.

Reciprocal sync failures are deliberately absent: they are logged and
reported on ``ReciprocalResult.reciprocal_error``, never raised.
"""

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class KinshipError(Exception):
    """Base class for every error raised by the kinship package."""


class ValidationError(KinshipError):
    """
    Connection input failed validation.

    Carries every failing rule so callers can highlight each field.
    """

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__(f"Validation failed: {', '.join(self.messages)}")


class DuplicateConnectionError(KinshipError):
    def __init__(self, message: str = "This connection already exists"):
        super().__init__(message)


class NotFoundError(KinshipError):
    def __init__(self, message: str = "Connection not found"):
        super().__init__(message)


class StoreError(KinshipError):
    """
    Raised by a connection store when the backing database rejects a call.

    ``code`` holds the database error code when one is available.
    """

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION
