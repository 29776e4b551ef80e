"""Exceptions for users app."""


class AuthenticationError(Exception):
    """Raised when credentials or a bearer token are missing or invalid."""

    def __init__(self, message: str = 'Unauthorized') -> None:
        """Initialize AuthenticationError.

        Args:
            message: Caller-facing reason, free of internal identifiers.
        """
        self.message = message
        super().__init__(message)
