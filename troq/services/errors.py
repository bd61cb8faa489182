"""Errors raised by the use-case layer (storage errors live in troq.repositories)."""


class ServiceError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed input detected before reaching storage."""


class InvalidCredentialsError(ServiceError):
    """Unknown e-mail or wrong password; callers must not tell them apart."""
