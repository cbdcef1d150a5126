from __future__ import annotations

from typing import Optional


class DarkfibreError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(DarkfibreError):
    """
    A caller-supplied limit was violated before anything was signed or submitted.

    Attributes:
        field: Name of the offending option as sent on the wire (e.g. 'maxPriceImpact').
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        field_part = f" (field: {self.field})" if self.field else ""
        return f"ValidationError: {self.message}{field_part}"


class SigningError(DarkfibreError):
    """Local key decoding or transaction signing failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        cause_part = f" | Caused by: {self.cause}" if self.cause is not None else ""
        return f"SigningError: {self.message}{cause_part}"


class APIError(DarkfibreError):
    """
    Backend-reported or transport-level failure.

    `status` is the HTTP status of the response, 0 when no response was
    received at all and 408 when the request timed out.
    """

    def __init__(self, code: str, message: str, status: int) -> None:
        super().__init__(message)
        self.code = code
        self.status = status

    def __str__(self) -> str:
        return f"APIError [{self.code}] ({self.status}): {self.message}"
