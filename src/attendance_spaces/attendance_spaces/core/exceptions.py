from __future__ import annotations

from typing import Mapping


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InvalidCode(DomainError):
    """No attendance code was supplied."""

    def __init__(self, message: str = "Invalid attendance code"):
        super().__init__(message)


class SessionNotFound(DomainError):
    """The code does not match any space."""

    def __init__(self, message: str = "Attendance session not found"):
        super().__init__(message)


class SessionRejected(DomainError):
    """The space exists but does not accept submissions right now."""

    def __init__(self, reason: str):
        self.reason = str(reason)
        if self.reason == "ended":
            message = "This attendance session has ended"
        else:
            message = f"This attendance session is {self.reason}"
        super().__init__(message)


class ValidationFailed(DomainError):
    """One or more submitted fields failed local constraints."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        super().__init__("Please correct the highlighted fields")


class SubmissionFailed(DomainError):
    """The store rejected or never acknowledged the insert."""

    def __init__(self, message: str = "Failed to submit attendance"):
        super().__init__(message)


class PrefillFailed(DomainError):
    """Profile lookup for prefill failed; logged only."""


class StoreError(Exception):
    """Raised by the persistence layer in place of raw driver errors."""


class DuplicateKeyError(StoreError):
    """A unique key rejected the write."""
