"""Exception hierarchy for lead-intake."""

from __future__ import annotations


class LeadIntakeError(Exception):
    """Base exception for all lead-intake errors."""


class StoreError(LeadIntakeError):
    """Raised when the document store rejects a read or write."""


class AuthError(LeadIntakeError):
    """Raised when the identity provider fails or refuses credentials."""


class FormValidationError(LeadIntakeError):
    """Raised when submitted form values fail validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
