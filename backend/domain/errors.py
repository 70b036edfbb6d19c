"""Exceptions raised by the aggregation and credential-management use cases.

Per-credential fetch problems are never raised; they travel as
FailureOutcome values inside a Snapshot.
"""


class NoCredentialsError(Exception):
    """Raised when an aggregation is requested with no credentials configured."""

    def __init__(self, message: str = "No API keys configured. Add keys via the management interface."):
        super().__init__(message)


class CredentialError(Exception):
    """Base class for credential CRUD validation errors."""
    pass


class InvalidCredentialError(CredentialError):
    pass


class DuplicateCredentialError(CredentialError):
    pass


class CredentialNotFoundError(CredentialError):
    pass
