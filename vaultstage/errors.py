"""
vaultstage error taxonomy.

Every error surfaced to an operator derives from VaultStageError so the
controller can turn it into a notification at one boundary.
"""

from typing import List, Optional


class VaultStageError(Exception):
    """Base class for vaultstage errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(VaultStageError):
    """Missing or invalid staging input. Never reaches the network."""


class AuthenticationError(VaultStageError):
    """Login failed or the vault returned no token."""


class ApiRequestError(VaultStageError):
    """Non-2xx response, or a transport/parse failure, during an API call."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StaleDataWarning(VaultStageError, UserWarning):
    """Attempt to stage something that is already staged."""

    def __init__(self, message: str, skipped: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.skipped = list(skipped or [])
