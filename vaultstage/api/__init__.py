"""
vaultstage API module.

Thin async client for the vault's Safe, Safe Member and Account endpoints.
"""

from .accounts import AccountManager
from .client import VaultApiClient, login, resolve_api_base
from .members import MemberManager
from .models import AccountRecord, MemberRecord, RetentionMode, SafeRecord
from .safes import SafeManager

__all__ = [
    # Client
    "VaultApiClient",
    "login",
    "resolve_api_base",
    # Managers
    "SafeManager",
    "MemberManager",
    "AccountManager",
    # Models
    "SafeRecord",
    "MemberRecord",
    "AccountRecord",
    "RetentionMode",
]
