"""
vaultstage auth module.

Operator sessions: login, logout, debug bypass and restore.
"""

from .models import LoginForm, Session
from .sessions import DEBUG_VAULT_URL, SessionManager

__all__ = [
    "Session",
    "LoginForm",
    "SessionManager",
    "DEBUG_VAULT_URL",
]
