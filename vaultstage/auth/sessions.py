"""
Session management for vaultstage.

Handles operator login, logout, debug bypass, and restoring a session
from client storage.
"""

import time
from typing import TYPE_CHECKING, Optional

import httpx
import structlog

from ..api.client import login
from ..errors import AuthenticationError
from ..storage import TOKEN_KEY, URL_KEY
from .models import Session

if TYPE_CHECKING:
    from ..config import StageConfig
    from ..storage import ClientStorage

logger = structlog.get_logger()

DEBUG_VAULT_URL = "https://cyberark-dev.local:8443"


class SessionManager:
    """
    Manages the operator session.

    The bearer token and vault URL are persisted in client storage under
    fixed keys and removed on logout.

    Example:
        ```python
        sessions = SessionManager(config, storage)
        session = await sessions.login(url, "admin", password)
        ...
        sessions.logout()
        ```
    """

    def __init__(
        self,
        config: "StageConfig",
        storage: "ClientStorage",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize SessionManager.

        Args:
            config: vaultstage configuration
            storage: Client storage for the token and URL
            transport: Optional httpx transport (tests)
        """
        self.config = config
        self.storage = storage
        self.transport = transport
        self.session = Session()

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    async def login(self, vault_url: str, username: str, password: str) -> Session:
        """
        Sign in with username and password.

        Args:
            vault_url: PVWA URL
            username: Vault username
            password: Vault password

        Returns:
            The new Session

        Raises:
            AuthenticationError: If input is missing or the vault rejects it
        """
        token = await login(
            vault_url,
            username,
            password,
            timeout=self.config.timeout,
            transport=self.transport,
        )
        return self._start(vault_url.rstrip("/"), token)

    def debug_login(self) -> Session:
        """
        Start a session without contacting the vault.

        Raises:
            AuthenticationError: If debug mode is disabled
        """
        if not self.config.debug:
            raise AuthenticationError("Debug mode is disabled")

        token = f"debug_token_{int(time.time() * 1000)}"
        logger.warning("debug_login", vault_url=DEBUG_VAULT_URL)
        return self._start(DEBUG_VAULT_URL, token)

    def restore(self) -> Optional[Session]:
        """
        Rebuild the session from client storage.

        Returns:
            The restored Session, or None if nothing usable is stored
        """
        token = self.storage.get(TOKEN_KEY) or ""
        vault_url = self.storage.get(URL_KEY) or self.config.vault_url or ""
        if not token or not vault_url:
            return None

        self.session = Session(vault_url=vault_url, token=token)
        logger.debug("session_restored", vault_url=vault_url)
        return self.session

    def logout(self) -> None:
        """Forget the session and clear it from storage."""
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(URL_KEY)
        self.session = Session()
        logger.info("logout")

    def _start(self, vault_url: str, token: str) -> Session:
        self.storage.set(TOKEN_KEY, token)
        self.storage.set(URL_KEY, vault_url)
        self.session = Session(vault_url=vault_url, token=token)
        return self.session
