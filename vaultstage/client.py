"""
Main vaultstage client.

Bundles an authenticated API client with the Safe, Member and Account
managers.
"""

from typing import Optional

import httpx

from .api import AccountManager, MemberManager, SafeManager, VaultApiClient
from .config import StageConfig, load_config
from .errors import AuthenticationError


class VaultStage:
    """
    Authenticated entry point to the vault REST API.

    Example:
        ```python
        from vaultstage import VaultStage

        # URL from VAULTSTAGE_VAULT_URL
        stage = await VaultStage.create(token=token)

        # Or explicit
        stage = await VaultStage.create(
            vault_url="https://pvwa.example.com",
            token=token,
        )

        safes = await stage.safes.get_all()
        ```
    """

    def __init__(self, config: StageConfig, api: VaultApiClient) -> None:
        """
        Initialize the client.

        Args:
            config: vaultstage configuration
            api: Authenticated API client

        Note:
            Use VaultStage.create() instead of direct instantiation.
        """
        self.config = config
        self.api = api

        self.safes = SafeManager(api)
        self.members = MemberManager(api)
        self.accounts = AccountManager(api)

    @classmethod
    async def create(
        cls,
        token: str,
        vault_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs,
    ) -> "VaultStage":
        """
        Create a client for an existing session token.

        Args:
            token: Bearer token from login
            vault_url: PVWA URL (optional, loads from env)
            transport: Optional httpx transport (tests)
            **kwargs: Additional configuration options

        Returns:
            Initialized VaultStage

        Raises:
            AuthenticationError: If no vault URL or token is available
        """
        config_kwargs = kwargs.copy()
        if vault_url:
            config_kwargs["vault_url"] = vault_url

        config = load_config(**config_kwargs)

        if not config.vault_url or not token:
            raise AuthenticationError("A vault URL and session token are required")

        api = VaultApiClient(
            config.vault_url,
            token,
            timeout=config.timeout,
            transport=transport,
        )
        return cls(config=config, api=api)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.api.close()

    async def __aenter__(self) -> "VaultStage":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
