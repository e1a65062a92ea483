"""
Tests for vaultstage.client module.
"""

import pytest

from vaultstage.api import AccountManager, MemberManager, SafeManager
from vaultstage.client import VaultStage
from vaultstage.errors import AuthenticationError

from conftest import TOKEN, VAULT_URL


class TestVaultStage:
    """Tests for VaultStage client class."""

    @pytest.mark.asyncio
    async def test_create_with_kwargs(self, fake_vault):
        """Test creating a VaultStage with explicit settings."""
        stage = await VaultStage.create(
            token=TOKEN,
            vault_url=VAULT_URL,
            transport=fake_vault.transport,
            _env_file=None,
            timeout=5,
        )

        assert stage.config.vault_url == VAULT_URL
        assert stage.config.timeout == 5
        assert stage.api.base_url == f"{VAULT_URL}/api"
        assert isinstance(stage.safes, SafeManager)
        assert isinstance(stage.members, MemberManager)
        assert isinstance(stage.accounts, AccountManager)
        await stage.close()

    @pytest.mark.asyncio
    async def test_create_url_from_env(self, monkeypatch, fake_vault):
        """Test the vault URL is read from the environment."""
        monkeypatch.setenv("VAULTSTAGE_VAULT_URL", VAULT_URL)

        async with await VaultStage.create(
            token=TOKEN, transport=fake_vault.transport, _env_file=None
        ) as stage:
            await stage.safes.get_all()

        assert fake_vault.paths() == ["/safes"]

    @pytest.mark.asyncio
    async def test_create_requires_url(self):
        """Test a missing vault URL is rejected."""
        with pytest.raises(AuthenticationError):
            await VaultStage.create(token=TOKEN, _env_file=None)

    @pytest.mark.asyncio
    async def test_create_requires_token(self):
        """Test a missing token is rejected."""
        with pytest.raises(AuthenticationError):
            await VaultStage.create(token="", vault_url=VAULT_URL, _env_file=None)
