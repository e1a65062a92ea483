"""
Tests for vaultstage.auth module.
"""

import pytest

from vaultstage.api.client import MISSING_CREDENTIALS
from vaultstage.auth import DEBUG_VAULT_URL, Session, SessionManager
from vaultstage.errors import AuthenticationError
from vaultstage.storage import TOKEN_KEY, URL_KEY, MemoryStorage

from conftest import TOKEN, VAULT_URL


class TestSession:
    """Tests for the Session model."""

    def test_authenticated_iff_token(self):
        """Test is_authenticated is derived from the token."""
        assert Session().is_authenticated is False
        assert Session(vault_url=VAULT_URL, token="abc").is_authenticated is True

    def test_token_not_in_repr(self):
        """Test the token stays out of repr."""
        assert "abc" not in repr(Session(vault_url=VAULT_URL, token="abc"))


class TestSessionManager:
    """Tests for SessionManager class."""

    @pytest.mark.asyncio
    async def test_login_persists_session(self, stage_config, storage, fake_vault):
        """Test a successful login stores the token and URL."""
        fake_vault.respond("POST", "/auth/login", 200, {"token": TOKEN})
        sessions = SessionManager(stage_config, storage, transport=fake_vault.transport)

        session = await sessions.login(f"{VAULT_URL}/", "admin", "secret")

        assert session.is_authenticated
        assert session.vault_url == VAULT_URL
        assert sessions.is_authenticated
        assert storage.get(TOKEN_KEY) == TOKEN
        assert storage.get(URL_KEY) == VAULT_URL

    @pytest.mark.asyncio
    async def test_login_empty_password(self, stage_config, storage, fake_vault):
        """Test an empty password never reaches the network."""
        sessions = SessionManager(stage_config, storage, transport=fake_vault.transport)

        with pytest.raises(AuthenticationError) as exc_info:
            await sessions.login(VAULT_URL, "admin", "")

        assert exc_info.value.message == MISSING_CREDENTIALS
        assert fake_vault.calls == []
        assert not sessions.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_login_rejected_keeps_logged_out(self, stage_config, storage, fake_vault):
        """Test a rejected login stores nothing."""
        fake_vault.respond("POST", "/auth/login", 401, {"message": "Bad password"})
        sessions = SessionManager(stage_config, storage, transport=fake_vault.transport)

        with pytest.raises(AuthenticationError):
            await sessions.login(VAULT_URL, "admin", "wrong")

        assert not sessions.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    def test_logout_clears_storage(self, stage_config):
        """Test logout removes both keys and resets the session."""
        storage = MemoryStorage({TOKEN_KEY: TOKEN, URL_KEY: VAULT_URL, "other": 1})
        sessions = SessionManager(stage_config, storage)
        sessions.restore()

        sessions.logout()

        assert not sessions.is_authenticated
        assert storage.get(TOKEN_KEY) is None
        assert storage.get(URL_KEY) is None
        assert storage.get("other") == 1

    def test_restore(self, stage_config):
        """Test restoring a stored session."""
        storage = MemoryStorage({TOKEN_KEY: TOKEN, URL_KEY: VAULT_URL})
        sessions = SessionManager(stage_config, storage)

        session = sessions.restore()

        assert session is not None
        assert session.token == TOKEN
        assert sessions.is_authenticated

    def test_restore_uses_configured_url(self, tmp_path):
        """Test the configured URL fills in a missing stored URL."""
        from vaultstage.config import StageConfig

        config = StageConfig(_env_file=None, state_dir=tmp_path, vault_url=VAULT_URL)
        sessions = SessionManager(config, MemoryStorage({TOKEN_KEY: TOKEN}))

        assert sessions.restore().vault_url == VAULT_URL

    def test_restore_nothing_stored(self, stage_config, storage):
        """Test restore without a token."""
        sessions = SessionManager(stage_config, storage)
        assert sessions.restore() is None
        assert not sessions.is_authenticated

    def test_debug_login(self, debug_config, storage):
        """Test the debug bypass starts a session without a network call."""
        sessions = SessionManager(debug_config, storage)

        session = sessions.debug_login()

        assert session.vault_url == DEBUG_VAULT_URL
        assert session.token.startswith("debug_token_")
        assert storage.get(URL_KEY) == DEBUG_VAULT_URL

    def test_debug_login_disabled(self, stage_config, storage):
        """Test the debug bypass requires debug mode."""
        sessions = SessionManager(stage_config, storage)

        with pytest.raises(AuthenticationError):
            sessions.debug_login()

        assert not sessions.is_authenticated
