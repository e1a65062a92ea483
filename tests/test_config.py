"""
Tests for vaultstage.config module.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vaultstage.config import (
    DEFAULT_BRANDING,
    BrandingConfig,
    StageConfig,
    load_branding,
    load_config,
)
from vaultstage.storage import BRANDING_KEY, MemoryStorage


class TestStageConfig:
    """Tests for StageConfig class."""

    def test_defaults(self):
        """Test the default configuration."""
        config = StageConfig(_env_file=None)
        assert config.debug is False
        assert config.vault_url is None
        assert config.timeout == 30.0
        assert config.log_level == "INFO"
        assert config.log_json is False
        assert config.state_dir == Path.home() / ".vaultstage"

    def test_vault_url_trailing_slash_stripped(self):
        """Test the vault URL is normalized."""
        config = StageConfig(_env_file=None, vault_url="https://pvwa.example.com/")
        assert config.vault_url == "https://pvwa.example.com"

    def test_blank_vault_url_is_none(self):
        """Test a blank URL means no URL."""
        config = StageConfig(_env_file=None, vault_url="   ")
        assert config.vault_url is None

    def test_vault_url_requires_scheme(self):
        """Test URL validation rejects a bare host."""
        with pytest.raises(ValidationError) as exc_info:
            StageConfig(_env_file=None, vault_url="pvwa.example.com")
        assert "http://" in str(exc_info.value)

    def test_timeout_must_be_positive(self):
        """Test timeout validation."""
        with pytest.raises(ValidationError):
            StageConfig(_env_file=None, timeout=0)

    def test_log_level_uppercased(self):
        """Test log level normalization."""
        assert StageConfig(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            StageConfig(_env_file=None, log_level="chatty")

    @pytest.mark.parametrize("value", ["true", "1", "yes", "ON"])
    def test_debug_truthy_spellings(self, monkeypatch, value):
        """Test VAULTSTAGE_DEBUG accepts the usual truthy values."""
        monkeypatch.setenv("VAULTSTAGE_DEBUG", value)
        assert StageConfig(_env_file=None).debug is True

    def test_debug_falsy_spelling(self, monkeypatch):
        """Test anything else leaves debug off."""
        monkeypatch.setenv("VAULTSTAGE_DEBUG", "nope")
        assert StageConfig(_env_file=None).debug is False

    def test_env_vars(self, monkeypatch, tmp_path):
        """Test loading from environment variables."""
        monkeypatch.setenv("VAULTSTAGE_VAULT_URL", "https://env.example.com")
        monkeypatch.setenv("VAULTSTAGE_STATE_DIR", str(tmp_path))
        monkeypatch.setenv("VAULTSTAGE_TIMEOUT", "5")

        config = StageConfig(_env_file=None)

        assert config.vault_url == "https://env.example.com"
        assert config.state_dir == tmp_path
        assert config.timeout == 5.0


class TestLoadConfig:
    """Tests for load_config function."""

    def test_kwargs_override_env(self, monkeypatch):
        """Test keyword arguments win over the environment."""
        monkeypatch.setenv("VAULTSTAGE_VAULT_URL", "https://env.example.com")
        config = load_config(_env_file=None, vault_url="https://kwarg.example.com")
        assert config.vault_url == "https://kwarg.example.com"


class TestBranding:
    """Tests for branding preferences."""

    def test_default_branding(self):
        """Test the built-in branding."""
        assert DEFAULT_BRANDING.site_name == "PXM-API-TOOL"
        assert DEFAULT_BRANDING.logo_icon == "Shield"
        assert DEFAULT_BRANDING.primary_color == "#dc2626"

    def test_invalid_color(self):
        """Test colors must be #rrggbb."""
        with pytest.raises(ValidationError):
            BrandingConfig(primary_color="red")

    def test_invalid_logo_icon(self):
        """Test the logo icon must be a known icon."""
        with pytest.raises(ValidationError):
            BrandingConfig(logo_icon="Rocket")

    def test_load_branding_missing(self):
        """Test nothing stored falls back to the default."""
        assert load_branding(MemoryStorage()) == DEFAULT_BRANDING

    def test_load_branding_saved(self):
        """Test stored preferences are used."""
        storage = MemoryStorage({BRANDING_KEY: {"site_name": "Acme PAM", "logo_icon": "Lock"}})
        branding = load_branding(storage)
        assert branding.site_name == "Acme PAM"
        assert branding.logo_icon == "Lock"
        assert branding.accent_color == "#0f172a"

    def test_load_branding_invalid_falls_back(self):
        """Test invalid stored preferences fall back to the default."""
        storage = MemoryStorage({BRANDING_KEY: {"site_name": "", "primary_color": "nope"}})
        assert load_branding(storage) == DEFAULT_BRANDING
