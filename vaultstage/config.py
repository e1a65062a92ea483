"""
vaultstage configuration management.

Loads runtime configuration from environment variables or a .env file, and
branding preferences from client storage.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from .storage import ClientStorage

logger = structlog.get_logger()

DEFAULT_STATE_DIR = Path.home() / ".vaultstage"

LOGO_ICONS = ("Shield", "Lock", "Database", "Vault")

_TRUTHY = ("true", "1", "yes", "on")


class StageConfig(BaseSettings):
    """
    vaultstage configuration settings.

    Can be loaded from:
    1. Environment variables (VAULTSTAGE_DEBUG, VAULTSTAGE_VAULT_URL, etc.)
    2. .env file in the working directory
    3. Direct instantiation with kwargs

    Example:
        ```python
        # From environment
        config = StageConfig()

        # Direct instantiation
        config = StageConfig(vault_url="https://pvwa.example.com", debug=True)
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="VAULTSTAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Debug: enables the authentication bypass and the indicator banner
    debug: bool = Field(
        default=False,
        description="Enable debug mode (authentication bypass, debug banner)",
    )

    # Optional pre-set PVWA URL
    vault_url: Optional[str] = Field(
        default=None,
        description="PVWA base URL (e.g., https://pvwa.example.com/PasswordVault)",
    )

    # Client storage
    state_dir: Path = Field(
        default=DEFAULT_STATE_DIR,
        description="Directory holding the session token and branding preferences",
    )

    # Transport
    timeout: float = Field(
        default=30.0,
        description="HTTP transport timeout in seconds",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v: object) -> bool:
        """Accept the usual truthy spellings for the debug flag."""
        if isinstance(v, str):
            return v.strip().lower() in _TRUTHY
        return bool(v)

    @field_validator("vault_url")
    @classmethod
    def validate_vault_url(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the vault URL carries a scheme."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("vault_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_config(**kwargs) -> StageConfig:
    """
    Load vaultstage configuration.

    Priority order:
    1. Keyword arguments
    2. Environment variables (VAULTSTAGE_*)
    3. .env file

    Args:
        **kwargs: Override configuration values

    Returns:
        StageConfig instance

    Raises:
        ValidationError: If a value is invalid

    Example:
        ```python
        config = load_config(debug=True)
        ```
    """
    return StageConfig(**kwargs)


class BrandingConfig(BaseModel):
    """
    Branding preferences shown by front ends (site name, logo, colors).

    Stored as JSON under the ``brandingPreferences`` storage key.
    """

    site_name: str = Field(default="PXM-API-TOOL", min_length=1, max_length=100)
    logo_icon: str = "Shield"
    logo_image_url: Optional[str] = None
    logo_bg_color: str = Field(default="#dc2626", pattern=r"^#[0-9a-fA-F]{6}$")
    primary_color: str = Field(default="#dc2626", pattern=r"^#[0-9a-fA-F]{6}$")
    accent_color: str = Field(default="#0f172a", pattern=r"^#[0-9a-fA-F]{6}$")

    @field_validator("logo_icon")
    @classmethod
    def validate_logo_icon(cls, v: str) -> str:
        if v not in LOGO_ICONS:
            raise ValueError(f"logo_icon must be one of {', '.join(LOGO_ICONS)}")
        return v


DEFAULT_BRANDING = BrandingConfig()


def load_branding(storage: "ClientStorage") -> BrandingConfig:
    """
    Load branding preferences from client storage.

    Falls back to the built-in default when nothing is stored or the stored
    value does not validate.
    """
    from .storage import BRANDING_KEY

    saved = storage.get(BRANDING_KEY)
    if not saved:
        return DEFAULT_BRANDING

    try:
        return BrandingConfig.model_validate(saved)
    except ValidationError as e:
        logger.warning("branding_invalid", errors=e.error_count())
        return DEFAULT_BRANDING
