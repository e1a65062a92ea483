"""
vaultstage - Staging console for CyberArk PVWA Safes, Members and Accounts.

Stage creations, modifications and removals locally, review them, then
deploy them to the vault in one sequential, best-effort batch.

Example:
    ```python
    from vaultstage import FileStorage, StagingConsole, load_config

    config = load_config()
    console = StagingConsole(config, FileStorage(config.state_dir))
    await console.login("https://pvwa.example.com", "admin", password)

    # Stage a Safe
    console.state.safe_form.name = "Finance-01"
    console.state.safe_form.version_retention = 10
    console.stage_safe()

    # Stage a standard member on it
    console.toggle_standard_member("G_PAM_ADMINS")
    console.stage_standard_members(target_safe="Finance-01")

    # Deploy everything
    report = await console.deploy()
    ```
"""

from .client import VaultStage
from .config import BrandingConfig, StageConfig, load_branding, load_config
from .console import StagingConsole, Tab
from .deploy import DeploymentEngine, DeploymentReport, ItemOutcome
from .errors import (
    ApiRequestError,
    AuthenticationError,
    StaleDataWarning,
    ValidationError,
    VaultStageError,
)
from .notifications import Notification, NotificationType, Notifier
from .rbac import PERMISSION_TEMPLATES, detect_role
from .staging import OperationKind, ResourceKind, StagingArea
from .storage import FileStorage, MemoryStorage

__version__ = "0.1.0"

__all__ = [
    # Main client
    "VaultStage",
    "StageConfig",
    "load_config",
    "BrandingConfig",
    "load_branding",
    # Console
    "StagingConsole",
    "Tab",
    "StagingArea",
    "ResourceKind",
    "OperationKind",
    # Deployment
    "DeploymentEngine",
    "DeploymentReport",
    "ItemOutcome",
    # Notifications
    "Notifier",
    "Notification",
    "NotificationType",
    # Storage
    "FileStorage",
    "MemoryStorage",
    # RBAC
    "PERMISSION_TEMPLATES",
    "detect_role",
    # Errors
    "VaultStageError",
    "ValidationError",
    "AuthenticationError",
    "ApiRequestError",
    "StaleDataWarning",
]
