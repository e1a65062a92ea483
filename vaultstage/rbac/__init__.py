"""
vaultstage RBAC module.

Permission templates, role detection and the managed standard members.
"""

from .models import StandardMember, default_standard_members
from .permissions import (
    CUSTOM_ROLE,
    PERMISSION_KEYS,
    PERMISSION_TEMPLATES,
    PermissionSet,
    detect_role,
    empty_permissions,
    granted,
    normalize_permissions,
    template_permissions,
)

__all__ = [
    # Models
    "StandardMember",
    "default_standard_members",
    # Permissions
    "CUSTOM_ROLE",
    "PERMISSION_KEYS",
    "PERMISSION_TEMPLATES",
    "PermissionSet",
    "detect_role",
    "empty_permissions",
    "granted",
    "normalize_permissions",
    "template_permissions",
]
