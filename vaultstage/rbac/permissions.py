"""
Safe member permission templates and role detection.

A permission set maps each of the 22 vault permission names to a bool.
Named templates are read-only reference values; a member's role label is
derived from its permission set by structural equality against them.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

PermissionSet = Dict[str, bool]

CUSTOM_ROLE = "Custom"

PERMISSION_KEYS: List[str] = [
    "UseAccounts",
    "RetrieveAccounts",
    "ListAccounts",
    "AddAccounts",
    "UpdateAccountContent",
    "UpdateAccountProperties",
    "InitiateCPMAccountManagementOperations",
    "SpecifyNextAccountContent",
    "RenameAccounts",
    "DeleteAccounts",
    "UnlockAccounts",
    "ManageSafe",
    "ManageSafeMembers",
    "BackupSafe",
    "ViewAuditLog",
    "ViewSafeMembers",
    "AccessWithoutConfirmation",
    "CreateFolders",
    "DeleteFolders",
    "MoveAccountsAndFolders",
    "RequestsAuthorizationLevel1",
    "RequestsAuthorizationLevel2",
]


def _template(*granted: str) -> Mapping[str, bool]:
    unknown = set(granted) - set(PERMISSION_KEYS)
    if unknown:
        raise ValueError(f"Unknown permissions: {sorted(unknown)}")
    return MappingProxyType({key: key in granted for key in PERMISSION_KEYS})


_ALL_BUT_REQUESTS = [key for key in PERMISSION_KEYS if not key.startswith("RequestsAuthorization")]

# Declaration order matters: detect_role returns the first match.
PERMISSION_TEMPLATES: Mapping[str, Mapping[str, bool]] = MappingProxyType(
    {
        "PAM": _template(*_ALL_BUT_REQUESTS),
        "SM-HOLDER": _template(
            "ListAccounts",
            "AddAccounts",
            "UpdateAccountProperties",
            "RenameAccounts",
            "DeleteAccounts",
            "ManageSafeMembers",
            "ViewAuditLog",
            "ViewSafeMembers",
            "CreateFolders",
            "DeleteFolders",
            "MoveAccountsAndFolders",
        ),
        "SM-PROV": _template(
            "UseAccounts",
            "RetrieveAccounts",
            "ListAccounts",
            "ViewSafeMembers",
            "AccessWithoutConfirmation",
        ),
        "SM-APP": _template(
            "UseAccounts",
            "RetrieveAccounts",
            "ListAccounts",
            "AddAccounts",
            "UpdateAccountContent",
            "UpdateAccountProperties",
            "InitiateCPMAccountManagementOperations",
            "SpecifyNextAccountContent",
            "RenameAccounts",
            "DeleteAccounts",
            "UnlockAccounts",
            "ViewAuditLog",
            "ViewSafeMembers",
            "CreateFolders",
        ),
        "NONE": _template(),
        "FULL": _template(*_ALL_BUT_REQUESTS),
    }
)


def detect_role(permissions: Optional[Mapping[str, bool]]) -> str:
    """
    Derive a role label from a permission set.

    Templates are compared in declaration order and the first one whose
    full key/value mapping equals the input wins.

    Args:
        permissions: Permission name to bool mapping

    Returns:
        Template name, or "Custom" when nothing matches

    Examples:
        >>> detect_role(template_permissions("SM-APP"))
        'SM-APP'
        >>> detect_role(empty_permissions())
        'NONE'
        >>> detect_role({"UseAccounts": True})
        'Custom'
    """
    candidate = dict(permissions or {})
    for name, template in PERMISSION_TEMPLATES.items():
        if candidate == dict(template):
            return name
    return CUSTOM_ROLE


def template_permissions(name: str) -> PermissionSet:
    """Return a mutable copy of a named template."""
    try:
        return dict(PERMISSION_TEMPLATES[name])
    except KeyError:
        raise ValueError(
            f"Unknown permission template: {name}. "
            f"Expected one of {', '.join(PERMISSION_TEMPLATES)}"
        ) from None


def empty_permissions() -> PermissionSet:
    """Return the all-false permission set."""
    return {key: False for key in PERMISSION_KEYS}


def normalize_permissions(permissions: Optional[Mapping[str, object]]) -> PermissionSet:
    """
    Coerce a server or user supplied mapping onto the 22 known keys.

    Unknown keys are dropped and missing keys default to False.
    """
    permissions = permissions or {}
    return {key: bool(permissions.get(key, False)) for key in PERMISSION_KEYS}


def granted(permissions: Mapping[str, bool]) -> List[str]:
    """List the permission names that are switched on, in enumeration order."""
    return [key for key in PERMISSION_KEYS if permissions.get(key)]
