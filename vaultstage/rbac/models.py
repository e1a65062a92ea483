"""
vaultstage RBAC models.

Pydantic models for the managed list of standard Safe members.
"""

from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

from .permissions import detect_role, normalize_permissions, template_permissions


class StandardMember(BaseModel):
    """
    A pre-defined principal that operators routinely add to new Safes.

    The role label always reflects the permission set.
    """

    member: str = Field(..., min_length=1, max_length=255)
    domain: str = "Vault"
    permissions: Dict[str, bool] = Field(default_factory=lambda: template_permissions("PAM"))
    role: str = ""

    @model_validator(mode="after")
    def derive_role(self) -> "StandardMember":
        self.permissions = normalize_permissions(self.permissions)
        self.role = detect_role(self.permissions)
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "member": "G_PAM_ADMINS",
                "domain": "Vault",
                "permissions": {"UseAccounts": True, "ListAccounts": True},
                "role": "Custom",
            }
        },
    }


def default_standard_members() -> List[StandardMember]:
    """The standard members every console starts with."""
    return [
        StandardMember(member="G_PAM_ADMINS", permissions=template_permissions("FULL")),
        StandardMember(member="G_PROVISIONING_AUTOMATION", permissions=template_permissions("SM-PROV")),
        StandardMember(member="G_APPLICATION_READERS", permissions=template_permissions("SM-APP")),
        StandardMember(member="G_SAFE_HOLDERS_GLOBAL", permissions=template_permissions("SM-HOLDER")),
    ]
