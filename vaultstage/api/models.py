"""
vaultstage resource models.

Pydantic models for Safes, Safe Members and Accounts as the console sees
them. Field names are Python-side; the managers translate to the vault's
wire names.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator

from ..rbac.permissions import detect_role, normalize_permissions


class RetentionMode(str, Enum):
    """Which retention policy a Safe uses. Exactly one applies at a time."""

    VERSIONS = "versions"
    DAYS = "days"


class SafeRecord(BaseModel):
    """
    A Safe: a named container with a retention policy and a managing CPM.

    Retention is exclusive: a Safe keeps either a number of versions or a
    number of days, never both.
    """

    id: str
    name: str = Field(..., min_length=1)
    managing_cpm: str = ""
    number_of_versions_retention: Optional[int] = Field(None, gt=0)
    number_of_days_retention: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_retention_exclusive(self) -> "SafeRecord":
        if self.number_of_versions_retention is not None and self.number_of_days_retention is not None:
            raise ValueError(
                "A Safe retains either a number of versions or a number of days, not both"
            )
        return self

    @property
    def retention_mode(self) -> Optional[RetentionMode]:
        if self.number_of_versions_retention is not None:
            return RetentionMode.VERSIONS
        if self.number_of_days_retention is not None:
            return RetentionMode.DAYS
        return None

    @property
    def retention_value(self) -> Optional[int]:
        if self.retention_mode is RetentionMode.VERSIONS:
            return self.number_of_versions_retention
        return self.number_of_days_retention

    @property
    def label(self) -> str:
        return self.name

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "Finance-01",
                "name": "Finance-01",
                "managing_cpm": "PasswordManager",
                "number_of_versions_retention": 10,
                "number_of_days_retention": None,
                "description": "Finance team credentials",
            }
        },
    }


class MemberRecord(BaseModel):
    """
    A principal granted a permission set on a Safe.

    ``role_label`` is derived from ``permissions`` on construction and is
    never taken from input.
    """

    id: str
    member_name: str = Field(..., min_length=1)
    domain: str = "Vault"
    safe_name: str = Field(..., min_length=1)
    permissions: Dict[str, bool] = Field(default_factory=dict)
    role_label: str = ""

    @model_validator(mode="after")
    def derive_role_label(self) -> "MemberRecord":
        self.permissions = normalize_permissions(self.permissions)
        self.role_label = detect_role(self.permissions)
        return self

    @property
    def label(self) -> str:
        return self.member_name


class AccountRecord(BaseModel):
    """
    A credential record (address/username/secret) stored within a Safe.

    ``manual_management_reason`` only means something when automatic
    management is disabled; it is cleared otherwise.
    """

    id: str
    object_id: str = ""
    user_name: str = ""
    address: str = ""
    secret: Optional[str] = Field(default=None, repr=False)
    platform_id: str = ""
    safe_name: str = ""
    automatic_management_enabled: bool = True
    manual_management_reason: Optional[str] = None
    remote_machines: Optional[str] = None

    @model_validator(mode="after")
    def clear_manual_reason(self) -> "AccountRecord":
        if self.automatic_management_enabled:
            self.manual_management_reason = None
        return self

    @property
    def label(self) -> str:
        return self.user_name or self.object_id or self.id
