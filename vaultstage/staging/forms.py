"""
Input forms behind the create path.

Forms hold raw operator input. Staging validates them, builds a record,
and resets them to their defaults.
"""

from typing import Dict, Iterable, List, Union

from pydantic import BaseModel, Field

from ..api.models import RetentionMode
from ..rbac.models import StandardMember, default_standard_members
from ..rbac.permissions import PermissionSet, empty_permissions


class Form(BaseModel):
    """Base for input forms: adds reset-to-defaults."""

    def reset(self, keep: Iterable[str] = ()) -> None:
        keep = set(keep)
        for name, field in type(self).model_fields.items():
            if name not in keep:
                setattr(self, name, field.get_default(call_default_factory=True))


class SafeForm(Form):
    name: str = ""
    description: str = ""
    managing_cpm: str = ""
    retention_mode: RetentionMode = RetentionMode.VERSIONS
    version_retention: Union[int, str] = ""
    days_retention: Union[int, str] = ""


class MemberForm(Form):
    target_safe: str = ""
    member_name: str = ""
    domain: str = "Vault"
    permissions: PermissionSet = Field(default_factory=empty_permissions)


class AccountForm(Form):
    object_id: str = ""
    address: str = ""
    user_name: str = ""
    secret: str = Field(default="", repr=False)
    platform_id: str = ""
    safe_name: str = ""
    automatic_management: bool = True
    manual_management_reason: str = ""
    remote_machines: str = ""


class StandardMemberPanel(BaseModel):
    """
    The managed standard members, the current selection, and per-member
    permission overrides for the next staging.
    """

    managed: List[StandardMember] = Field(default_factory=default_standard_members)
    selection: Dict[str, bool] = Field(default_factory=dict)
    overrides: Dict[str, PermissionSet] = Field(default_factory=dict)

    def find(self, member: str) -> StandardMember:
        for candidate in self.managed:
            if candidate.member == member:
                return candidate
        raise KeyError(member)

    def selected(self) -> List[StandardMember]:
        """Selected members, in managed-list order."""
        return [m for m in self.managed if self.selection.get(m.member)]

    def clear_selection(self) -> None:
        self.selection.clear()
        self.overrides.clear()
