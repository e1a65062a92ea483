"""
Staging plans.

A plan is a JSON document listing creations, modifications and removals per
resource kind. Staging a plan drives the console's commands, so every
validation rule of interactive staging applies.

Example plan:
    ```json
    {
      "create": {
        "safes": [{"name": "Finance-01", "retention_mode": "versions", "version_retention": 10}],
        "members": [{"target_safe": "Finance-01", "member_name": "jdoe", "role": "SM-HOLDER"}]
      },
      "modify": {
        "safes": [{"id": "Legacy-02", "edits": {"retention_type": "days", "retention_value": 30}}]
      },
      "remove": {"accounts": ["12_3"]}
    }
    ```
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import structlog
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as SchemaError

from .errors import ValidationError
from .rbac.permissions import PERMISSION_TEMPLATES, template_permissions
from .staging.forms import AccountForm, SafeForm
from .staging.modify import EDIT_FIELDS
from .staging.queues import ResourceKind

if TYPE_CHECKING:
    from .console import StagingConsole

logger = structlog.get_logger()


class MemberEntry(BaseModel):
    """A member to create: explicit permissions, or a template name."""

    target_safe: str = ""
    member_name: str = ""
    domain: str = "Vault"
    role: Optional[str] = None
    permissions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in PERMISSION_TEMPLATES:
            raise ValueError(f"role must be one of {', '.join(PERMISSION_TEMPLATES)}")
        return v

    def resolved_permissions(self) -> Dict[str, bool]:
        if self.role:
            return template_permissions(self.role)
        return dict(self.permissions)


class CreateSection(BaseModel):
    safes: List[SafeForm] = Field(default_factory=list)
    members: List[MemberEntry] = Field(default_factory=list)
    accounts: List[AccountForm] = Field(default_factory=list)


class EditEntry(BaseModel):
    id: str
    edits: Dict[str, Any] = Field(default_factory=dict)


class ModifySection(BaseModel):
    safes: List[EditEntry] = Field(default_factory=list)
    members: List[EditEntry] = Field(default_factory=list)
    accounts: List[EditEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_edit_fields(self) -> "ModifySection":
        for kind, attr in SECTION_ATTRS.items():
            for entry in getattr(self, attr):
                unknown = set(entry.edits) - EDIT_FIELDS[kind]
                if unknown:
                    raise ValueError(
                        f"{attr}: cannot edit {', '.join(sorted(unknown))} on {entry.id}"
                    )
        return self


class RemoveSection(BaseModel):
    safes: List[str] = Field(default_factory=list)
    members: List[str] = Field(default_factory=list)
    accounts: List[str] = Field(default_factory=list)


class Plan(BaseModel):
    """A batch of changes to stage."""

    create: CreateSection = Field(default_factory=CreateSection)
    modify: ModifySection = Field(default_factory=ModifySection)
    remove: RemoveSection = Field(default_factory=RemoveSection)

    def kinds_needing_mirrors(self) -> List[ResourceKind]:
        """Kinds whose modify or remove entries need server state."""
        kinds = []
        for kind, attr in SECTION_ATTRS.items():
            if getattr(self.modify, attr) or getattr(self.remove, attr):
                kinds.append(kind)
        return kinds


SECTION_ATTRS = {
    ResourceKind.SAFE: "safes",
    ResourceKind.MEMBER: "members",
    ResourceKind.ACCOUNT: "accounts",
}


def load_plan(source: Union[str, Path]) -> Plan:
    """
    Load a plan from a JSON file.

    Raises:
        ValidationError: If the file is unreadable or not a valid plan
    """
    path = Path(source)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read plan {path}: {e}") from e

    try:
        return Plan.model_validate(data)
    except SchemaError as e:
        raise ValidationError(f"Invalid plan {path}: {e}") from e


async def stage_plan(console: "StagingConsole", plan: Plan) -> int:
    """
    Stage every entry of a plan through the console.

    Mirrors are refreshed first for kinds that are modified or removed.

    Returns:
        Number of entries that could not be staged
    """
    failures = 0
    state = console.state

    for kind in plan.kinds_needing_mirrors():
        if not await console.refresh(kind):
            console.notifier.error(f"Could not load {kind.value}s from the vault")

    for entry in plan.create.safes:
        state.safe_form = entry.model_copy(deep=True)
        failures += not console.stage_safe()

    for member in plan.create.members:
        state.member_form.target_safe = member.target_safe
        state.member_form.member_name = member.member_name
        state.member_form.domain = member.domain
        state.member_form.permissions = member.resolved_permissions()
        failures += not console.stage_custom_member()

    for entry in plan.create.accounts:
        state.account_form = entry.model_copy(deep=True)
        failures += not console.stage_account()

    for kind, attr in SECTION_ATTRS.items():
        for edit in getattr(plan.modify, attr):
            staged = (
                console.begin_edit(kind, edit.id) is not None
                and console.update_edit(kind, **edit.edits)
                and console.save_edit(kind)
            )
            if not staged:
                console.cancel_edit(kind)
                failures += 1

    for kind, attr in SECTION_ATTRS.items():
        record_ids = getattr(plan.remove, attr)
        if not record_ids:
            continue
        for record_id in record_ids:
            if state.mirrors[kind].for_removal.get(record_id) is None:
                console.notifier.error(f"{kind.display_name} {record_id} not found")
                failures += 1
            elif not state.selections[kind].is_selected(record_id):
                console.toggle_selection(kind, record_id)
        if state.selections[kind].selected_ids():
            failures += not console.stage_removals(kind)

    logger.info("plan_staged", total=state.staging.total, failures=failures)
    return failures
