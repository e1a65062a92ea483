"""
Create path: validate form input and append new records to the create
queues. Identical creations may be staged more than once.
"""

from typing import Dict, List, Optional, Union

import structlog

from ..api.models import AccountRecord, MemberRecord, RetentionMode, SafeRecord
from ..errors import ValidationError
from ..rbac.models import StandardMember
from ..rbac.permissions import PERMISSION_KEYS, template_permissions
from .forms import AccountForm, MemberForm, SafeForm, StandardMemberPanel
from .queues import StagingQueue

logger = structlog.get_logger()


def member_id(safe_name: str, member_name: str) -> str:
    """Local id for a member that has no server id yet."""
    return f"{safe_name}/{member_name}"


def parse_retention(value: Union[int, str, None], mode: RetentionMode) -> int:
    """
    Parse a retention input into a positive integer.

    Raises:
        ValidationError: If the value is empty or not a positive integer
    """
    noun = "number of versions" if mode is RetentionMode.VERSIONS else "number of days"
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"Please enter {noun} for retention!")
    try:
        number = int(text)
    except ValueError:
        raise ValidationError(f"Retention {noun} must be a whole number, got {text!r}") from None
    if number <= 0:
        raise ValidationError(f"Retention {noun} must be greater than zero")
    return number


def stage_safe(form: SafeForm, queue: StagingQueue) -> SafeRecord:
    """
    Stage a Safe for creation and reset the form.

    Only the retention field of the selected mode is set on the record.
    """
    name = form.name.strip()
    if not name:
        raise ValidationError("Please enter a Safe name!")

    mode = RetentionMode(form.retention_mode)
    raw = form.version_retention if mode is RetentionMode.VERSIONS else form.days_retention
    retention = parse_retention(raw, mode)

    safe = SafeRecord(
        id=name,
        name=name,
        description=form.description,
        managing_cpm=form.managing_cpm,
        number_of_versions_retention=retention if mode is RetentionMode.VERSIONS else None,
        number_of_days_retention=retention if mode is RetentionMode.DAYS else None,
    )
    queue.append(safe)
    form.reset()

    logger.debug("staged_safe_create", safe_name=name, retention_mode=mode.value)
    return safe


def stage_custom_member(form: MemberForm, queue: StagingQueue) -> MemberRecord:
    """Stage one hand-entered member. The target Safe stays selected."""
    target_safe = form.target_safe.strip()
    member_name = form.member_name.strip()
    if not target_safe or not member_name:
        raise ValidationError("Please specify a target Safe and member name!")

    member = MemberRecord(
        id=member_id(target_safe, member_name),
        member_name=member_name,
        domain=form.domain or "Vault",
        safe_name=target_safe,
        permissions=dict(form.permissions),
    )
    queue.append(member)
    form.reset(keep=("target_safe",))

    logger.debug("staged_member_create", safe_name=target_safe, member_name=member_name)
    return member


def stage_standard_members(
    target_safe: str,
    panel: StandardMemberPanel,
    queue: StagingQueue,
) -> List[MemberRecord]:
    """
    Stage every selected standard member on the target Safe.

    Per-member overrides win over the member's own permission set.
    """
    target_safe = (target_safe or "").strip()
    if not target_safe:
        raise ValidationError("Please specify a target Safe!")

    selected = panel.selected()
    if not selected:
        raise ValidationError("Please select at least one standard member!")

    staged = []
    for standard in selected:
        permissions = panel.overrides.get(standard.member) or standard.permissions
        staged.append(
            MemberRecord(
                id=member_id(target_safe, standard.member),
                member_name=standard.member,
                domain=standard.domain,
                safe_name=target_safe,
                permissions=dict(permissions),
            )
        )

    queue.extend(staged)
    panel.clear_selection()
    return staged


def toggle_standard_member(panel: StandardMemberPanel, member: str) -> bool:
    """
    Flip a standard member's selection.

    The first toggle seeds an override with the member's own permissions.
    """
    standard = _find(panel, member)
    panel.selection[member] = not panel.selection.get(member, False)
    if member not in panel.overrides:
        panel.overrides[member] = dict(standard.permissions)
    return panel.selection[member]


def set_standard_member_permission(
    panel: StandardMemberPanel,
    member: str,
    permission: str,
    value: bool,
) -> None:
    """Adjust one permission of a selected standard member's override."""
    standard = _find(panel, member)
    if permission not in PERMISSION_KEYS:
        raise ValidationError(f"Unknown permission: {permission}")
    override = panel.overrides.setdefault(member, dict(standard.permissions))
    override[permission] = bool(value)


def add_standard_member(
    panel: StandardMemberPanel,
    member: str,
    domain: str = "Vault",
    permissions: Optional[Dict[str, bool]] = None,
) -> StandardMember:
    """Add a principal to the managed standard member list (PAM by default)."""
    member = (member or "").strip()
    if not member:
        raise ValidationError("Please enter a member name!")
    if any(m.member == member for m in panel.managed):
        raise ValidationError(f"Standard member {member} already exists")

    standard = StandardMember(
        member=member,
        domain=domain or "Vault",
        permissions=permissions or template_permissions("PAM"),
    )
    panel.managed.append(standard)
    return standard


def remove_standard_member(panel: StandardMemberPanel, member: str) -> None:
    """Drop a managed standard member along with its selection and override."""
    _find(panel, member)
    panel.managed = [m for m in panel.managed if m.member != member]
    panel.selection.pop(member, None)
    panel.overrides.pop(member, None)


def update_standard_member(panel: StandardMemberPanel, member: str, **changes) -> StandardMember:
    """Apply changes to a managed standard member; the role is re-derived."""
    standard = _find(panel, member)
    updated = StandardMember(**{**standard.model_dump(exclude={"role"}), **changes})
    panel.managed = [updated if m.member == member else m for m in panel.managed]
    return updated


def stage_account(form: AccountForm, queue: StagingQueue) -> AccountRecord:
    """Stage an Account for creation and reset the form."""
    required = (form.object_id, form.address, form.user_name, form.platform_id, form.safe_name)
    if not all(value and value.strip() for value in required):
        raise ValidationError("Please fill required fields!")

    account = AccountRecord(
        id=form.object_id.strip(),
        object_id=form.object_id.strip(),
        user_name=form.user_name.strip(),
        address=form.address.strip(),
        secret=form.secret,
        platform_id=form.platform_id.strip(),
        safe_name=form.safe_name.strip(),
        automatic_management_enabled=form.automatic_management,
        manual_management_reason=None if form.automatic_management else form.manual_management_reason,
        remote_machines=form.remote_machines or None,
    )
    queue.append(account)
    form.reset()

    logger.debug("staged_account_create", user_name=account.user_name, address=account.address)
    return account


def _find(panel: StandardMemberPanel, member: str) -> StandardMember:
    try:
        return panel.find(member)
    except KeyError:
        raise ValidationError(f"Unknown standard member: {member}") from None
