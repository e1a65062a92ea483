"""
Modify path: edit a mirrored server record and stage the result.

A saved edit replaces the staged entry with the same id in place, so a record
is never queued for modification twice.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import structlog
from pydantic import BaseModel, Field

from ..api.models import AccountRecord, MemberRecord, RetentionMode, SafeRecord
from ..errors import ValidationError
from ..rbac.permissions import normalize_permissions
from .create import parse_retention
from .queues import ResourceKind, StagingQueue

if TYPE_CHECKING:
    from ..mirrors import RemoteMirror

logger = structlog.get_logger()

SAFE_EDIT_FIELDS = frozenset({"description", "managing_cpm", "retention_type", "retention_value"})
MEMBER_EDIT_FIELDS = frozenset({"permissions", "domain"})
ACCOUNT_EDIT_FIELDS = frozenset(
    {
        "address",
        "secret",
        "user_name",
        "automatic_management_enabled",
        "manual_management_reason",
    }
)

EDIT_FIELDS = {
    ResourceKind.SAFE: SAFE_EDIT_FIELDS,
    ResourceKind.MEMBER: MEMBER_EDIT_FIELDS,
    ResourceKind.ACCOUNT: ACCOUNT_EDIT_FIELDS,
}


class EditSession(BaseModel):
    """The record being edited and the changes made so far."""

    kind: ResourceKind
    editing_id: Optional[str] = None
    edits: Dict[str, Any] = Field(default_factory=dict)

    @property
    def active(self) -> bool:
        return self.editing_id is not None


def begin_edit(session: EditSession, mirror: "RemoteMirror", record_id: str) -> Any:
    """
    Open an edit on a mirrored record, replacing any previous edit.

    Raises:
        ValidationError: If the record is not in the mirror
    """
    record = mirror.get(record_id)
    if record is None:
        raise ValidationError(f"{session.kind.display_name} {record_id} not found")
    session.editing_id = record_id
    session.edits = {}
    return record


def update_edit(session: EditSession, **fields: Any) -> Dict[str, Any]:
    """Accumulate field changes on the open edit."""
    if not session.active:
        raise ValidationError(f"No {session.kind.value} is being edited")

    allowed = EDIT_FIELDS[session.kind]
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(
            f"Cannot edit {', '.join(sorted(unknown))} on a {session.kind.value}"
        )

    if "permissions" in fields:
        # Partial permission edits layer on the permissions edited so far.
        merged = dict(session.edits.get("permissions") or {})
        merged.update(fields.pop("permissions") or {})
        session.edits["permissions"] = merged
    session.edits.update(fields)
    return dict(session.edits)


def cancel_edit(session: EditSession) -> None:
    session.editing_id = None
    session.edits = {}


def save_edit(
    session: EditSession,
    mirror: "RemoteMirror",
    queue: StagingQueue,
) -> Tuple[Any, bool]:
    """
    Merge the edits onto the base record and upsert it into the modify queue.

    Returns:
        Tuple of (staged record, whether an existing entry was replaced)

    Example:
        ```python
        begin_edit(session, mirror, "Finance-01")
        update_edit(session, retention_type="days", retention_value=30)
        record, replaced = save_edit(session, mirror, queue)
        ```
    """
    if not session.active:
        raise ValidationError(f"No {session.kind.value} is being edited")

    base = mirror.get(session.editing_id)
    if base is None:
        raise ValidationError(f"{session.kind.display_name} {session.editing_id} not found")

    if session.kind is ResourceKind.SAFE:
        record = _merge_safe(base, session.edits)
    elif session.kind is ResourceKind.MEMBER:
        record = _merge_member(base, session.edits)
    else:
        record = _merge_account(base, session.edits)

    replaced = queue.upsert(record)
    cancel_edit(session)

    logger.debug(
        "staged_modify",
        kind=session.kind.value,
        record_id=record.id,
        replaced=replaced,
    )
    return record, replaced


def _merge_safe(base: SafeRecord, edits: Dict[str, Any]) -> SafeRecord:
    if edits.get("retention_type"):
        mode = RetentionMode(edits["retention_type"])
    elif base.number_of_versions_retention:
        mode = RetentionMode.VERSIONS
    else:
        mode = RetentionMode.DAYS

    value = edits.get("retention_value")
    if value in (None, ""):
        value = (
            base.number_of_versions_retention
            if mode is RetentionMode.VERSIONS
            else base.number_of_days_retention
        )
    retention = parse_retention(value, mode)

    return SafeRecord(
        id=base.id,
        name=base.name,
        description=edits.get("description", base.description),
        managing_cpm=edits.get("managing_cpm") or base.managing_cpm,
        number_of_versions_retention=retention if mode is RetentionMode.VERSIONS else None,
        number_of_days_retention=retention if mode is RetentionMode.DAYS else None,
    )


def _merge_member(base: MemberRecord, edits: Dict[str, Any]) -> MemberRecord:
    permissions = dict(base.permissions)
    permissions.update(edits.get("permissions") or {})
    return MemberRecord(
        id=base.id,
        member_name=base.member_name,
        domain=edits.get("domain") or base.domain,
        safe_name=base.safe_name,
        permissions=normalize_permissions(permissions),
    )


def _merge_account(base: AccountRecord, edits: Dict[str, Any]) -> AccountRecord:
    merged = base.model_dump()
    merged.update({k: v for k, v in edits.items() if k in ACCOUNT_EDIT_FIELDS})
    return AccountRecord(**merged)
