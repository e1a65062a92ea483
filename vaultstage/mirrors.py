"""
Remote state mirrors.

Each resource kind keeps the last fetched snapshot of server records, once
for the modify workflow and once for the remove workflow. A refresh replaces
both wholesale; a failed refresh keeps the previous snapshot.
"""

from typing import TYPE_CHECKING, Any, Dict, Generic, Iterator, List, Optional, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from .api.models import AccountRecord, MemberRecord, SafeRecord
from .errors import ApiRequestError
from .rbac.permissions import normalize_permissions
from .staging.create import member_id
from .staging.queues import ResourceKind

if TYPE_CHECKING:
    from .client import VaultStage

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first truthy value among keys."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return default


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def normalize_safe(data: Dict[str, Any]) -> SafeRecord:
    """
    Map a server Safe onto a SafeRecord.

    When a server reports both retention values, versions wins.
    """
    versions = _positive_int(data.get("numberOfVersionsRetention"))
    days = None if versions is not None else _positive_int(data.get("numberOfDaysRetention"))
    name = str(_first(data, "safeName", "name", "id", default=""))
    return SafeRecord(
        id=str(_first(data, "safeName", "id", "name", default=name)),
        name=name,
        managing_cpm=_first(data, "managingCPM", default="CyberArk"),
        number_of_versions_retention=versions,
        number_of_days_retention=days,
        description=data.get("description") or None,
    )


def normalize_member(data: Dict[str, Any], safe_name: str = "") -> MemberRecord:
    """Map a server Safe member onto a MemberRecord."""
    member_name = str(_first(data, "memberName", "member", default=""))
    safe = str(_first(data, "safeName", "safe", default=safe_name))
    return MemberRecord(
        id=str(_first(data, "id", "memberId", default=member_id(safe, member_name))),
        member_name=member_name,
        domain=_first(data, "searchIn", "domain", default="Domain"),
        safe_name=safe,
        permissions=normalize_permissions(data.get("permissions")),
    )


def normalize_account(data: Dict[str, Any]) -> AccountRecord:
    """Map a server Account onto an AccountRecord."""
    secret_management = data.get("secretManagement") or {}
    automatic = secret_management.get(
        "automaticManagementEnabled",
        data.get("automaticManagementEnabled", True),
    )
    reason = secret_management.get("manualManagementReason", data.get("manualManagementReason"))
    account_id = str(_first(data, "id", "object", default=""))
    return AccountRecord(
        id=account_id,
        object_id=str(_first(data, "name", "object", "id", default="")),
        user_name=str(_first(data, "userName", "username", default="")),
        address=str(data.get("address") or ""),
        platform_id=str(_first(data, "platformId", "platform", default="")),
        safe_name=str(_first(data, "safeName", "safe", default="")),
        automatic_management_enabled=bool(automatic),
        manual_management_reason=reason or None,
    )


class RemoteMirror(Generic[T]):
    """The last fetched snapshot of one resource kind."""

    def __init__(self, kind: ResourceKind, records: Optional[List[T]] = None) -> None:
        self.kind = kind
        self._records: List[T] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._records))

    @property
    def records(self) -> List[T]:
        return list(self._records)

    def replace(self, records: List[T]) -> None:
        self._records = list(records)

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None


class ResourceMirrors:
    """The modify and remove mirrors of one resource kind."""

    def __init__(self, kind: ResourceKind) -> None:
        self.kind = kind
        self.for_modification: RemoteMirror = RemoteMirror(kind)
        self.for_removal: RemoteMirror = RemoteMirror(kind)

    def replace(self, records: List[Any]) -> None:
        self.for_modification.replace(records)
        self.for_removal.replace(records)


class MirrorRefresher:
    """
    Fetches server state into the mirrors.

    Example:
        ```python
        refresher = MirrorRefresher(mirrors)
        await refresher.refresh(stage, ResourceKind.SAFE)
        ```
    """

    def __init__(self, mirrors: Dict[ResourceKind, ResourceMirrors]) -> None:
        self.mirrors = mirrors

    async def fetch(self, stage: "VaultStage", kind: ResourceKind) -> List[Any]:
        """Fetch and normalize every record of a kind."""
        kind = ResourceKind(kind)
        if kind is ResourceKind.SAFE:
            return [normalize_safe(raw) for raw in await stage.safes.get_all()]

        if kind is ResourceKind.ACCOUNT:
            return [normalize_account(raw) for raw in await stage.accounts.get_all()]

        members: List[MemberRecord] = []
        for safe in [normalize_safe(raw) for raw in await stage.safes.get_all()]:
            for raw in await stage.members.get_by_safe(safe.name):
                members.append(normalize_member(raw, safe_name=safe.name))
        return members

    async def refresh(self, stage: "VaultStage", kind: ResourceKind) -> bool:
        """
        Replace both mirrors of a kind with fresh server state.

        Returns:
            True if the mirrors were replaced, False if the fetch failed
        """
        kind = ResourceKind(kind)
        try:
            records = await self.fetch(stage, kind)
        except ApiRequestError as e:
            logger.warning("mirror_refresh_failed", kind=kind.value, error=e.message)
            return False
        except SchemaError as e:
            # A record the vault returned could not be normalized.
            logger.warning("mirror_refresh_invalid", kind=kind.value, errors=e.error_count())
            return False

        self.mirrors[kind].replace(records)
        logger.info("mirror_refreshed", kind=kind.value, count=len(records))
        return True


def new_mirrors() -> Dict[ResourceKind, ResourceMirrors]:
    return {kind: ResourceMirrors(kind) for kind in ResourceKind}
