"""
Remove path: select mirrored records and stage them for deletion.

Records already in the removal queue are skipped. When every selected
record is already staged nothing is staged and a StaleDataWarning is raised.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field

from ..errors import StaleDataWarning, ValidationError
from .queues import ResourceKind, StagingQueue

if TYPE_CHECKING:
    from ..mirrors import RemoteMirror

logger = structlog.get_logger()

# Fields the free-text filter searches, per kind.
FILTER_FIELDS = {
    ResourceKind.SAFE: ("name", "id"),
    ResourceKind.MEMBER: ("member_name", "domain"),
    ResourceKind.ACCOUNT: ("object_id", "user_name", "address", "platform_id"),
}


class SelectionSet(BaseModel):
    """Removal selection and filters for one resource kind."""

    kind: ResourceKind
    selected: Dict[str, bool] = Field(default_factory=dict)
    search: str = ""
    safe_filter: str = ""

    def toggle(self, record_id: str) -> bool:
        self.selected[record_id] = not self.selected.get(record_id, False)
        return self.selected[record_id]

    def is_selected(self, record_id: str) -> bool:
        return bool(self.selected.get(record_id))

    def selected_ids(self) -> List[str]:
        return [record_id for record_id, on in self.selected.items() if on]

    def set_filter(self, search: Optional[str] = None, safe: Optional[str] = None) -> None:
        if search is not None:
            self.search = search
        if safe is not None:
            if self.kind is ResourceKind.SAFE and safe:
                raise ValidationError("Safes cannot be filtered by Safe")
            self.safe_filter = safe

    def clear(self) -> None:
        self.selected.clear()
        self.search = ""
        self.safe_filter = ""


def matches(selection: SelectionSet, record: Any) -> bool:
    """Whether a record passes the selection's filters."""
    if selection.safe_filter and getattr(record, "safe_name", None) != selection.safe_filter:
        return False

    needle = selection.search.strip().lower()
    if not needle:
        return True
    return any(
        needle in str(getattr(record, field, "") or "").lower()
        for field in FILTER_FIELDS[selection.kind]
    )


def filtered(selection: SelectionSet, mirror: "RemoteMirror") -> List[Any]:
    """The mirror records visible under the current filters."""
    return [record for record in mirror if matches(selection, record)]


def stage_removals(
    selection: SelectionSet,
    mirror: "RemoteMirror",
    queue: StagingQueue,
) -> Tuple[List[Any], List[str]]:
    """
    Stage every selected record for removal, skipping ones already staged.

    Returns:
        Tuple of (records staged in mirror order, labels of skipped records)

    Raises:
        ValidationError: If nothing is selected
        StaleDataWarning: If every selected record is already staged
    """
    kind = selection.kind.display_name
    chosen = [record for record in mirror if selection.is_selected(record.id)]
    if not chosen:
        raise ValidationError(f"Please select at least one {kind} to remove!")

    fresh = [record for record in chosen if not queue.contains(record.id)]
    skipped = [record.label for record in chosen if queue.contains(record.id)]
    if not fresh:
        raise StaleDataWarning(f"All selected {kind}s are already queued!", skipped=skipped)

    queue.extend(fresh)
    selection.clear()

    logger.debug(
        "staged_removals",
        kind=selection.kind.value,
        staged=len(fresh),
        skipped=len(skipped),
    )
    return fresh, skipped


def skipped_message(kind: ResourceKind, skipped: List[str]) -> str:
    return (
        f"Skipped {len(skipped)} {ResourceKind(kind).value}(s) already queued for removal: "
        + ", ".join(skipped)
    )
