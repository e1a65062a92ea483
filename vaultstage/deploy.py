"""
Deployment engine.

Replays the nine staging queues against the vault one call at a time.
Deployment is best effort: a failed item is reported and the run moves on.
Every queue is cleared at the end, failures included.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field

from .api import AccountManager, MemberManager, SafeManager
from .api.models import AccountRecord, MemberRecord, SafeRecord
from .errors import VaultStageError
from .notifications import Notifier
from .staging.queues import OperationKind, ResourceKind, StagingArea

logger = structlog.get_logger()

NOTHING_TO_DEPLOY = "No staged items to deploy!"

# Verb and past participle for per-item messages, keyed by queue.
_VERBS: Dict[Tuple[ResourceKind, OperationKind], Tuple[str, str]] = {
    (ResourceKind.SAFE, OperationKind.CREATE): ("create", "created"),
    (ResourceKind.MEMBER, OperationKind.CREATE): ("add", "added"),
    (ResourceKind.ACCOUNT, OperationKind.CREATE): ("create", "created"),
    (ResourceKind.SAFE, OperationKind.REMOVE): ("delete", "deleted"),
    (ResourceKind.MEMBER, OperationKind.REMOVE): ("remove", "removed"),
    (ResourceKind.ACCOUNT, OperationKind.REMOVE): ("delete", "deleted"),
    (ResourceKind.SAFE, OperationKind.MODIFY): ("update", "updated"),
    (ResourceKind.MEMBER, OperationKind.MODIFY): ("update", "updated"),
    (ResourceKind.ACCOUNT, OperationKind.MODIFY): ("update", "updated"),
}


class ItemOutcome(BaseModel):
    """Result of deploying one staged item."""

    kind: ResourceKind
    operation: OperationKind
    label: str
    ok: bool
    error: Optional[str] = None


class DeploymentReport(BaseModel):
    """Ordered outcomes of a deployment run."""

    total: int = 0
    outcomes: List[ItemOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]


class DeploymentEngine:
    """
    Submits staged operations to the vault.

    Example:
        ```python
        engine = DeploymentEngine(stage.safes, stage.members, stage.accounts, notifier)
        report = await engine.deploy(staging)
        print(len(report.failed), "failed")
        ```
    """

    def __init__(
        self,
        safes: SafeManager,
        members: MemberManager,
        accounts: AccountManager,
        notifier: Notifier,
    ) -> None:
        self.safes = safes
        self.members = members
        self.accounts = accounts
        self.notifier = notifier

        self._handlers: Dict[Tuple[ResourceKind, OperationKind], Callable[[Any], Awaitable[Any]]] = {
            (ResourceKind.SAFE, OperationKind.CREATE): self._create_safe,
            (ResourceKind.MEMBER, OperationKind.CREATE): self._add_member,
            (ResourceKind.ACCOUNT, OperationKind.CREATE): self._create_account,
            (ResourceKind.SAFE, OperationKind.REMOVE): self._delete_safe,
            (ResourceKind.MEMBER, OperationKind.REMOVE): self._remove_member,
            (ResourceKind.ACCOUNT, OperationKind.REMOVE): self._delete_account,
            (ResourceKind.SAFE, OperationKind.MODIFY): self._update_safe,
            (ResourceKind.MEMBER, OperationKind.MODIFY): self._update_member,
            (ResourceKind.ACCOUNT, OperationKind.MODIFY): self._update_account,
        }

    async def deploy(self, staging: StagingArea) -> DeploymentReport:
        """
        Deploy every staged item and clear the queues.

        Args:
            staging: Staging area to drain

        Returns:
            DeploymentReport with one outcome per staged item, in deploy order
        """
        total = staging.total
        report = DeploymentReport(total=total)
        if total == 0:
            self.notifier.warning(NOTHING_TO_DEPLOY)
            return report

        self.notifier.info(f"Starting deployment of {total} items...")
        logger.info("deployment_started", total=total, **staging.counts())

        for queue in staging.in_deploy_order():
            key = (queue.kind, queue.operation)
            for item in queue:
                report.outcomes.append(await self._deploy_item(key, item))

        staging.clear()
        self.notifier.success(f"✓ Deployment completed! {total} items processed.")
        logger.info(
            "deployment_completed",
            total=total,
            succeeded=len(report.succeeded),
            failed=len(report.failed),
        )
        return report

    async def _deploy_item(self, key: Tuple[ResourceKind, OperationKind], item: Any) -> ItemOutcome:
        kind, operation = key
        verb, past = _VERBS[key]
        label = item.label
        try:
            await self._handlers[key](item)
        except VaultStageError as e:
            self.notifier.error(f'✗ Failed to {verb} {kind.display_name} "{label}": {e.message}')
            return ItemOutcome(kind=kind, operation=operation, label=label, ok=False, error=e.message)

        self.notifier.success(f'✓ {kind.display_name} "{label}" {past} successfully!')
        return ItemOutcome(kind=kind, operation=operation, label=label, ok=True)

    async def _create_safe(self, safe: SafeRecord) -> Any:
        return await self.safes.create(safe)

    async def _add_member(self, member: MemberRecord) -> Any:
        return await self.members.add(member.safe_name, member)

    async def _create_account(self, account: AccountRecord) -> Any:
        return await self.accounts.create(account)

    async def _delete_safe(self, safe: SafeRecord) -> Any:
        return await self.safes.delete(safe.id)

    async def _remove_member(self, member: MemberRecord) -> Any:
        return await self.members.remove(member.safe_name, member.member_name)

    async def _delete_account(self, account: AccountRecord) -> Any:
        return await self.accounts.delete(account.id)

    async def _update_safe(self, safe: SafeRecord) -> Any:
        fields: Dict[str, Any] = {
            "managing_cpm": safe.managing_cpm,
            "number_of_versions_retention": safe.number_of_versions_retention,
            "number_of_days_retention": safe.number_of_days_retention,
        }
        if safe.description:
            fields["description"] = safe.description
        return await self.safes.update(safe.id, **fields)

    async def _update_member(self, member: MemberRecord) -> Any:
        return await self.members.update_permissions(
            member.safe_name,
            member.member_name,
            member.permissions,
        )

    async def _update_account(self, account: AccountRecord) -> Any:
        fields = {
            "address": account.address,
            "secret": account.secret,
            "user_name": account.user_name,
            "automatic_management_enabled": account.automatic_management_enabled,
            "manual_management_reason": account.manual_management_reason,
        }
        return await self.accounts.update(
            account.id,
            **{name: value for name, value in fields.items() if value is not None},
        )
