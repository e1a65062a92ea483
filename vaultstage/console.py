"""
Application controller.

StagingConsole owns all console state and exposes every state transition as
a named command. Commands never raise VaultStageError: failures become
notifications, and the command returns False (or None).
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import structlog

from .api.client import MISSING_CREDENTIALS, VaultApiClient
from .auth import LoginForm, SessionManager
from .auth.models import Session
from .client import VaultStage
from .config import BrandingConfig, StageConfig, load_branding
from .deploy import NOTHING_TO_DEPLOY, DeploymentEngine, DeploymentReport
from .errors import StaleDataWarning, VaultStageError
from .mirrors import MirrorRefresher, ResourceMirrors, new_mirrors
from .notifications import Notifier
from .staging import create, modify, remove
from .staging.forms import AccountForm, MemberForm, SafeForm, StandardMemberPanel
from .staging.queues import OperationKind, ResourceKind, StagingArea
from .storage import ClientStorage

logger = structlog.get_logger()

ApiFactory = Callable[[StageConfig, Session], VaultStage]


class Tab(str, Enum):
    """Console views. Modify and remove views are backed by a mirror."""

    DASHBOARD = "dashboard"
    SAFE_ADD = "safe-add"
    MEMBER_ADD = "member-add"
    ACCOUNT_ADD = "account-add"
    SAFE_MODIFY = "safe-modify"
    MEMBER_MODIFY = "member-modify"
    ACCOUNT_MODIFY = "account-modify"
    SAFE_REMOVE = "safe-remove"
    MEMBER_REMOVE = "member-remove"
    ACCOUNT_REMOVE = "account-remove"
    REVIEW_DEPLOY = "review-deploy"


# Tabs whose activation refreshes a mirror.
MIRROR_TABS: Dict[Tab, ResourceKind] = {
    Tab.SAFE_MODIFY: ResourceKind.SAFE,
    Tab.MEMBER_MODIFY: ResourceKind.MEMBER,
    Tab.ACCOUNT_MODIFY: ResourceKind.ACCOUNT,
    Tab.SAFE_REMOVE: ResourceKind.SAFE,
    Tab.MEMBER_REMOVE: ResourceKind.MEMBER,
    Tab.ACCOUNT_REMOVE: ResourceKind.ACCOUNT,
}

CONNECTED = "CONNECTED"
DISCONNECTED = "DISCONNECTED"


def default_api_factory(
    config: StageConfig,
    session: Session,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> VaultStage:
    """Build a VaultStage for an authenticated session."""
    api = VaultApiClient(
        session.vault_url,
        session.token,
        timeout=config.timeout,
        transport=transport,
    )
    return VaultStage(config=config, api=api)


class ConsoleState:
    """Everything the console shows or edits. Mutated only by commands."""

    def __init__(self, branding: BrandingConfig) -> None:
        self.branding = branding
        self.login_form = LoginForm()
        self.auth_error = ""
        self.active_tab = Tab.DASHBOARD

        self.safe_form = SafeForm()
        self.member_form = MemberForm()
        self.account_form = AccountForm()
        self.standard_members = StandardMemberPanel()

        self.mirrors: Dict[ResourceKind, ResourceMirrors] = new_mirrors()
        self.edits: Dict[ResourceKind, modify.EditSession] = {
            kind: modify.EditSession(kind=kind) for kind in ResourceKind
        }
        self.selections: Dict[ResourceKind, remove.SelectionSet] = {
            kind: remove.SelectionSet(kind=kind) for kind in ResourceKind
        }
        self.staging = StagingArea()


class StagingConsole:
    """
    Stages Safe, Member and Account changes and deploys them in one batch.

    Example:
        ```python
        console = StagingConsole(config, FileStorage(config.state_dir))
        await console.login("https://pvwa.example.com", "admin", password)

        console.state.safe_form.name = "Finance-01"
        console.state.safe_form.version_retention = 10
        console.stage_safe()

        report = await console.deploy()
        ```
    """

    def __init__(
        self,
        config: StageConfig,
        storage: ClientStorage,
        notifier: Optional[Notifier] = None,
        api_factory: Optional[ApiFactory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the console.

        Args:
            config: vaultstage configuration
            storage: Client storage for the session and branding
            notifier: Notification sink (a fresh Notifier by default)
            api_factory: Builds a VaultStage for a session
            transport: Optional httpx transport (tests)
        """
        self.config = config
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.transport = transport
        self.api_factory = api_factory or (
            lambda cfg, session: default_api_factory(cfg, session, transport=transport)
        )

        self.sessions = SessionManager(config, storage, transport=transport)
        self.state = ConsoleState(load_branding(storage))
        self.refresher = MirrorRefresher(self.state.mirrors)

        if config.vault_url:
            self.state.login_form.vault_url = config.vault_url

    @property
    def session(self) -> Session:
        return self.sessions.session

    # Session

    async def login(
        self,
        vault_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> bool:
        """Authenticate with the values given, or with the login form."""
        form = self.state.login_form
        if vault_url is not None:
            form.vault_url = vault_url
        if username is not None:
            form.username = username
        if password is not None:
            form.password = password

        if not form.vault_url or not form.username or not form.password:
            self.state.auth_error = MISSING_CREDENTIALS
            self.notifier.error(MISSING_CREDENTIALS)
            return False

        self.state.auth_error = ""
        self.notifier.info("Authenticating with CyberArk...")
        try:
            await self.sessions.login(form.vault_url, form.username, form.password)
        except VaultStageError as e:
            self.state.auth_error = e.message
            self.notifier.error(f"✗ Authentication failed: {e.message}")
            return False
        finally:
            form.password = ""

        self.notifier.success("✓ Successfully authenticated with CyberArk!")
        return True

    def debug_login(self) -> bool:
        try:
            session = self.sessions.debug_login()
        except VaultStageError as e:
            self.notifier.error(e.message)
            return False

        self.state.login_form.vault_url = session.vault_url
        self.notifier.success("✓ Debug mode enabled - bypassing authentication")
        return True

    def restore_session(self) -> bool:
        session = self.sessions.restore()
        if session is None:
            return False
        self.state.login_form.vault_url = session.vault_url
        return True

    def logout(self) -> bool:
        self.sessions.logout()
        self.state.active_tab = Tab.DASHBOARD
        self.notifier.success("✓ Logged out successfully")
        return True

    # Navigation

    async def activate_tab(self, tab: str) -> bool:
        """Switch views, refreshing the mirror behind modify and remove views."""
        try:
            tab = Tab(tab)
        except ValueError:
            self.notifier.error(f"Unknown view: {tab}")
            return False

        self.state.active_tab = tab
        kind = MIRROR_TABS.get(tab)
        if kind is not None and self.session.is_authenticated:
            await self.refresh(kind)
        return True

    async def refresh(self, kind: ResourceKind) -> bool:
        """Reload a mirror from the vault. The old snapshot survives a failure."""
        if not self.session.is_authenticated:
            return False
        stage = self.api_factory(self.config, self.session)
        try:
            return await self.refresher.refresh(stage, ResourceKind(kind))
        finally:
            await stage.close()

    # Create path

    def stage_safe(self) -> bool:
        return self._attempt(
            lambda: create.stage_safe(
                self.state.safe_form,
                self._queue(ResourceKind.SAFE, OperationKind.CREATE),
            )
        )

    def stage_custom_member(self) -> bool:
        return self._attempt(
            lambda: create.stage_custom_member(
                self.state.member_form,
                self._queue(ResourceKind.MEMBER, OperationKind.CREATE),
            )
        )

    def stage_standard_members(self, target_safe: Optional[str] = None) -> bool:
        """Stage the selected standard members on the member form's target Safe."""
        if target_safe is not None:
            self.state.member_form.target_safe = target_safe
        return self._attempt(
            lambda: create.stage_standard_members(
                self.state.member_form.target_safe,
                self.state.standard_members,
                self._queue(ResourceKind.MEMBER, OperationKind.CREATE),
            )
        )

    def toggle_standard_member(self, member: str) -> bool:
        return self._attempt(
            lambda: create.toggle_standard_member(self.state.standard_members, member)
        )

    def set_standard_member_permission(self, member: str, permission: str, value: bool) -> bool:
        return self._attempt(
            lambda: create.set_standard_member_permission(
                self.state.standard_members, member, permission, value
            )
        )

    def add_standard_member(
        self,
        member: str,
        domain: str = "Vault",
        permissions: Optional[Dict[str, bool]] = None,
    ) -> bool:
        return self._attempt(
            lambda: create.add_standard_member(
                self.state.standard_members, member, domain, permissions
            )
        )

    def remove_standard_member(self, member: str) -> bool:
        return self._attempt(
            lambda: create.remove_standard_member(self.state.standard_members, member)
        )

    def update_standard_member(self, member: str, **changes: Any) -> bool:
        return self._attempt(
            lambda: create.update_standard_member(self.state.standard_members, member, **changes)
        )

    def stage_account(self) -> bool:
        return self._attempt(
            lambda: create.stage_account(
                self.state.account_form,
                self._queue(ResourceKind.ACCOUNT, OperationKind.CREATE),
            )
        )

    # Modify path

    def begin_edit(self, kind: ResourceKind, record_id: str) -> Optional[Any]:
        kind = ResourceKind(kind)
        return self._run(
            lambda: modify.begin_edit(
                self.state.edits[kind],
                self.state.mirrors[kind].for_modification,
                record_id,
            )
        )

    def update_edit(self, kind: ResourceKind, **fields: Any) -> bool:
        kind = ResourceKind(kind)
        return self._attempt(lambda: modify.update_edit(self.state.edits[kind], **fields))

    def cancel_edit(self, kind: ResourceKind) -> bool:
        modify.cancel_edit(self.state.edits[ResourceKind(kind)])
        return True

    def save_edit(self, kind: ResourceKind) -> bool:
        kind = ResourceKind(kind)
        result: Optional[Tuple[Any, bool]] = self._run(
            lambda: modify.save_edit(
                self.state.edits[kind],
                self.state.mirrors[kind].for_modification,
                self._queue(kind, OperationKind.MODIFY),
            )
        )
        if result is None:
            return False

        record, replaced = result
        outcome = "updated in staging" if replaced else "staged for modification"
        self.notifier.success(f'{kind.display_name} "{record.label}" {outcome}!')
        return True

    # Remove path

    def toggle_selection(self, kind: ResourceKind, record_id: str) -> bool:
        return self.state.selections[ResourceKind(kind)].toggle(record_id)

    def set_filter(
        self,
        kind: ResourceKind,
        search: Optional[str] = None,
        safe: Optional[str] = None,
    ) -> bool:
        selection = self.state.selections[ResourceKind(kind)]
        return self._attempt(lambda: selection.set_filter(search=search, safe=safe))

    def filtered(self, kind: ResourceKind) -> List[Any]:
        """Records of a kind visible in the remove view."""
        kind = ResourceKind(kind)
        return remove.filtered(self.state.selections[kind], self.state.mirrors[kind].for_removal)

    def stage_removals(self, kind: ResourceKind) -> bool:
        kind = ResourceKind(kind)
        try:
            staged, skipped = remove.stage_removals(
                self.state.selections[kind],
                self.state.mirrors[kind].for_removal,
                self._queue(kind, OperationKind.REMOVE),
            )
        except StaleDataWarning as e:
            self.notifier.warning(e.message)
            return False
        except VaultStageError as e:
            self.notifier.error(e.message)
            return False

        if skipped:
            self.notifier.warning(remove.skipped_message(kind, skipped))
        logger.info("removals_staged", kind=kind.value, staged=len(staged))
        return True

    # Review & deploy

    def remove_staged(self, kind: ResourceKind, operation: OperationKind, index: int) -> bool:
        """Drop one entry from a staging queue."""
        return self._attempt(lambda: self._queue(kind, operation).remove_at(index))

    async def deploy(self) -> DeploymentReport:
        """Deploy every staged operation. The queues are empty afterwards."""
        staging = self.state.staging
        if staging.total == 0:
            self.notifier.warning(NOTHING_TO_DEPLOY)
            return DeploymentReport(total=0)
        if not self.session.is_authenticated:
            self.notifier.error("Please log in before deploying!")
            return DeploymentReport(total=0)

        stage = self.api_factory(self.config, self.session)
        try:
            engine = DeploymentEngine(stage.safes, stage.members, stage.accounts, self.notifier)
            return await engine.deploy(staging)
        finally:
            await stage.close()

    def summary(self) -> Dict[str, Any]:
        """Dashboard counts: per-queue lengths, total, and connection status."""
        staging = self.state.staging
        return {
            "queues": staging.counts(),
            "total": staging.total,
            "status": CONNECTED if self.session.is_authenticated else DISCONNECTED,
            "vault_url": self.session.vault_url,
            "debug": self.config.debug,
            "site_name": self.state.branding.site_name,
        }

    def _queue(self, kind: ResourceKind, operation: OperationKind):
        return self.state.staging.queue(kind, operation)

    def _run(self, command: Callable[[], Any]) -> Optional[Any]:
        try:
            return command()
        except VaultStageError as e:
            self.notifier.error(e.message)
            return None

    def _attempt(self, command: Callable[[], Any]) -> bool:
        try:
            command()
        except VaultStageError as e:
            self.notifier.error(e.message)
            return False
        return True
