"""
Account management against the vault REST API.

Endpoints:
    POST   /accounts
    GET    /accounts
    GET    /accounts?search={q}
    PUT    /accounts/{id}
    DELETE /accounts/{id}
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .client import encode_segment, unwrap_list
from .models import AccountRecord
from .safes import UNSET

if TYPE_CHECKING:
    from .client import VaultApiClient


class AccountManager:
    """
    Manager for Account CRUD operations.

    Example:
        ```python
        await stage.accounts.create(account)
        matches = await stage.accounts.search("db-server")
        await stage.accounts.update(account.id, address="10.0.0.6")
        ```
    """

    def __init__(self, client: "VaultApiClient") -> None:
        self.client = client

    async def create(self, account: AccountRecord) -> Any:
        """
        Create an Account.

        The object id, when present, is sent as ``id``.
        """
        payload: Dict[str, Any] = {
            "name": account.user_name,
            "address": account.address,
            "userName": account.user_name,
            "secret": account.secret,
            "platformId": account.platform_id,
            "safeName": account.safe_name,
            "automaticManagementEnabled": account.automatic_management_enabled is True,
            "manualManagementReason": account.manual_management_reason or None,
            "remoteMachinesAccess": "Yes" if account.remote_machines else "No",
        }
        if account.object_id:
            payload["id"] = account.object_id

        return await self.client.request("/accounts", method="POST", body=payload)

    async def get_all(self) -> List[Dict[str, Any]]:
        """List every Account visible to the session, as raw server records."""
        body = await self.client.request("/accounts", method="GET")
        return unwrap_list(body, "Accounts")

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """Search Accounts by keyword."""
        body = await self.client.request("/accounts", method="GET", params={"search": query})
        return unwrap_list(body, "Accounts")

    async def update(
        self,
        account_id: str,
        *,
        address: Optional[str] = UNSET,
        secret: Optional[str] = UNSET,
        user_name: Optional[str] = UNSET,
        automatic_management_enabled: Optional[bool] = UNSET,
        manual_management_reason: Optional[str] = UNSET,
    ) -> Any:
        """
        Update an Account. Only the fields passed are sent.
        """
        fields = {
            "address": address,
            "secret": secret,
            "userName": user_name,
            "automaticManagementEnabled": automatic_management_enabled,
            "manualManagementReason": manual_management_reason,
        }
        payload = {key: value for key, value in fields.items() if value is not UNSET}

        return await self.client.request(
            f"/accounts/{encode_segment(account_id)}",
            method="PUT",
            body=payload,
        )

    async def delete(self, account_id: str) -> Any:
        """Delete an Account."""
        return await self.client.request(f"/accounts/{encode_segment(account_id)}", method="DELETE")
