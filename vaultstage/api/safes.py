"""
Safe management against the vault REST API.

Endpoints:
    POST   /safes
    GET    /safes
    GET    /safes/{id}
    PUT    /safes/{id}
    DELETE /safes/{id}
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .client import encode_segment, unwrap_list
from .models import SafeRecord

if TYPE_CHECKING:
    from .client import VaultApiClient

UNSET: Any = object()


class SafeManager:
    """
    Manager for Safe CRUD operations.

    Example:
        ```python
        stage = await VaultStage.create(vault_url=url, token=token)

        await stage.safes.create(SafeRecord(id="Finance-01", name="Finance-01",
                                            number_of_versions_retention=10))
        safes = await stage.safes.get_all()
        await stage.safes.update("Finance-01", managing_cpm="PasswordManager")
        await stage.safes.delete("Finance-01")
        ```
    """

    def __init__(self, client: "VaultApiClient") -> None:
        """
        Initialize SafeManager.

        Args:
            client: Authenticated API client
        """
        self.client = client

    async def create(self, safe: SafeRecord) -> Any:
        """
        Create a Safe.

        Args:
            safe: Safe to create; only one retention field is set

        Returns:
            Parsed server response

        Raises:
            ApiRequestError: If the vault rejects the request
        """
        payload = {
            "safeName": safe.name,
            "description": safe.description or "",
            "managingCPM": safe.managing_cpm,
            "numberOfVersionsRetention": safe.number_of_versions_retention or None,
            "numberOfDaysRetention": safe.number_of_days_retention or None,
        }
        return await self.client.request("/safes", method="POST", body=payload)

    async def get_all(self) -> List[Dict[str, Any]]:
        """List every Safe visible to the session, as raw server records."""
        body = await self.client.request("/safes", method="GET")
        return unwrap_list(body, "Safes")

    async def get(self, safe_id: str) -> Any:
        """Get a single Safe by id (its name on most vaults)."""
        return await self.client.request(f"/safes/{encode_segment(safe_id)}", method="GET")

    async def update(
        self,
        safe_id: str,
        *,
        description: Optional[str] = UNSET,
        managing_cpm: Optional[str] = UNSET,
        number_of_versions_retention: Optional[int] = UNSET,
        number_of_days_retention: Optional[int] = UNSET,
    ) -> Any:
        """
        Update a Safe.

        Only the fields passed are sent; passing None sends an explicit null.

        Args:
            safe_id: Safe id
            description: New description
            managing_cpm: New managing CPM
            number_of_versions_retention: Versions to retain
            number_of_days_retention: Days to retain

        Returns:
            Parsed server response
        """
        fields = {
            "description": description,
            "managingCPM": managing_cpm,
            "numberOfVersionsRetention": number_of_versions_retention,
            "numberOfDaysRetention": number_of_days_retention,
        }
        payload = {key: value for key, value in fields.items() if value is not UNSET}

        return await self.client.request(
            f"/safes/{encode_segment(safe_id)}",
            method="PUT",
            body=payload,
        )

    async def delete(self, safe_id: str) -> Any:
        """Delete a Safe."""
        return await self.client.request(f"/safes/{encode_segment(safe_id)}", method="DELETE")
