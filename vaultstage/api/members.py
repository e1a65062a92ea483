"""
Safe member management for vaultstage.

Handles adding, listing, re-permissioning and removing members of a Safe.

Endpoints:
    POST   /safes/{safeName}/members
    GET    /safes/{safeName}/members
    PUT    /safes/{safeName}/members/{memberName}
    DELETE /safes/{safeName}/members/{memberName}
"""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from .client import encode_segment, unwrap_list
from .models import MemberRecord

if TYPE_CHECKING:
    from .client import VaultApiClient

MEMBER_TYPE = "Domain"


class MemberManager:
    """
    Manager for Safe membership operations.

    Memberships grant a principal a permission set on one Safe.

    Example:
        ```python
        stage = await VaultStage.create(vault_url=url, token=token)

        # Add a member to a Safe
        await stage.members.add("Finance-01", member)

        # List a Safe's members
        members = await stage.members.get_by_safe("Finance-01")

        # Change permissions
        await stage.members.update_permissions("Finance-01", "jdoe", perms)
        ```
    """

    def __init__(self, client: "VaultApiClient") -> None:
        """
        Initialize MemberManager.

        Args:
            client: Authenticated API client
        """
        self.client = client

    def _member_path(self, safe_name: str, member_name: str = "") -> str:
        path = f"/safes/{encode_segment(safe_name)}/members"
        if member_name:
            path = f"{path}/{encode_segment(member_name)}"
        return path

    async def add(self, safe_name: str, member: MemberRecord) -> Any:
        """
        Add a member to a Safe.

        Args:
            safe_name: Target Safe
            member: Member with its permission set

        Returns:
            Parsed server response

        Raises:
            ApiRequestError: If the member already exists or validation fails
        """
        payload = {
            "memberName": member.member_name,
            "memberType": MEMBER_TYPE,
            "searchIn": member.domain or MEMBER_TYPE,
            "permissions": dict(member.permissions),
        }
        return await self.client.request(self._member_path(safe_name), method="POST", body=payload)

    async def get_by_safe(self, safe_name: str) -> List[Dict[str, Any]]:
        """List the members of a Safe, as raw server records."""
        body = await self.client.request(self._member_path(safe_name), method="GET")
        return unwrap_list(body, "SafeMembers", "members")

    async def update_permissions(
        self,
        safe_name: str,
        member_name: str,
        permissions: Mapping[str, bool],
    ) -> Any:
        """Replace a member's permission set."""
        return await self.client.request(
            self._member_path(safe_name, member_name),
            method="PUT",
            body={"permissions": dict(permissions or {})},
        )

    async def remove(self, safe_name: str, member_name: str) -> Any:
        """Remove a member from a Safe."""
        return await self.client.request(self._member_path(safe_name, member_name), method="DELETE")
