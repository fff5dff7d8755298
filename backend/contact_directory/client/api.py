"""
Typed client for the contact directory admin API.
"""

from typing import Any, Dict, List, Optional

from contact_directory.client.errors import error_from_response
from contact_directory.core.config import settings
from contact_directory.core.integrations.http.http_client import HttpClient


class ContactPagesAPI:
    """Remote calls used by the optimistic sync engine. Payloads are plain JSON values."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        http_client: Optional[HttpClient] = None,
    ):
        if http_client is None:
            token = token if token is not None else settings.API_TOKEN
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            http_client = HttpClient(
                base_url=base_url or settings.API_BASE_URL,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                max_retries=settings.HTTP_MAX_RETRIES,
                retry_delay=settings.HTTP_RETRY_DELAY_SECONDS,
                headers=headers,
                error_factory=error_from_response,
            )
        self.http = http_client

    async def close(self) -> None:
        await self.http.close()

    # Pages

    async def get_page(self, page_id: str) -> Dict[str, Any]:
        return await self.http.get(f"/contact-pages/{page_id}")

    async def update_page(self, page_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.http.put(f"/contact-pages/{page_id}", json=fields)

    async def toggle_publish(self, page_id: str) -> Dict[str, Any]:
        return await self.http.patch(f"/contact-pages/{page_id}/publish")

    # Roster

    async def get_members(self, page_id: str) -> List[Dict[str, Any]]:
        payload = await self.http.get(f"/contact-pages/{page_id}/members")
        return payload["items"]

    async def add_member(
        self,
        page_id: str,
        contact_id: str,
        role: str,
        order_index: Optional[int] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"contact_id": contact_id, "role": role}
        if order_index is not None:
            body["order_index"] = order_index
        return await self.http.post(f"/contact-pages/{page_id}/members", json=body)

    async def update_member(self, member_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.http.put(f"/contact-pages/members/{member_id}", json=fields)

    async def remove_member(self, member_id: str) -> None:
        await self.http.delete(f"/contact-pages/members/{member_id}")

    async def reorder_members(self, page_id: str, order: List[Dict[str, Any]]) -> Dict[str, Any]:
        """``order`` is a list of ``{"member_id", "order_index"}`` pairs."""
        return await self.http.patch(f"/contact-pages/{page_id}/members/reorder", json={"order": order})

    async def update_member_reasons(self, member_id: str, reason_ids: List[str]) -> List[Dict[str, Any]]:
        return await self.http.post(
            f"/contact-pages/members/{member_id}/reasons",
            json={"reason_ids": reason_ids},
        )

    async def get_available_contacts(self, page_id: str) -> List[Dict[str, Any]]:
        payload = await self.http.get(f"/contact-pages/{page_id}/available-contacts")
        return payload["items"]

    # Reason catalog

    async def list_reasons(self) -> List[Dict[str, Any]]:
        payload = await self.http.get("/contact-reasons")
        return payload["items"]

    async def create_reason(self, label: str, description: Optional[str] = None) -> Dict[str, Any]:
        return await self.http.post("/contact-reasons", json={"label": label, "description": description})
