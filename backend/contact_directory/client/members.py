"""
Per-page client view of a contact page and its roster.
Every mutating call goes through the optimistic sync engine.
"""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from contact_directory.client.api import ContactPagesAPI
from contact_directory.client.cache import CacheKey
from contact_directory.client.sync_engine import OptimisticSyncEngine
from contact_directory.core.exceptions import PartialFailureError, ValidationError
from contact_directory.core.logging import get_logger
from contact_directory.core.roles import decode

logger = get_logger(__name__)

REASONS_KEY: CacheKey = ("contact-reasons",)

PENDING_PREFIX = "pending-"


def members_key(page_id: str) -> CacheKey:
    return ("contact-page-members", str(page_id))


def page_key(page_id: str) -> CacheKey:
    return ("contact-page", str(page_id))


def available_key(page_id: str) -> CacheKey:
    return ("available-contacts", str(page_id))


def _sorted(roster: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(roster, key=lambda member: member["order_index"])


def _replace(roster: List[Dict[str, Any]], member_id: str, member: Dict[str, Any]) -> List[Dict[str, Any]]:
    return _sorted([member if str(item["id"]) == member_id else item for item in roster])


class ContactPageMembers:
    """
    Cached view of one contact page, its roster and the contacts that can
    still be added to it.
    """

    def __init__(self, page_id: str, api: ContactPagesAPI, engine: Optional[OptimisticSyncEngine] = None):
        self.page_id = str(page_id)
        self.api = api
        self.engine = engine if engine is not None else OptimisticSyncEngine()

        self.members_key = members_key(self.page_id)
        self.page_key = page_key(self.page_id)
        self.available_key = available_key(self.page_id)

        self.engine.register_fetcher(self.members_key, lambda: self.api.get_members(self.page_id))
        self.engine.register_fetcher(self.page_key, lambda: self.api.get_page(self.page_id))
        self.engine.register_fetcher(self.available_key, lambda: self.api.get_available_contacts(self.page_id))
        self.engine.register_fetcher(REASONS_KEY, self.api.list_reasons)

    async def load(self) -> List[Dict[str, Any]]:
        """Load page, roster, available contacts and the reason catalog."""
        await self.engine.load(self.page_key)
        await self.engine.load(self.available_key)
        await self.engine.load(REASONS_KEY)
        return await self.engine.load(self.members_key)

    @property
    def members(self) -> List[Dict[str, Any]]:
        return self.engine.get(self.members_key, [])

    @property
    def page(self) -> Optional[Dict[str, Any]]:
        return self.engine.get(self.page_key)

    @property
    def available_contacts(self) -> List[Dict[str, Any]]:
        return self.engine.get(self.available_key, [])

    async def add_member(self, contact_id: str, role: str, order_index: Optional[int] = None) -> Dict[str, Any]:
        """
        Add a contact. A placeholder row with a ``pending-`` id shows until the
        server answers, then the created member replaces it.
        """
        # Bad roles fail here, before anything is cached or sent
        decode(role)
        contact_id = str(contact_id)
        placeholder_id = f"{PENDING_PREFIX}{uuid.uuid4()}"
        contact = next(
            (item for item in self.available_contacts if str(item["id"]) == contact_id),
            {},
        )

        def apply(roster):
            roster = roster or []
            roster.append({
                "id": placeholder_id,
                "page_id": self.page_id,
                "contact_id": contact_id,
                "name": contact.get("name"),
                "title": contact.get("title"),
                "email": contact.get("email"),
                "phone": contact.get("phone"),
                "photo_url": contact.get("photo_url"),
                "role": role,
                "order_index": len(roster) if order_index is None else order_index,
                "reasons": [],
            })
            return _sorted(roster)

        created = await self.engine.mutate(
            self.members_key,
            apply,
            lambda: self.api.add_member(self.page_id, contact_id, role, order_index),
            reconcile=lambda roster, member: _replace(roster or [], placeholder_id, member),
            name="add_member",
        )
        await self.engine.refresh(self.available_key)
        return created

    async def update_member(
        self,
        member_id: str,
        role: Optional[str] = None,
        order_index: Optional[int] = None,
        reason_ids: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Change role, position and/or the full reason set of one member."""
        member_id = str(member_id)
        fields: Dict[str, Any] = {}
        if role is not None:
            decode(role)
            fields["role"] = role
        if order_index is not None:
            fields["order_index"] = order_index
        if reason_ids is not None:
            fields["reason_ids"] = [str(reason_id) for reason_id in reason_ids]

        def apply(roster):
            roster = roster or []
            for member in roster:
                if str(member["id"]) == member_id:
                    if "role" in fields:
                        member["role"] = fields["role"]
                    if "order_index" in fields:
                        member["order_index"] = fields["order_index"]
                    if "reason_ids" in fields:
                        member["reasons"] = self._reason_refs(fields["reason_ids"])
            return _sorted(roster)

        return await self.engine.mutate(
            self.members_key,
            apply,
            lambda: self.api.update_member(member_id, fields),
            reconcile=lambda roster, member: _replace(roster or [], member_id, member),
            name="update_member",
        )

    async def remove_member(self, member_id: str) -> None:
        """Remove a member. Remaining positions are left as they are until the next reorder."""
        member_id = str(member_id)
        await self.engine.mutate(
            self.members_key,
            lambda roster: [member for member in roster or [] if str(member["id"]) != member_id],
            lambda: self.api.remove_member(member_id),
            name="remove_member",
        )
        await self.engine.refresh(self.available_key)

    async def reorder_members(self, order: Iterable[Tuple[str, int]]) -> Dict[str, Any]:
        """
        Move members to new positions, given ``(member_id, order_index)`` pairs.

        On partial failure some pairs were applied on the server, so the
        restored snapshot is not trusted and the roster is refetched before
        the error is raised.

        Raises:
            ValidationError: if a member appears twice, before anything is sent
        """
        positions: Dict[str, int] = {}
        duplicates = set()
        for member_id, index in order:
            member_id = str(member_id)
            if member_id in positions:
                duplicates.add(member_id)
            positions[member_id] = index
        if duplicates:
            raise ValidationError(
                "Each member may appear only once in a reorder batch",
                details={"member_ids": sorted(duplicates)},
            )

        def apply(roster):
            roster = roster or []
            for member in roster:
                if str(member["id"]) in positions:
                    member["order_index"] = positions[str(member["id"])]
            return _sorted(roster)

        try:
            return await self.engine.mutate(
                self.members_key,
                apply,
                lambda: self.api.reorder_members(
                    self.page_id,
                    [{"member_id": member_id, "order_index": index} for member_id, index in positions.items()],
                ),
                name="reorder_members",
            )
        except PartialFailureError as exc:
            # The engine has already refetched the roster after the rollback
            logger.warning(
                "Reorder partially applied",
                extra={"page_id": self.page_id, "failed_ids": exc.failed_ids},
            )
            raise

    async def update_member_reasons(self, member_id: str, reason_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Replace the whole reason set of a member."""
        member_id = str(member_id)
        reason_ids = [str(reason_id) for reason_id in reason_ids]

        def apply(roster):
            roster = roster or []
            for member in roster:
                if str(member["id"]) == member_id:
                    member["reasons"] = self._reason_refs(reason_ids)
            return roster

        def reconcile(roster, reasons):
            roster = roster or []
            for member in roster:
                if str(member["id"]) == member_id:
                    member["reasons"] = reasons
            return roster

        return await self.engine.mutate(
            self.members_key,
            apply,
            lambda: self.api.update_member_reasons(member_id, reason_ids),
            reconcile=reconcile,
            name="update_member_reasons",
        )

    async def toggle_publish(self) -> Dict[str, Any]:
        """Flip the publish flag. A slug conflict rolls the flag back."""
        def apply(page):
            if page is not None:
                page["is_published"] = not page["is_published"]
            return page

        return await self.engine.mutate(
            self.page_key,
            apply,
            lambda: self.api.toggle_publish(self.page_id),
            reconcile=lambda page, response: response,
            name="toggle_publish",
        )

    async def update_contact_page(self, **fields: Any) -> Dict[str, Any]:
        def apply(page):
            if page is not None:
                page.update(fields)
            return page

        return await self.engine.mutate(
            self.page_key,
            apply,
            lambda: self.api.update_page(self.page_id, fields),
            reconcile=lambda page, response: response,
            name="update_contact_page",
        )

    def _reason_refs(self, reason_ids: List[str]) -> List[Dict[str, Any]]:
        catalog = {str(reason["id"]): reason for reason in self.engine.get(REASONS_KEY, [])}
        refs = []
        for reason_id in reason_ids:
            reason = catalog.get(reason_id, {})
            refs.append({"id": reason_id, "label": reason.get("label", "")})
        return refs
