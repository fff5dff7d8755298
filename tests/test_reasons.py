"""
Reason set store tests.
"""

import uuid

import pytest
from sqlalchemy import insert, select

from contact_directory.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from contact_directory.models import member_reasons
from contact_directory.schemas.reason import ReasonCreate, ReasonUpdate
from contact_directory.services.member_service import MemberService
from contact_directory.services.reason_service import ReasonService


async def _assigned(session, member_id):
    result = await session.execute(
        select(member_reasons.c.reason_id).where(member_reasons.c.member_id == member_id)
    )
    return set(result.scalars().all())


@pytest.mark.asyncio
async def test_create_reason_trims_label(test_db_session):
    reason = await ReasonService(test_db_session).create_reason(
        ReasonCreate(label="  Invoices  ", description="  ")
    )

    assert reason.label == "Invoices"
    assert reason.description is None


@pytest.mark.asyncio
@pytest.mark.parametrize("label", ["", "   "])
async def test_create_reason_requires_label(test_db_session, label):
    with pytest.raises(ValidationError):
        await ReasonService(test_db_session).create_reason(ReasonCreate(label=label))


@pytest.mark.asyncio
async def test_duplicate_label_conflicts(test_db_session, seed):
    await seed.reason("Invoices")

    with pytest.raises(ConflictError):
        await ReasonService(test_db_session).create_reason(ReasonCreate(label="Invoices"))


@pytest.mark.asyncio
async def test_catalog_order_is_stable(test_db_session, seed):
    for label in ["Support", "Invoices", "Contracts"]:
        await seed.reason(label)
    service = ReasonService(test_db_session)

    first = await service.list_catalog()
    second = await service.list_catalog()

    assert len(first) == 3
    assert [reason.id for reason in first] == [reason.id for reason in second]


@pytest.mark.asyncio
async def test_replace_member_reasons_is_full_replace(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    a, b, c = [await seed.reason(label) for label in ("A", "B", "C")]
    service = ReasonService(test_db_session)

    await service.replace_member_reasons(member.id, [a.id, b.id])
    result = await service.replace_member_reasons(member.id, [b.id, c.id])

    assert {ref.id for ref in result} == {b.id, c.id}
    assert await _assigned(test_db_session, member.id) == {b.id, c.id}


@pytest.mark.asyncio
async def test_replace_member_reasons_is_idempotent(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    a = await seed.reason("A")
    b = await seed.reason("B")
    service = ReasonService(test_db_session)

    first = await service.replace_member_reasons(member.id, [a.id, b.id])
    second = await service.replace_member_reasons(member.id, [b.id, a.id])

    assert first == second
    assert await _assigned(test_db_session, member.id) == {a.id, b.id}


@pytest.mark.asyncio
async def test_replace_with_empty_set_clears(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    a = await seed.reason("A")
    service = ReasonService(test_db_session)

    await service.replace_member_reasons(member.id, [a.id])
    assert await service.replace_member_reasons(member.id, []) == []
    assert await _assigned(test_db_session, member.id) == set()


@pytest.mark.asyncio
async def test_unknown_reason_leaves_set_unchanged(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    a = await seed.reason("A")
    b = await seed.reason("B")
    service = ReasonService(test_db_session)
    await service.replace_member_reasons(member.id, [a.id])

    with pytest.raises(NotFoundError):
        await service.replace_member_reasons(member.id, [b.id, uuid.uuid4()])

    assert await _assigned(test_db_session, member.id) == {a.id}


@pytest.mark.asyncio
async def test_replace_for_unknown_member(test_db_session):
    with pytest.raises(NotFoundError):
        await ReasonService(test_db_session).replace_member_reasons(uuid.uuid4(), [])


@pytest.mark.asyncio
async def test_delete_reason_detaches_assignments(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    a = await seed.reason("A")
    service = ReasonService(test_db_session)
    await service.replace_member_reasons(member.id, [a.id])

    await service.delete_reason(a.id)

    assert await _assigned(test_db_session, member.id) == set()
    assert await service.list_catalog() == []


@pytest.mark.asyncio
async def test_dangling_assignment_is_an_integrity_fault(test_db_session, seed):
    page = await seed.page()
    member = await seed.member(page, await seed.contact())
    # SQLite does not enforce the foreign key unless asked to
    await test_db_session.execute(
        insert(member_reasons).values(member_id=member.id, reason_id=uuid.uuid4())
    )
    await test_db_session.commit()

    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await MemberService(test_db_session).get_roster(page.id)
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_update_reason_label_conflict(test_db_session, seed):
    await seed.reason("A")
    b = await seed.reason("B")
    service = ReasonService(test_db_session)

    with pytest.raises(ConflictError):
        await service.update_reason(b.id, ReasonUpdate(label="A"))

    renamed = await service.update_reason(b.id, ReasonUpdate(label="Billing"))
    assert renamed.label == "Billing"
