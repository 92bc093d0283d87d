# (c) Copyright Datacraft, 2026
"""Tests for the document metadata store."""
import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from trustdoc.core.exceptions import DocumentNotFoundError, MetadataPersistError
from trustdoc.core.features.documents import DocumentCreate, MetadataStore
from trustdoc.core.types import CustodyState, DocumentLifecycle

H = "d" * 64


def complete(owner_id="u1", ledger_id=1, **kwargs) -> DocumentCreate:
    return DocumentCreate(
        title=kwargs.get("title", "Report"),
        filename="report.pdf",
        owner_id=owner_id,
        content_hash=H,
        content_address="b3-" + "e" * 64,
        content_path="/trustdoc/u1/x",
        ledger_id=ledger_id,
    )


@pytest.mark.asyncio
async def test_create_and_get(metadata):
    created = await metadata.create(complete())
    document = await metadata.get_by_id(created.id)

    assert document.content_hash == H
    assert document.ledger_id == 1
    assert document.lifecycle == DocumentLifecycle.ACTIVE
    assert document.custody_state == CustodyState.COMPLETE
    assert document.signed is False
    assert (await metadata.get_by_ledger_id(1)).id == created.id
    assert await metadata.get_by_ledger_id(2) is None


@pytest.mark.asyncio
async def test_missing_references_are_degraded(metadata):
    created = await metadata.create(DocumentCreate(title="t", filename="f", owner_id="u1"))
    assert created.custody_state == CustodyState.DEGRADED


@pytest.mark.asyncio
async def test_get_missing_document(metadata):
    with pytest.raises(DocumentNotFoundError):
        await metadata.get_by_id("nope")


@pytest.mark.asyncio
async def test_lists_exclude_deleted_newest_first(metadata):
    first = await metadata.create(complete(ledger_id=1, title="first"))
    await asyncio.sleep(0.01)
    second = await metadata.create(complete(ledger_id=2, title="second"))
    await metadata.create(complete(owner_id="u2", ledger_id=3))
    deleted = await metadata.create(complete(ledger_id=4))
    await metadata.mark_deleted_locally(deleted.id)
    await metadata.mark_deleted_locally(deleted.id)

    owned = await metadata.list_by_owner("u1")
    assert [d.id for d in owned] == [second.id, first.id]

    members = await metadata.list_by_organization_members(["u1", "u2"])
    assert len(members) == 3
    assert await metadata.list_by_organization_members([]) == []

    assert (await metadata.get_by_id(deleted.id)).lifecycle == DocumentLifecycle.SOFT_DELETED


@pytest.mark.asyncio
async def test_signed_and_revoked_are_set_once(metadata):
    created = await metadata.create(complete())

    signed = await metadata.mark_signed(created.id)
    again = await metadata.mark_signed(created.id)
    assert signed.signed is True
    assert again.signed_at == signed.signed_at

    revoked = await metadata.mark_revoked(created.id)
    again = await metadata.mark_revoked(created.id)
    assert revoked.revoked is True
    assert again.revoked_at == revoked.revoked_at


@pytest.mark.asyncio
async def test_set_lifecycle(metadata):
    created = await metadata.create(complete())

    soft = await metadata.set_lifecycle(created.id, DocumentLifecycle.SOFT_DELETED)
    assert soft.deleted is True
    active = await metadata.set_lifecycle(created.id, DocumentLifecycle.ACTIVE)
    assert active.deleted is False


@pytest.mark.asyncio
async def test_shared_content(metadata):
    first = await metadata.create(complete(ledger_id=1))
    second = await metadata.create(complete(ledger_id=2))
    address = first.content_address

    assert await metadata.is_content_shared(address, first.id) is True
    await metadata.mark_deleted_locally(second.id)
    assert await metadata.is_content_shared(address, first.id) is False


@pytest.mark.asyncio
async def test_duplicate_ledger_id_is_a_persist_error(metadata):
    await metadata.create(complete(ledger_id=1))
    with pytest.raises(MetadataPersistError):
        await metadata.create(complete(ledger_id=1))


@pytest.mark.asyncio
async def test_database_failure_is_a_persist_error():
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    store = MetadataStore(MagicMock(side_effect=broken_session))
    with pytest.raises(MetadataPersistError):
        await store.create(complete())
    assert await store.health_check() is False
