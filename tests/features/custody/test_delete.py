# (c) Copyright Datacraft, 2026
"""Tests for best-effort deletion across the custody backends."""
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from trustdoc.core.exceptions import DocumentNotFoundError, ForbiddenError, MetadataPersistError
from trustdoc.core.features.custody import http_status_for
from trustdoc.core.features.documents import DocumentCreate
from trustdoc.core.ledger import LedgerError
from trustdoc.core.storage import LOCAL_ONLY_NOTICE, ContentReclaimError
from trustdoc.core.types import CustodyBackend, DeletionStatus, DocumentLifecycle, RoleType


@pytest_asyncio.fixture
async def ingested(fast_orchestrator):
    result = await fast_orchestrator.ingest("u1", b"B" * 64, "b.txt", "Buffer B")
    return result.document


@pytest.mark.asyncio
async def test_complete_delete(fast_orchestrator, ingested, ledger, content_store, metadata):
    result = await fast_orchestrator.delete(ingested.id, "u1", RoleType.USER)

    assert result.status == DeletionStatus.COMPLETE
    assert set(result.succeeded_backends) == {
        CustodyBackend.METADATA, CustodyBackend.CONTENT, CustodyBackend.LEDGER,
    }
    assert result.errors == []
    assert result.notice == LOCAL_ONLY_NOTICE
    assert http_status_for(result) == 200

    assert await ledger.is_active(ingested.ledger_id) is False
    assert await content_store.is_pinned(ingested.content_address) is False
    assert await metadata.list_by_owner("u1") == []
    assert (await metadata.get_by_id(ingested.id)).lifecycle == DocumentLifecycle.SOFT_DELETED


@pytest.mark.asyncio
@pytest.mark.parametrize("failing", [
    CustodyBackend.METADATA,
    CustodyBackend.CONTENT,
    CustodyBackend.LEDGER,
])
async def test_one_failing_backend_gives_partial(fast_orchestrator, ingested, metadata, content_store, ledger, failing):
    """Test that exactly one failing backend yields partial with two successes."""
    if failing == CustodyBackend.METADATA:
        metadata.mark_deleted_locally = AsyncMock(side_effect=MetadataPersistError("db down"))
    elif failing == CustodyBackend.CONTENT:
        content_store.unpin = AsyncMock(side_effect=ContentReclaimError("node refused"))
    else:
        ledger.soft_delete = AsyncMock(side_effect=LedgerError("gateway down"))

    result = await fast_orchestrator.delete(ingested.id, "u1", RoleType.USER)

    assert result.status == DeletionStatus.PARTIAL
    assert len(result.succeeded_backends) == 2
    assert failing not in result.succeeded_backends
    assert len(result.errors) == 1
    assert result.errors[0].backend == failing
    assert http_status_for(result) == 207


@pytest.mark.asyncio
async def test_all_backends_failing_gives_none(fast_orchestrator, ingested, metadata, content_store, ledger):
    metadata.mark_deleted_locally = AsyncMock(side_effect=MetadataPersistError("db down"))
    content_store.unpin = AsyncMock(side_effect=ContentReclaimError("node refused"))
    ledger.soft_delete = AsyncMock(side_effect=LedgerError("gateway down"))

    result = await fast_orchestrator.delete(ingested.id, "u1", RoleType.USER)

    assert result.status == DeletionStatus.NONE
    assert result.succeeded_backends == []
    assert {e.backend for e in result.errors} == {
        CustodyBackend.METADATA, CustodyBackend.CONTENT, CustodyBackend.LEDGER,
    }
    assert http_status_for(result) == 502


@pytest.mark.asyncio
async def test_partial_delete_can_be_retried(fast_orchestrator, ingested, metadata):
    metadata.mark_deleted_locally = AsyncMock(side_effect=MetadataPersistError("db down"))
    first = await fast_orchestrator.delete(ingested.id, "u1", RoleType.USER)
    assert first.status == DeletionStatus.PARTIAL

    del metadata.mark_deleted_locally
    second = await fast_orchestrator.delete(ingested.id, "u1", RoleType.USER)
    assert second.status == DeletionStatus.COMPLETE


@pytest.mark.asyncio
@pytest.mark.parametrize("requester_id,role", [
    ("u2", RoleType.USER),
    ("u1", RoleType.ORGANIZATION_ADMIN),
    ("u1", RoleType.SUPER_ADMIN),
    ("admin", RoleType.SUPER_ADMIN),
    ("u1", 999),
])
async def test_forbidden_delete_has_no_side_effects(fast_orchestrator, ingested, ledger, content_store, requester_id, role):
    ledger.soft_delete = AsyncMock()
    content_store.unpin = AsyncMock()

    with pytest.raises(ForbiddenError):
        await fast_orchestrator.delete(ingested.id, requester_id, role)

    ledger.soft_delete.assert_not_awaited()
    content_store.unpin.assert_not_awaited()
    assert (await fast_orchestrator.get(ingested.id)).deleted is False


@pytest.mark.asyncio
async def test_delete_missing_document(fast_orchestrator, ledger):
    ledger.soft_delete = AsyncMock()
    with pytest.raises(DocumentNotFoundError):
        await fast_orchestrator.delete("missing", "u1", RoleType.USER)
    ledger.soft_delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_references_are_noop_successes(fast_orchestrator, metadata, ledger, content_store):
    degraded = await metadata.create(DocumentCreate(title="t", filename="f", owner_id="u1"))
    ledger.soft_delete = AsyncMock()
    content_store.unpin = AsyncMock()

    result = await fast_orchestrator.delete(degraded.id, "u1", RoleType.USER)

    assert result.status == DeletionStatus.COMPLETE
    ledger.soft_delete.assert_not_awaited()
    content_store.unpin.assert_not_awaited()
