# (c) Copyright Datacraft, 2026
"""Tests for registry semantics through the in-memory ledger."""
import asyncio

import pytest
import pytest_asyncio

from trustdoc.core.ledger import (
    MAX_FILE_SIZE,
    ZERO_ADDRESS,
    DuplicateActiveHashError,
    LedgerAlreadyActiveError,
    LedgerAlreadyDeletedError,
    LedgerConfig,
    LedgerHashClaimedElsewhereError,
    LedgerInvalidArgumentError,
    LedgerInvalidIdError,
    LedgerSigner,
    LedgerSizeOutOfRangeError,
    LedgerUnauthorizedError,
    MemoryLedger,
    get_ledger,
    reset_ledger,
)
from trustdoc.core.types import LedgerBackend

SERVICE_ADDRESS = "0x" + "5e" * 20
OTHER_ADDRESS = "0x" + "0f" * 20
H = "a" * 64
H2 = "b" * 64


@pytest_asyncio.fixture
async def other_ledger(contract):
    """A second wallet talking to the same registry."""
    signer = LedgerSigner(OTHER_ADDRESS)
    await signer.open()
    return MemoryLedger(contract, signer)


@pytest.mark.asyncio
async def test_register_assigns_sequential_ids(ledger):
    first = await ledger.register("a.pdf", 10, H)
    second = await ledger.register("b.pdf", 20, H2)

    assert (first.ledger_id, second.ledger_id) == (1, 2)
    assert second.block_number > first.block_number
    assert first.tx_ref.startswith("0x")

    record = await ledger.get(1)
    assert record.file_name == "a.pdf"
    assert record.content_hash == H
    assert record.uploader == SERVICE_ADDRESS
    assert record.is_active
    assert await ledger.total_records() == 2


@pytest.mark.asyncio
async def test_duplicate_active_hash_then_reregister_after_soft_delete(ledger):
    """Test hash uniqueness across soft deletion."""
    await ledger.register("a.pdf", 10, H)
    with pytest.raises(DuplicateActiveHashError):
        await ledger.register("a.pdf", 10, H)

    await ledger.soft_delete(1)
    receipt = await ledger.register("a.pdf", 10, H)

    assert receipt.ledger_id == 2
    assert await ledger.get_id_by_hash(H) == 2


@pytest.mark.asyncio
async def test_commit_rejects_duplicate_missed_by_preflight(ledger, contract):
    """Test that the commit, not the preflight, enforces uniqueness."""
    await ledger.register("a.pdf", 10, H)
    with pytest.raises(DuplicateActiveHashError):
        await ledger._submit_register("a.pdf", 10, H)
    assert await ledger.total_records() == 1


@pytest.mark.asyncio
async def test_restore_rejected_while_hash_claimed_elsewhere(ledger):
    await ledger.register("a.pdf", 10, H)
    await ledger.soft_delete(1)
    await ledger.register("a.pdf", 10, H)

    with pytest.raises(LedgerHashClaimedElsewhereError):
        await ledger.restore(1)

    await ledger.soft_delete(2)
    await ledger.restore(1)

    assert await ledger.is_active(1)
    assert await ledger.get_id_by_hash(H) == 1


@pytest.mark.asyncio
async def test_restore_and_soft_delete_state_errors(ledger):
    await ledger.register("a.pdf", 10, H)
    with pytest.raises(LedgerAlreadyActiveError):
        await ledger.restore(1)

    await ledger.soft_delete(1)
    with pytest.raises(LedgerAlreadyDeletedError):
        await ledger.soft_delete(1)
    # The map still points at the inactive record
    assert await ledger.get_id_by_hash(H) == 1
    assert (await ledger.get_by_hash(H)).is_active is False


@pytest.mark.asyncio
async def test_hard_delete_clears_map_only_when_it_points_to_the_id(ledger):
    await ledger.register("a.pdf", 10, H)
    await ledger.soft_delete(1)
    await ledger.register("a.pdf", 10, H)

    await ledger.hard_delete(1)
    assert await ledger.get_id_by_hash(H) == 2

    await ledger.hard_delete(2)
    assert await ledger.get_id_by_hash(H) == 0
    assert await ledger.get_by_hash(H) is None

    erased = await ledger.get(2)
    assert erased.erased
    assert erased.uploader == ZERO_ADDRESS
    with pytest.raises(LedgerInvalidIdError):
        await ledger.restore(2)


@pytest.mark.asyncio
async def test_invalid_ids(ledger):
    with pytest.raises(LedgerInvalidIdError):
        await ledger.get(0)
    with pytest.raises(LedgerInvalidIdError):
        await ledger.soft_delete(7)


@pytest.mark.asyncio
async def test_argument_bounds(ledger):
    with pytest.raises(LedgerSizeOutOfRangeError):
        await ledger.register("a.pdf", 0, H)
    with pytest.raises(LedgerSizeOutOfRangeError):
        await ledger.register("a.pdf", MAX_FILE_SIZE + 1, H)
    with pytest.raises(LedgerInvalidArgumentError):
        await ledger.register("", 10, H)
    with pytest.raises(LedgerInvalidArgumentError):
        await ledger.register("x" * 257, 10, H)
    with pytest.raises(LedgerInvalidArgumentError):
        await ledger.get_id_by_hash("")

    receipt = await ledger.register("big.bin", MAX_FILE_SIZE, H)
    assert (await ledger.get(receipt.ledger_id)).file_size == MAX_FILE_SIZE


@pytest.mark.asyncio
async def test_soft_delete_requires_uploader_or_administrator(ledger, other_ledger):
    await other_ledger.register("theirs.pdf", 10, H)
    await ledger.register("ours.pdf", 10, H2)

    with pytest.raises(LedgerUnauthorizedError):
        await other_ledger.soft_delete(2)
    # The administrator may soft-delete anyone's record
    await ledger.soft_delete(1)


@pytest.mark.asyncio
async def test_administration(ledger, other_ledger):
    assert await ledger.is_administrator()
    assert not await other_ledger.is_administrator()

    with pytest.raises(LedgerUnauthorizedError):
        await other_ledger.hard_delete(1)
    with pytest.raises(LedgerInvalidArgumentError):
        await ledger.transfer_administration(SERVICE_ADDRESS)
    with pytest.raises(LedgerInvalidArgumentError):
        await ledger.transfer_administration(ZERO_ADDRESS)

    await ledger.transfer_administration(OTHER_ADDRESS)
    assert await other_ledger.is_administrator()

    await other_ledger.renounce_administration()
    await ledger.register("a.pdf", 10, H)
    for registrar in (ledger, other_ledger):
        with pytest.raises(LedgerUnauthorizedError):
            await registrar.hard_delete(1)


@pytest.mark.asyncio
async def test_stats_and_health(ledger, contract):
    await ledger.register("a.pdf", 10, H)
    stats = await ledger.stats()

    assert stats["total_records"] == 1
    assert stats["administrator"] == SERVICE_ADDRESS
    assert stats["registry_address"] == contract.address
    assert await ledger.health_check() is True


@pytest.mark.asyncio
async def test_concurrent_identical_registrations_commit_once(ledger):
    results = await asyncio.gather(
        *(ledger.register("a.pdf", 10, H) for _ in range(5)),
        return_exceptions=True,
    )

    committed = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, DuplicateActiveHashError)]
    assert len(committed) == 1
    assert len(rejected) == 4
    assert await ledger.total_records() == 1


@pytest.mark.asyncio
async def test_factory_opens_memory_ledger():
    reset_ledger()
    try:
        ledger = await get_ledger(LedgerConfig(
            backend=LedgerBackend.MEMORY,
            signer_address=SERVICE_ADDRESS,
        ))
        assert ledger.signer.is_open
        assert await ledger.is_administrator()
        await ledger.close()
        assert not ledger.signer.is_open
    finally:
        reset_ledger()
