# (c) Copyright Datacraft, 2026
"""Shared fixtures: real local backends wired the way production wires them."""
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from trustdoc.core.config import Settings
from trustdoc.core.db.engine import init_db
from trustdoc.core.features.custody import DocumentCustodyOrchestrator
from trustdoc.core.features.documents import MetadataStore
from trustdoc.core.hasher import EnclaveConfig, EnclaveHasher, LocalHasher
from trustdoc.core.ledger import LedgerSigner, MemoryLedger, RegistryContract
from trustdoc.core.storage.local import LocalContentStore
from trustdoc.core.types import HasherBackend, LedgerBackend, StorageBackend

SERVICE_ADDRESS = "0x" + "5e" * 20
OTHER_ADDRESS = "0x" + "0f" * 20

# Stands in for the enclave host: digest of stdin on stdout
SHA256_HOST = (
    "import hashlib, sys; "
    "sys.stdout.write(hashlib.sha256(sys.stdin.buffer.read()).hexdigest())"
)


def host_command(script: str) -> list[str]:
    return [sys.executable, "-c", script]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'trustdoc.db'}",
        log_config=None,
        hasher_backend=HasherBackend.LOCAL,
        storage_backend=StorageBackend.LOCAL,
        local_storage_path=tmp_path / "content",
        ledger_backend=LedgerBackend.MEMORY,
        ledger_signer_address=SERVICE_ADDRESS,
        ledger_timeout=5.0,
        max_file_size_mb=1,
    )


@pytest.fixture
def enclave_hasher():
    return EnclaveHasher(EnclaveConfig(
        host_path=Path(sys.executable),
        timeout=10.0,
        command=host_command(SHA256_HOST),
    ))


@pytest.fixture
def content_store(tmp_path):
    return LocalContentStore(tmp_path / "content")


@pytest.fixture
def contract():
    return RegistryContract(administrator=SERVICE_ADDRESS)


@pytest_asyncio.fixture
async def signer():
    signer = LedgerSigner(SERVICE_ADDRESS)
    await signer.open()
    yield signer
    await signer.close()


@pytest.fixture
def ledger(contract, signer):
    return MemoryLedger(contract, signer)


@pytest_asyncio.fixture
async def session_factory(settings):
    engine = create_async_engine(settings.db_url)
    await init_db(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def metadata(session_factory):
    return MetadataStore(session_factory)


@pytest.fixture
def orchestrator(enclave_hasher, content_store, ledger, metadata, settings):
    return DocumentCustodyOrchestrator(
        hasher=enclave_hasher,
        content_store=content_store,
        ledger=ledger,
        metadata=metadata,
        settings=settings,
    )


@pytest.fixture
def fast_orchestrator(content_store, ledger, metadata, settings):
    """Orchestrator with the in-process hasher, for tests not about hashing."""
    return DocumentCustodyOrchestrator(
        hasher=LocalHasher(),
        content_store=content_store,
        ledger=ledger,
        metadata=metadata,
        settings=settings,
    )
