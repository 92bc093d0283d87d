# (c) Copyright Datacraft, 2026
"""Wires the configured backends into an orchestrator."""
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.db.engine import get_session_factory
from trustdoc.core.features.documents import MetadataStore
from trustdoc.core.hasher import get_hasher
from trustdoc.core.ledger import LedgerConfig, LedgerSigner, get_ledger
from trustdoc.core.storage import StorageConfig, get_content_store

from .orchestrator import DocumentCustodyOrchestrator

logger = logging.getLogger(__name__)


async def create_orchestrator(
	settings: Settings | None = None,
	signer: LedgerSigner | None = None,
	session_factory: async_sessionmaker | None = None,
) -> DocumentCustodyOrchestrator:
	"""Build an orchestrator over the backends selected in settings.

	The ledger signer is opened before the orchestrator is returned and
	stays open until ``close_orchestrator``.
	"""
	settings = settings or get_settings()
	ledger = await get_ledger(LedgerConfig.from_settings(settings), signer)

	orchestrator = DocumentCustodyOrchestrator(
		hasher=get_hasher(settings),
		content_store=get_content_store(StorageConfig.from_settings(settings)),
		ledger=ledger,
		metadata=MetadataStore(session_factory or get_session_factory(settings)),
		settings=settings,
	)
	logger.info(
		f"Custody orchestrator ready (hasher={settings.hasher_backend.value}, "
		f"storage={settings.storage_backend.value}, ledger={settings.ledger_backend.value})"
	)
	return orchestrator


async def close_orchestrator(orchestrator: DocumentCustodyOrchestrator) -> None:
	await orchestrator.ledger.close()
	await orchestrator.content_store.close()
