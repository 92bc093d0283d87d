# (c) Copyright Datacraft, 2026
"""Process-level startup and shutdown for hosts embedding the custody service."""
import logging

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.db.engine import dispose_engine, get_engine, get_session_factory, init_db
from trustdoc.core.features.custody import (
	DocumentCustodyOrchestrator,
	close_orchestrator,
	create_orchestrator,
)
from trustdoc.core.logging import setup_logging

logger = logging.getLogger(__name__)


async def startup(settings: Settings | None = None) -> DocumentCustodyOrchestrator:
	"""Bind the process database to ``settings`` and build the orchestrator."""
	settings = settings or get_settings()
	setup_logging(settings=settings)

	# Drop any engine built from other settings before binding ours
	await dispose_engine()
	session_factory = get_session_factory(settings)
	await init_db(get_engine())

	orchestrator = await create_orchestrator(settings, session_factory=session_factory)
	health = await orchestrator.health()
	unavailable = [name for name, ok in health.items() if not ok]
	if unavailable:
		logger.warning(f"Starting with unavailable backends: {', '.join(unavailable)}")
	return orchestrator


async def shutdown(orchestrator: DocumentCustodyOrchestrator) -> None:
	await close_orchestrator(orchestrator)
	await dispose_engine()
	logger.info("Custody service stopped")
