# (c) Copyright Datacraft, 2026
import logging
import ssl

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.db.base import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def build_engine(settings: Settings) -> AsyncEngine:
	connect_args = {}
	if settings.db_ssl:
		# asyncpg requires an SSL context, not sslmode
		ssl_context = ssl.create_default_context()
		ssl_context.check_hostname = False
		ssl_context.verify_mode = ssl.CERT_NONE
		connect_args["ssl"] = ssl_context

	return create_async_engine(
		settings.async_db_url,
		poolclass=NullPool,
		connect_args=connect_args,
	)


def get_engine(settings: Settings | None = None) -> AsyncEngine:
	"""Process-wide engine, built from ``settings`` on first use."""
	global _engine
	if _engine is None:
		_engine = build_engine(settings or get_settings())
	return _engine


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker:
	global _session_factory
	if _session_factory is None:
		_session_factory = async_sessionmaker(get_engine(settings), expire_on_commit=False)
	return _session_factory


async def init_db(engine: AsyncEngine | None = None) -> None:
	"""Create all tables known to the ORM metadata."""
	# Registers the ORM classes on Base.metadata
	from trustdoc.core.features.documents.db import orm  # noqa: F401

	engine = engine or get_engine()
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)
	logger.info("Database schema initialised")


async def dispose_engine() -> None:
	global _engine, _session_factory
	if _engine is not None:
		await _engine.dispose()
	_engine = None
	_session_factory = None
