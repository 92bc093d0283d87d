# (c) Copyright Datacraft, 2026
"""Metadata store: the user-facing source of truth for documents.

Every call runs in its own session and commits before returning, so a
returned value is durable. The store never talks to the other custody
backends.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trustdoc.core.exceptions import DocumentNotFoundError, MetadataPersistError
from trustdoc.core.types import DocumentLifecycle

from . import schema
from .db import api as db_api
from .db.orm import Document

logger = logging.getLogger(__name__)


class MetadataStore:
	"""Async facade over the documents table."""

	def __init__(self, session_factory: async_sessionmaker):
		self.session_factory = session_factory

	@asynccontextmanager
	async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
		try:
			async with self.session_factory() as session:
				async with session.begin():
					yield session
		except IntegrityError as e:
			logger.error(f"Metadata {operation} violated a constraint: {e.orig}")
			raise MetadataPersistError(f"Metadata {operation} violated a constraint", e) from e
		except SQLAlchemyError as e:
			logger.error(f"Metadata {operation} failed: {e}")
			raise MetadataPersistError(f"Metadata {operation} failed", e) from e

	async def _load(self, session: AsyncSession, document_id: str) -> Document:
		document = await db_api.get_document(session, document_id)
		if document is None:
			raise DocumentNotFoundError(document_id)
		return document

	async def create(self, data: schema.DocumentCreate) -> schema.Document:
		"""Persist a new document; the assigned id is on the returned record."""
		async with self._session("create") as session:
			document = await db_api.create_document(session, **data.model_dump())
			created = schema.Document.model_validate(document)
		logger.debug(f"Persisted document {created.id} for owner {data.owner_id}")
		return created

	async def get_by_id(self, document_id: str) -> schema.Document:
		async with self._session("read") as session:
			document = await self._load(session, document_id)
			return schema.Document.model_validate(document)

	async def get_by_ledger_id(self, ledger_id: int) -> schema.Document | None:
		async with self._session("read") as session:
			document = await db_api.get_document_by_ledger_id(session, ledger_id)
			if document is None:
				return None
			return schema.Document.model_validate(document)

	async def list_by_owner(self, owner_id: str) -> list[schema.Document]:
		return await self.list_by_organization_members([owner_id])

	async def list_by_organization_members(self, member_ids: list[str]) -> list[schema.Document]:
		async with self._session("list") as session:
			documents = await db_api.list_documents_by_owners(session, member_ids)
			return [schema.Document.model_validate(d) for d in documents]

	async def mark_deleted_locally(self, document_id: str) -> None:
		"""Set the local soft-delete flag. Repeating it is a no-op."""
		async with self._session("delete") as session:
			document = await self._load(session, document_id)
			await db_api.mark_deleted(session, document)

	async def mark_signed(self, document_id: str) -> schema.Document:
		async with self._session("sign") as session:
			document = await self._load(session, document_id)
			await db_api.mark_signed(session, document)
			return schema.Document.model_validate(document)

	async def mark_revoked(self, document_id: str) -> schema.Document:
		async with self._session("revoke") as session:
			document = await self._load(session, document_id)
			await db_api.mark_revoked(session, document)
			return schema.Document.model_validate(document)

	async def set_lifecycle(
		self,
		document_id: str,
		lifecycle: DocumentLifecycle,
	) -> schema.Document:
		async with self._session("lifecycle update") as session:
			document = await self._load(session, document_id)
			await db_api.set_lifecycle(session, document, lifecycle)
			return schema.Document.model_validate(document)

	async def is_content_shared(self, content_address: str, exclude_id: str) -> bool:
		"""Whether another live document references the same content."""
		async with self._session("read") as session:
			count = await db_api.count_live_by_content_address(
				session, content_address, exclude_id
			)
		return count > 0

	async def health_check(self) -> bool:
		try:
			async with self._session("health check") as session:
				await db_api.list_documents_by_owners(session, ["__health__"])
			return True
		except MetadataPersistError:
			return False
