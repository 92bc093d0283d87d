# (c) Copyright Datacraft, 2026
"""Documents database API."""
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trustdoc.core.types import DocumentLifecycle

from .orm import Document, utc_now


async def create_document(
	session: AsyncSession,
	title: str,
	filename: str,
	owner_id: str,
	content_hash: str | None = None,
	content_address: str | None = None,
	content_path: str | None = None,
	ledger_id: int | None = None,
) -> Document:
	document = Document(
		title=title,
		filename=filename,
		owner_id=owner_id,
		content_hash=content_hash,
		content_address=content_address,
		content_path=content_path,
		ledger_id=ledger_id,
	)
	session.add(document)
	await session.flush()
	await session.refresh(document)
	return document


async def get_document(
	session: AsyncSession,
	document_id: str,
) -> Document | None:
	"""Get document by ID, including locally deleted ones."""
	return await session.get(Document, document_id)


async def get_document_by_ledger_id(
	session: AsyncSession,
	ledger_id: int,
) -> Document | None:
	stmt = select(Document).where(Document.ledger_id == ledger_id)
	result = await session.execute(stmt)
	return result.scalar_one_or_none()


async def list_documents_by_owners(
	session: AsyncSession,
	owner_ids: list[str],
) -> list[Document]:
	"""Documents of the given owners that are not locally deleted, newest first."""
	if not owner_ids:
		return []

	stmt = (
		select(Document)
		.where(
			and_(
				Document.owner_id.in_(owner_ids),
				Document.deleted.is_(False),
			)
		)
		.order_by(Document.created_at.desc(), Document.id.desc())
	)
	result = await session.execute(stmt)
	return list(result.scalars().all())


async def mark_deleted(
	session: AsyncSession,
	document: Document,
) -> Document:
	document.deleted = True
	if document.lifecycle == DocumentLifecycle.ACTIVE:
		document.lifecycle = DocumentLifecycle.SOFT_DELETED
	await session.flush()
	return document


async def mark_signed(
	session: AsyncSession,
	document: Document,
) -> Document:
	# signed_at records the first transition only
	if not document.signed:
		document.signed = True
		document.signed_at = utc_now()
		await session.flush()
		await session.refresh(document)
	return document


async def mark_revoked(
	session: AsyncSession,
	document: Document,
) -> Document:
	if not document.revoked:
		document.revoked = True
		document.revoked_at = utc_now()
		await session.flush()
		await session.refresh(document)
	return document


async def set_lifecycle(
	session: AsyncSession,
	document: Document,
	lifecycle: DocumentLifecycle,
) -> Document:
	document.lifecycle = lifecycle
	document.deleted = lifecycle != DocumentLifecycle.ACTIVE
	await session.flush()
	await session.refresh(document)
	return document


async def count_live_by_content_address(
	session: AsyncSession,
	content_address: str,
	exclude_id: str | None = None,
) -> int:
	"""Documents not locally deleted that reference ``content_address``."""
	stmt = (
		select(func.count())
		.select_from(Document)
		.where(
			and_(
				Document.content_address == content_address,
				Document.deleted.is_(False),
			)
		)
	)
	if exclude_id is not None:
		stmt = stmt.where(Document.id != exclude_id)
	result = await session.execute(stmt)
	return result.scalar_one()
