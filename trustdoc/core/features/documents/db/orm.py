# (c) Copyright Datacraft, 2026
"""
ORM model for the authoritative off-chain document record.
"""
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7str

from trustdoc.core.db.base import Base
from trustdoc.core.types import CustodyState, DocumentLifecycle


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


class Document(Base):
	"""
	Metadata record of a document in custody.
	Links the user-facing record to its content hash, content address and ledger id.
	"""
	__tablename__ = "custody_documents"

	id: Mapped[str] = mapped_column(
		String(32),
		primary_key=True,
		default=uuid7str,
	)
	title: Mapped[str] = mapped_column(String(255))
	filename: Mapped[str] = mapped_column(String(255))
	owner_id: Mapped[str] = mapped_column(String(64), index=True)

	# Custody references, each set once its ingest stage commits
	content_hash: Mapped[str | None] = mapped_column(String(64))
	# Not unique: identical bytes share one address
	content_address: Mapped[str | None] = mapped_column(String(128))
	content_path: Mapped[str | None] = mapped_column(String(1024))
	ledger_id: Mapped[int | None] = mapped_column(Integer, unique=True)

	# Once-set flags
	signed: Mapped[bool] = mapped_column(default=False)
	signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	revoked: Mapped[bool] = mapped_column(default=False)
	revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

	deleted: Mapped[bool] = mapped_column(default=False)
	lifecycle: Mapped[DocumentLifecycle] = mapped_column(
		Enum(DocumentLifecycle, native_enum=False, length=20),
		default=DocumentLifecycle.ACTIVE,
	)

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True),
		default=utc_now,
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True),
		default=utc_now,
		onupdate=utc_now,
	)

	__table_args__ = (
		Index("idx_custody_documents_owner_deleted", "owner_id", "deleted"),
		Index("idx_custody_documents_content_hash", "content_hash"),
	)

	@property
	def custody_state(self) -> CustodyState:
		if self.content_hash and self.content_address and self.ledger_id:
			return CustodyState.COMPLETE
		return CustodyState.DEGRADED

	def __repr__(self) -> str:
		return f"<Document {self.id} owner={self.owner_id} ledger_id={self.ledger_id}>"
