# (c) Copyright Datacraft, 2026
"""
Pydantic schemas for custody documents.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from trustdoc.core.types import CustodyState, DocumentLifecycle


class DocumentCreate(BaseModel):
	title: str = Field(min_length=1, max_length=255)
	filename: str = Field(min_length=1, max_length=255)
	owner_id: str = Field(min_length=1, max_length=64)
	content_hash: str | None = Field(None, min_length=64, max_length=64)
	content_address: str | None = None
	content_path: str | None = None
	ledger_id: int | None = Field(None, gt=0)


class Document(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	title: str
	filename: str
	owner_id: str
	content_hash: str | None = None
	content_address: str | None = None
	content_path: str | None = None
	ledger_id: int | None = None
	signed: bool = False
	signed_at: datetime | None = None
	revoked: bool = False
	revoked_at: datetime | None = None
	deleted: bool = False
	lifecycle: DocumentLifecycle = DocumentLifecycle.ACTIVE
	custody_state: CustodyState
	created_at: datetime
	updated_at: datetime
