# (c) Copyright Datacraft, 2026
"""
Custody workflow results and their serialisable forms.
"""
from dataclasses import dataclass

from pydantic import BaseModel

from trustdoc.core.exceptions import CustodyError
from trustdoc.core.features.documents.schema import Document
from trustdoc.core.types import (
	CustodyBackend,
	DeletionStatus,
	IngestStage,
	IngestStatus,
)

from .stages import Hashed, Recorded, Registered, Stored


@dataclass
class IngestSuccess:
	document: Document
	progress: Recorded


@dataclass
class IngestDegraded:
	"""Content and ledger committed, metadata did not.

	Carries what reconciliation needs to rebuild the record.
	"""
	progress: Registered
	owner_id: str
	filename: str
	title: str
	error: CustodyError


@dataclass
class IngestFailure:
	stage: IngestStage
	error: CustodyError
	progress: Hashed | Stored | None = None


IngestResult = IngestSuccess | IngestDegraded | IngestFailure


class BackendError(BaseModel):
	backend: CustodyBackend | None = None
	code: str
	message: str

	@classmethod
	def from_error(
		cls,
		error: CustodyError,
		backend: CustodyBackend | None = None,
	) -> "BackendError":
		return cls(backend=backend, code=error.code, message=error.message)


_STAGE_BACKENDS = {
	IngestStage.HASH: CustodyBackend.HASHER,
	IngestStage.CONTENT: CustodyBackend.CONTENT,
	IngestStage.LEDGER: CustodyBackend.LEDGER,
	IngestStage.METADATA: CustodyBackend.METADATA,
}


class IngestResponse(BaseModel):
	document_id: str | None = None
	content_hash: str | None = None
	content_address: str | None = None
	ledger_id: int | None = None
	status: IngestStatus
	stage: IngestStage | None = None
	error: BackendError | None = None

	@classmethod
	def from_result(cls, result: IngestResult) -> "IngestResponse":
		if isinstance(result, IngestSuccess):
			return cls(
				document_id=result.document.id,
				content_hash=result.progress.content_hash,
				content_address=result.progress.content_address,
				ledger_id=result.progress.ledger_id,
				status=IngestStatus.SUCCESS,
			)

		if isinstance(result, IngestDegraded):
			return cls(
				content_hash=result.progress.content_hash,
				content_address=result.progress.content_address,
				ledger_id=result.progress.ledger_id,
				status=IngestStatus.DEGRADED,
				stage=IngestStage.METADATA,
				error=BackendError.from_error(result.error, CustodyBackend.METADATA),
			)

		progress = result.progress
		return cls(
			content_hash=progress.content_hash if progress else None,
			content_address=progress.content_address if isinstance(progress, Stored) else None,
			status=IngestStatus.FAILURE,
			stage=result.stage,
			error=BackendError.from_error(result.error, _STAGE_BACKENDS.get(result.stage)),
		)


class DeleteResult(BaseModel):
	status: DeletionStatus
	succeeded_backends: list[CustodyBackend] = []
	errors: list[BackendError] = []
	notice: str | None = None


_ERROR_STATUS = {
	"ValidationError": 422,
	"NotFound": 404,
	"Forbidden": 403,
	"DuplicateActiveHash": 409,
	"LedgerAlreadyActive": 409,
	"LedgerAlreadyDeleted": 409,
	"LedgerHashClaimedElsewhere": 409,
	"LedgerUnauthorized": 403,
	"HashTimeout": 504,
	"LedgerTimeout": 504,
	"LedgerOutcomeUnknown": 504,
}


def status_for_error(error: CustodyError | BackendError) -> int:
	"""Transport status for a failure; unclassified backend errors are 502."""
	return _ERROR_STATUS.get(error.code, 502)


def http_status_for(response: IngestResponse | DeleteResult) -> int:
	"""Suggested transport status for a workflow response.

	Full success maps to 200, degraded and partial to 207 (multi-status)
	and failures by cause.
	"""
	if isinstance(response, IngestResponse):
		if response.status == IngestStatus.SUCCESS:
			return 200
		if response.status == IngestStatus.DEGRADED:
			return 207
		return status_for_error(response.error) if response.error else 500

	if response.status == DeletionStatus.COMPLETE:
		return 200
	if response.status == DeletionStatus.PARTIAL:
		return 207
	return status_for_error(response.errors[0]) if response.errors else 500
