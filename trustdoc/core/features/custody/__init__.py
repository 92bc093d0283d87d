# (c) Copyright Datacraft, 2026
"""Document custody workflows."""
from .factory import close_orchestrator, create_orchestrator
from .orchestrator import DocumentCustodyOrchestrator
from .reconciliation import ReconciliationError
from .schema import (
	BackendError,
	DeleteResult,
	IngestDegraded,
	IngestFailure,
	IngestResponse,
	IngestResult,
	IngestSuccess,
	http_status_for,
	status_for_error,
)
from .stages import Hashed, Recorded, Registered, Stored

__all__ = [
	"BackendError",
	"DeleteResult",
	"DocumentCustodyOrchestrator",
	"Hashed",
	"IngestDegraded",
	"IngestFailure",
	"IngestResponse",
	"IngestResult",
	"IngestSuccess",
	"ReconciliationError",
	"Recorded",
	"Registered",
	"Stored",
	"close_orchestrator",
	"create_orchestrator",
	"http_status_for",
	"status_for_error",
]
