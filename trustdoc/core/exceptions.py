# (c) Copyright Datacraft, 2026
"""Base error types shared by every custody backend."""


class CustodyError(Exception):
	"""Base class for all custody errors.

	``code`` is a stable identifier safe to hand to API clients; the
	message never contains tracebacks or backend internals beyond a
	short description.
	"""
	code: str = "CustodyError"

	def __init__(self, message: str, cause: Exception | None = None):
		self.message = message
		self.cause = cause
		super().__init__(message)

	def to_dict(self) -> dict[str, str]:
		return {"code": self.code, "message": self.message}


class IngestValidationError(CustodyError):
	"""Malformed ingest input, rejected before any backend call."""
	code = "ValidationError"


class DocumentNotFoundError(CustodyError):
	code = "NotFound"

	def __init__(self, document_id: str):
		self.document_id = document_id
		super().__init__(f"Document not found: {document_id}")


class ForbiddenError(CustodyError):
	code = "Forbidden"


class MetadataPersistError(CustodyError):
	"""Metadata store could not persist or update a record."""
	code = "MetadataPersistError"
