# (c) Copyright Datacraft, 2026
"""Cross-checks between the metadata record and the external backends."""
import logging

from trustdoc.core.exceptions import CustodyError
from trustdoc.core.features.documents.schema import Document
from trustdoc.core.ledger import LedgerRecord
from trustdoc.core.types import DocumentLifecycle

logger = logging.getLogger(__name__)


def verify_ledger_record(
	record: LedgerRecord,
	content_hash: str,
) -> tuple[bool, str | None]:
	"""
	Check that a ledger record still vouches for ``content_hash``.
	Returns (success, error_message).
	"""
	if record.erased:
		return False, f"Ledger record {record.ledger_id} was permanently deleted"
	if record.content_hash != content_hash:
		return False, (
			f"Ledger record {record.ledger_id} holds hash {record.content_hash}, "
			f"expected {content_hash}"
		)
	return True, None


def verify_custody(
	document: Document,
	record: LedgerRecord | None,
	content_pinned: bool | None,
) -> tuple[bool, list[str]]:
	"""
	Compare a document with what the ledger and content store report.
	Returns (consistent, problems).
	"""
	problems = []

	if document.ledger_id is None:
		problems.append("Document has no ledger id")
	elif record is not None:
		ok, error = verify_ledger_record(record, document.content_hash or "")
		if not ok:
			problems.append(error)
		expected_active = document.lifecycle == DocumentLifecycle.ACTIVE
		if not record.erased and record.is_active != expected_active:
			problems.append(
				f"Ledger record {record.ledger_id} is_active={record.is_active} "
				f"but document lifecycle is {document.lifecycle.value}"
			)

	if document.content_address is None:
		problems.append("Document has no content address")
	elif content_pinned is False and document.lifecycle == DocumentLifecycle.ACTIVE:
		problems.append(f"Content {document.content_address} is not pinned")

	for problem in problems:
		logger.warning(f"Custody check for document {document.id}: {problem}")

	return not problems, problems


class ReconciliationError(CustodyError):
	"""A degraded ingest can no longer be reconciled against the ledger."""
	code = "ReconciliationError"
