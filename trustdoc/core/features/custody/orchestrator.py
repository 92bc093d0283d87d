# (c) Copyright Datacraft, 2026
"""Document custody orchestrator.

Sequences hashing, content storage, ledger registration and metadata
persistence, and owns what happens when one of them fails part way.
The orchestrator holds no persistent state of its own.
"""
import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from uuid_extensions import uuid7str

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.exceptions import CustodyError, ForbiddenError, IngestValidationError
from trustdoc.core.features.documents import Document, DocumentCreate, MetadataStore
from trustdoc.core.hasher import CancellationToken, IntegrityHasher
from trustdoc.core.ledger import (
	DuplicateActiveHashError,
	LedgerAlreadyActiveError,
	LedgerAlreadyDeletedError,
	LedgerInvalidIdError,
	LedgerOutcomeUnknownError,
	LedgerRegistrar,
	LedgerTimeoutError,
)
from trustdoc.core.storage import LOCAL_ONLY_NOTICE, ContentStore, publish_path
from trustdoc.core.types import (
	CustodyBackend,
	CustodyState,
	DeletionStatus,
	DocumentLifecycle,
	IngestStage,
	RoleType,
)

from . import policy
from .reconciliation import ReconciliationError, verify_custody, verify_ledger_record
from .schema import (
	BackendError,
	DeleteResult,
	IngestDegraded,
	IngestFailure,
	IngestResult,
	IngestSuccess,
)
from .stages import Hashed, Stored, recorded, registered, stored

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_NAME_LENGTH = 255
MAX_OWNER_LENGTH = 64


class DocumentCustodyOrchestrator:
	"""Composes the four custody backends into document workflows.

	Usage:
		orchestrator = DocumentCustodyOrchestrator(hasher, content_store, ledger, metadata)
		result = await orchestrator.ingest(owner_id, data, "report.pdf", "Q3 report")
	"""

	def __init__(
		self,
		hasher: IntegrityHasher,
		content_store: ContentStore,
		ledger: LedgerRegistrar,
		metadata: MetadataStore,
		settings: Settings | None = None,
	):
		self.hasher = hasher
		self.content_store = content_store
		self.ledger = ledger
		self.metadata = metadata
		self.settings = settings or get_settings()

	# Ingest

	def _validate_ingest(self, owner_id: str, data: bytes, filename: str, title: str) -> None:
		if not owner_id or not owner_id.strip():
			raise IngestValidationError("Owner id is required")
		if len(owner_id) > MAX_OWNER_LENGTH:
			raise IngestValidationError(f"Owner id exceeds {MAX_OWNER_LENGTH} characters")
		if not data:
			raise IngestValidationError("File is empty")
		if len(data) > self.settings.max_file_size:
			raise IngestValidationError(
				f"File size {len(data)} exceeds the maximum of {self.settings.max_file_size} bytes"
			)
		for label, value in (("Filename", filename), ("Title", title)):
			if not value or not value.strip():
				raise IngestValidationError(f"{label} is required")
			if len(value) > MAX_NAME_LENGTH:
				raise IngestValidationError(f"{label} exceeds {MAX_NAME_LENGTH} characters")

	async def ingest(
		self,
		owner_id: str,
		data: bytes,
		filename: str,
		title: str,
		cancel: CancellationToken | None = None,
	) -> IngestResult:
		"""Take a file into custody.

		Hash, content and ledger failures are fatal and compensated where
		something was already committed. A metadata failure after the ledger
		committed yields a degraded result instead.

		Args:
			owner_id: Owner of the new document
			data: File content
			filename: Original file name, recorded on the ledger
			title: Display title
			cancel: Optional token aborting the hash computation

		Returns:
			IngestSuccess, IngestDegraded or IngestFailure
		"""
		try:
			self._validate_ingest(owner_id, data, filename, title)
		except IngestValidationError as e:
			logger.info(f"Rejected ingest for owner {owner_id!r}: {e}")
			return IngestFailure(stage=IngestStage.VALIDATION, error=e)

		attempt_id = uuid7str()
		logger.info(f"Ingest {attempt_id}: {len(data)} bytes for owner {owner_id}")

		# 1. Hash
		try:
			hashed = Hashed(content_hash=await self.hasher.compute_hash(data, cancel))
		except CustodyError as e:
			logger.error(f"Ingest {attempt_id} failed at hashing: {e}")
			return IngestFailure(stage=IngestStage.HASH, error=e)

		# 2. Add, pin, publish
		try:
			in_store = await self._store(hashed, data, owner_id, attempt_id, filename)
		except CustodyError as e:
			logger.error(f"Ingest {attempt_id} failed at content storage: {e}")
			return IngestFailure(stage=IngestStage.CONTENT, error=e, progress=hashed)

		# 3. Register
		try:
			receipt = await self._ledger_call(
				self.ledger.register(filename, len(data), hashed.content_hash),
				"register",
			)
		except LedgerOutcomeUnknownError as e:
			# The write may still settle, so nothing is rolled back
			logger.error(
				f"Ingest {attempt_id}: ledger outcome unknown for hash {in_store.content_hash} "
				f"at {in_store.content_address}"
			)
			return IngestFailure(stage=IngestStage.LEDGER, error=e, progress=in_store)
		except DuplicateActiveHashError as e:
			logger.warning(f"Ingest {attempt_id}: hash {hashed.content_hash} already active on the ledger")
			release_pin = in_store.pinned_here and await self._pin_is_orphaned(in_store)
			await self._compensate(in_store, release_pin=release_pin)
			return IngestFailure(stage=IngestStage.LEDGER, error=e, progress=in_store)
		except CustodyError as e:
			logger.error(f"Ingest {attempt_id} failed at ledger registration: {e}")
			await self._compensate(in_store, release_pin=in_store.pinned_here)
			return IngestFailure(stage=IngestStage.LEDGER, error=e, progress=in_store)

		on_ledger = registered(in_store, receipt.ledger_id, receipt.tx_ref, receipt.block_number)
		logger.info(
			f"Ingest {attempt_id}: ledger id {on_ledger.ledger_id} in block {on_ledger.block_number}"
		)

		# 4. Persist
		try:
			document = await self.metadata.create(DocumentCreate(
				title=title,
				filename=filename,
				owner_id=owner_id,
				content_hash=on_ledger.content_hash,
				content_address=on_ledger.content_address,
				content_path=on_ledger.content_path,
				ledger_id=on_ledger.ledger_id,
			))
		except CustodyError as e:
			logger.error(
				f"Ingest {attempt_id} degraded: metadata not persisted for ledger id "
				f"{on_ledger.ledger_id} ({e}); reconciliation required"
			)
			return IngestDegraded(
				progress=on_ledger,
				owner_id=owner_id,
				filename=filename,
				title=title,
				error=e,
			)

		logger.info(f"Ingest {attempt_id} complete: document {document.id}")
		return IngestSuccess(document=document, progress=recorded(on_ledger, document.id))

	async def _store(
		self,
		hashed: Hashed,
		data: bytes,
		owner_id: str,
		attempt_id: str,
		filename: str,
	) -> Stored:
		address, pinned_here = await self.content_store.add_pinned(data)
		path = publish_path(
			self.settings.publish_root,
			owner_id,
			hashed.content_hash,
			attempt_id,
			filename,
		)
		try:
			await self.content_store.publish(address, path)
		except CustodyError:
			await self._compensate(stored(hashed, address, path, pinned_here), release_pin=pinned_here)
			raise
		return stored(hashed, address, path, pinned_here)

	async def _compensate(self, in_store: Stored, release_pin: bool) -> None:
		"""Remove what this attempt put in the content store, best effort."""
		try:
			await self.content_store.unpin(
				in_store.content_address,
				path=in_store.content_path,
				release_pin=release_pin,
			)
			removed = await self.content_store.reclaim()
			logger.warning(
				f"Compensated content {in_store.content_address} at {in_store.content_path} "
				f"(pin released: {release_pin}, blocks reclaimed: {removed})"
			)
		except CustodyError as e:
			logger.error(f"Compensation for {in_store.content_address} failed: {e}")

	async def _pin_is_orphaned(self, in_store: Stored) -> bool:
		"""Whether a pin this attempt created backs no live document.

		Only a record left behind by a delete whose ledger step failed has
		no use for the pin. Any doubt keeps it.
		"""
		try:
			record = await self._ledger_call(
				self.ledger.get_by_hash(in_store.content_hash),
				"lookup",
			)
			if record is None:
				return False
			holder = await self.metadata.get_by_ledger_id(record.ledger_id)
			if holder is None or not holder.deleted:
				return False
			return not await self.metadata.is_content_shared(in_store.content_address, holder.id)
		except CustodyError as e:
			logger.warning(f"Keeping pin on {in_store.content_address}, ownership unclear: {e}")
			return False

	async def _ledger_call(self, call: Awaitable[T], operation: str) -> T:
		timeout = self.settings.ledger_timeout
		try:
			return await asyncio.wait_for(call, timeout=timeout)
		except asyncio.TimeoutError as e:
			raise LedgerTimeoutError(
				f"Ledger {operation} did not settle within {timeout}s; outcome unknown", e
			) from e

	# Delete

	async def delete(
		self,
		document_id: str,
		requester_id: str,
		requester_role: int | RoleType,
	) -> DeleteResult:
		"""Soft-delete a document across metadata, content store and ledger.

		The three removals run concurrently and none aborts the others.

		Raises:
			DocumentNotFoundError: No such document
			ForbiddenError: Requester may not delete it
		"""
		document = await self.metadata.get_by_id(document_id)
		policy.ensure_can_delete(document, requester_id, requester_role)
		release_pin = await self._owns_content(document)

		outcomes = await asyncio.gather(
			self._attempt(CustodyBackend.METADATA, self.metadata.mark_deleted_locally(document.id)),
			self._attempt(CustodyBackend.CONTENT, self._remove_content(document, release_pin)),
			self._attempt(CustodyBackend.LEDGER, self._soft_delete_on_ledger(document)),
		)
		result = self._aggregate(outcomes)
		logger.info(
			f"Delete of document {document_id} by {requester_id}: {result.status.value} "
			f"(succeeded: {[b.value for b in result.succeeded_backends]})"
		)
		return result

	async def _owns_content(self, document: Document) -> bool:
		if document.content_address is None:
			return False
		return not await self.metadata.is_content_shared(document.content_address, document.id)

	async def _attempt(
		self,
		backend: CustodyBackend,
		call: Awaitable[Any],
	) -> tuple[CustodyBackend, CustodyError | None]:
		try:
			await call
		except CustodyError as e:
			logger.warning(f"{backend.value} removal failed: {e}")
			return backend, e
		return backend, None

	def _aggregate(self, outcomes: list[tuple[CustodyBackend, CustodyError | None]]) -> DeleteResult:
		succeeded = [backend for backend, error in outcomes if error is None]
		errors = [
			BackendError.from_error(error, backend)
			for backend, error in outcomes
			if error is not None
		]

		if not errors:
			status = DeletionStatus.COMPLETE
		elif succeeded:
			status = DeletionStatus.PARTIAL
		else:
			status = DeletionStatus.NONE

		return DeleteResult(
			status=status,
			succeeded_backends=succeeded,
			errors=errors,
			notice=LOCAL_ONLY_NOTICE,
		)

	async def _remove_content(self, document: Document, release_pin: bool) -> None:
		if document.content_address is None:
			return
		await self.content_store.unpin(
			document.content_address,
			path=document.content_path,
			release_pin=release_pin,
		)
		await self.content_store.reclaim()

	async def _soft_delete_on_ledger(self, document: Document) -> None:
		if document.ledger_id is None:
			return
		try:
			await self._ledger_call(self.ledger.soft_delete(document.ledger_id), "soft delete")
		except LedgerAlreadyDeletedError:
			# Left over from an earlier partial delete
			logger.info(f"Ledger record {document.ledger_id} was already soft-deleted")

	# Reads

	async def get(self, document_id: str) -> Document:
		return await self.metadata.get_by_id(document_id)

	async def list_by_owner(self, owner_id: str) -> list[Document]:
		return await self.metadata.list_by_owner(owner_id)

	async def list_by_organization_members(self, member_ids: list[str]) -> list[Document]:
		return await self.metadata.list_by_organization_members(member_ids)

	# Lifecycle

	async def restore(
		self,
		document_id: str,
		requester_id: str,
		requester_role: int | RoleType,
	) -> Document:
		"""Reactivate a soft-deleted document on the ledger, then locally.

		Raises:
			DocumentNotFoundError: No such document
			ForbiddenError: Requester may not restore it
			LedgerHashClaimedElsewhereError: Another active record holds the hash
			LedgerInvalidIdError: The ledger record was permanently deleted
		"""
		document = await self.metadata.get_by_id(document_id)
		policy.ensure_can_restore(document, requester_id, requester_role)

		if document.lifecycle == DocumentLifecycle.HARD_DELETED:
			raise LedgerInvalidIdError(f"Document {document_id} was permanently deleted")

		if document.ledger_id is not None:
			try:
				await self._ledger_call(self.ledger.restore(document.ledger_id), "restore")
			except LedgerAlreadyActiveError:
				logger.info(f"Ledger record {document.ledger_id} was already active")

		restored = await self.metadata.set_lifecycle(document_id, DocumentLifecycle.ACTIVE)
		logger.info(f"Document {document_id} restored by {requester_id}")
		return restored

	async def hard_delete(
		self,
		document_id: str,
		requester_role: int | RoleType,
	) -> DeleteResult:
		"""Permanently erase a document.

		The ledger erasure goes first and is irreversible; if it fails
		nothing else is touched. Content and metadata removal follow as
		best-effort steps.
		"""
		policy.ensure_can_hard_delete(requester_role)
		document = await self.metadata.get_by_id(document_id)
		release_pin = await self._owns_content(document)

		if document.ledger_id is not None:
			await self._ledger_call(self.ledger.hard_delete(document.ledger_id), "hard delete")
			logger.warning(f"Ledger record {document.ledger_id} for document {document_id} erased")

		outcomes = await asyncio.gather(
			self._attempt(
				CustodyBackend.METADATA,
				self.metadata.set_lifecycle(document_id, DocumentLifecycle.HARD_DELETED),
			),
			self._attempt(CustodyBackend.CONTENT, self._remove_content(document, release_pin)),
		)
		result = self._aggregate([(CustodyBackend.LEDGER, None), *outcomes])
		logger.info(f"Hard delete of document {document_id}: {result.status.value}")
		return result

	async def sign(self, document_id: str, requester_id: str) -> Document:
		document = await self.metadata.get_by_id(document_id)
		policy.ensure_owner(document, requester_id)
		if document.deleted:
			raise ForbiddenError(f"Document {document_id} is deleted")
		if document.custody_state != CustodyState.COMPLETE:
			raise ForbiddenError(f"Document {document_id} is not fully in custody")
		return await self.metadata.mark_signed(document_id)

	async def revoke(self, document_id: str, requester_id: str) -> Document:
		document = await self.metadata.get_by_id(document_id)
		policy.ensure_owner(document, requester_id)
		if document.lifecycle == DocumentLifecycle.HARD_DELETED:
			raise ForbiddenError(f"Document {document_id} was permanently deleted")
		return await self.metadata.mark_revoked(document_id)

	# Reconciliation

	async def reconcile(self, degraded: IngestDegraded) -> Document:
		"""Persist the metadata a degraded ingest could not write.

		Repeating it returns the already persisted document.

		Raises:
			ReconciliationError: The ledger record no longer vouches for the hash
		"""
		progress = degraded.progress
		existing = await self.metadata.get_by_ledger_id(progress.ledger_id)
		if existing is not None:
			return existing

		record = await self._ledger_call(self.ledger.get(progress.ledger_id), "read")
		ok, error = verify_ledger_record(record, progress.content_hash)
		if not ok:
			raise ReconciliationError(error)

		document = await self.metadata.create(DocumentCreate(
			title=degraded.title,
			filename=degraded.filename,
			owner_id=degraded.owner_id,
			content_hash=progress.content_hash,
			content_address=progress.content_address,
			content_path=progress.content_path,
			ledger_id=progress.ledger_id,
		))
		if not record.is_active:
			document = await self.metadata.set_lifecycle(document.id, DocumentLifecycle.SOFT_DELETED)
		logger.info(f"Reconciled ledger id {progress.ledger_id} as document {document.id}")
		return document

	async def verify(self, document_id: str) -> tuple[bool, list[str]]:
		"""Check a document against the ledger and the content store."""
		document = await self.metadata.get_by_id(document_id)
		record = None
		if document.ledger_id is not None:
			record = await self._ledger_call(self.ledger.get(document.ledger_id), "read")
		pinned = None
		if document.content_address is not None:
			pinned = await self.content_store.is_pinned(document.content_address)
		return verify_custody(document, record, pinned)

	async def health(self) -> dict[str, bool]:
		"""Availability of each backend."""
		hasher, content, ledger, metadata = await asyncio.gather(
			self.hasher.is_available(),
			self.content_store.health_check(),
			self.ledger.health_check(),
			self.metadata.health_check(),
		)
		return {
			CustodyBackend.HASHER.value: hasher,
			CustodyBackend.CONTENT.value: content,
			CustodyBackend.LEDGER.value: ledger,
			CustodyBackend.METADATA.value: metadata,
		}
