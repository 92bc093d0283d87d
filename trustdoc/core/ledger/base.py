# (c) Copyright Datacraft, 2026
"""Abstract ledger registrar interface."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from trustdoc.core.exceptions import CustodyError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 2**96 - 1
MAX_STRING_LENGTH = 256
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class LedgerRecord:
	"""A registry entry. Erased records keep their id with empty fields."""
	ledger_id: int
	file_name: str
	file_size: int
	content_hash: str
	uploader: str
	timestamp: datetime | None
	is_active: bool

	@property
	def erased(self) -> bool:
		return not self.content_hash and self.uploader == ZERO_ADDRESS


@dataclass(frozen=True)
class LedgerReceipt:
	"""Commit metadata of a settled ledger write."""
	tx_ref: str
	block_number: int
	ledger_id: int | None = None


class LedgerError(CustodyError):
	"""Ledger unreachable or failed for an unclassified reason."""
	code = "LedgerError"
	outcome_unknown = False


class DuplicateActiveHashError(LedgerError):
	code = "DuplicateActiveHash"


class LedgerUnauthorizedError(LedgerError):
	code = "LedgerUnauthorized"


class LedgerInvalidIdError(LedgerError):
	code = "LedgerInvalidId"


class LedgerAlreadyDeletedError(LedgerError):
	code = "LedgerAlreadyDeleted"


class LedgerAlreadyActiveError(LedgerError):
	code = "LedgerAlreadyActive"


class LedgerHashClaimedElsewhereError(LedgerError):
	code = "LedgerHashClaimedElsewhere"


class LedgerSizeOutOfRangeError(LedgerError):
	code = "LedgerSizeOutOfRange"


class LedgerInvalidArgumentError(LedgerError):
	code = "LedgerInvalidArgument"


class LedgerOutcomeUnknownError(LedgerError):
	"""A write left this process but whether it settled is not known.

	The write may still settle later; callers must not treat this as
	either success or failure.
	"""
	code = "LedgerOutcomeUnknown"
	outcome_unknown = True


class LedgerTimeoutError(LedgerOutcomeUnknownError):
	"""Settlement did not complete in time."""
	code = "LedgerTimeout"


# Revert reasons emitted by the registry contract
REVERT_REASONS: dict[str, type[LedgerError]] = {
	"Documento gia esistente attivo": DuplicateActiveHashError,
	"Non autorizzato": LedgerUnauthorizedError,
	"Solo owner": LedgerUnauthorizedError,
	"Id non valido": LedgerInvalidIdError,
	"Documento non esiste": LedgerAlreadyDeletedError,
	"Documento gia attivo": LedgerAlreadyActiveError,
	"TEE hash usato da altro documento attivo": LedgerHashClaimedElsewhereError,
	"File size non valido": LedgerSizeOutOfRangeError,
	"String non valida": LedgerInvalidArgumentError,
	"Owner non valido": LedgerInvalidArgumentError,
	"Stesso owner": LedgerInvalidArgumentError,
}

ERROR_CODES: dict[str, type[LedgerError]] = {
	cls.code: cls
	for cls in (
		DuplicateActiveHashError,
		LedgerUnauthorizedError,
		LedgerInvalidIdError,
		LedgerAlreadyDeletedError,
		LedgerAlreadyActiveError,
		LedgerHashClaimedElsewhereError,
		LedgerSizeOutOfRangeError,
		LedgerInvalidArgumentError,
		LedgerTimeoutError,
	)
}


def error_for_revert(reason: str) -> LedgerError:
	"""Map a contract revert reason or error code to a ledger error."""
	if reason in ERROR_CODES:
		return ERROR_CODES[reason](reason)
	for marker, cls in REVERT_REASONS.items():
		if marker in reason:
			return cls(reason)
	return LedgerError(f"Ledger rejected the transaction: {reason}")


class LedgerRegistrar(ABC):
	"""Append-only registry keyed by sequential id with a hash index.

	Every write is submitted under the registrar's signer identity.
	"""

	@property
	@abstractmethod
	def identity(self) -> str:
		"""Address writes are submitted from."""
		...

	async def register(
		self,
		file_name: str,
		file_size: int,
		content_hash: str,
	) -> LedgerReceipt:
		"""Register a content hash and return the assigned id.

		The preflight only saves a doomed transaction; the commit re-checks
		uniqueness and is the authority on it.

		Raises:
			DuplicateActiveHashError: An active record already holds the hash
			LedgerSizeOutOfRangeError: file_size outside 1 .. 2**96 - 1
			LedgerInvalidArgumentError: Empty or oversized file_name/content_hash
		"""
		existing = await self.get_by_hash(content_hash)
		if existing is not None and existing.is_active:
			raise DuplicateActiveHashError(
				f"Active ledger record {existing.ledger_id} already holds hash {content_hash}"
			)
		if existing is not None:
			logger.info(
				f"Hash {content_hash} was held by inactive record {existing.ledger_id}, registering anew"
			)
		return await self._submit_register(file_name, file_size, content_hash)

	@abstractmethod
	async def _submit_register(
		self,
		file_name: str,
		file_size: int,
		content_hash: str,
	) -> LedgerReceipt:
		...

	@abstractmethod
	async def get(self, ledger_id: int) -> LedgerRecord:
		"""Raises LedgerInvalidIdError for 0 or an unassigned id."""
		...

	@abstractmethod
	async def get_id_by_hash(self, content_hash: str) -> int:
		"""Current id for ``content_hash`` or 0."""
		...

	async def get_by_hash(self, content_hash: str) -> LedgerRecord | None:
		ledger_id = await self.get_id_by_hash(content_hash)
		if ledger_id == 0:
			return None
		return await self.get(ledger_id)

	async def is_active(self, ledger_id: int) -> bool:
		return (await self.get(ledger_id)).is_active

	@abstractmethod
	async def soft_delete(self, ledger_id: int) -> LedgerReceipt:
		...

	@abstractmethod
	async def restore(self, ledger_id: int) -> LedgerReceipt:
		...

	@abstractmethod
	async def hard_delete(self, ledger_id: int) -> LedgerReceipt:
		...

	@abstractmethod
	async def total_records(self) -> int:
		...

	@abstractmethod
	async def administrator(self) -> str:
		...

	@abstractmethod
	async def transfer_administration(self, new_administrator: str) -> LedgerReceipt:
		...

	@abstractmethod
	async def renounce_administration(self) -> LedgerReceipt:
		...

	async def is_administrator(self) -> bool:
		return (await self.administrator()).lower() == self.identity.lower()

	async def stats(self) -> dict[str, Any]:
		return {
			"total_records": await self.total_records(),
			"administrator": await self.administrator(),
			"identity": self.identity,
		}

	async def health_check(self) -> bool:
		try:
			await self.total_records()
			return True
		except LedgerError as e:
			logger.error(f"Ledger health check failed: {e}")
			return False

	async def close(self) -> None:
		return None
