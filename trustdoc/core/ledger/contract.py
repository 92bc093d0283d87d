# (c) Copyright Datacraft, 2026
"""In-process implementation of the document registry contract.

Mirrors the on-chain registry: sequential ids from 1, a hash index that
allows a single active record per hash, uploader-or-administrator soft
delete, administrator-only hard delete.
"""
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .base import (
	MAX_FILE_SIZE,
	MAX_STRING_LENGTH,
	ZERO_ADDRESS,
	DuplicateActiveHashError,
	LedgerAlreadyActiveError,
	LedgerAlreadyDeletedError,
	LedgerHashClaimedElsewhereError,
	LedgerInvalidArgumentError,
	LedgerInvalidIdError,
	LedgerReceipt,
	LedgerRecord,
	LedgerSizeOutOfRangeError,
	LedgerUnauthorizedError,
)

logger = logging.getLogger(__name__)


@dataclass
class ContractEvent:
	name: str
	ledger_id: int
	actor: str
	block_number: int


@dataclass
class _Entry:
	file_name: str
	file_size: int
	content_hash: str
	uploader: str
	timestamp: datetime | None
	is_active: bool


def _check_string(value: str) -> None:
	if not value or len(value) > MAX_STRING_LENGTH:
		raise LedgerInvalidArgumentError("String non valida")


class RegistryContract:
	"""Registry state machine; each mutating call is one mined block."""

	def __init__(self, administrator: str, address: str = "0x" + "ab" * 20):
		self.address = address
		self.administrator = administrator
		self.events: list[ContractEvent] = []
		self._entries: list[_Entry] = []
		self._id_by_hash: dict[str, int] = {}
		self._block_number = 0

	def _mine(self, name: str, ledger_id: int, actor: str) -> LedgerReceipt:
		self._block_number += 1
		self.events.append(ContractEvent(name, ledger_id, actor, self._block_number))
		tx_ref = "0x" + hashlib.sha256(
			f"{self.address}:{self._block_number}:{name}:{ledger_id}".encode()
		).hexdigest()
		return LedgerReceipt(tx_ref=tx_ref, block_number=self._block_number, ledger_id=ledger_id)

	def _entry(self, ledger_id: int) -> _Entry:
		if ledger_id <= 0 or ledger_id > len(self._entries):
			raise LedgerInvalidIdError("Id non valido")
		return self._entries[ledger_id - 1]

	def _only_administrator(self, sender: str) -> None:
		if self.administrator == ZERO_ADDRESS or sender.lower() != self.administrator.lower():
			raise LedgerUnauthorizedError("Solo owner")

	# Writes

	def store_document(
		self,
		sender: str,
		file_name: str,
		file_size: int,
		content_hash: str,
	) -> LedgerReceipt:
		_check_string(file_name)
		_check_string(content_hash)
		if file_size <= 0 or file_size > MAX_FILE_SIZE:
			raise LedgerSizeOutOfRangeError("File size non valido")

		current = self._id_by_hash.get(content_hash, 0)
		if current and self._entries[current - 1].is_active:
			raise DuplicateActiveHashError("Documento gia esistente attivo")

		self._entries.append(_Entry(
			file_name=file_name,
			file_size=file_size,
			content_hash=content_hash,
			uploader=sender,
			timestamp=datetime.now(timezone.utc),
			is_active=True,
		))
		ledger_id = len(self._entries)
		self._id_by_hash[content_hash] = ledger_id
		return self._mine("DocumentStored", ledger_id, sender)

	def soft_delete_document(self, sender: str, ledger_id: int) -> LedgerReceipt:
		entry = self._entry(ledger_id)
		if not entry.is_active:
			raise LedgerAlreadyDeletedError("Documento non esiste")
		if sender.lower() not in (entry.uploader.lower(), self.administrator.lower()):
			raise LedgerUnauthorizedError("Non autorizzato")

		entry.is_active = False
		return self._mine("DocumentSoftDeleted", ledger_id, sender)

	def restore_document(self, sender: str, ledger_id: int) -> LedgerReceipt:
		entry = self._entry(ledger_id)
		if entry.is_active:
			raise LedgerAlreadyActiveError("Documento gia attivo")
		if not entry.content_hash:
			raise LedgerInvalidIdError("Id non valido")

		current = self._id_by_hash.get(entry.content_hash, 0)
		if current and current != ledger_id and self._entries[current - 1].is_active:
			raise LedgerHashClaimedElsewhereError("TEE hash usato da altro documento attivo")

		entry.is_active = True
		self._id_by_hash[entry.content_hash] = ledger_id
		return self._mine("DocumentRestored", ledger_id, sender)

	def hard_delete_document(self, sender: str, ledger_id: int) -> LedgerReceipt:
		self._only_administrator(sender)
		entry = self._entry(ledger_id)

		if entry.content_hash and self._id_by_hash.get(entry.content_hash) == ledger_id:
			del self._id_by_hash[entry.content_hash]

		self._entries[ledger_id - 1] = _Entry(
			file_name="",
			file_size=0,
			content_hash="",
			uploader=ZERO_ADDRESS,
			timestamp=None,
			is_active=False,
		)
		return self._mine("DocumentHardDeleted", ledger_id, sender)

	def transfer_ownership(self, sender: str, new_administrator: str) -> LedgerReceipt:
		self._only_administrator(sender)
		if not new_administrator or new_administrator == ZERO_ADDRESS:
			raise LedgerInvalidArgumentError("Owner non valido")
		if new_administrator.lower() == self.administrator.lower():
			raise LedgerInvalidArgumentError("Stesso owner")

		self.administrator = new_administrator
		return self._mine("OwnershipTransferred", 0, sender)

	def renounce_ownership(self, sender: str) -> LedgerReceipt:
		self._only_administrator(sender)
		self.administrator = ZERO_ADDRESS
		return self._mine("OwnershipTransferred", 0, sender)

	# Reads

	def get_document(self, ledger_id: int) -> LedgerRecord:
		entry = self._entry(ledger_id)
		return LedgerRecord(
			ledger_id=ledger_id,
			file_name=entry.file_name,
			file_size=entry.file_size,
			content_hash=entry.content_hash,
			uploader=entry.uploader,
			timestamp=entry.timestamp,
			is_active=entry.is_active,
		)

	def get_document_id_by_hash(self, content_hash: str) -> int:
		_check_string(content_hash)
		return self._id_by_hash.get(content_hash, 0)

	def total_documents(self) -> int:
		return len(self._entries)
