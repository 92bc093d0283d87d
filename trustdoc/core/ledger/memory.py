# (c) Copyright Datacraft, 2026
"""Ledger registrar over an in-process registry contract."""
import asyncio
import logging
from typing import Callable

from .base import LedgerReceipt, LedgerRecord, LedgerRegistrar
from .contract import RegistryContract
from .signer import LedgerSigner

logger = logging.getLogger(__name__)


class MemoryLedger(LedgerRegistrar):
	"""Registrar for development and tests.

	Several registrars may share one contract with different signers, the
	way several wallets talk to one deployed contract. ``settlement_delay``
	simulates confirmation time after the state change is applied.
	"""

	def __init__(
		self,
		contract: RegistryContract,
		signer: LedgerSigner,
		settlement_delay: float = 0.0,
	):
		self.contract = contract
		self.signer = signer
		self.settlement_delay = settlement_delay

	@property
	def identity(self) -> str:
		return self.signer.address

	async def _read(self, fn: Callable, *args):
		# Yield like a network round trip would
		await asyncio.sleep(0)
		return fn(*args)

	async def _write(self, fn: Callable, *args) -> LedgerReceipt:
		async with self.signer.submission() as nonce:
			await asyncio.sleep(0)
			receipt = fn(self.signer.address, *args)
			logger.debug(f"Submitted {fn.__name__} with nonce {nonce}: {receipt.tx_ref}")
		if self.settlement_delay:
			await asyncio.sleep(self.settlement_delay)
		return receipt

	async def _submit_register(
		self,
		file_name: str,
		file_size: int,
		content_hash: str,
	) -> LedgerReceipt:
		receipt = await self._write(
			self.contract.store_document, file_name, file_size, content_hash
		)
		logger.info(f"Registered {content_hash} as ledger id {receipt.ledger_id}")
		return receipt

	async def get(self, ledger_id: int) -> LedgerRecord:
		return await self._read(self.contract.get_document, ledger_id)

	async def get_id_by_hash(self, content_hash: str) -> int:
		return await self._read(self.contract.get_document_id_by_hash, content_hash)

	async def soft_delete(self, ledger_id: int) -> LedgerReceipt:
		return await self._write(self.contract.soft_delete_document, ledger_id)

	async def restore(self, ledger_id: int) -> LedgerReceipt:
		return await self._write(self.contract.restore_document, ledger_id)

	async def hard_delete(self, ledger_id: int) -> LedgerReceipt:
		return await self._write(self.contract.hard_delete_document, ledger_id)

	async def total_records(self) -> int:
		return await self._read(self.contract.total_documents)

	async def administrator(self) -> str:
		await asyncio.sleep(0)
		return self.contract.administrator

	async def transfer_administration(self, new_administrator: str) -> LedgerReceipt:
		return await self._write(self.contract.transfer_ownership, new_administrator)

	async def renounce_administration(self) -> LedgerReceipt:
		return await self._write(self.contract.renounce_ownership)

	async def stats(self) -> dict:
		stats = await super().stats()
		stats["registry_address"] = self.contract.address
		return stats

	async def close(self) -> None:
		await self.signer.close()
