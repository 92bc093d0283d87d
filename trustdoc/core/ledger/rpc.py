# (c) Copyright Datacraft, 2026
"""Ledger registrar talking JSON-RPC 2.0 to a registry gateway.

The gateway fronts the deployed registry contract. Writes are submitted
with an explicit sender and nonce from the injected signer, then polled
until a receipt is available. Transient transport failures on read calls
are retried; writes are never retried here.
"""
import asyncio
import itertools
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from tenacity import (
	AsyncRetrying,
	retry_if_exception_type,
	stop_after_attempt,
	wait_exponential,
	wait_random,
)

from .base import (
	LedgerError,
	LedgerOutcomeUnknownError,
	LedgerReceipt,
	LedgerRecord,
	LedgerRegistrar,
	error_for_revert,
)
from .signer import LedgerSigner

logger = logging.getLogger(__name__)


class RpcLedger(LedgerRegistrar):
	"""Registrar backed by a JSON-RPC registry gateway."""

	def __init__(
		self,
		rpc_url: str,
		signer: LedgerSigner,
		poll_interval: float = 1.0,
		read_attempts: int = 3,
		timeout: float = 30.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.rpc_url = rpc_url
		self.signer = signer
		self.poll_interval = poll_interval
		self.read_attempts = read_attempts
		self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
		self._ids = itertools.count(1)

	@property
	def identity(self) -> str:
		return self.signer.address

	async def open(self) -> None:
		"""Open the signer at the gateway's next nonce for our identity."""
		await self.signer.open(await self._remote_nonce(), nonce_source=self._remote_nonce)

	async def close(self) -> None:
		await self.signer.close()
		await self._client.aclose()

	async def _remote_nonce(self) -> int:
		return int(await self._read("registry_getNonce", [self.identity]))

	async def _call(self, method: str, params: list[Any]) -> Any:
		payload = {
			"jsonrpc": "2.0",
			"id": next(self._ids),
			"method": method,
			"params": params,
		}
		response = await self._client.post(self.rpc_url, json=payload)
		response.raise_for_status()
		body = response.json()

		if body.get("error"):
			error = body["error"]
			reason = (error.get("data") or {}).get("reason") or error.get("message", "")
			raise error_for_revert(reason)
		return body.get("result")

	async def _read(self, method: str, params: list[Any]) -> Any:
		try:
			async for attempt in AsyncRetrying(
				stop=stop_after_attempt(self.read_attempts),
				wait=wait_exponential(multiplier=0.2, max=2.0) + wait_random(0, 0.2),
				retry=retry_if_exception_type(httpx.TransportError),
				reraise=True,
			):
				with attempt:
					return await self._call(method, params)
		except httpx.HTTPError as e:
			raise LedgerError(f"Ledger gateway unavailable during {method}: {e}", e) from e
		except (ValueError, AttributeError) as e:
			raise LedgerError(f"Malformed gateway response to {method}: {e}", e) from e

	async def _write(self, method: str, args: list[Any]) -> LedgerReceipt:
		try:
			async with self.signer.submission() as nonce:
				try:
					tx_ref = await self._call(
						"registry_submit",
						[{"from": self.identity, "nonce": nonce, "method": method, "args": args}],
					)
				except (httpx.ConnectError, httpx.ConnectTimeout) as e:
					# Never reached the gateway, the nonce is still free
					raise LedgerError(f"Ledger gateway unreachable during {method}: {e}", e) from e
		except (httpx.HTTPError, ValueError, AttributeError) as e:
			raise LedgerOutcomeUnknownError(
				f"Submission of {method} may or may not have been accepted: {e}", e
			) from e

		logger.debug(f"Submitted {method} as {tx_ref}, awaiting settlement")
		return await self._await_receipt(tx_ref)

	async def _await_receipt(self, tx_ref: str) -> LedgerReceipt:
		while True:
			try:
				receipt = await self._read("registry_getReceipt", [tx_ref])
			except LedgerError as e:
				raise LedgerOutcomeUnknownError(f"Lost track of {tx_ref}: {e.message}", e) from e
			if receipt is not None:
				break
			await asyncio.sleep(self.poll_interval)

		try:
			if not receipt.get("status"):
				raise error_for_revert(receipt.get("revertReason") or "Transazione fallita")

			ledger_id = None
			for event in receipt.get("events") or []:
				if event.get("name") in ("DocumentStored", "DocumentSoftDeleted", "DocumentRestored", "DocumentHardDeleted"):
					ledger_id = int(event["args"]["documentId"])
					break

			return LedgerReceipt(
				tx_ref=tx_ref,
				block_number=int(receipt["blockNumber"]),
				ledger_id=ledger_id,
			)
		except (KeyError, TypeError, ValueError, AttributeError) as e:
			raise LedgerOutcomeUnknownError(f"Malformed receipt for {tx_ref}: {e!r}", e) from e

	async def _submit_register(
		self,
		file_name: str,
		file_size: int,
		content_hash: str,
	) -> LedgerReceipt:
		# Sizes beyond 2**53 must not lose precision in JSON
		receipt = await self._write("storeDocument", [file_name, str(file_size), content_hash])
		if receipt.ledger_id is None:
			raise LedgerOutcomeUnknownError(f"DocumentStored event not found in receipt {receipt.tx_ref}")
		logger.info(f"Registered {content_hash} as ledger id {receipt.ledger_id}")
		return receipt

	async def get(self, ledger_id: int) -> LedgerRecord:
		data = await self._read("registry_getDocument", [ledger_id])
		try:
			timestamp = int(data.get("timestamp") or 0)
			return LedgerRecord(
				ledger_id=ledger_id,
				file_name=data["fileName"],
				file_size=int(data["fileSize"]),
				content_hash=data["teeHash"],
				uploader=data["uploader"],
				timestamp=datetime.fromtimestamp(timestamp, tz=timezone.utc) if timestamp else None,
				is_active=bool(data["isActive"]),
			)
		except (KeyError, TypeError, ValueError, AttributeError) as e:
			raise LedgerError(f"Malformed ledger record {ledger_id}: {e!r}", e) from e

	async def get_id_by_hash(self, content_hash: str) -> int:
		try:
			return int(await self._read("registry_getDocumentIdByTee", [content_hash]))
		except (TypeError, ValueError) as e:
			raise LedgerError(f"Malformed id for hash {content_hash}: {e!r}", e) from e

	async def soft_delete(self, ledger_id: int) -> LedgerReceipt:
		return await self._write("softDeleteDocument", [ledger_id])

	async def restore(self, ledger_id: int) -> LedgerReceipt:
		return await self._write("restoreDocument", [ledger_id])

	async def hard_delete(self, ledger_id: int) -> LedgerReceipt:
		return await self._write("hardDeleteDocument", [ledger_id])

	async def total_records(self) -> int:
		return int(await self._read("registry_getTotalDocuments", []))

	async def administrator(self) -> str:
		return await self._read("registry_owner", [])

	async def transfer_administration(self, new_administrator: str) -> LedgerReceipt:
		return await self._write("transferOwnership", [new_administrator])

	async def renounce_administration(self) -> LedgerReceipt:
		return await self._write("renounceOwnership", [])
