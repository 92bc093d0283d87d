# (c) Copyright Datacraft, 2026
"""Long-lived ledger writing identity."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from .base import LedgerError

logger = logging.getLogger(__name__)

NonceSource = Callable[[], Awaitable[int]]


class SignerClosedError(LedgerError):
	code = "LedgerSignerClosed"


class LedgerSigner:
	"""The single identity all ledger writes are submitted from.

	Submissions are serialised through a single-writer lock and each one
	gets the next sequence number (nonce). A submission refused with a
	``LedgerError`` that is not ``outcome_unknown`` never left this
	process, so its nonce goes to the next writer. Anything else
	(cancellation, timeouts, broken responses) may have reached the
	ledger: the nonce is consumed and the signer resynchronises with
	``nonce_source`` before the next submission.

	Usage:
		signer = LedgerSigner(address)
		await signer.open(next_nonce, nonce_source=fetch_nonce)
		async with signer.submission() as nonce:
			tx_ref = await send(nonce)
		await signer.close()
	"""

	def __init__(self, address: str):
		self.address = address
		self._lock = asyncio.Lock()
		self._next_nonce = 0
		self._nonce_source: NonceSource | None = None
		self._needs_resync = False
		self._open = False

	@property
	def is_open(self) -> bool:
		return self._open

	@property
	def next_nonce(self) -> int:
		return self._next_nonce

	@property
	def needs_resync(self) -> bool:
		return self._needs_resync

	async def open(self, next_nonce: int = 0, nonce_source: NonceSource | None = None) -> None:
		async with self._lock:
			self._next_nonce = next_nonce
			self._nonce_source = nonce_source
			self._needs_resync = False
			self._open = True
		logger.info(f"Ledger signer {self.address} opened at nonce {next_nonce}")

	async def close(self) -> None:
		async with self._lock:
			self._open = False
		logger.info(f"Ledger signer {self.address} closed")

	async def _resync(self) -> None:
		if self._nonce_source is not None:
			remote = await self._nonce_source()
			# Never step back below a nonce that may be in flight
			self._next_nonce = max(self._next_nonce, remote)
		self._needs_resync = False
		logger.info(f"Ledger signer {self.address} resynchronised at nonce {self._next_nonce}")

	@asynccontextmanager
	async def submission(self) -> AsyncIterator[int]:
		async with self._lock:
			if not self._open:
				raise SignerClosedError(f"Ledger signer {self.address} is not open")
			if self._needs_resync:
				await self._resync()

			nonce = self._next_nonce
			try:
				yield nonce
			except LedgerError as e:
				if e.outcome_unknown:
					self._consume_unknown(nonce, e)
				raise
			except BaseException as e:
				self._consume_unknown(nonce, e)
				raise
			self._next_nonce = nonce + 1

	def _consume_unknown(self, nonce: int, error: BaseException) -> None:
		self._next_nonce = nonce + 1
		self._needs_resync = True
		logger.warning(
			f"Ledger signer {self.address}: submission with nonce {nonce} has an unknown "
			f"outcome ({type(error).__name__}); nonce consumed"
		)
