# (c) Copyright Datacraft, 2026
"""Abstract integrity hasher interface."""
import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from trustdoc.core.exceptions import CustodyError

logger = logging.getLogger(__name__)

DIGEST_PATTERN = re.compile(r"^[a-fA-F0-9]{64}$")
CANARY = b"test"


class HashTimeoutError(CustodyError):
	"""Hash computation exceeded its deadline or was cancelled."""
	code = "HashTimeout"

	def __init__(self, message: str, cancelled: bool = False):
		self.cancelled = cancelled
		super().__init__(message)


class HashProcessError(CustodyError):
	"""Hash facility exited abnormally or could not be reached."""
	code = "HashProcessError"


class HashFormatError(CustodyError):
	"""Hash facility returned something that is not a SHA-256 hex digest."""
	code = "HashFormatError"


class CancellationToken:
	"""Explicit cancellation handle passed into a hash computation.

	Cancelling the token forcibly terminates the live computation.
	"""

	def __init__(self):
		self._event = asyncio.Event()

	def cancel(self) -> None:
		self._event.set()

	@property
	def cancelled(self) -> bool:
		return self._event.is_set()

	async def wait(self) -> None:
		await self._event.wait()


def validate_digest(value: str) -> str:
	"""Return ``value`` as a lowercase digest or raise HashFormatError."""
	digest = value.strip()
	if not DIGEST_PATTERN.match(digest):
		# Truncate, the facility may have written arbitrary output
		raise HashFormatError(f"Invalid hash format received: {digest[:80]!r}")
	return digest.lower()


class IntegrityHasher(ABC):
	"""Computes content digests in a facility trusted independently of the caller."""

	@abstractmethod
	async def compute_hash(
		self,
		data: bytes,
		cancel: CancellationToken | None = None,
	) -> str:
		"""Compute the SHA-256 digest of ``data``.

		Args:
			data: Content to hash
			cancel: Optional token; cancelling it aborts the computation

		Returns:
			64 character lowercase hex digest

		Raises:
			HashTimeoutError: Deadline exceeded or token cancelled
			HashProcessError: Facility failed or is unreachable
			HashFormatError: Facility output is not a digest
		"""
		...

	@abstractmethod
	def info(self) -> dict[str, Any]:
		"""Configuration snapshot for diagnostics."""
		...

	async def is_available(self) -> bool:
		"""Run a canary computation, never raises."""
		try:
			digest = await self.compute_hash(CANARY)
		except CustodyError as e:
			logger.error(f"Hasher availability check failed: {e}")
			return False
		logger.info(f"Hasher availability check succeeded, digest {digest}")
		return True
