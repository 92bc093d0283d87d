# (c) Copyright Datacraft, 2026
"""In-process hasher for development and testing."""
import hashlib
from typing import Any

from .base import CancellationToken, HashTimeoutError, IntegrityHasher


class LocalHasher(IntegrityHasher):
	"""SHA-256 computed in the calling process.

	Offers none of the isolation guarantees of the enclave host.
	"""

	async def compute_hash(
		self,
		data: bytes,
		cancel: CancellationToken | None = None,
	) -> str:
		if cancel is not None and cancel.cancelled:
			raise HashTimeoutError("Hash computation cancelled", cancelled=True)
		return hashlib.sha256(data).hexdigest()

	def info(self) -> dict[str, Any]:
		return {"backend": "local", "algorithm": "sha256"}
