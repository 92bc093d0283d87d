# (c) Copyright Datacraft, 2026
"""Abstract content-addressed storage interface."""
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from trustdoc.core.exceptions import CustodyError

LOCAL_ONLY_NOTICE = (
	"Content was removed from the local node only; "
	"other replicas may still serve it."
)


class EntryType(str, Enum):
	FILE = "file"
	DIRECTORY = "directory"


@dataclass
class ContentEntry:
	"""An entry under a published path."""
	name: str
	address: str | None
	size: int = 0
	type: EntryType = EntryType.FILE


class ContentStoreError(CustodyError):
	"""Content store unreachable or rejected an operation."""
	code = "ContentStoreError"


class ContentReclaimError(CustodyError):
	"""Best-effort content removal failed."""
	code = "ContentReclaimError"


def publish_path(
	root: str,
	owner_id: str,
	content_hash: str,
	attempt_id: str,
	filename: str,
) -> str:
	"""Deterministic mutable path for one ingest attempt.

	The attempt id keeps concurrent uploads of identical bytes apart.
	"""
	safe_name = filename.replace("/", "_").strip() or "document"
	return posixpath.join(
		"/" + root.strip("/"),
		owner_id,
		content_hash,
		f"{attempt_id}-{safe_name}",
	)


class ContentStore(ABC):
	"""Abstract base class for content-addressed stores."""

	@abstractmethod
	async def add(self, data: bytes) -> str:
		"""Add content and return its address.

		Identical content always yields the identical address.
		"""
		...

	@abstractmethod
	async def pin(self, address: str) -> bool:
		"""Retain content on this node.

		Returns:
			True if this call created the pin, False if it already existed
		"""
		...

	@abstractmethod
	async def add_pinned(self, data: bytes) -> tuple[str, bool]:
		"""Add and pin content in one step.

		Garbage collection can never observe the content unpinned in
		between.

		Returns:
			The address, and True if this call created the pin
		"""
		...

	@abstractmethod
	async def is_pinned(self, address: str) -> bool:
		...

	@abstractmethod
	async def publish(self, address: str, path: str) -> None:
		"""Expose content under a mutable path.

		Publishing to an existing path is not an error.
		"""
		...

	@abstractmethod
	async def list_entries(self, path: str) -> list[ContentEntry]:
		"""List entries under ``path``; an absent path yields ``[]``."""
		...

	@abstractmethod
	async def unpin(
		self,
		address: str,
		path: str | None = None,
		release_pin: bool = True,
	) -> None:
		"""Remove ``path`` and, if ``release_pin``, the pin on ``address``.

		Absent paths and missing pins are not errors.

		Raises:
			ContentReclaimError: If the node refused the removal
		"""
		...

	@abstractmethod
	async def reclaim(self) -> int:
		"""Garbage-collect unpinned, unpublished content.

		Returns:
			Number of blocks removed, as reported by the backend

		Raises:
			ContentReclaimError: If collection failed
		"""
		...

	@abstractmethod
	async def health_check(self) -> bool:
		...

	async def close(self) -> None:
		"""Release network resources."""
		return None
