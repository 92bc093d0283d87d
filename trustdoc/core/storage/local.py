# (c) Copyright Datacraft, 2026
"""Local filesystem content store for development and testing."""
import asyncio
import logging
import posixpath
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from trustdoc.core.utils.hash import calculate_blake3

from .base import (
	ContentEntry,
	ContentReclaimError,
	ContentStore,
	ContentStoreError,
	EntryType,
)

logger = logging.getLogger(__name__)

ADDRESS_PREFIX = "b3-"


class LocalContentStore(ContentStore):
	"""Content-addressed store laid out on the local filesystem.

	``blocks/`` holds content named by its BLAKE3 address, ``pins/`` holds
	one marker per pinned address and ``mfs/`` mirrors published paths,
	each file containing the address it points to.

	Mutations and collection share one lock, so a
	collection never runs between an add and its pin.
	"""

	def __init__(self, base_path: str | Path):
		"""Initialize local content store.

		Args:
			base_path: Base directory for storage
		"""
		self.base_path = Path(base_path)
		self.blocks_dir = self.base_path / "blocks"
		self.pins_dir = self.base_path / "pins"
		self.mfs_dir = self.base_path / "mfs"
		self._lock = asyncio.Lock()

		for directory in (self.blocks_dir, self.pins_dir, self.mfs_dir):
			directory.mkdir(parents=True, exist_ok=True)

	def _block_path(self, address: str) -> Path:
		if not address.startswith(ADDRESS_PREFIX) or "/" in address:
			raise ContentStoreError(f"Invalid content address: {address}")
		return self.blocks_dir / address

	def _pin_path(self, address: str) -> Path:
		self._block_path(address)
		return self.pins_dir / address

	def _mfs_path(self, path: str) -> Path:
		normalized = posixpath.normpath("/" + path.strip())
		if normalized.startswith("/.."):
			raise ContentStoreError(f"Path escapes the store: {path}")
		return self.mfs_dir / normalized.lstrip("/")

	async def add(self, data: bytes) -> str:
		async with self._lock:
			return await self._write_block(data)

	async def _write_block(self, data: bytes) -> str:
		address = ADDRESS_PREFIX + calculate_blake3(data)
		path = self._block_path(address)

		if path.exists():
			return address

		try:
			tmp_path = self.base_path / f".{address}.{uuid.uuid4().hex}.tmp"
			async with aiofiles.open(tmp_path, "wb") as f:
				await f.write(data)
			await aiofiles.os.replace(tmp_path, path)
		except OSError as e:
			raise ContentStoreError(f"Failed to add content {address}", e) from e

		logger.debug(f"Added {len(data)} bytes as {address}")
		return address

	async def add_pinned(self, data: bytes) -> tuple[str, bool]:
		async with self._lock:
			address = await self._write_block(data)
			return address, self._create_pin(address)

	async def pin(self, address: str) -> bool:
		async with self._lock:
			return self._create_pin(address)

	def _create_pin(self, address: str) -> bool:
		if not self._block_path(address).exists():
			raise ContentStoreError(f"Cannot pin unknown content: {address}")

		pin_path = self._pin_path(address)
		if pin_path.exists():
			return False
		try:
			pin_path.touch()
		except OSError as e:
			raise ContentStoreError(f"Failed to pin {address}", e) from e
		return True

	async def is_pinned(self, address: str) -> bool:
		return self._pin_path(address).exists()

	async def publish(self, address: str, path: str) -> None:
		async with self._lock:
			if not self._block_path(address).exists():
				raise ContentStoreError(f"Cannot publish unknown content: {address}")

			target = self._mfs_path(path)
			if target.exists():
				return

			try:
				target.parent.mkdir(parents=True, exist_ok=True)
				async with aiofiles.open(target, "w") as f:
					await f.write(address)
			except OSError as e:
				raise ContentStoreError(f"Failed to publish {address} at {path}", e) from e

	async def list_entries(self, path: str) -> list[ContentEntry]:
		target = self._mfs_path(path)

		if target.is_file():
			return [await self._entry(target)]
		if not target.is_dir():
			return []

		return [await self._entry(child) for child in sorted(target.iterdir())]

	async def _entry(self, path: Path) -> ContentEntry:
		if path.is_dir():
			return ContentEntry(name=path.name, address=None, type=EntryType.DIRECTORY)

		async with aiofiles.open(path, "r") as f:
			address = (await f.read()).strip()
		block = self.blocks_dir / address
		size = block.stat().st_size if block.exists() else 0
		return ContentEntry(name=path.name, address=address, size=size)

	async def unpin(
		self,
		address: str,
		path: str | None = None,
		release_pin: bool = True,
	) -> None:
		async with self._lock:
			try:
				if path:
					target = self._mfs_path(path)
					if target.is_file():
						await aiofiles.os.remove(target)
						self._prune_empty_parents(target.parent)

				if release_pin:
					pin_path = self._pin_path(address)
					if pin_path.exists():
						await aiofiles.os.remove(pin_path)
			except (OSError, ContentStoreError) as e:
				raise ContentReclaimError(f"Failed to unpin {address}", e) from e

	def _prune_empty_parents(self, directory: Path) -> None:
		while directory != self.mfs_dir and directory.is_dir() and not any(directory.iterdir()):
			directory.rmdir()
			directory = directory.parent

	async def reclaim(self) -> int:
		async with self._lock:
			return await self._collect()

	async def _collect(self) -> int:
		try:
			referenced = set()
			for path in self.mfs_dir.rglob("*"):
				if path.is_file():
					async with aiofiles.open(path, "r") as f:
						referenced.add((await f.read()).strip())

			pinned = {path.name for path in self.pins_dir.iterdir()}
			removed = 0
			for block in self.blocks_dir.iterdir():
				if block.name in pinned or block.name in referenced:
					continue
				await aiofiles.os.remove(block)
				removed += 1
		except OSError as e:
			raise ContentReclaimError("Failed to reclaim content", e) from e

		if removed:
			logger.info(f"Reclaimed {removed} unreferenced blocks")
		return removed

	async def health_check(self) -> bool:
		return self.blocks_dir.is_dir()
