# (c) Copyright Datacraft, 2026
"""IPFS content store speaking the Kubo RPC API."""
import asyncio
import json
import logging
import posixpath
import zlib
from typing import Any

import httpx

from .base import (
	ContentEntry,
	ContentReclaimError,
	ContentStore,
	ContentStoreError,
	EntryType,
)

logger = logging.getLogger(__name__)

# Kubo error messages that mean "nothing to do"
_ABSENT_PATH_MARKERS = ("file does not exist", "no such file")
_NOT_PINNED_MARKERS = ("not pinned",)
_ALREADY_EXISTS_MARKERS = ("already has entry", "already exists")

PIN_LOCK_STRIPES = 64


class IpfsRpcError(Exception):
	"""Error response returned by the Kubo RPC API."""

	def __init__(self, command: str, status_code: int, message: str):
		self.command = command
		self.status_code = status_code
		self.message = message
		super().__init__(f"{command} failed ({status_code}): {message}")

	def matches(self, markers: tuple[str, ...]) -> bool:
		text = self.message.lower()
		return any(marker in text for marker in markers)


class IpfsContentStore(ContentStore):
	"""Content store backed by a Kubo (go-ipfs) node.

	Deletion only affects this node; content already fetched by other
	peers stays reachable through them.
	"""

	def __init__(
		self,
		api_url: str = "http://127.0.0.1:5001",
		timeout: float = 60.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self._base_url = api_url.rstrip("/") + "/api/v0"
		self._client = httpx.AsyncClient(
			base_url=self._base_url,
			timeout=timeout,
			transport=transport,
		)
		self._pin_locks = [asyncio.Lock() for _ in range(PIN_LOCK_STRIPES)]

	async def close(self) -> None:
		await self._client.aclose()

	async def _rpc(
		self,
		command: str,
		params: list[tuple[str, str]] | None = None,
		files: dict[str, Any] | None = None,
	) -> httpx.Response:
		try:
			response = await self._client.post(f"/{command}", params=params, files=files)
		except httpx.HTTPError as e:
			raise ContentStoreError(f"IPFS node unreachable during {command}: {e}", e) from e

		if response.status_code >= 400:
			try:
				message = response.json().get("Message", response.text)
			except (ValueError, AttributeError):
				message = response.text
			raise IpfsRpcError(command, response.status_code, message)
		return response

	async def add(self, data: bytes) -> str:
		return await self._add(data, pin=False)

	async def _add(self, data: bytes, pin: bool, only_hash: bool = False) -> str:
		params = [("pin", "true" if pin else "false"), ("cid-version", "0")]
		if only_hash:
			params.append(("only-hash", "true"))
		try:
			response = await self._rpc(
				"add",
				params=params,
				files={"file": ("blob", data, "application/octet-stream")},
			)
		except IpfsRpcError as e:
			raise ContentStoreError(str(e), e) from e

		address = self._decode(response, "add").get("Hash")
		if not address:
			raise ContentStoreError("IPFS add returned no content address")
		if not only_hash:
			logger.debug(f"Added {len(data)} bytes to IPFS as {address} (pinned: {pin})")
		return address

	async def add_pinned(self, data: bytes) -> tuple[str, bool]:
		# Computing the CID first lets the pin state be read before the
		# node pins and stores the content in a single add
		address = await self._add(data, pin=False, only_hash=True)
		async with self._lock_for(address):
			pinned_before = await self.is_pinned(address)
			await self._add(data, pin=True)
		return address, not pinned_before

	def _lock_for(self, address: str) -> asyncio.Lock:
		return self._pin_locks[zlib.crc32(address.encode()) % len(self._pin_locks)]

	def _decode(self, response: httpx.Response, command: str) -> Any:
		try:
			body = response.json()
		except ValueError as e:
			raise ContentStoreError(f"Malformed IPFS response to {command}", e) from e
		if not isinstance(body, dict):
			raise ContentStoreError(f"Unexpected IPFS response to {command}: {body!r}")
		return body

	async def is_pinned(self, address: str) -> bool:
		try:
			response = await self._rpc(
				"pin/ls",
				params=[("arg", address), ("type", "recursive")],
			)
		except IpfsRpcError as e:
			if e.matches(_NOT_PINNED_MARKERS):
				return False
			raise ContentStoreError(str(e), e) from e
		return address in (self._decode(response, "pin/ls").get("Keys") or {})

	async def pin(self, address: str) -> bool:
		async with self._lock_for(address):
			if await self.is_pinned(address):
				return False
			try:
				await self._rpc("pin/add", params=[("arg", address)])
			except IpfsRpcError as e:
				raise ContentStoreError(str(e), e) from e
		logger.debug(f"Pinned {address}")
		return True

	async def publish(self, address: str, path: str) -> None:
		parent = posixpath.dirname(path)
		try:
			if parent and parent != "/":
				await self._rpc("files/mkdir", params=[("arg", parent), ("parents", "true")])
			await self._rpc("files/cp", params=[("arg", f"/ipfs/{address}"), ("arg", path)])
		except IpfsRpcError as e:
			if e.matches(_ALREADY_EXISTS_MARKERS):
				return
			raise ContentStoreError(str(e), e) from e

	async def list_entries(self, path: str) -> list[ContentEntry]:
		try:
			response = await self._rpc("files/ls", params=[("arg", path), ("long", "true")])
		except IpfsRpcError as e:
			if e.matches(_ABSENT_PATH_MARKERS):
				return []
			raise ContentStoreError(str(e), e) from e

		entries = self._decode(response, "files/ls").get("Entries") or []
		try:
			return [
				ContentEntry(
					name=entry["Name"],
					address=entry.get("Hash") or None,
					size=entry.get("Size", 0),
					type=EntryType.DIRECTORY if entry.get("Type") == 1 else EntryType.FILE,
				)
				for entry in entries
			]
		except (KeyError, TypeError, AttributeError) as e:
			raise ContentStoreError(f"Malformed listing of {path}: {e!r}", e) from e


	async def unpin(
		self,
		address: str,
		path: str | None = None,
		release_pin: bool = True,
	) -> None:
		try:
			if path:
				await self._rpc("files/rm", params=[("arg", path), ("force", "true")])
		except IpfsRpcError as e:
			if not e.matches(_ABSENT_PATH_MARKERS):
				raise ContentReclaimError(str(e), e) from e
		except ContentStoreError as e:
			raise ContentReclaimError(e.message, e) from e

		if not release_pin:
			return

		async with self._lock_for(address):
			try:
				await self._rpc("pin/rm", params=[("arg", address)])
			except IpfsRpcError as e:
				if not e.matches(_NOT_PINNED_MARKERS):
					raise ContentReclaimError(str(e), e) from e
			except ContentStoreError as e:
				raise ContentReclaimError(e.message, e) from e
		logger.debug(f"Unpinned {address}")

	async def reclaim(self) -> int:
		try:
			response = await self._rpc("repo/gc")
		except (IpfsRpcError, ContentStoreError) as e:
			raise ContentReclaimError(f"Garbage collection failed: {e}", e) from e

		removed = 0
		for line in response.text.splitlines():
			if not line.strip():
				continue
			try:
				item = json.loads(line)
			except ValueError as e:
				raise ContentReclaimError(f"Malformed garbage collection output: {line!r}", e) from e
			if not isinstance(item, dict):
				continue
			if item.get("Error"):
				raise ContentReclaimError(f"Garbage collection failed: {item['Error']}")
			if item.get("Key"):
				removed += 1

		logger.info(f"IPFS garbage collection removed {removed} blocks")
		return removed

	async def health_check(self) -> bool:
		try:
			await self._rpc("version")
			return True
		except (IpfsRpcError, ContentStoreError) as e:
			logger.error(f"IPFS health check failed: {e}")
			return False
