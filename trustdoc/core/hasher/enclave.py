# (c) Copyright Datacraft, 2026
"""Integrity hasher backed by the enclave host executable."""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .base import (
	CancellationToken,
	HashProcessError,
	HashTimeoutError,
	IntegrityHasher,
	validate_digest,
)

logger = logging.getLogger(__name__)


@dataclass
class EnclaveConfig:
	"""Enclave host invocation settings."""
	host_path: Path
	simulate: bool = True
	use_wsl: bool = False
	timeout: float = 30.0
	# Overrides the computed command line, used to run alternative hosts
	command: list[str] | None = None


class EnclaveHasher(IntegrityHasher):
	"""Hashes bytes by piping them into the enclave host process.

	The host reads the buffer from stdin (``-`` argument) and prints the
	hex digest on stdout. The process runs in the host directory so the
	signed enclave image next to it is found.
	"""

	def __init__(self, config: EnclaveConfig):
		self.config = config
		self.host_path = Path(config.host_path).resolve()
		self.host_dir = self.host_path.parent
		self.host_executable = self.host_path.name

	def _command(self) -> list[str]:
		if self.config.command:
			return list(self.config.command)

		args = [f"./{self.host_executable}"]
		if self.config.simulate:
			args.append("--simulate")
		args.append("-")

		if self.config.use_wsl:
			return ["wsl", *args]
		return [str(self.host_path), *args[1:]]

	def _cwd(self) -> str | None:
		if self.config.command:
			return None
		return str(self.host_dir)

	async def compute_hash(
		self,
		data: bytes,
		cancel: CancellationToken | None = None,
	) -> str:
		command = self._command()
		try:
			process = await asyncio.create_subprocess_exec(
				*command,
				stdin=asyncio.subprocess.PIPE,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
				cwd=self._cwd(),
			)
		except OSError as e:
			raise HashProcessError(f"Failed to start hash process: {e}", e) from e

		communicate = asyncio.ensure_future(process.communicate(data))
		waiters: set[asyncio.Future] = {communicate}
		cancel_wait = None
		if cancel is not None:
			cancel_wait = asyncio.ensure_future(cancel.wait())
			waiters.add(cancel_wait)

		try:
			done, _ = await asyncio.wait(
				waiters,
				timeout=self.config.timeout,
				return_when=asyncio.FIRST_COMPLETED,
			)
		except asyncio.CancelledError:
			await self._terminate(process, communicate)
			raise
		finally:
			if cancel_wait is not None and not cancel_wait.done():
				cancel_wait.cancel()

		if communicate not in done:
			await self._terminate(process, communicate)
			if cancel_wait is not None and cancel_wait in done:
				logger.warning("Hash computation cancelled, process killed")
				raise HashTimeoutError("Hash computation cancelled", cancelled=True)
			logger.error(f"Hash computation timed out after {self.config.timeout}s")
			raise HashTimeoutError(
				f"Hash computation timed out after {self.config.timeout}s"
			)

		try:
			stdout, stderr = communicate.result()
		except (BrokenPipeError, ConnectionResetError) as e:
			await self._terminate(process, communicate)
			raise HashProcessError(f"Failed to write to hash process: {e}", e) from e

		if process.returncode != 0:
			message = stderr.decode(errors="replace").strip()
			raise HashProcessError(
				f"Hash process failed with code {process.returncode}: {message}"
			)

		return validate_digest(stdout.decode(errors="replace"))

	async def _terminate(
		self,
		process: asyncio.subprocess.Process,
		communicate: asyncio.Future,
	) -> None:
		"""Kill the child and reap it so no zombie is left behind."""
		if process.returncode is None:
			try:
				process.kill()
			except ProcessLookupError:
				pass
		communicate.cancel()
		try:
			await communicate
		except (asyncio.CancelledError, OSError):
			pass
		await process.wait()

	def info(self) -> dict[str, Any]:
		return {
			"host_path": str(self.host_path),
			"host_dir": str(self.host_dir),
			"host_executable": self.host_executable,
			"simulate": self.config.simulate,
			"use_wsl": self.config.use_wsl,
			"timeout": self.config.timeout,
		}
