# (c) Copyright Datacraft, 2026
"""Ledger registrar factory."""
from dataclasses import dataclass

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.types import LedgerBackend

from .base import LedgerRegistrar
from .signer import LedgerSigner


@dataclass
class LedgerConfig:
	"""Ledger configuration."""
	backend: LedgerBackend = LedgerBackend.RPC
	signer_address: str = "0x0000000000000000000000000000000000000001"

	# RPC settings
	rpc_url: str = "http://127.0.0.1:8545"
	poll_interval: float = 1.0
	read_attempts: int = 3

	# Memory backend settings
	admin_address: str | None = None

	@classmethod
	def from_settings(cls, settings: Settings) -> "LedgerConfig":
		return cls(
			backend=settings.ledger_backend,
			signer_address=settings.ledger_signer_address,
			rpc_url=settings.ledger_rpc_url,
			poll_interval=settings.ledger_poll_interval,
			read_attempts=settings.ledger_rpc_retries,
			admin_address=settings.ledger_admin_address,
		)


_ledger: LedgerRegistrar | None = None


async def get_ledger(
	config: LedgerConfig | None = None,
	signer: LedgerSigner | None = None,
) -> LedgerRegistrar:
	"""Get an open ledger registrar.

	The signer is opened here, before the registrar is handed out, so no
	write ever starts a signer lazily.

	Args:
		config: Ledger configuration (uses settings if None)
		signer: Signer to submit from (built from config if None)

	Returns:
		Registrar instance with an open signer
	"""
	global _ledger

	if _ledger is not None and config is None and signer is None:
		return _ledger

	if config is None:
		config = LedgerConfig.from_settings(get_settings())
	if signer is None:
		signer = LedgerSigner(config.signer_address)

	ledger = await _create_ledger(config, signer)

	if _ledger is None:
		_ledger = ledger

	return ledger


async def _create_ledger(config: LedgerConfig, signer: LedgerSigner) -> LedgerRegistrar:
	if config.backend == LedgerBackend.RPC:
		from .rpc import RpcLedger
		ledger = RpcLedger(
			rpc_url=config.rpc_url,
			signer=signer,
			poll_interval=config.poll_interval,
			read_attempts=config.read_attempts,
		)
		await ledger.open()
		return ledger

	elif config.backend == LedgerBackend.MEMORY:
		from .contract import RegistryContract
		from .memory import MemoryLedger
		contract = RegistryContract(administrator=config.admin_address or signer.address)
		if not signer.is_open:
			await signer.open()
		return MemoryLedger(contract, signer)

	else:
		raise ValueError(f"Unknown ledger backend: {config.backend}")


def reset_ledger() -> None:
	"""Reset cached ledger (for testing)."""
	global _ledger
	_ledger = None
