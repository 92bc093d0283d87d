# (c) Copyright Datacraft, 2026
"""Integrity hasher factory."""
from trustdoc.core.config import Settings, get_settings
from trustdoc.core.types import HasherBackend

from .base import IntegrityHasher
from .enclave import EnclaveConfig

_hasher: IntegrityHasher | None = None


def get_hasher(settings: Settings | None = None) -> IntegrityHasher:
	"""Get the configured integrity hasher.

	Args:
		settings: Settings to build from (uses cached settings if None)

	Returns:
		Hasher instance
	"""
	global _hasher

	if _hasher is not None and settings is None:
		return _hasher

	hasher = _create_hasher(settings or get_settings())

	if _hasher is None:
		_hasher = hasher

	return hasher


def _create_hasher(settings: Settings) -> IntegrityHasher:
	if settings.hasher_backend == HasherBackend.ENCLAVE:
		from .enclave import EnclaveHasher
		return EnclaveHasher(EnclaveConfig(
			host_path=settings.enclave_host_path,
			simulate=settings.enclave_simulate,
			use_wsl=settings.enclave_use_wsl,
			timeout=settings.hash_timeout,
		))

	elif settings.hasher_backend == HasherBackend.LOCAL:
		from .local import LocalHasher
		return LocalHasher()

	else:
		raise ValueError(f"Unknown hasher backend: {settings.hasher_backend}")


def reset_hasher() -> None:
	"""Reset cached hasher (for testing)."""
	global _hasher
	_hasher = None
