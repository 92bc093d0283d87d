# (c) Copyright Datacraft, 2026
"""Integrity hasher abstraction."""
from .base import (
	CancellationToken,
	HashFormatError,
	HashProcessError,
	HashTimeoutError,
	IntegrityHasher,
)
from .enclave import EnclaveConfig, EnclaveHasher
from .factory import get_hasher, reset_hasher
from .local import LocalHasher

__all__ = [
	"CancellationToken",
	"EnclaveConfig",
	"EnclaveHasher",
	"HashFormatError",
	"HashProcessError",
	"HashTimeoutError",
	"IntegrityHasher",
	"LocalHasher",
	"get_hasher",
	"reset_hasher",
]
