# (c) Copyright Datacraft, 2026
"""Append-only ledger registry abstraction."""
from .base import (
	MAX_FILE_SIZE,
	MAX_STRING_LENGTH,
	ZERO_ADDRESS,
	DuplicateActiveHashError,
	LedgerAlreadyActiveError,
	LedgerAlreadyDeletedError,
	LedgerError,
	LedgerHashClaimedElsewhereError,
	LedgerInvalidArgumentError,
	LedgerInvalidIdError,
	LedgerOutcomeUnknownError,
	LedgerReceipt,
	LedgerRecord,
	LedgerRegistrar,
	LedgerSizeOutOfRangeError,
	LedgerTimeoutError,
	LedgerUnauthorizedError,
	error_for_revert,
)
from .contract import RegistryContract
from .factory import LedgerConfig, get_ledger, reset_ledger
from .memory import MemoryLedger
from .signer import LedgerSigner, SignerClosedError

__all__ = [
	"MAX_FILE_SIZE",
	"MAX_STRING_LENGTH",
	"ZERO_ADDRESS",
	"DuplicateActiveHashError",
	"LedgerAlreadyActiveError",
	"LedgerAlreadyDeletedError",
	"LedgerConfig",
	"LedgerError",
	"LedgerHashClaimedElsewhereError",
	"LedgerInvalidArgumentError",
	"LedgerInvalidIdError",
	"LedgerOutcomeUnknownError",
	"LedgerReceipt",
	"LedgerRecord",
	"LedgerRegistrar",
	"LedgerSigner",
	"LedgerSizeOutOfRangeError",
	"LedgerTimeoutError",
	"LedgerUnauthorizedError",
	"MemoryLedger",
	"RegistryContract",
	"SignerClosedError",
	"error_for_revert",
	"get_ledger",
	"reset_ledger",
]
