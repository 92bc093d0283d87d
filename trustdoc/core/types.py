# (c) Copyright Datacraft, 2026
"""Shared enumerations."""
from enum import Enum, IntEnum


class HasherBackend(str, Enum):
	ENCLAVE = "enclave"
	LOCAL = "local"


class StorageBackend(str, Enum):
	IPFS = "ipfs"
	LOCAL = "local"


class LedgerBackend(str, Enum):
	RPC = "rpc"
	MEMORY = "memory"


class RoleType(IntEnum):
	"""Requester roles, lower value means more privilege."""
	SUPER_ADMIN = 0
	ORGANIZATION_ADMIN = 100
	USER = 200


class DocumentLifecycle(str, Enum):
	ACTIVE = "active"
	SOFT_DELETED = "soft_deleted"
	HARD_DELETED = "hard_deleted"


class CustodyState(str, Enum):
	COMPLETE = "complete"
	DEGRADED = "degraded"


class CustodyBackend(str, Enum):
	"""Backends touched by the custody workflows."""
	HASHER = "hasher"
	METADATA = "metadata"
	CONTENT = "content"
	LEDGER = "ledger"


class IngestStatus(str, Enum):
	SUCCESS = "success"
	DEGRADED = "degraded"
	FAILURE = "failure"


class IngestStage(str, Enum):
	VALIDATION = "validation"
	HASH = "hash"
	CONTENT = "content"
	LEDGER = "ledger"
	METADATA = "metadata"


class DeletionStatus(str, Enum):
	COMPLETE = "complete"
	PARTIAL = "partial"
	NONE = "none"
