# (c) Copyright Datacraft, 2026
"""Content-addressed storage abstraction layer."""
from .base import (
	LOCAL_ONLY_NOTICE,
	ContentEntry,
	ContentReclaimError,
	ContentStore,
	ContentStoreError,
	EntryType,
	publish_path,
)
from .factory import StorageConfig, get_content_store, reset_content_store

__all__ = [
	"LOCAL_ONLY_NOTICE",
	"ContentEntry",
	"ContentReclaimError",
	"ContentStore",
	"ContentStoreError",
	"EntryType",
	"StorageConfig",
	"get_content_store",
	"publish_path",
	"reset_content_store",
]
