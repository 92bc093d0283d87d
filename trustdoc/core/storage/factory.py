# (c) Copyright Datacraft, 2026
"""Content store factory."""
from dataclasses import dataclass
from pathlib import Path

from trustdoc.core.config import Settings, get_settings
from trustdoc.core.types import StorageBackend

from .base import ContentStore


@dataclass
class StorageConfig:
	"""Content store configuration."""
	backend: StorageBackend = StorageBackend.IPFS

	# IPFS settings
	ipfs_api_url: str = "http://127.0.0.1:5001"
	ipfs_timeout: float = 60.0

	# Local backend settings
	local_path: Path = Path("media/content")

	@classmethod
	def from_settings(cls, settings: Settings) -> "StorageConfig":
		return cls(
			backend=settings.storage_backend,
			ipfs_api_url=settings.ipfs_api_url,
			ipfs_timeout=settings.ipfs_timeout,
			local_path=settings.local_storage_path,
		)


_content_store: ContentStore | None = None


def get_content_store(config: StorageConfig | None = None) -> ContentStore:
	"""Get configured content store.

	Args:
		config: Storage configuration (uses settings if None)

	Returns:
		Content store instance
	"""
	global _content_store

	if _content_store is not None and config is None:
		return _content_store

	if config is None:
		config = StorageConfig.from_settings(get_settings())

	store = _create_store(config)

	if _content_store is None:
		_content_store = store

	return store


def _create_store(config: StorageConfig) -> ContentStore:
	if config.backend == StorageBackend.IPFS:
		from .ipfs import IpfsContentStore
		return IpfsContentStore(
			api_url=config.ipfs_api_url,
			timeout=config.ipfs_timeout,
		)

	elif config.backend == StorageBackend.LOCAL:
		from .local import LocalContentStore
		return LocalContentStore(base_path=config.local_path)

	else:
		raise ValueError(f"Unknown storage backend: {config.backend}")


def reset_content_store() -> None:
	"""Reset cached content store (for testing)."""
	global _content_store
	_content_store = None
