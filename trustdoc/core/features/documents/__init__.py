# (c) Copyright Datacraft, 2026
"""Off-chain document metadata."""
from .schema import Document, DocumentCreate
from .store import MetadataStore

__all__ = ["Document", "DocumentCreate", "MetadataStore"]
