# (c) Copyright Datacraft, 2026
"""trustdoc: custody of integrity-hashed, content-addressed documents."""
from trustdoc.core.version import __version__

__all__ = ["__version__"]
