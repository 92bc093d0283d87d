# (c) Copyright Datacraft, 2026
"""Utility for calculating BLAKE3 content addresses."""
import blake3


def calculate_blake3(data: bytes) -> str:
    """
    Calculate the BLAKE3 hash of an in-memory buffer.

    Args:
        data: Bytes to hash.

    Returns:
        The hex-encoded BLAKE3 hash.
    """
    return blake3.blake3(data).hexdigest()
