"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing business logic
"""

from bouldering.domain.services.storage_path import (
    derive_storage_prefix,
    is_valid_prefix,
)

__all__ = [
    "derive_storage_prefix",
    "is_valid_prefix",
]
