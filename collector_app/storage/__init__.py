"""
Hit storage module.

This module implements the Strategy Pattern for pluggable hit storage.
"""

from .strategies import HitStorageStrategy, SQLAlchemyHitStorage
from .factory import HitStorageFactory, HitStorageBackend

__all__ = [
    "HitStorageStrategy",
    "SQLAlchemyHitStorage",
    "HitStorageFactory",
    "HitStorageBackend",
]
