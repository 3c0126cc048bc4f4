"""
Database models for the hit collector.

Only one entity exists: a Hit, stored in the `requests` table.
"""

from .hit import Hit, MAX_FIELD_LENGTH

__all__ = ["Hit", "MAX_FIELD_LENGTH"]
