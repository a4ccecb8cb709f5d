"""
Migrations package for database schema changes.

Schema changes are a numbered, ordered list applied once each at startup.
"""

from .schema_migrations import (
    MIGRATIONS,
    Migration,
    apply_migrations,
    get_applied_versions,
)

__all__ = [
    "MIGRATIONS",
    "Migration",
    "apply_migrations",
    "get_applied_versions",
]
