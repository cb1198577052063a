"""
Persistence layer for PrimoBoost.

Wraps the hosted database client behind a small table-CRUD interface.
"""

from primoboost.storage.database import (
    Database,
    DatabaseError,
    InMemoryDatabase,
    SupabaseDatabase,
    create_database,
)

__all__ = [
    "Database",
    "DatabaseError",
    "InMemoryDatabase",
    "SupabaseDatabase",
    "create_database",
]
