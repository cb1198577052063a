"""
Hosted database access for PrimoBoost.

All records are plain dicts stored in named tables. Constraints such as
uniqueness and foreign keys live in the hosted database schema; this module
only moves rows in and out.

Two implementations share the ``Database`` interface:
- SupabaseDatabase: the production client (Supabase / PostgREST)
- InMemoryDatabase: process-local tables for development and tests
"""

import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from supabase import AsyncClient, acreate_client

from primoboost.config.settings import get_settings

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class DatabaseError(Exception):
    """Raised when the hosted database rejects a request."""
    pass


class Database(ABC):
    """Table-based CRUD with equality and membership row filters."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        """Return rows matching every filter."""

    @abstractmethod
    async def count(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
    ) -> int:
        """Count rows matching every filter."""

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row and return it as stored."""

    @abstractmethod
    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        """Update matching rows and return them."""

    async def get(self, table: str, row_id: str) -> Row | None:
        """Fetch a single row by primary key."""
        rows = await self.select(table, filters={"id": row_id}, limit=1)
        return rows[0] if rows else None

    async def close(self) -> None:
        """Release client resources."""


# =============================================================================
# SUPABASE
# =============================================================================

class SupabaseDatabase(Database):
    """Database backed by the Supabase async client."""

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: AsyncClient | None = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.url, self.key)
            logger.info("Supabase client initialized")
        return self._client

    @staticmethod
    def _apply_filters(query, filters, in_filters):
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        for column, values in (in_filters or {}).items():
            query = query.in_(column, values)
        return query

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        client = await self._get_client()
        query = self._apply_filters(client.table(table).select("*"), filters, in_filters)
        if order_by:
            query = query.order(order_by, desc=desc)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        try:
            response = await query.execute()
        except Exception as e:
            logger.error(f"Supabase select on {table} failed: {e}")
            raise DatabaseError(str(e)) from e
        return response.data or []

    async def count(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
    ) -> int:
        client = await self._get_client()
        query = self._apply_filters(
            client.table(table).select("id", count="exact"), filters, in_filters
        )
        try:
            response = await query.execute()
        except Exception as e:
            logger.error(f"Supabase count on {table} failed: {e}")
            raise DatabaseError(str(e)) from e
        return response.count or 0

    async def insert(self, table: str, row: Row) -> Row:
        client = await self._get_client()
        try:
            response = await client.table(table).insert(row).execute()
        except Exception as e:
            logger.error(f"Supabase insert into {table} failed: {e}")
            raise DatabaseError(str(e)) from e
        if not response.data:
            raise DatabaseError(f"Insert into {table} returned no row")
        return response.data[0]

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        client = await self._get_client()
        query = self._apply_filters(client.table(table).update(values), filters, None)
        try:
            response = await query.execute()
        except Exception as e:
            logger.error(f"Supabase update on {table} failed: {e}")
            raise DatabaseError(str(e)) from e
        return response.data or []


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryDatabase(Database):
    """Process-local tables. Rows are copied in and out."""

    def __init__(self, seed: dict[str, list[Row]] | None = None):
        self._tables: dict[str, list[Row]] = {}
        for table, rows in (seed or {}).items():
            for row in rows:
                self._store(table, row)

    def _store(self, table: str, row: Row) -> Row:
        stored = deepcopy(row)
        stored.setdefault("id", str(uuid4()))
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._tables.setdefault(table, []).append(stored)
        return stored

    @staticmethod
    def _matches(row: Row, filters, in_filters) -> bool:
        for column, value in (filters or {}).items():
            if row.get(column) != value:
                return False
        for column, values in (in_filters or {}).items():
            if row.get(column) not in values:
                return False
        return True

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        rows = [r for r in self._tables.get(table, []) if self._matches(r, filters, in_filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""), reverse=desc)
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return deepcopy(rows)

    async def count(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        in_filters: dict[str, list[Any]] | None = None,
    ) -> int:
        return sum(1 for r in self._tables.get(table, []) if self._matches(r, filters, in_filters))

    async def insert(self, table: str, row: Row) -> Row:
        return deepcopy(self._store(table, row))

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        updated = []
        for row in self._tables.get(table, []):
            if self._matches(row, filters, None):
                row.update(deepcopy(values))
                updated.append(deepcopy(row))
        return updated

    def rows(self, table: str) -> list[Row]:
        """All rows of a table (copies)."""
        return deepcopy(self._tables.get(table, []))


def create_database() -> Database:
    """Build the database client configured in settings."""
    settings = get_settings()
    if settings.database_configured:
        return SupabaseDatabase(settings.supabase_url, settings.supabase_service_key)

    logger.warning("Supabase not configured, using in-memory database")
    return InMemoryDatabase()
