"""Supabase client initialization and helper methods."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import structlog
from supabase import Client, create_client

from prompt_library.config import get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Thin wrapper over the Supabase table API used by the prompt library."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return the created row."""
        result = self._client.table(table).insert(data).execute()
        return result.data[0]

    def insert_many(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert several records in one request."""
        if not rows:
            return []
        result = self._client.table(table).insert(rows).execute()
        return result.data

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select records with optional equality filters, ordering, and limit."""
        query = self._client.table(table).select("*")

        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)

        if order_by:
            query = query.order(order_by, desc=not ascending)

        if limit:
            query = query.limit(limit)

        return query.execute().data

    def select_in(
        self,
        table: str,
        column: str,
        values: list[Any],
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        """Select records whose ``column`` is any of ``values``."""
        if not values:
            return []
        query = self._client.table(table).select("*").in_(column, values)
        if order_by:
            query = query.order(order_by)
        return query.execute().data

    def update(self, table: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record by ID."""
        result = self._client.table(table).update(data).eq("id", id).execute()
        return result.data[0]

    def delete_where(self, table: str, column: str, value: Any) -> None:
        """Delete every record where ``column`` equals ``value``."""
        self._client.table(table).delete().eq(column, value).execute()

    def delete_in(self, table: str, column: str, values: list[Any]) -> None:
        """Delete every record whose ``column`` is one of ``values``."""
        self._client.table(table).delete().in_(column, values).execute()


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Get cached Supabase client instance."""
    settings = get_settings()
    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info("supabase.connected", url=settings.supabase_url)
    return SupabaseClient(client)
