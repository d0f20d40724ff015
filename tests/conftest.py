"""Test fixtures — mock Supabase client and in-memory prompt graphs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from prompt_library.core.types import BasePrompt, ComponentWithPrompt, PromptWithComponents
from prompt_library.db.client import SupabaseClient


class MockSupabaseClient(SupabaseClient):
    """In-memory mock of the Supabase client for testing."""

    def __init__(self):
        self._tables: dict[str, list[dict[str, Any]]] = {
            "prompts": [],
            "compound_prompt_components": [],
        }

    def insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        record = {
            "id": str(uuid4()),
            "created_at": datetime.now(timezone.utc).isoformat(),
            "updated_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        self._tables.setdefault(table, []).append(record)
        return dict(record)

    def insert_many(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [self.insert(table, row) for row in rows]

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = self._tables.get(table, [])
        if filters:
            for key, value in filters.items():
                rows = [r for r in rows if r.get(key) == value]
        if order_by:
            rows = sorted(rows, key=lambda r: r.get(order_by, 0), reverse=not ascending)
        if limit:
            rows = rows[:limit]
        return [dict(r) for r in rows]

    def select_in(
        self,
        table: str,
        column: str,
        values: list[Any],
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        rows = [r for r in self._tables.get(table, []) if r.get(column) in values]
        if order_by:
            rows = sorted(rows, key=lambda r: r.get(order_by, 0))
        return [dict(r) for r in rows]

    def update(self, table: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        for row in self._tables.get(table, []):
            if row["id"] == id:
                row.update(data)
                row["updated_at"] = datetime.now(timezone.utc).isoformat()
                return dict(row)
        raise ValueError(f"Row {id} not found in {table}")

    def delete_where(self, table: str, column: str, value: Any) -> None:
        self._tables[table] = [r for r in self._tables.get(table, []) if r.get(column) != value]

    def delete_in(self, table: str, column: str, values: list[Any]) -> None:
        self._tables[table] = [r for r in self._tables.get(table, []) if r.get(column) not in values]


class InMemoryGraph:
    """Fixture graph implementing both fetch ports; records every lookup."""

    def __init__(self):
        self.prompts: dict[str, BasePrompt] = {}
        self.components: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[str] = []
        self.bulk_calls: list[list[str]] = []

    def plain(self, prompt_id: str, text: str | None = None) -> str:
        self.prompts[prompt_id] = BasePrompt(
            id=prompt_id,
            prompt_text=f"text of {prompt_id}" if text is None else text,
            is_compound=False,
        )
        return prompt_id

    def compound(self, prompt_id: str, *components: dict[str, Any]) -> str:
        """Add a compound prompt; each component is {"ref", "before", "after"}."""
        self.prompts[prompt_id] = BasePrompt(id=prompt_id, is_compound=True)
        self.components[prompt_id] = list(components)
        return prompt_id

    def chain(self, levels: int, leaf: str = "leaf") -> str:
        """Build ``levels`` compound prompts nested in a line; return the top id."""
        self.plain(leaf, "base")
        child = leaf
        for i in range(levels):
            child = self.compound(f"level-{i + 1}", {"ref": child})
        return child

    def record(self, prompt_id: str) -> PromptWithComponents | None:
        base = self.prompts.get(prompt_id)
        if base is None:
            return None
        components = [
            ComponentWithPrompt(
                id=f"{prompt_id}-c{position}",
                compound_prompt_id=prompt_id,
                position=slot.get("position", position),
                component_prompt_id=slot.get("ref"),
                custom_text_before=slot.get("before"),
                custom_text_after=slot.get("after"),
                component_prompt=self.prompts.get(slot.get("ref") or ""),
            )
            for position, slot in enumerate(self.components.get(prompt_id, []))
        ]
        return PromptWithComponents(**base.model_dump(), compound_components=components)

    def __call__(self, prompt_id: str) -> PromptWithComponents | None:
        self.calls.append(prompt_id)
        return self.record(prompt_id)

    def fetch_many(self, prompt_ids: list[str]) -> dict[str, PromptWithComponents]:
        self.bulk_calls.append(list(prompt_ids))
        found = {pid: self.record(pid) for pid in prompt_ids}
        return {pid: p for pid, p in found.items() if p is not None}


@pytest.fixture
def mock_db() -> MockSupabaseClient:
    """Fresh mock database for each test."""
    return MockSupabaseClient()


@pytest.fixture
def graph() -> InMemoryGraph:
    """Empty in-memory prompt graph."""
    return InMemoryGraph()


@pytest.fixture
def fetcher(mock_db):
    from prompt_library.db.fetcher import SupabasePromptFetcher

    return SupabasePromptFetcher(mock_db)


@pytest.fixture
def registry(mock_db, fetcher):
    from prompt_library.core.registry import CompoundPromptRegistry

    return CompoundPromptRegistry(mock_db, fetcher)


@pytest.fixture
def app(mock_db, fetcher, registry):
    """FastAPI test app with mocked dependencies."""
    from prompt_library.core.registry import get_registry
    from prompt_library.db.client import get_supabase_client
    from prompt_library.db.fetcher import get_prompt_fetcher
    from prompt_library.main import app as _app

    _app.dependency_overrides[get_registry] = lambda: registry
    _app.dependency_overrides[get_prompt_fetcher] = lambda: fetcher
    _app.dependency_overrides[get_supabase_client] = lambda: mock_db

    yield _app

    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client."""
    return TestClient(app)
