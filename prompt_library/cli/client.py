"""API client for the prompt library REST API."""

from __future__ import annotations

from typing import Any

import httpx


class LibraryClient:
    """HTTP client wrapping the prompt library endpoints."""

    def __init__(self, base_url: str = "http://localhost:8400") -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=f"{self.base_url}/api/v1", timeout=30)

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            if isinstance(detail, dict) and "message" in detail:
                detail = f"{detail.get('code')}: {detail['message']}"
            raise RuntimeError(f"API error ({resp.status_code}): {detail}")
        return resp.json()

    # --- Prompts ---

    def create_prompt(self, data: dict) -> dict:
        return self._handle(self._client.post("/prompts", json=data))

    def get_prompt(self, prompt_id: str) -> dict:
        return self._handle(self._client.get(f"/prompts/{prompt_id}"))

    # --- Compound prompts ---

    def create_compound(self, data: dict) -> dict:
        return self._handle(self._client.post("/prompts/compound", json=data))

    def replace_components(self, prompt_id: str, components: list[dict]) -> dict:
        return self._handle(
            self._client.put(f"/prompts/{prompt_id}/components", json={"components": components})
        )

    def resolve(self, prompt_id: str) -> dict:
        return self._handle(self._client.get(f"/prompts/{prompt_id}/resolved"))

    def resolve_many(self, prompt_ids: list[str]) -> dict:
        return self._handle(self._client.post("/prompts/resolve", json={"prompt_ids": prompt_ids}))

    def dependencies(self, prompt_id: str) -> dict:
        return self._handle(self._client.get(f"/prompts/{prompt_id}/dependencies"))

    def preview(self, components: list[dict]) -> dict:
        return self._handle(self._client.post("/compound/preview", json={"components": components}))

    def validate(self, compound_prompt_id: str, component_prompt_id: str) -> dict:
        return self._handle(
            self._client.post(
                "/compound/validate",
                json={
                    "compound_prompt_id": compound_prompt_id,
                    "component_prompt_id": component_prompt_id,
                },
            )
        )
