"""Tests for prompt and compound API endpoints."""


class TestPromptAPI:
    def _plain(self, client, title="Base", text="hello"):
        resp = client.post("/api/v1/prompts", json={"title": title, "prompt_text": text})
        assert resp.status_code == 201
        return resp.json()["id"]

    def _compound(self, client, components, title="Compound"):
        return client.post(
            "/api/v1/prompts/compound", json={"title": title, "components": components}
        )

    def test_create_prompt(self, client):
        resp = client.post("/api/v1/prompts", json={"title": "Greeting", "prompt_text": "hi"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["is_compound"] is False
        assert data["prompt_text"] == "hi"

    def test_get_prompt(self, client):
        prompt_id = self._plain(client)
        resp = client.get(f"/api/v1/prompts/{prompt_id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == prompt_id

    def test_get_not_found(self, client):
        resp = client.get("/api/v1/prompts/nonexistent")
        assert resp.status_code == 404

    def test_create_compound(self, client):
        base = self._plain(client)
        resp = self._compound(
            client,
            [{"position": 0, "custom_text_before": "X ", "component_prompt_id": base, "custom_text_after": " Y"}],
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["is_compound"] is True
        assert data["max_depth"] == 1

    def test_create_compound_bad_positions(self, client):
        resp = self._compound(
            client,
            [{"position": 1, "custom_text_before": "a"}, {"position": 2, "custom_text_before": "b"}],
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["field"] == "components"
        assert detail["code"] == "INVALID_COMPONENT"
        assert detail["details"]["reason"] == "positions"

    def test_create_compound_missing_reference(self, client):
        resp = self._compound(client, [{"position": 0, "component_prompt_id": "ghost"}])
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_COMPONENT"

    def test_resolve(self, client):
        leaf = self._plain(client, text="base")
        mid = self._compound(
            client, [{"position": 0, "custom_text_before": "B:", "component_prompt_id": leaf}]
        ).json()["id"]
        root = self._compound(
            client, [{"position": 0, "custom_text_before": "A:", "component_prompt_id": mid}]
        ).json()["id"]
        resp = client.get(f"/api/v1/prompts/{root}/resolved")
        assert resp.status_code == 200
        data = resp.json()
        assert data["resolved_text"] == "A:B:base"
        assert data["depth_reached"] == 2
        assert data["used_prompt_ids"] == [root, mid, leaf]

    def test_resolve_not_found(self, client):
        resp = client.get("/api/v1/prompts/ghost/resolved")
        assert resp.status_code == 404

    def test_dependencies(self, client):
        leaf = self._plain(client)
        root = self._compound(client, [{"position": 0, "component_prompt_id": leaf}]).json()["id"]
        resp = client.get(f"/api/v1/prompts/{root}/dependencies")
        assert resp.status_code == 200
        assert resp.json()["dependencies"] == [root, leaf]

    def test_replace_components(self, client):
        a = self._plain(client, text="a")
        b = self._plain(client, text="b")
        root = self._compound(client, [{"position": 0, "component_prompt_id": a}]).json()["id"]
        resp = client.put(
            f"/api/v1/prompts/{root}/components",
            json={"components": [{"position": 0, "component_prompt_id": b}]},
        )
        assert resp.status_code == 200
        assert client.get(f"/api/v1/prompts/{root}/resolved").json()["resolved_text"] == "b"

    def test_replace_components_cycle(self, client):
        a = self._plain(client)
        inner = self._compound(client, [{"position": 0, "component_prompt_id": a}]).json()["id"]
        outer = self._compound(client, [{"position": 0, "component_prompt_id": inner}]).json()["id"]
        resp = client.put(
            f"/api/v1/prompts/{inner}/components",
            json={"components": [{"position": 0, "component_prompt_id": outer}]},
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["code"] == "CIRCULAR_REFERENCE"
        assert detail["details"]["path"] == [inner, outer, inner]

    def test_replace_components_not_found(self, client):
        resp = client.put(
            "/api/v1/prompts/ghost/components",
            json={"components": [{"position": 0, "custom_text_before": "x"}]},
        )
        assert resp.status_code == 404

    def test_bulk_resolve_uses_placeholder(self, client, mock_db):
        a = self._plain(client, text="a")
        ok = self._compound(client, [{"position": 0, "component_prompt_id": a}]).json()["id"]
        b = self._plain(client, text="b")
        broken = self._compound(client, [{"position": 0, "component_prompt_id": b}]).json()["id"]
        mock_db.delete_where("prompts", "id", b)

        resp = client.post("/api/v1/prompts/resolve", json={"prompt_ids": [ok, broken]})
        assert resp.status_code == 200
        data = resp.json()
        assert data["resolved"][ok] == "a"
        assert data["resolved"][broken] == "[Error resolving compound prompt]"
        assert broken in data["errors"]

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestCompoundAPI:
    def _plain(self, client, text):
        return client.post("/api/v1/prompts", json={"title": "P", "prompt_text": text}).json()["id"]

    def test_preview(self, client):
        ctx = self._plain(client, "the repo")
        resp = client.post(
            "/api/v1/compound/preview",
            json={
                "components": [
                    {"position": 0, "custom_text_before": "Context: ", "component_prompt_id": ctx},
                    {"position": 1, "custom_text_before": " Done."},
                ]
            },
        )
        assert resp.status_code == 200
        assert resp.json()["resolved_text"] == "Context: the repo Done."

    def test_preview_invalid_structure(self, client):
        resp = client.post("/api/v1/compound/preview", json={"components": []})
        assert resp.status_code == 422
        assert resp.json()["detail"]["details"]["reason"] == "empty"

    def test_validate(self, client):
        leaf = self._plain(client, "x")
        resp = client.post(
            "/api/v1/compound/validate",
            json={"compound_prompt_id": "draft", "component_prompt_id": leaf},
        )
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "max_depth": 1}

    def test_validate_self_reference(self, client):
        resp = client.post(
            "/api/v1/compound/validate",
            json={"compound_prompt_id": "same", "component_prompt_id": "same"},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "CIRCULAR_REFERENCE"
