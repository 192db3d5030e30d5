"""
Tests for the HTTP API.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from cardpt.gateway.adapters import create_adapter_registry
from cardpt.gateway.pipeline import DecisionGateway
from cardpt.gateway.settings import GatewaySettings
from cardpt.server import routes
from cardpt.server.app import create_app


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(routes, "_engine", None)
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def table(client):
    response = client.post("/engine", json={"seed": "table-1"})
    assert response.status_code == 200
    return response.json()


def use_model_reply(app, text):
    """Route the gateway's qwen calls to a canned chat completion."""
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": text}}]})

    gateway = DecisionGateway(
        adapters=create_adapter_registry(transport=httpx.MockTransport(handler)),
        settings=GatewaySettings(),
    )
    app.dependency_overrides[routes.get_gateway] = lambda: gateway


class TestEngineRoutes:
    """Tests for the session engine routes."""

    def test_no_engine_yet(self, client):
        response = client.get("/engine/snapshot")
        assert response.status_code == 400
        assert response.json()["detail"] == "Engine not initialized"

    def test_create(self, table):
        assert table["state"]["hand_id"] == 1
        assert table["state"]["action_seat"] == 3
        assert table["config"]["starting_stacks"] == [1000] * 6

    def test_bad_stacks(self, client):
        assert client.post("/engine", json={"seed": "x", "starting_stacks": [1000] * 5}).status_code == 422

    def test_bad_blinds(self, client):
        response = client.post("/engine", json={"seed": "x", "small_blind": 50, "big_blind": 20})
        assert response.status_code == 400

    def test_legal_actions(self, client, table):
        data = client.get("/engine/legal_actions").json()
        assert data["action_seat"] == 3
        assert data["actions"][2] == {"type": "raise", "min_amount": 40, "max_amount": 1000}

    def test_apply_action(self, client, table):
        response = client.post("/engine/actions", json={"actor": 3, "type": "RAISE", "amount": 60})
        assert response.status_code == 200
        assert response.json()["state"]["current_bet"] == 60

    def test_illegal_action(self, client, table):
        response = client.post("/engine/actions", json={"actor": 3, "type": "check"})
        assert response.status_code == 400
        snapshot = client.get("/engine/snapshot").json()
        assert snapshot["action_history"] == []

    def test_unknown_action_type(self, client, table):
        assert client.post("/engine/actions", json={"actor": 3, "type": "shove"}).status_code == 400

    def test_next_hand(self, client, table):
        assert client.post("/engine/next_hand").status_code == 400
        for seat in (3, 4, 5, 0, 1):
            client.post("/engine/actions", json={"actor": seat, "type": "fold"})
        response = client.post("/engine/next_hand")
        assert response.status_code == 200
        assert response.json()["hand_id"] == 2
        assert response.json()["state"]["dealer_seat"] == 1


class TestDecisionRoute:
    """Tests for /api/decision."""

    def test_accepted_from_engine_state(self, app, client, table):
        use_model_reply(app, json.dumps({"action": {"type": "RAISE", "amount": 60}}))
        response = client.post("/api/decision", json={
            "action_mode": "ai_standard",
            "preset_id": "qwen-plus",
            "credential": {"provider": "qwen", "api_key": "sk-1"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "ACCEPTED"
        assert body["engine_action"] == {"type": "raise", "amount": 60}

        applied = client.post("/engine/actions", json={"actor": 3, **body["engine_action"]})
        assert applied.status_code == 200

    def test_rejected_is_400(self, app, client, table):
        use_model_reply(app, "I think I'll call.")
        response = client.post("/api/decision", json={
            "action_mode": "ai_standard",
            "preset_id": "qwen-plus",
            "credential": {"provider": "qwen", "api_key": "sk-1"},
        })
        assert response.status_code == 400
        body = response.json()
        assert body["reason"] == "invalid_json"
        assert body["allow_manual_fallback"] is True

    def test_manual_fallback(self, app, client, table):
        use_model_reply(app, "{}")
        response = client.post("/api/decision", json={"action_mode": "manual", "preset_id": "qwen-plus"})
        assert response.status_code == 200
        assert response.json()["type"] == "FALLBACK"

    def test_explicit_input(self, app, client):
        use_model_reply(app, json.dumps({"action": {"type": "CALL"}}))
        response = client.post("/api/decision", json={
            "action_mode": "ai_basic",
            "preset_id": "qwen-flash",
            "credential": {"provider": "qwen", "api_key": "sk-1"},
            "input": {
                "engine_facts": {"hand_id": 9},
                "state": {"pot": 100, "to_call": 0, "legal_actions": [{"type": "check"}]},
            },
        })
        assert response.status_code == 200
        assert response.json()["engine_action"] == {"type": "check", "amount": None}

    def test_unknown_mode_is_422(self, client):
        response = client.post("/api/decision", json={"action_mode": "turbo", "preset_id": "qwen-plus"})
        assert response.status_code == 422
