"""
Tests d'intégration pour web/backend (FastAPI + WebSocket)
Bot désactivé: aucun identifiant Twitch
"""
import asyncio
import time
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from core.registry import Registry
from twitchapi.auth_manager import TokenInfo
from web.backend.main import create_app


@pytest.fixture
def registry(clock):
    return Registry.build({}, clock=clock)


@pytest.fixture
def client(registry):
    with TestClient(create_app(registry)) as test_client:
        yield test_client


def ban(client, name="Book of Dead", by="Alice", path="/api/ban-slot"):
    return client.post(path, json={"slotName": name, "bannedBy": by})


def receive_event(ws, event_type):
    """Lit les frames jusqu'au type attendu (BOT_STATUS au démarrage ignoré)"""
    while True:
        event = ws.receive_json()
        if event["type"] == event_type:
            return event


@pytest.mark.integration
class TestBannedSlotsAPI:

    def test_list_empty(self, client):
        response = client.get("/api/banned-slots")
        assert response.status_code == 200
        assert response.json() == []

    def test_ban_slot(self, client, clock):
        response = ban(client)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 1
        assert data["slotName"] == "Book of Dead"
        assert data["bannedBy"] == "Alice"
        assert data["bannedAt"] == clock().isoformat()

        listed = client.get("/api/banned-slots").json()
        assert [s["slotName"] for s in listed] == ["Book of Dead"]

    def test_ban_slot_alias_route(self, client):
        assert ban(client, path="/api/banned-slots").status_code == 200
        assert len(client.get("/api/banned-slots").json()) == 1

    def test_duplicate_is_conflict(self, client):
        ban(client, name="Foo")
        response = ban(client, name="foo", by="Bob")

        assert response.status_code == 409
        assert "error" in response.json()
        assert len(client.get("/api/banned-slots").json()) == 1

    @pytest.mark.parametrize("body", [
        {"slotName": "Foo"},
        {"bannedBy": "Alice"},
        {"slotName": "   ", "bannedBy": "Alice"},
        {},
    ])
    def test_missing_fields(self, client, body):
        response = client.post("/api/ban-slot", json=body)

        assert response.status_code == 400
        assert "error" in response.json()

    def test_invalid_body_type(self, client):
        response = client.post("/api/ban-slot", json={"slotName": 12, "bannedBy": ["x"]})
        assert response.status_code == 400

    def test_remove_ban(self, client):
        slot_id = ban(client).json()["id"]

        response = client.delete(f"/api/ban-slot/{slot_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/banned-slots").json() == []

    def test_remove_unknown_ban_succeeds(self, client):
        assert client.delete("/api/ban-slot/999").json() == {"success": True}
        assert client.delete("/api/banned-slots/999").status_code == 200

    def test_clear_expired(self, client, clock):
        ban(client, name="old")
        clock.advance(days=6)
        ban(client, name="fresh")
        clock.advance(days=5)

        response = client.delete("/api/clear-expired")

        assert response.json() == {"removed": 1}
        assert [s["slotName"] for s in client.get("/api/banned-slots").json()] == ["fresh"]

    def test_clear_all(self, client):
        for name in ["a", "b", "c"]:
            ban(client, name=name)

        assert client.delete("/api/clear-all").json() == {"success": True}
        assert client.get("/api/banned-slots").json() == []


@pytest.mark.integration
class TestStatusAPI:

    def test_status(self, client):
        ban(client)
        assert client.get("/api/status").json() == {
            "requestsOpen": True,
            "botConnected": False,
            "totalBans": 1,
        }

    def test_toggle_requests(self, client):
        assert client.post("/api/toggle-requests").json() == {"requestsOpen": False}
        assert client.get("/api/status").json()["requestsOpen"] is False
        assert client.post("/api/toggle-requests").json() == {"requestsOpen": True}

    def test_health_exposes_stats(self, client):
        ban(client)
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["bans"] == {"total_bans": 1, "next_id": 2}
        assert data["websocket"] == {"subscribers": 0}
        assert data["bus"]["published"]["slotban.event"] >= 1
        assert data["bot"] == {"connected": False, "channels": []}


@pytest.mark.integration
class TestWebSocket:

    def test_ban_added_is_pushed(self, client):
        with client.websocket_connect("/ws") as ws:
            ban(client, name="Foo")
            event = receive_event(ws, "BAN_ADDED")

        assert event["data"]["slotName"] == "Foo"
        assert event["data"]["id"] == 1

    def test_status_changed_is_pushed(self, client):
        with client.websocket_connect("/ws") as ws:
            client.post("/api/toggle-requests")
            event = receive_event(ws, "STATUS_CHANGED")

        assert event["data"] == {"requestsOpen": False}

    def test_clear_all_is_pushed(self, client):
        with client.websocket_connect("/ws") as ws:
            client.delete("/api/clear-all")
            event = receive_event(ws, "BAN_REMOVED")

        assert event["data"] == {"clearAll": True}

    def test_disconnect_unsubscribes(self, client, registry):
        with client.websocket_connect("/ws"):
            assert registry.hub.get_stats()["subscribers"] == 1
        assert registry.hub.get_stats()["subscribers"] == 0

    def test_client_frames_are_ignored(self, client, registry):
        with client.websocket_connect("/ws") as ws:
            ws.send_bytes(b"\x00\x01")
            ws.send_text("ping")
            ban(client, name="Foo")
            event = receive_event(ws, "BAN_ADDED")

            assert event["data"]["slotName"] == "Foo"
            assert registry.hub.get_stats()["subscribers"] == 1


@pytest.mark.integration
class TestSlowTwitchConnect:
    """Connexion Twitch lente: l'API répond pendant le connect"""

    def test_api_answers_while_connecting(self, clock):
        async def slow_connect(token):
            await asyncio.sleep(30)

        auth = Mock()
        auth.create_bot_twitch = AsyncMock(side_effect=slow_connect)
        token = TokenInfo(user_login="slotbot", access_token="abc", channels=["streamer"])
        registry = Registry.build({}, token=token, auth=auth, clock=clock)

        started = time.monotonic()
        with TestClient(create_app(registry)) as test_client:
            response = test_client.get("/api/status")
            elapsed = time.monotonic() - started

        assert elapsed < 5.0
        assert response.json() == {"requestsOpen": True, "botConnected": False, "totalBans": 0}
        assert registry.irc_task is None
