from unittest.mock import patch

import pytest

from catch_server import config
from catch_server.app import app, players_registry
from catch_server.errors import BackingStoreError, FeedUnavailableError

CATCHES = ["Short gain", "Touchdown! One-handed grab", "Incomplete"]


@pytest.fixture
def client():
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def registry(make_registry):
    reg = make_registry(["name", "Alice", "Bob", "alice"])
    with patch("catch_server.app.players_registry", return_value=reg):
        yield reg


class TestHealth:
    def test_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"ok": True}

    def test_unknown_route_is_json(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert "error" in resp.get_json()


class TestAdminPlayers:
    def test_list(self, client, registry):
        resp = client.get("/api/admin/receiver-players")
        assert resp.get_json() == {"players": ["Alice", "Bob"]}

    def test_add(self, client, registry):
        resp = client.post("/api/admin/receiver-players", json={"name": "Carol"})
        assert resp.status_code == 200
        assert resp.get_json() == {"ok": True, "added": True, "players": ["Alice", "Bob", "Carol"]}

    def test_add_existing(self, client, registry):
        resp = client.post("/api/admin/receiver-players", json={"name": "bob "})
        assert resp.get_json() == {"ok": True, "added": False, "players": ["Alice", "Bob"]}
        assert registry.gateway.appends == []

    def test_add_form_encoded(self, client, registry):
        resp = client.post("/api/admin/receiver-players", data={"name": "Dana"})
        assert resp.get_json()["added"] is True

    def test_add_missing_name(self, client, registry):
        for body in ({}, {"name": "   "}, {"name": 5}):
            resp = client.post("/api/admin/receiver-players", json=body)
            assert resp.status_code == 400
            assert resp.get_json() == {"error": "Missing name"}

    def test_delete(self, client, registry):
        resp = client.delete("/api/admin/receiver-players", json={"name": "ALICE"})
        assert resp.get_json() == {"ok": True, "deletedCount": 2, "players": ["Bob"]}

    def test_delete_missing_name(self, client, registry):
        resp = client.delete("/api/admin/receiver-players", json={})
        assert resp.status_code == 400

    def test_backing_store_error(self, client):
        with patch("catch_server.app.players_registry", side_effect=BackingStoreError("Missing env var: PLAYERS_SHEET_ID")):
            resp = client.get("/api/admin/receiver-players")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Missing env var: PLAYERS_SHEET_ID"}


class TestRandomPlayer:
    def test_pick(self, client, registry):
        resp = client.get("/api/random-player")
        assert resp.get_json()["name"] in ("Alice", "Bob")
        assert "no-store" in resp.headers["Cache-Control"]

    def test_empty(self, client, make_registry):
        with patch("catch_server.app.players_registry", return_value=make_registry(["name"])):
            resp = client.get("/api/random-player")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "No players found"}


class TestRandomCatch:
    def test_normal(self, client):
        with patch("catch_server.app.catch_feed.fetch_catches", return_value=CATCHES):
            resp = client.get("/api/random-catch")
        assert resp.get_json()["catch"] in CATCHES

    def test_sb_mode_uses_touchdown_rate(self, client):
        with patch("catch_server.app.catch_feed.fetch_catches", return_value=CATCHES), \
                patch.object(config, "CATCH_TOUCHDOWN_RATE", 1.0):
            picks = {client.get("/api/random-catch?mode=sb").get_json()["catch"] for _ in range(20)}
        assert picks == {"Touchdown! One-handed grab"}

    def test_bad_mode(self, client):
        resp = client.get("/api/random-catch?mode=overtime")
        assert resp.status_code == 400

    def test_empty_feed(self, client):
        with patch("catch_server.app.catch_feed.fetch_catches", return_value=[]):
            resp = client.get("/api/random-catch")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "No catches found"}

    def test_feed_down(self, client):
        err = FeedUnavailableError("Failed to read receivers sheet", details="503 Server Error")
        with patch("catch_server.app.catch_feed.fetch_catches", side_effect=err):
            resp = client.get("/api/random-catch")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to read receivers sheet", "details": "503 Server Error"}


class TestRandomImage:
    @pytest.fixture(autouse=True)
    def images_dir(self, tmp_path):
        (tmp_path / "Receiver").mkdir()
        (tmp_path / "Receiver" / "kelce.webp").write_bytes(b"")
        with patch.object(config, "IMAGES_DIR", tmp_path):
            yield tmp_path

    def test_single(self, client):
        resp = client.get("/api/random-image?type=receiver")
        assert resp.get_json() == {"url": "/images/Receiver/kelce.webp"}

    def test_missing_folder(self, client):
        resp = client.get("/api/random-image?type=QB")
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "Image folder not found: QB"

    def test_batch(self, client):
        resp = client.get("/api/random-image-batch?type=receiver&n=3")
        assert resp.get_json() == {"urls": ["/images/Receiver/kelce.webp"] * 3}

    def test_batch_bad_n(self, client):
        resp = client.get("/api/random-image-batch?type=receiver&n=abc")
        assert resp.status_code == 400


class TestPlayersRegistryWiring:
    def test_serializer_uses_configured_timeout(self, make_gateway):
        gateway = make_gateway(["name", "Alice"])
        with patch("catch_server.app.sheets.players_gateway", return_value=gateway), \
                patch.object(config, "WRITE_LOCK_TIMEOUT_SECONDS", 7.5):
            registry = players_registry()
            again = players_registry()
        assert registry.gateway is gateway
        assert registry.serializer.timeout == 7.5
        assert again.serializer is registry.serializer
        assert registry.list_all() == ["Alice"]
