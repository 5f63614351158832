"""Tests for the FastAPI API endpoints."""

import pytest
from fastapi.testclient import TestClient

from pandemic_kernel.api.app import create_app
from pandemic_kernel.config.settings import Settings
from pandemic_kernel.persistence.store import InMemoryGameStore
from pandemic_kernel.reveal.protocol import LocalAccountIdentity, start_reveal_session
from pandemic_kernel.session.table import GameTable

ALICE_KEY = "0x" + "11" * 32
BOB_KEY = "0x" + "22" * 32


class _FixedRandom:
    def __init__(self, roll: float = 0.99, color: int = 1):
        self.roll = roll
        self.color = color

    def random(self) -> float:
        return self.roll

    def randrange(self, stop: int) -> int:
        return min(self.color, stop - 1)


@pytest.fixture
def store():
    return InMemoryGameStore()


@pytest.fixture
def client(store):
    """Create a test client around a fresh Game Table."""
    table = GameTable(
        store=store,
        identity_provider=LocalAccountIdentity(private_key=ALICE_KEY),
        challenge=start_reveal_session("0x5FbDB2315678afecb367f032d93F642f64180aa3", 31337),
        rng=_FixedRandom(),
    )
    app = create_app(table=table, settings=Settings(app_name="Pandemic Test"))
    return TestClient(app)


def _wallet_signature(client, key: str):
    wallet = LocalAccountIdentity(private_key=key)
    message = client.get("/reveal/challenge").json()["message"]
    return wallet.address, wallet.sign(message)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "app": "Pandemic Test"}


class TestGameEndpoints:
    def test_no_game_yet(self, client):
        data = client.get("/game").json()
        assert data["game"] is None
        assert data["view"]["selected_city"] is None

    def test_action_requires_game(self, client):
        assert client.post("/game/action").status_code == 409
        assert client.post("/game/end-turn").status_code == 409

    def test_new_game(self, client):
        response = client.post("/game/new")
        assert response.status_code == 200
        assert response.json()["status"]["status"] == "success"

        game = client.get("/game").json()["game"]
        assert len(game["cities"]) == 47
        assert game["outbreak_count"] == 4
        hidden = [c for c in game["cities"] if not c["outbreak"]]
        assert all(c["disease_levels"] is None for c in hidden)
        assert all(c["sealed_levels"][0].startswith("FHE-") for c in hidden)

    def test_select_unknown_city(self, client):
        client.post("/game/new")
        response = client.post("/game/select", json={"city": "Atlantis"})
        assert response.status_code == 404

    def test_select_hidden_city_reveals_nothing(self, client):
        client.post("/game/new")
        data = client.post("/game/select", json={"city": "Atlanta"}).json()
        assert data["status"]["message"] == "Atlanta selected"
        assert data["view"]["selected_city"] == "Atlanta"
        assert "decrypted_levels" not in data["view"]
        assert "levels" not in data

        game = client.get("/game").json()
        atlanta = next(c for c in game["game"]["cities"] if c["name"] == "Atlanta")
        assert atlanta["disease_levels"] is None
        assert "decrypted_levels" not in game["view"]

    def test_invalid_mode(self, client):
        response = client.post("/game/mode", json={"mode": "fly"})
        assert response.status_code == 422

    def test_treat_and_persist(self, client, store):
        client.post("/game/new")
        client.post("/game/select", json={"city": "Atlanta"})
        client.post("/game/mode", json={"mode": "treat"})

        response = client.post("/game/action")
        assert response.status_code == 200
        assert response.json()["status"]["status"] == "success"
        assert store.save_count == 1
        assert store.load().players[0].actions == 3

    def test_end_turn(self, client):
        client.post("/game/new")
        client.post("/game/player", json={"index": 1})

        data = client.post("/game/end-turn").json()
        assert data["status"]["message"] == "Turn 2 begins"
        assert data["view"]["active_player"] == 0
        assert data["view"]["action_mode"] == "move"
        assert client.get("/game").json()["game"]["turn"] == 2
        assert client.get("/game/history").json() == []

    def test_diseases(self, client):
        diseases = client.get("/game/diseases").json()
        assert [d["color"] for d in diseases] == ["red", "blue", "yellow", "black"]
        assert not any(d["cured"] for d in diseases)

    def test_refresh_empty_store(self, client):
        data = client.post("/game/refresh").json()
        assert data["status"]["message"] == "No saved game found"


class TestRevealEndpoints:
    def test_challenge(self, client):
        data = client.get("/reveal/challenge").json()
        assert data["message"].startswith("publickey:0x")
        assert data["challenge"]["chain_id"] == 31337
        assert "durationDays:30" in data["message"]

    def test_reveal_with_wallet_signature(self, client):
        client.post("/game/new")
        address, signature = _wallet_signature(client, BOB_KEY)
        response = client.post("/game/reveal", json={
            "city": "Madrid", "address": address, "signature": signature,
        })
        assert response.status_code == 200
        assert response.json()["levels"] == [1, 1, 1, 1]
        assert "decrypted_levels" not in response.json()["view"]

        later = client.get("/game").json()
        assert "decrypted_levels" not in later["view"]

    def test_reveal_with_mismatched_signature(self, client):
        client.post("/game/new")
        _, signature = _wallet_signature(client, BOB_KEY)
        alice = LocalAccountIdentity(private_key=ALICE_KEY).address
        response = client.post("/game/reveal", json={
            "city": "Atlanta", "address": alice, "signature": signature,
        })
        assert response.status_code == 403

    def test_reveal_unknown_city(self, client):
        client.post("/game/new")
        address, signature = _wallet_signature(client, BOB_KEY)
        response = client.post("/game/reveal", json={
            "city": "Atlantis", "address": address, "signature": signature,
        })
        assert response.status_code == 404
