"""End-to-end admission scenarios through the HTTP API.

Each test walks real guests through the full flow against mocked DynamoDB:
vote while voting is open, come back after it closes, claim a tier and
get scanned at the door.
"""

import pytest
from fastapi.testclient import TestClient

CARLOS = {"phone": "987654321", "first_name": "Carlos", "last_name": "Quispe"}
MARIA = {"phone": "912345678", "first_name": "María", "last_name": "Rojas"}


def start_and_verify(client: TestClient, phone: str) -> tuple[str, dict]:
    session_id = client.post("/api/sessions").json()["session_id"]
    response = client.post(f"/api/sessions/{session_id}/verify", json={"phone": phone})
    assert response.status_code == 200
    return session_id, response.json()


def identity(guest: dict) -> dict:
    return {
        "first_name": guest["first_name"],
        "last_name": guest["last_name"],
        "email": f"{guest['phone']}@example.com",
    }


def save_config(client: TestClient, auth: tuple[str, str], **changes) -> None:
    config = client.get("/api/admin/config", auth=auth).json()
    response = client.put("/api/admin/config", json={**config, **changes}, auth=auth)
    assert response.status_code == 200


def win_game(client: TestClient, session_id: str, tier_id: str) -> str:
    base = f"/api/sessions/{session_id}"
    assert client.post(f"{base}/tier", json={"tier_id": tier_id}).status_code == 200
    response = client.post(f"{base}/game/complete", json={"score": 99})
    assert response.status_code == 200
    return response.json()["game_pass"]


class TestVoteThenClaim:
    """A guest votes, waits for the deadline, then claims tickets."""

    def test_vote_reentry_and_forced_winner(self, client: TestClient, admin_auth) -> None:
        # Given: Carlos votes for the rooftop lounge
        session_id, view = start_and_verify(client, CARLOS["phone"])
        assert view["state"] == "verified"
        vote = client.post(
            f"/api/sessions/{session_id}/vote",
            json={"venue_id": "lounge", **identity(CARLOS)},
        )
        assert vote.json()["state"] == "voted"

        # When: he re-enters from another device
        _, view = start_and_verify(client, CARLOS["phone"])

        # Then: he is on the waiting screen and there is still one submission
        assert view["state"] == "voted"
        assert view["rsvp"]["selected_venue_id"] == "lounge"
        stats = client.get("/api/admin/stats", auth=admin_auth).json()
        assert stats["total_submissions"] == 1
        assert stats["leading_venue_id"] == "lounge"

        # When: the host forces the club as the winner
        save_config(client, admin_auth, winning_venue_id="club")

        # Then: his waiting session moves on and shows the club
        refreshed = client.post(f"/api/sessions/{session_id}/refresh").json()
        assert refreshed["state"] == "tier_selecting"
        assert refreshed["winning_venue"]["venue_id"] == "club"

        # And: he can claim without re-typing his identity
        game_pass = win_game(client, session_id, "emerald")
        claimed = client.post(f"/api/sessions/{session_id}/claim", json={"game_pass": game_pass})
        assert claimed.json()["state"] == "issuing"
        issued = client.post(f"/api/sessions/{session_id}/issue", json={"guest_count": 2}).json()

        assert issued["state"] == "issued"
        assert issued["rsvp"]["selected_venue_id"] == "lounge"
        assert issued["rsvp"]["selected_tier_id"] == "emerald"
        assert len(issued["rsvp"]["ticket_ids"]) == 3

    def test_tickets_are_admitted_once(self, client: TestClient, admin_auth) -> None:
        save_config(client, admin_auth, winning_venue_id="pub")
        session_id, _ = start_and_verify(client, MARIA["phone"])
        game_pass = win_game(client, session_id, "standard")
        client.post(f"/api/sessions/{session_id}/claim", json={"game_pass": game_pass})
        issued = client.post(
            f"/api/sessions/{session_id}/issue",
            json={"guest_count": 0, **identity(MARIA)},
        ).json()
        ticket_id = issued["rsvp"]["ticket_ids"][0]

        first = client.post("/api/admin/scans", json={"ticket_id": ticket_id}, auth=admin_auth)
        second = client.post("/api/admin/scans", json={"ticket_id": ticket_id}, auth=admin_auth)

        assert first.json()["status"] == "admitted"
        assert first.json()["guest_name"] == "María Rojas"
        assert first.json()["tier_name"] == "STANDARD ECHO"
        assert second.json()["status"] == "already_used"
        assert second.json()["scanned_at"] == first.json()["scanned_at"]


class TestLastPlatinumUnit:
    """Two guests race for the last platinum ticket."""

    @pytest.fixture
    def one_platinum_left(self, client: TestClient, admin_auth) -> None:
        save_config(client, admin_auth, winning_venue_id="club")
        response = client.put("/api/admin/tiers/platinum/stock", json={"stock": 1}, auth=admin_auth)
        assert response.status_code == 200

    def test_only_one_guest_gets_it(self, client: TestClient, one_platinum_left) -> None:
        # Given: Carlos and María both won the platinum game
        carlos_session, _ = start_and_verify(client, CARLOS["phone"])
        maria_session, _ = start_and_verify(client, MARIA["phone"])
        carlos_pass = win_game(client, carlos_session, "platinum")
        maria_pass = win_game(client, maria_session, "platinum")

        # When: both claim
        carlos = client.post(
            f"/api/sessions/{carlos_session}/claim", json={"game_pass": carlos_pass}
        )
        maria = client.post(f"/api/sessions/{maria_session}/claim", json={"game_pass": maria_pass})

        # Then: Carlos gets the last unit and María is sent back to choose
        assert carlos.status_code == 200
        assert carlos.json()["state"] == "issuing"
        assert maria.status_code == 409
        assert maria.json()["error_code"] == "ERR_004"
        assert maria.json()["details"]["available_tiers"] == "emerald,standard"

        view = client.get(f"/api/sessions/{maria_session}").json()
        assert view["state"] == "tier_selecting"
        platinum = next(t for t in view["tiers"] if t["tier_id"] == "platinum")
        assert platinum["stock"] == 0

    def test_sold_out_tier_cannot_be_selected(self, client: TestClient, one_platinum_left) -> None:
        carlos_session, _ = start_and_verify(client, CARLOS["phone"])
        carlos_pass = win_game(client, carlos_session, "platinum")
        client.post(f"/api/sessions/{carlos_session}/claim", json={"game_pass": carlos_pass})

        maria_session, _ = start_and_verify(client, MARIA["phone"])
        response = client.post(
            f"/api/sessions/{maria_session}/tier", json={"tier_id": "platinum"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "ERR_004"
