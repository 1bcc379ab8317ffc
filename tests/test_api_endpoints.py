"""
Tests for the HTTP API.
"""
from conftest import make_token


ORDER_CREATED = {"type": "OrderCreated", "data": {"orderId": "abc123"}}


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "event-bus"
    assert data["status"] == "operational"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["destinations"] == ["messages", "notifications", "orders", "restaurants", "users"]


class TestPublishEvent:
    """Test suite for POST /events."""

    def test_publish_acknowledges_and_fans_out(self, client, downstream, auth_headers):
        response = client.post("/events", json=ORDER_CREATED, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "OK"}
        assert downstream.hosts == [
            "messages", "notification", "orders", "restaurants", "users", "logger"
        ]
        for request in downstream.requests[:-1]:
            assert request["json"]["variables"]["input"] == ORDER_CREATED

        events = client.get("/events", headers=auth_headers).json()
        assert len(events) == 1
        assert events[0]["type"] == "OrderCreated"
        assert events[0]["data"] == {"orderId": "abc123"}

    def test_ack_returned_when_destinations_fail(self, client, downstream, auth_headers):
        downstream.fail("notification", "connect")
        downstream.fail("orders", 500)
        downstream.fail("logger", "timeout")

        response = client.post("/events", json=ORDER_CREATED, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "OK"}
        assert "users" in downstream.hosts

    def test_missing_token_rejected(self, client, downstream, auth_headers):
        response = client.post("/events", json=ORDER_CREATED)

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"
        assert downstream.requests == []
        assert client.get("/events", headers=auth_headers).json() == []

    def test_expired_token_rejected(self, client, downstream, auth_headers):
        expired = {"Authorization": f"Bearer {make_token(expires_in=-60)}"}

        response = client.post("/events", json=ORDER_CREATED, headers=expired)

        assert response.status_code == 401
        assert downstream.requests == []
        assert client.get("/events", headers=auth_headers).json() == []

    def test_unauthenticated_invalid_body_is_still_401(self, client):
        response = client.post("/events", json={"data": {}})
        assert response.status_code == 401

    def test_null_type_rejected(self, client, downstream, auth_headers):
        response = client.post(
            "/events",
            json={"type": None, "data": {"orderId": "abc123"}},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json() == {"error": "Invalid event", "detail": "Invalid field(s): type"}
        assert downstream.requests == []
        assert client.get("/events", headers=auth_headers).json() == []

    def test_missing_data_rejected(self, client, downstream, auth_headers):
        response = client.post("/events", json={"type": "OrderCreated"}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid event"
        assert "data" in response.json()["detail"]
        assert downstream.requests == []

    def test_duplicate_events_both_stored(self, client, auth_headers):
        client.post("/events", json=ORDER_CREATED, headers=auth_headers)
        client.post("/events", json=ORDER_CREATED, headers=auth_headers)

        events = client.get("/events", headers=auth_headers).json()
        assert len(events) == 2
        assert events[0]["id"] != events[1]["id"]


class TestQueryEvents:
    """Test suite for the read side of /events."""

    def _publish(self, client, headers, *types):
        for i, event_type in enumerate(types):
            response = client.post(
                "/events", json={"type": event_type, "data": {"n": i}}, headers=headers
            )
            assert response.status_code == 200

    def test_list_requires_token(self, client):
        assert client.get("/events").status_code == 401

    def test_list_empty(self, client, auth_headers):
        response = client.get("/events", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_list_oldest_first_and_repeatable(self, client, auth_headers):
        self._publish(client, auth_headers, "A", "B", "C")

        first = client.get("/events", headers=auth_headers).json()
        second = client.get("/events", headers=auth_headers).json()

        assert [e["type"] for e in first] == ["A", "B", "C"]
        assert first == second

    def test_list_query_parameters(self, client, auth_headers):
        self._publish(client, auth_headers, "A", "B", "A", "C")

        by_type = client.get("/events", params={"type": "A"}, headers=auth_headers).json()
        newest = client.get(
            "/events", params={"order": "desc", "limit": 1}, headers=auth_headers
        ).json()
        page = client.get(
            "/events", params={"limit": 2, "offset": 1}, headers=auth_headers
        ).json()

        assert [e["data"]["n"] for e in by_type] == [0, 2]
        assert [e["type"] for e in newest] == ["C"]
        assert [e["type"] for e in page] == ["B", "A"]

    def test_list_rejects_invalid_limit(self, client, auth_headers):
        response = client.get("/events", params={"limit": 0}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"
        assert response.json()["detail"] == "Invalid field(s): limit"

    def test_get_event_by_id(self, client, auth_headers):
        self._publish(client, auth_headers, "OrderCreated")
        stored, = client.get("/events", headers=auth_headers).json()

        response = client.get(f"/events/{stored['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == stored

    def test_get_unknown_event(self, client, auth_headers):
        response = client.get("/events/does-not-exist", headers=auth_headers)
        assert response.status_code == 404


class TestReplayEvent:
    """Test suite for POST /events/{id}/replay."""

    def test_replay_redelivers_without_new_record(self, client, downstream, auth_headers):
        client.post("/events", json=ORDER_CREATED, headers=auth_headers)
        stored, = client.get("/events", headers=auth_headers).json()
        downstream.requests.clear()

        response = client.post(f"/events/{stored['id']}/replay", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "OK"}
        assert downstream.hosts == [
            "messages", "notification", "orders", "restaurants", "users", "logger"
        ]
        assert len(client.get("/events", headers=auth_headers).json()) == 1

    def test_replay_unknown_event(self, client, downstream, auth_headers):
        response = client.post("/events/does-not-exist/replay", headers=auth_headers)

        assert response.status_code == 404
        assert downstream.requests == []

    def test_replay_requires_token(self, client):
        assert client.post("/events/anything/replay").status_code == 401
