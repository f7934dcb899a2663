"""Tests for the notification inbox endpoints and websocket."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from civicvote.domain.entities import AUDIENCE_ADMIN
from civicvote.infrastructure.security import create_access_token

from tests.factories import auth_headers, create_admin, create_event, create_voter


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_client_shutdown_keeps_the_database_open(client, db_session):
    voter = create_voter(db_session)

    with TestClient(client.app) as second_client:
        assert second_client.get("/health").status_code == 200

    response = client.get("/notifications/", headers=auth_headers(voter))
    assert response.status_code == 200
    assert create_event(db_session).id is not None


def test_requests_without_a_valid_token_are_rejected(client, db_session):
    assert client.get("/notifications/").status_code == 401
    assert (
        client.get("/notifications/", headers={"Authorization": "Bearer nope"}).status_code
        == 401
    )
    unknown = create_access_token({"sub": "999"})
    response = client.get("/notifications/", headers={"Authorization": f"Bearer {unknown}"})
    assert response.status_code == 401


def test_inbox_read_and_clear_flow(client, db_session):
    voter = create_voter(db_session)
    first = create_event(db_session, title="First")
    second = create_event(db_session, title="Second", scope="state", scope_state="Lagos")
    create_event(db_session, title="Elsewhere", scope="state", scope_state="Kano")
    headers = auth_headers(voter)

    response = client.get("/notifications/", headers=headers)
    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["Second", "First"]

    assert client.post(f"/notifications/{first.id}/read", headers=headers).json() == {
        "success": True,
        "updated": None,
    }
    assert client.post(f"/notifications/{second.id}/clear", headers=headers).status_code == 200

    [item] = client.get("/notifications/", headers=headers).json()
    assert item["id"] == first.id
    assert item["read_at"] is not None
    assert item["cleared_at"] is None


def test_unknown_notification_returns_404(client, db_session):
    headers = auth_headers(create_voter(db_session))

    assert client.post("/notifications/404/read", headers=headers).status_code == 404
    assert client.post("/notifications/404/clear", headers=headers).status_code == 404


def test_bulk_actions_report_updated_rows(client, db_session):
    voter = create_voter(db_session)
    for index in range(3):
        create_event(db_session, title=f"n{index}")
    headers = auth_headers(voter)

    assert client.post("/notifications/mark-all-read", headers=headers).json()["updated"] == 3
    assert client.post("/notifications/clear-all", headers=headers).json()["updated"] == 3
    assert client.get("/notifications/", headers=headers).json() == []


def test_admin_audience_requires_admin_role(client, db_session):
    voter = create_voter(db_session)
    admin = create_admin(db_session)
    create_event(db_session, title="New registrations", audience=AUDIENCE_ADMIN)

    forbidden = client.get("/notifications/?audience=admin", headers=auth_headers(voter))
    allowed = client.get("/notifications/?audience=admin", headers=auth_headers(admin))

    assert forbidden.status_code == 403
    assert [item["title"] for item in allowed.json()] == ["New registrations"]
    cleared = client.post("/notifications/clear-all?audience=admin", headers=auth_headers(admin))
    assert cleared.json()["updated"] == 1


def test_websocket_sends_snapshot_and_answers_ping(client, db_session):
    voter = create_voter(db_session)
    event = create_event(db_session, title="Welcome")
    token = create_access_token({"sub": str(voter.id)})

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [event.id]

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_websocket_without_token_is_closed(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws") as websocket:
            websocket.receive_json()
