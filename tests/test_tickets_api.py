"""End-to-end tests for the ticket routes and the request gate."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from helpdesk.application.services.token_service import TokenService
from helpdesk.core.app_factory import create_application
from helpdesk.core.messages import ErrorMessages, TicketMessages

from .conftest import TEST_SECRET

TICKETS = "/api/v1/tickets"
NEW_TICKET = {"title": "T", "description": "D", "dueDate": "2025-01-01"}


def _create(client, headers, **overrides):
    response = client.post(TICKETS, json={**NEW_TICKET, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["ticket"]


class TestRequestGate:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", TICKETS),
            ("post", TICKETS),
            ("get", f"{TICKETS}/1"),
            ("patch", f"{TICKETS}/1"),
            ("delete", f"{TICKETS}/1"),
        ],
    )
    def test_missing_token(self, client, method, path):
        response = client.request(method.upper(), path)

        assert response.status_code == 401
        assert response.json() == {"status": "fail", "message": ErrorMessages.UNAUTHORIZED}

    def test_failures_are_indistinguishable(self, client, auth):
        headers, user = auth
        expired = TokenService(TEST_SECRET, expires_in=timedelta(seconds=-5)).issue_for_user(user["id"])
        forged = TokenService("another-secret").issue_for_user(user["id"])
        orphan = TokenService(TEST_SECRET).issue_for_user(999999)
        candidates = [
            {"Authorization": f"Bearer {expired}"},
            {"Authorization": f"Bearer {forged}"},
            {"Authorization": f"Bearer {orphan}"},
            {"Authorization": "Bearer garbage"},
            {"Authorization": headers["Authorization"].replace("Bearer ", "Token ")},
        ]

        bodies = [client.get(TICKETS, headers=candidate) for candidate in candidates]

        assert {response.status_code for response in bodies} == {401}
        assert {response.json()["message"] for response in bodies} == {ErrorMessages.UNAUTHORIZED}

    def test_valid_token(self, client, auth):
        headers, _ = auth

        assert client.get(TICKETS, headers=headers).status_code == 200


class TestCreateTicket:
    def test_end_to_end_defaults(self, client, auth):
        headers, user = auth

        response = client.post(TICKETS, json=NEW_TICKET, headers=headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == TicketMessages.TICKET_CREATED
        assert body["ticket"]["status"] == "Open"
        assert body["ticket"]["priority"] == "Low"
        assert body["ticket"]["createdBy"] == user["id"]
        assert body["ticket"]["dueDate"].startswith("2025-01-01T00:00:00")

    def test_client_supplied_author_is_ignored(self, client, auth):
        headers, user = auth

        ticket = _create(client, headers, createdBy=user["id"] + 100)

        assert ticket["createdBy"] == user["id"]

    def test_missing_due_date(self, client, auth):
        headers, _ = auth
        payload = {"title": "T", "description": "D"}

        response = client.post(TICKETS, json=payload, headers=headers)

        assert response.status_code == 400
        assert TicketMessages.DUE_DATE_REQUIRED in response.json()["message"]

    def test_invalid_priority(self, client, auth):
        headers, _ = auth

        response = client.post(TICKETS, json={**NEW_TICKET, "priority": "Urgent"}, headers=headers)

        assert response.status_code == 400
        assert TicketMessages.INVALID_PRIORITY in response.json()["message"]

    def test_unparseable_due_date(self, client, auth):
        headers, _ = auth

        response = client.post(TICKETS, json={**NEW_TICKET, "dueDate": "someday"}, headers=headers)

        assert response.status_code == 400
        assert "dueDate" in response.json()["message"]

    def test_due_date_beyond_utc_range(self, client, auth):
        headers, _ = auth
        payload = {**NEW_TICKET, "dueDate": "9999-12-31T23:00:00-05:00"}

        response = client.post(TICKETS, json=payload, headers=headers)

        assert response.status_code == 400
        assert TicketMessages.INVALID_DUE_DATE in response.json()["message"]


class TestListTickets:
    def test_pagination(self, client, auth):
        headers, _ = auth
        for index in range(25):
            _create(client, headers, title=f"T{index}")

        response = client.get(TICKETS, params={"limit": 10, "page": 3}, headers=headers)

        body = response.json()
        assert response.status_code == 200
        assert body["totalPages"] == 3
        assert body["currentPage"] == 3
        assert body["pageSize"] == 10
        assert len(body["tickets"]) == 5

    def test_defaults(self, client, auth):
        headers, _ = auth
        _create(client, headers)

        body = client.get(TICKETS, headers=headers).json()

        assert (body["currentPage"], body["pageSize"], body["totalPages"]) == (1, 10, 1)

    def test_sort_by_due_date_desc(self, client, auth):
        headers, _ = auth
        for due in ("2025-03-01", "2025-01-15", "2025-07-04", "2025-02-01"):
            _create(client, headers, dueDate=due)

        body = client.get(TICKETS, params={"sort": "dueDate:desc"}, headers=headers).json()
        due_dates = [ticket["dueDate"] for ticket in body["tickets"]]

        assert due_dates == sorted(due_dates, reverse=True)

    def test_author_is_expanded(self, client, auth):
        headers, user = auth
        _create(client, headers)

        ticket = client.get(TICKETS, headers=headers).json()["tickets"][0]

        assert ticket["createdBy"] == {"id": user["id"], "name": "A", "email": "a@x.com"}

    def test_filter(self, client, auth):
        headers, _ = auth
        _create(client, headers, status="Closed")
        _create(client, headers)

        body = client.get(TICKETS, params={"filter": '{"status": "Closed"}'}, headers=headers).json()

        assert [ticket["status"] for ticket in body["tickets"]] == ["Closed"]

    def test_malformed_filter(self, client, auth):
        headers, _ = auth

        response = client.get(TICKETS, params={"filter": "{oops"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith(TicketMessages.INVALID_FILTER)

    @pytest.mark.parametrize(
        "params",
        [
            {"page": 0},
            {"limit": 0},
            {"page": "two"},
            {"page": "99999999999999999999"},
            {"limit": "99999999999999999999"},
        ],
    )
    def test_invalid_pagination(self, client, auth, params):
        headers, _ = auth

        assert client.get(TICKETS, params=params, headers=headers).status_code == 400


class TestSingleTicket:
    def test_get(self, client, auth):
        headers, user = auth
        created = _create(client, headers)

        response = client.get(f"{TICKETS}/{created['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["title"] == "T"
        assert response.json()["createdBy"]["id"] == user["id"]

    def test_patch_is_partial(self, client, auth):
        headers, _ = auth
        created = _create(client, headers)

        response = client.patch(f"{TICKETS}/{created['id']}", json={"status": "In Progress"}, headers=headers)

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == TicketMessages.TICKET_UPDATED
        assert body["ticket"]["status"] == "In Progress"
        assert body["ticket"]["title"] == "T"
        assert body["ticket"]["dueDate"] == created["dueDate"]

    def test_patch_revalidates(self, client, auth):
        headers, _ = auth
        created = _create(client, headers)

        response = client.patch(f"{TICKETS}/{created['id']}", json={"title": None}, headers=headers)

        assert response.status_code == 400
        assert TicketMessages.TITLE_REQUIRED in response.json()["message"]

    def test_deleted_ticket_is_gone(self, client, auth):
        headers, _ = auth
        created = _create(client, headers)
        path = f"{TICKETS}/{created['id']}"

        response = client.delete(path, headers=headers)
        assert response.status_code == 200
        assert response.json() == {"message": TicketMessages.TICKET_DELETED}

        for response in (
            client.get(path, headers=headers),
            client.patch(path, json={"title": "again"}, headers=headers),
            client.delete(path, headers=headers),
        ):
            assert response.status_code == 404
            assert response.json()["message"] == TicketMessages.TICKET_NOT_FOUND

    @pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
    def test_malformed_id_is_400(self, client, auth, method):
        headers, _ = auth

        response = client.request(method, f"{TICKETS}/not-an-id", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid id: not-an-id."

    @pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
    def test_id_beyond_integer_range_is_400(self, client, auth, method):
        headers, _ = auth

        response = client.request(method, f"{TICKETS}/99999999999999999999", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid id: 99999999999999999999."

    def test_filter_id_beyond_integer_range_is_400(self, client, auth):
        headers, _ = auth

        response = client.get(TICKETS, params={"filter": '{"id": 99999999999999999999}'}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith(TicketMessages.INVALID_FILTER)


class TestErrorContract:
    def test_unmatched_route(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"status": "fail", "message": ErrorMessages.ROUTE_NOT_FOUND}

    def test_unsupported_method(self, client):
        response = client.put("/api/v1/auth/login", json={})

        assert response.status_code == 404
        assert response.json()["message"] == ErrorMessages.ROUTE_NOT_FOUND

    def test_internal_error_is_hidden(self, app, auth):
        headers, _ = auth

        async def boom(**kwargs):
            raise RuntimeError("sqlite is on fire")

        with TestClient(app, raise_server_exceptions=False) as client:
            app.state.container.ticket_service.list_tickets = boom
            response = client.get(TICKETS, headers=headers)

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": ErrorMessages.INTERNAL_SERVER_ERROR}

    def test_development_mode_is_verbose(self, monkeypatch, settings):
        monkeypatch.setattr(settings, "app_env", "development")
        app = create_application(settings)

        with TestClient(app) as client:
            response = client.get("/api/v1/nothing-here")

        body = response.json()
        assert response.status_code == 404
        assert body["message"] == ErrorMessages.ROUTE_NOT_FOUND
        assert "stack" in body
        assert body["error"]["isOperational"] is True
