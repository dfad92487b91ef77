"""
Unit tests for the CRM contacts routes.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.api.auth import CrmPrincipal, require_crm_auth
from src.api.crm_main import app
from src.core.database import get_db
from src.services.contacts import backfill, store
from src.services.contacts.backfill import BackfillResult


@pytest.fixture
def principal(workspace) -> CrmPrincipal:
    return CrmPrincipal(
        user_id="user_001",
        email="owner@example.com",
        name="Owner",
        workspace=workspace,
        session_token="tok",
    )


@pytest.fixture
def client(mock_db_session, principal):
    """Test client with the session and the caller stubbed out."""
    app.dependency_overrides[get_db] = lambda: mock_db_session
    app.dependency_overrides[require_crm_auth] = lambda: principal
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(mock_db_session):
    app.dependency_overrides[get_db] = lambda: mock_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuthRequired:
    """Test contacts routes reject unauthenticated callers."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/crm/contacts"),
            ("get", "/api/crm/contacts/c_1"),
            ("delete", "/api/crm/contacts/c_1"),
            ("post", "/api/crm/contacts/backfill"),
        ],
    )
    def test_missing_token(self, anonymous_client, method, path):
        response = getattr(anonymous_client, method)(path)

        assert response.status_code == 401
        assert response.json() == {"detail": "Missing auth token"}


class TestListContacts:
    """Test GET /api/crm/contacts."""

    def test_lists_workspace_contacts(self, client, monkeypatch, make_contact, workspace):
        captured = {}

        def fake_list(db, workspace_id, **filters):
            captured.update(filters, workspace_id=workspace_id)
            return [make_contact(tags=None, meta=None, email=None)]

        monkeypatch.setattr(store, "list_contacts", fake_list)

        response = client.get("/api/crm/contacts", params={"search": "ali", "tag": "vip", "limit": 5})

        assert response.status_code == 200
        contact = response.json()["contacts"][0]
        assert contact["phoneE164"] == "+14155550123"
        assert contact["workspaceId"] == workspace.id
        assert contact["tags"] == []
        assert contact["metadata"] == {}
        assert contact["email"] == ""
        assert captured["workspace_id"] == workspace.id
        assert captured["search"] == "ali"
        assert captured["tag"] == "vip"
        assert captured["limit"] == 5

    def test_limit_bounds(self, client):
        assert client.get("/api/crm/contacts", params={"limit": 0}).status_code == 422

    def test_database_unavailable(self, client, monkeypatch):
        def failing_list(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("could not connect"))

        monkeypatch.setattr(store, "list_contacts", failing_list)

        response = client.get("/api/crm/contacts")

        assert response.status_code == 503
        assert response.json() == {"detail": "Database unavailable"}


class TestGetContact:
    """Test GET /api/crm/contacts/{id}."""

    def test_found(self, client, mock_db_session, make_contact):
        mock_db_session.get.return_value = make_contact(id="c_1")

        response = client.get("/api/crm/contacts/c_1")

        assert response.status_code == 200
        assert response.json()["contact"]["id"] == "c_1"

    def test_missing(self, client, mock_db_session):
        mock_db_session.get.return_value = None

        response = client.get("/api/crm/contacts/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "Contact not found"}

    def test_other_workspace_is_hidden(self, client, mock_db_session, make_contact):
        mock_db_session.get.return_value = make_contact(id="c_1", workspace_id="ws_other")

        assert client.get("/api/crm/contacts/c_1").status_code == 404


class TestCreateContact:
    """Test POST /api/crm/contacts."""

    def test_create(self, client, monkeypatch, make_contact, workspace):
        captured = {}

        def fake_create(db, workspace_id, data):
            captured["workspace_id"] = workspace_id
            captured["fields"] = data.merge_fields()
            return make_contact(name=data.name)

        monkeypatch.setattr(store, "create_contact", fake_create)

        response = client.post(
            "/api/crm/contacts",
            json={"phoneE164": "+14155550123", "name": "Alice", "metadata": {"crm": "hubspot"}},
        )

        assert response.status_code == 200
        assert response.json()["contact"]["name"] == "Alice"
        assert captured["workspace_id"] == workspace.id
        assert captured["fields"] == {"name": "Alice", "meta": {"crm": "hubspot"}}

    def test_invalid_phone(self, client, mock_db_session):
        response = client.post("/api/crm/contacts", json={"phoneE164": "555-0123"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_phone"
        mock_db_session.commit.assert_not_called()

    def test_missing_phone(self, client):
        assert client.post("/api/crm/contacts", json={"name": "Alice"}).status_code == 422

    def test_unknown_source_rejected(self, client):
        response = client.post(
            "/api/crm/contacts", json={"phoneE164": "+14155550123", "source": "scraped"}
        )
        assert response.status_code == 422


class TestUpdateContact:
    """Test PUT /api/crm/contacts/{id}."""

    def test_partial_update(self, client, mock_db_session, make_contact):
        contact = make_contact(id="c_1", email="alice@example.com")
        mock_db_session.get.return_value = contact

        response = client.put("/api/crm/contacts/c_1", json={"name": "Alicia", "tags": ["vip"]})

        body = response.json()["contact"]
        assert response.status_code == 200
        assert body["name"] == "Alicia"
        assert body["tags"] == ["vip"]
        assert body["email"] == "alice@example.com"
        mock_db_session.commit.assert_called_once()

    def test_empty_body_changes_nothing(self, client, mock_db_session, make_contact):
        contact = make_contact(id="c_1")
        mock_db_session.get.return_value = contact

        response = client.put("/api/crm/contacts/c_1", json={})

        assert response.status_code == 200
        assert response.json()["contact"]["updatedAt"] == contact.created_at
        mock_db_session.commit.assert_not_called()

    def test_negative_total_calls_rejected(self, client, mock_db_session, make_contact):
        mock_db_session.get.return_value = make_contact(id="c_1")
        assert client.put("/api/crm/contacts/c_1", json={"totalCalls": -1}).status_code == 422


class TestDeleteContact:
    """Test DELETE /api/crm/contacts/{id}."""

    def test_delete(self, client, mock_db_session, make_contact):
        mock_db_session.get.return_value = make_contact(id="c_1")
        mock_db_session.execute.return_value.rowcount = 1

        response = client.delete("/api/crm/contacts/c_1")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_delete_other_workspace(self, client, mock_db_session, make_contact):
        mock_db_session.get.return_value = make_contact(id="c_1", workspace_id="ws_other")

        assert client.delete("/api/crm/contacts/c_1").status_code == 404
        mock_db_session.execute.assert_not_called()


class TestImportContacts:
    """Test POST /api/crm/contacts/import."""

    def test_import_counts(self, client, monkeypatch, make_contact):
        captured = {}

        def fake_bulk(db, workspace_id, rows):
            captured["phones"] = [row.phone_e164 for row in rows]
            return [make_contact(source="import")]

        monkeypatch.setattr(store, "bulk_create_contacts", fake_bulk)

        response = client.post(
            "/api/crm/contacts/import",
            json={"csv": "phone,name\n+14155550123,Alice\nnotaphone,Bob\n"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["imported"] == 1
        assert body["total"] == 1
        assert body["skipped"] == 1
        assert body["contacts"][0]["source"] == "import"
        assert captured["phones"] == ["+14155550123"]

    def test_duplicates_not_counted_as_imported(self, client, monkeypatch):
        monkeypatch.setattr(store, "bulk_create_contacts", lambda db, ws, rows: [])

        response = client.post(
            "/api/crm/contacts/import", json={"csv": "phone\n+14155550123\n+14155550124\n"}
        )

        assert response.json()["imported"] == 0
        assert response.json()["total"] == 2

    def test_csv_without_phone_column(self, client):
        response = client.post("/api/crm/contacts/import", json={"csv": "name\nAlice\n"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_csv"


class TestBackfillAndUpsert:
    """Test the backfill and upsert-from-call routes."""

    def test_backfill(self, client, monkeypatch, workspace):
        captured = {}

        def fake_backfill(db, workspace_id, test_call_sentinel):
            captured["args"] = (workspace_id, test_call_sentinel)
            return BackfillResult(created=2, updated=3)

        monkeypatch.setattr(backfill, "backfill_contacts_from_calls", fake_backfill)

        response = client.post("/api/crm/contacts/backfill")

        assert response.status_code == 200
        assert response.json() == {"created": 2, "updated": 3}
        assert captured["args"] == (workspace.id, "webtest")

    def test_upsert_from_call(self, client, monkeypatch, make_contact, workspace):
        captured = {}

        def fake_upsert(db, workspace_id, phone, name=None, source=None):
            captured["args"] = (workspace_id, phone, name, source)
            return make_contact(total_calls=1, source=source)

        monkeypatch.setattr(store, "upsert_contact_from_call", fake_upsert)

        response = client.post(
            "/api/crm/contacts/upsert-from-call",
            json={"phoneE164": "+14155550123", "name": "Alice", "source": "outbound"},
        )

        assert response.status_code == 200
        assert response.json()["contact"]["totalCalls"] == 1
        assert captured["args"] == (workspace.id, "+14155550123", "Alice", "outbound")

    def test_upsert_from_call_invalid_phone(self, client):
        response = client.post("/api/crm/contacts/upsert-from-call", json={"phoneE164": "webtest"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_phone"
