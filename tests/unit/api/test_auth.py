"""
Unit tests for CRM session auth and admin token auth.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from src.api.auth import (
    create_admin_token,
    decode_admin_token,
    get_auth_token,
    require_admin,
    require_crm_auth,
)
from src.core.timeutils import now_ms
from src.models import AuthSession, User


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


@pytest.fixture
def user() -> User:
    return User(id="user_001", email="owner@example.com", name="Owner")


def _lookup(session: AuthSession | None, user: User | None):
    def get(model, key):
        return {AuthSession: session, User: user}.get(model)

    return get


class TestGetAuthToken:
    """Test get_auth_token function."""

    def test_bearer_header(self):
        assert get_auth_token(_request({"Authorization": "Bearer tok_123"}), "auth_token") == "tok_123"

    def test_bearer_is_case_insensitive(self):
        assert get_auth_token(_request({"Authorization": "bearer tok_123"}), "auth_token") == "tok_123"

    def test_cookie_fallback(self):
        request = _request({"Cookie": "theme=dark; auth_token=tok_cookie"})
        assert get_auth_token(request, "auth_token") == "tok_cookie"

    def test_header_takes_precedence(self):
        request = _request({"Authorization": "Bearer from_header", "Cookie": "auth_token=from_cookie"})
        assert get_auth_token(request, "auth_token") == "from_header"

    def test_missing(self):
        assert get_auth_token(_request(), "auth_token") is None
        assert get_auth_token(_request({"Authorization": "Basic abc"}), "auth_token") is None


class TestRequireCrmAuth:
    """Test require_crm_auth dependency."""

    def test_valid_session(self, mock_db_session, settings, user, workspace):
        session = AuthSession(token="tok", user_id=user.id, expires_at=now_ms() + 60_000)
        mock_db_session.get.side_effect = _lookup(session, user)
        mock_db_session.scalars.return_value.first.return_value = workspace

        principal = require_crm_auth(
            _request({"Authorization": "Bearer tok"}), mock_db_session, settings
        )

        assert principal.user_id == "user_001"
        assert principal.workspace_id == workspace.id
        assert principal.session_token == "tok"

    def test_missing_token(self, mock_db_session, settings):
        with pytest.raises(HTTPException) as exc_info:
            require_crm_auth(_request(), mock_db_session, settings)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Missing auth token"
        mock_db_session.get.assert_not_called()

    def test_unknown_session(self, mock_db_session, settings):
        mock_db_session.get.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            require_crm_auth(_request({"Authorization": "Bearer nope"}), mock_db_session, settings)

        assert exc_info.value.detail == "Invalid session"

    def test_expired_session_is_deleted(self, mock_db_session, settings, user):
        """Test an expired session row is removed before rejecting."""
        session = AuthSession(token="old", user_id=user.id, expires_at=now_ms() - 1)
        mock_db_session.get.side_effect = _lookup(session, user)

        with pytest.raises(HTTPException) as exc_info:
            require_crm_auth(_request({"Cookie": "auth_token=old"}), mock_db_session, settings)

        assert exc_info.value.detail == "Session expired"
        mock_db_session.execute.assert_called_once()
        mock_db_session.commit.assert_called_once()

    def test_user_without_workspace(self, mock_db_session, settings, user):
        session = AuthSession(token="tok", user_id=user.id, expires_at=None)
        mock_db_session.get.side_effect = _lookup(session, user)
        mock_db_session.scalars.return_value.first.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            require_crm_auth(_request({"Authorization": "Bearer tok"}), mock_db_session, settings)

        assert exc_info.value.detail == "Workspace not found"

    def test_deleted_user(self, mock_db_session, settings):
        session = AuthSession(token="tok", user_id="gone", expires_at=None)
        mock_db_session.get.side_effect = _lookup(session, None)

        with pytest.raises(HTTPException) as exc_info:
            require_crm_auth(_request({"Authorization": "Bearer tok"}), mock_db_session, settings)

        assert exc_info.value.detail == "User not found"


class TestAdminTokens:
    """Test admin token issue and verification."""

    def test_round_trip(self, settings):
        token = create_admin_token(settings)
        payload = decode_admin_token(settings, token)

        assert payload["sub"] == "admin"
        assert payload["role"] == "admin"
        assert payload["exp"] - payload["iat"] == 12 * 3600

    def test_expired(self, settings):
        token = create_admin_token(settings, now=datetime.now(timezone.utc) - timedelta(hours=13))

        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(settings, token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_secret(self, settings):
        token = jwt.encode(
            {"sub": "admin", "role": "admin", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret-that-is-also-long-enough",
            algorithm="HS256",
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(settings, token)

        assert exc_info.value.detail.startswith("Invalid token")

    def test_non_admin_claims_rejected(self, settings):
        token = jwt.encode(
            {"sub": "user_001", "role": "user", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.admin_jwt_secret,
            algorithm="HS256",
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(settings, token)

        assert exc_info.value.status_code == 401

    def test_unconfigured_secret(self, settings):
        settings.admin_jwt_secret = None

        with pytest.raises(HTTPException) as exc_info:
            create_admin_token(settings)

        assert exc_info.value.status_code == 503

    def test_require_admin_reads_cookie(self, settings):
        token = create_admin_token(settings)
        payload = require_admin(_request({"Cookie": f"admin_auth_token={token}"}), settings)
        assert payload["role"] == "admin"

    def test_require_admin_missing_token(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            require_admin(_request(), settings)
        assert exc_info.value.status_code == 401
