"""
Unit tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from src.core.config import Settings


@pytest.fixture
def clean_env(monkeypatch):
    """Start each test from the variables it sets itself."""
    for name in (
        "DATABASE_URL",
        "APP_ENV",
        "CLIENT_ORIGIN",
        "ADMIN_PASSWORD",
        "ADMIN_JWT_SECRET",
        "ADMIN_JWT_TTL_HOURS",
        "TEST_CALL_SENTINEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Test Settings defaults and normalization."""

    def test_defaults(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@localhost/db")
        settings = Settings(_env_file=None)

        assert settings.crm_port == 8788
        assert settings.admin_port == 8789
        assert settings.database_pool_max == 20
        assert settings.database_statement_timeout_ms == 30000
        assert settings.admin_jwt_ttl_hours == 12
        assert settings.test_call_sentinel == "webtest"
        assert settings.admin_password is None
        assert settings.is_development

    def test_database_url_is_required(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_postgres_scheme_is_normalized(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgres://u:p@db.example.com:5432/rapidcall")
        settings = Settings(_env_file=None)
        assert settings.database_url == "postgresql://u:p@db.example.com:5432/rapidcall"

    def test_production_flags(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@localhost/db")
        clean_env.setenv("APP_ENV", "production")
        settings = Settings(_env_file=None)
        assert settings.is_production
        assert not settings.is_development

    def test_allowed_origins_include_client_origin(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@localhost/db")
        clean_env.setenv("CLIENT_ORIGIN", "https://app.example.com")
        settings = Settings(_env_file=None)
        origins = settings.get_allowed_origins()
        assert origins[0] == "https://app.example.com"
        assert "http://localhost:5173" in origins
