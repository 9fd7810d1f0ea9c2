"""
Tests for aadsso/core/config.py and aadsso/core/sso/config.py - settings validation.
"""
import importlib

import pytest

from aadsso.core.sso.config import AADSSOSettings, get_aad_sso_settings
from aadsso.core.sso.records import DEFAULT_OPENID_CONFIGURATION_ENDPOINT


class TestSettingsValidation:
    """Test service configuration validation logic."""

    def test_development_mode_allows_default_password(self, monkeypatch):
        """Development mode should allow the default database password."""
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("DEBUG", "true")

        from aadsso.core import config
        importlib.reload(config)

        assert config.settings.ENVIRONMENT == "development"
        assert config.settings.DEBUG is True

    def test_database_url_built_from_postgres_settings(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("SQLALCHEMY_DATABASE_URI", raising=False)
        monkeypatch.setenv("POSTGRES_USER", "sso")
        monkeypatch.setenv("POSTGRES_PASSWORD", "pw")
        monkeypatch.setenv("POSTGRES_SERVER", "dbhost")
        monkeypatch.setenv("POSTGRES_DB", "options")

        from aadsso.core.config import Settings

        assert Settings().DATABASE_URL == "postgresql+asyncpg://sso:pw@dbhost:5432/options"

    def test_allowed_origins_accepts_comma_separated_string(self, monkeypatch):
        from aadsso.core.config import Settings

        s = Settings(ALLOWED_ORIGINS="https://a.example, https://b.example")

        assert s.ALLOWED_ORIGINS == ["https://a.example", "https://b.example"]

    def test_production_mode_rejects_insecure_db_password(self, monkeypatch):
        """Production mode must reject insecure database passwords."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_PASSWORD", "postgres")

        from aadsso.core import config

        with pytest.raises(ValueError) as exc_info:
            importlib.reload(config)

        assert "insecure" in str(exc_info.value).lower()

    def test_production_mode_rejects_debug(self, monkeypatch):
        """Production mode must run with DEBUG off."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_PASSWORD", "a-strong-database-password")

        from aadsso.core.config import Settings

        with pytest.raises(ValueError) as exc_info:
            Settings()

        assert "DEBUG must be False" in str(exc_info.value)

    def test_production_mode_rejects_wildcard_origin(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://sso:Str0ng-Pass@db:5432/aadsso")
        monkeypatch.setenv("ALLOWED_ORIGINS", "*")

        from aadsso.core.config import Settings

        with pytest.raises(ValueError) as exc_info:
            Settings()

        assert "ALLOWED_ORIGINS" in str(exc_info.value)

    def test_production_mode_accepts_secure_settings(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://sso:Str0ng-Pass@db:5432/aadsso")

        from aadsso.core.config import Settings

        assert Settings().ENVIRONMENT == "production"


class TestAADSSOSettings:
    """Test the compiled-in SSO defaults."""

    def test_defaults(self, monkeypatch):
        for name in ("AADSSO_CLIENT_ID", "AADSSO_DEFAULT_ROLE", "AADSSO_OPENID_CONFIGURATION_ENDPOINT"):
            monkeypatch.delenv(name, raising=False)

        sso = AADSSOSettings(_env_file=None)

        assert sso.CLIENT_TYPE == "confidential"
        assert sso.CLIENT_ID == ""
        assert sso.OPENID_CONFIGURATION_ENDPOINT == DEFAULT_OPENID_CONFIGURATION_ENDPOINT
        assert sso.DEFAULT_ROLE is None
        assert sso.SETTINGS_OPTION_NAME == "aad-settings"
        assert sso.MIGRATION_FLAG_OPTION == "aad-group-map-set"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("AADSSO_CLIENT_ID", "env-client")
        monkeypatch.setenv("AADSSO_TENANT_DOMAIN", "contoso.onmicrosoft.com")
        monkeypatch.setenv("AADSSO_GROUP_ROLE_MAPPING_ENABLED", "true")
        monkeypatch.setenv("AADSSO_DEFAULT_ROLE", "subscriber")

        record = AADSSOSettings(_env_file=None).to_record()

        assert record.client_id == "env-client"
        assert record.tenant_domain == "contoso.onmicrosoft.com"
        assert record.group_role_mapping_enabled is True
        assert record.default_role == "subscriber"
        assert record.authorization_endpoint == ""

    def test_blank_default_role_is_none(self, monkeypatch):
        monkeypatch.setenv("AADSSO_DEFAULT_ROLE", "  ")

        assert AADSSOSettings(_env_file=None).DEFAULT_ROLE is None

    def test_discovery_timeout_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("AADSSO_DISCOVERY_TIMEOUT", "0")

        with pytest.raises(ValueError):
            AADSSOSettings(_env_file=None)

    def test_client_type_is_restricted(self, monkeypatch):
        monkeypatch.setenv("AADSSO_CLIENT_TYPE", "daemon")

        with pytest.raises(ValueError):
            AADSSOSettings(_env_file=None)

    def test_settings_are_cached(self):
        get_aad_sso_settings.cache_clear()

        assert get_aad_sso_settings() is get_aad_sso_settings()

        get_aad_sso_settings.cache_clear()
