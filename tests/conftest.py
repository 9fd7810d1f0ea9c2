"""
Shared test fixtures and configuration for the AAD SSO settings tests.
"""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"

from aadsso.core.sso.records import SettingsRecord  # noqa: E402
from aadsso.services.settings.option_store import InMemoryOptionStore  # noqa: E402


@pytest.fixture
def default_record():
    """Compiled-in defaults as the resolver receives them."""
    return SettingsRecord()


@pytest.fixture
def persisted_settings():
    """A settings mapping as saved by the admin form."""
    return {
        "org_display_name": "Contoso",
        "org_domain_hint": "contoso.com",
        "tenant_domain": "contoso.onmicrosoft.com",
        "client_id": "00000000-aaaa-bbbb-cccc-000000000001",
        "client_secret": "s3cret",
        "group_map_enabled": "1",
        "group_map": {
            "administrator": "11111111-0000-0000-0000-000000000001",
            "editor": "22222222-0000-0000-0000-000000000002",
            "author": "",
            "contributor": "",
            "subscriber": "",
        },
        "custom_roles": "shop_manager 33333333-0000-0000-0000-000000000003\n",
        "default_wp_role": "subscriber",
        "override_user_registration": "1",
    }


@pytest.fixture
def discovery_document():
    """Trimmed OpenID Connect discovery document."""
    return {
        "issuer": "https://sts.windows.net/{tenantid}/",
        "authorization_endpoint": "https://login.windows.net/common/oauth2/authorize",
        "token_endpoint": "https://login.windows.net/common/oauth2/token",
        "jwks_uri": "https://login.windows.net/common/discovery/keys",
        "end_session_endpoint": "https://login.windows.net/common/oauth2/logout",
        "response_types_supported": ["code", "id_token", "code id_token"],
    }


@pytest.fixture
def option_store(persisted_settings):
    """In-memory option store holding the admin form settings (migration flag unset)."""
    return InMemoryOptionStore({"aad-settings": persisted_settings})


@pytest.fixture
def mock_fetcher(discovery_document):
    """Discovery fetcher returning the sample document."""
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=discovery_document)
    return fetcher


@pytest.fixture
def mock_db_session():
    """Create a mock async database session usable as an async context manager."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.add = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def mock_session_factory(mock_db_session):
    """Session factory handing out the mock session."""
    return MagicMock(return_value=mock_db_session)

