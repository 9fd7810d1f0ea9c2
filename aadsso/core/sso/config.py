"""
Compiled-in SSO defaults.

Every value here is the lowest-precedence layer: options saved through the
admin UI override it, and the discovery document overrides the endpoints.

Environment variables (all optional):
    AADSSO_CLIENT_TYPE: OAuth 2.0 client type (confidential or public)
    AADSSO_CLIENT_ID / AADSSO_CLIENT_SECRET: Application credentials
    AADSSO_ORG_DISPLAY_NAME: Organization name shown on the login page
    AADSSO_ORG_DOMAIN_HINT: Domain hint sent to Azure AD
    AADSSO_TENANT_DOMAIN: Tenant domain used for directory queries
    AADSSO_OPENID_CONFIGURATION_ENDPOINT: Discovery document URL or local JSON path
    AADSSO_RESOURCE_URI / AADSSO_GRAPH_VERSION: Directory API parameters
    AADSSO_DEFAULT_ROLE: Role for users outside every mapped group
    AADSSO_DISCOVERY_TIMEOUT: HTTP timeout for the discovery fetch (seconds)
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aadsso.core.sso.records import (
    DEFAULT_GRAPH_VERSION,
    DEFAULT_OPENID_CONFIGURATION_ENDPOINT,
    DEFAULT_RESOURCE_URI,
    SettingsRecord,
)
from aadsso.core.sso.discovery import DEFAULT_DISCOVERY_TIMEOUT
from aadsso.core.sso.migrations import GROUP_MAP_FLAG_OPTION
from aadsso.services.settings.option_store import SETTINGS_OPTION


class AADSSOSettings(BaseSettings):
    """
    SSO defaults and resolver knobs loaded from environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="AADSSO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CLIENT_TYPE: Literal["confidential", "public"] = Field(
        default="confidential",
        description="OAuth 2.0 client type"
    )
    CLIENT_ID: str = Field(default="", description="Application (client) ID")
    CLIENT_SECRET: str = Field(default="", description="Client secret")

    ORG_DISPLAY_NAME: str = Field(default="", description="Organization display name")
    ORG_DOMAIN_HINT: str = Field(default="", description="Domain hint for the sign-in page")
    TENANT_DOMAIN: str = Field(default="", description="Tenant domain for directory queries")

    OPENID_CONFIGURATION_ENDPOINT: str = Field(
        default=DEFAULT_OPENID_CONFIGURATION_ENDPOINT,
        description="OpenID Connect discovery document (URL or local file)"
    )
    RESOURCE_URI: str = Field(default=DEFAULT_RESOURCE_URI, description="Directory API resource")
    GRAPH_VERSION: str = Field(default=DEFAULT_GRAPH_VERSION, description="Directory API version")

    GROUP_ROLE_MAPPING_ENABLED: bool = Field(
        default=False,
        description="Use directory group membership to assign roles"
    )
    OVERRIDE_USER_REGISTRATION: bool = Field(
        default=False,
        description="Create users on first sign-in regardless of site registration settings"
    )
    DEFAULT_ROLE: Optional[str] = Field(
        default=None,
        description="Role for users outside every mapped group (unset denies access)"
    )

    # Resolver settings
    DISCOVERY_TIMEOUT: float = Field(default=DEFAULT_DISCOVERY_TIMEOUT, gt=0)
    SETTINGS_OPTION_NAME: str = SETTINGS_OPTION
    MIGRATION_FLAG_OPTION: str = GROUP_MAP_FLAG_OPTION

    @field_validator("DEFAULT_ROLE", mode="before")
    @classmethod
    def _blank_role_is_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_record(self) -> SettingsRecord:
        """Build the defaults layer for the settings merger."""
        return SettingsRecord(
            client_type=self.CLIENT_TYPE,
            client_id=self.CLIENT_ID,
            client_secret=self.CLIENT_SECRET,
            org_display_name=self.ORG_DISPLAY_NAME,
            org_domain_hint=self.ORG_DOMAIN_HINT,
            tenant_domain=self.TENANT_DOMAIN,
            openid_configuration_endpoint=self.OPENID_CONFIGURATION_ENDPOINT,
            resource_uri=self.RESOURCE_URI,
            graph_version=self.GRAPH_VERSION,
            group_role_mapping_enabled=self.GROUP_ROLE_MAPPING_ENABLED,
            override_user_registration=self.OVERRIDE_USER_REGISTRATION,
            default_role=self.DEFAULT_ROLE,
        )


@lru_cache
def get_aad_sso_settings() -> AADSSOSettings:
    """Get cached SSO settings instance."""
    return AADSSOSettings()
