"""
Typed records for the resolved AAD SSO configuration.

``SettingsRecord`` is the canonical, immutable configuration consumed by the
rest of the system. ``group_to_role_map`` is ordered: when a user belongs to
several mapped groups, the first matching entry decides the role.
"""

from enum import Enum
from typing import Iterable, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class StandardRole(str, Enum):
    """Built-in local roles, highest privilege first."""

    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    AUTHOR = "author"
    CONTRIBUTOR = "contributor"
    SUBSCRIBER = "subscriber"


# Priority order used when building and inverting the role map
STANDARD_ROLES: tuple[str, ...] = tuple(role.value for role in StandardRole)

DEFAULT_OPENID_CONFIGURATION_ENDPOINT = (
    "https://login.windows.net/common/.well-known/openid-configuration"
)
DEFAULT_RESOURCE_URI = "https://graph.windows.net"
DEFAULT_GRAPH_VERSION = "2013-11-08"


def empty_group_map() -> dict[str, str]:
    """A role -> group map with a blank slot for every standard role."""
    return {role: "" for role in STANDARD_ROLES}


class RoleMappingRule(NamedTuple):
    """One ``<role> <group>`` line of the custom role mapping text."""

    role: str
    group: str


class DirectoryGroup(BaseModel):
    """A directory group as returned by the directory query collaborator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    object_id: str = Field(alias="objectId")
    display_name: str = Field(default="", alias="displayName")


class SettingsRecord(BaseModel):
    """Fully resolved SSO settings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Client identity
    client_type: Literal["confidential", "public"] = "confidential"
    client_id: str = ""
    client_secret: str = ""

    # Directory hints
    org_display_name: str = ""
    org_domain_hint: str = ""
    tenant_domain: str = ""

    # Protocol endpoints (usually filled from the discovery document)
    openid_configuration_endpoint: str = DEFAULT_OPENID_CONFIGURATION_ENDPOINT
    authorization_endpoint: str = ""
    token_endpoint: str = ""
    jwks_uri: str = ""
    end_session_endpoint: str = ""

    # Directory API parameters
    resource_uri: str = DEFAULT_RESOURCE_URI
    graph_version: str = DEFAULT_GRAPH_VERSION

    # Policy
    group_role_mapping_enabled: bool = False
    override_user_registration: bool = False
    default_role: Optional[str] = None

    # Role mapping: raw role -> group slots, the custom rule text they came
    # from, and the runtime group -> role lookup derived from both
    group_map: dict[str, str] = Field(default_factory=empty_group_map)
    custom_roles: str = ""
    group_to_role_map: dict[str, str] = Field(default_factory=dict)

    def role_for_groups(self, group_ids: Iterable[str]) -> Optional[str]:
        """Return the role of the first mapped group the user belongs to, else the default role."""
        member_of = set(group_ids)
        for group_id, role in self.group_to_role_map.items():
            if group_id in member_of:
                return role
        return self.default_role

    def has_endpoints(self) -> bool:
        return bool(self.authorization_endpoint and self.token_endpoint)

    def is_configured(self) -> bool:
        """Check if enough is known to start a sign-in."""
        return bool(self.client_id) and self.has_endpoints()


# Fields a discovery document (or local settings JSON) may overwrite. The role
# map is derived from the persisted store only.
DOCUMENT_OVERRIDABLE_FIELDS = frozenset(SettingsRecord.model_fields) - {
    "group_map",
    "custom_roles",
    "group_to_role_map",
}
