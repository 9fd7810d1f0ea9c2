"""
Read-only SSO status API.

Lets the login page decide whether to offer "Sign in with Azure AD" without
exposing credentials. Editing settings is the admin UI's job.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from aadsso.api.deps import get_settings_resolver
from aadsso.core.sso.resolver import SettingsResolver

logger = logging.getLogger("aadsso.api.sso")

router = APIRouter()


class SSOStatusResponse(BaseModel):
    """Non-secret summary of the resolved SSO settings."""
    state: str
    configured: bool
    client_type: str
    org_display_name: Optional[str] = None
    org_domain_hint: Optional[str] = None
    tenant_domain: Optional[str] = None
    authorization_endpoint: Optional[str] = None
    end_session_endpoint: Optional[str] = None
    group_role_mapping_enabled: bool
    mapped_group_count: int
    default_role: Optional[str] = None
    override_user_registration: bool


@router.get("/status", response_model=SSOStatusResponse)
async def sso_status(resolver: SettingsResolver = Depends(get_settings_resolver)):
    """
    Check SSO configuration status.
    Used by the frontend to determine if SSO login should be shown.
    """
    record = await resolver.resolve()

    return SSOStatusResponse(
        state=resolver.state.value,
        configured=record.is_configured(),
        client_type=record.client_type,
        org_display_name=record.org_display_name or None,
        org_domain_hint=record.org_domain_hint or None,
        tenant_domain=record.tenant_domain or None,
        authorization_endpoint=record.authorization_endpoint or None,
        end_session_endpoint=record.end_session_endpoint or None,
        group_role_mapping_enabled=record.group_role_mapping_enabled,
        mapped_group_count=len(record.group_to_role_map),
        default_role=record.default_role,
        override_user_registration=record.override_user_registration,
    )
