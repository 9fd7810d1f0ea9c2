"""
Azure AD SSO settings resolution.

Configuration comes from three layers, lowest precedence first:
- Compiled-in defaults (AADSSO_* environment variables)
- Options saved through the admin UI, including custom role rules
- The OpenID Connect discovery document (endpoints)

The resolver is created once per application and injected where needed.
"""

from aadsso.core.sso.config import AADSSOSettings, get_aad_sso_settings
from aadsso.core.sso.records import DirectoryGroup, SettingsRecord, StandardRole
from aadsso.core.sso.resolver import SettingsResolver, build_settings_resolver

__all__ = [
    "AADSSOSettings",
    "DirectoryGroup",
    "SettingsRecord",
    "SettingsResolver",
    "StandardRole",
    "build_settings_resolver",
    "get_aad_sso_settings",
]
