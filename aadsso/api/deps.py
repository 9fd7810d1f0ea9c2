import logging

from fastapi import HTTPException, Request, status

from aadsso.core.sso.resolver import SettingsResolver

logger = logging.getLogger("aadsso.deps")


def get_settings_resolver(request: Request) -> SettingsResolver:
    """Return the resolver created at application startup."""
    resolver = getattr(request.app.state, "settings_resolver", None)
    if resolver is None:
        logger.error("Settings resolver requested before application startup")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SSO settings are not available yet"
        )
    return resolver
