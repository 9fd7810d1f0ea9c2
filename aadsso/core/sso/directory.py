"""
Directory group lookup, memoized per resolver.

The directory query itself is provided by the host application through the
``DirectoryClient`` protocol; this module only caches its answer.
"""

import logging
from typing import Optional, Protocol, Sequence

from aadsso.core.sso.records import DirectoryGroup

logger = logging.getLogger("aadsso.sso.directory")

# Above this many groups the admin form falls back to a free-text field
MAX_DROPDOWN_GROUPS = 199


class DirectoryClient(Protocol):
    async def get_groups(self, tenant_id: str) -> Sequence[DirectoryGroup]:
        ...


class DirectoryGroupCache:
    """Queries the directory for the tenant's groups at most once."""

    def __init__(self, client: Optional[DirectoryClient]):
        self._client = client
        self._groups: Optional[list[DirectoryGroup]] = None

    async def get_groups(self, tenant_domain: str) -> Optional[list[DirectoryGroup]]:
        """
        Return the tenant's groups, querying the directory on first use.

        Returns None when no tenant is configured, no client is available,
        or the query failed (a failed query is not cached).
        """
        if not tenant_domain:
            return None

        if self._groups is not None:
            return self._groups

        if self._client is None:
            logger.debug("No directory client configured; group list unavailable")
            return None

        try:
            raw_groups = await self._client.get_groups(tenant_domain)
            groups = [
                g if isinstance(g, DirectoryGroup) else DirectoryGroup.model_validate(g)
                for g in raw_groups
            ]
        except Exception as e:
            logger.warning(f"Directory group query failed for {tenant_domain}: {e}")
            return None

        self._groups = groups
        logger.info(f"Loaded {len(self._groups)} directory groups for {tenant_domain}")
        return self._groups

    def reset(self) -> None:
        self._groups = None


def group_field_options(
    groups: Optional[Sequence[DirectoryGroup]],
) -> Optional[list[DirectoryGroup]]:
    """
    Groups to offer in a role's dropdown, or None to render a text input.

    Large directories and empty/unknown group lists get a text input where the
    admin pastes the group object ID.
    """
    if not groups or len(groups) >= MAX_DROPDOWN_GROUPS:
        return None
    return list(groups)
