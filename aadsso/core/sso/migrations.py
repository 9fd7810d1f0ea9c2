"""
One-shot settings migrations run by the resolver.

Deployments that predate the "Enable role mapping" checkbox always mapped
groups to roles. The first resolution on such a deployment turns mapping on
and records that it did so; after that the stored checkbox value is honored.
"""

import logging

from aadsso.core.sso.records import SettingsRecord
from aadsso.services.settings.option_store import OptionStore

logger = logging.getLogger("aadsso.sso.migrations")

GROUP_MAP_FLAG_OPTION = "aad-group-map-set"


async def apply_group_map_default_on(
    store: OptionStore,
    record: SettingsRecord,
    flag_name: str = GROUP_MAP_FLAG_OPTION,
) -> SettingsRecord:
    """
    Enable group -> role mapping once per deployment.

    Returns the record unchanged when the flag is already set.
    """
    if await store.get_option(flag_name, False):
        return record

    await store.update_option(flag_name, 1)
    logger.info(f"Group to role mapping enabled by one-time migration (flag {flag_name!r} recorded)")
    return record.model_copy(update={"group_role_mapping_enabled": True})
