"""
Settings merger: compiled-in defaults + persisted options + custom role rules.

Only an allow-listed set of persisted keys is copied onto the record; any
other key in the stored mapping is ignored. Merging never fails: a missing or
badly typed value keeps the default.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from aadsso.core.sso.records import STANDARD_ROLES, SettingsRecord
from aadsso.core.sso.role_mapping import invert_role_map, parse_custom_roles

logger = logging.getLogger("aadsso.sso.merger")

_TRUE_STRINGS = {"1", "true", "on", "yes"}
_FALSE_STRINGS = {"", "0", "false", "off", "no"}


def _coerce_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip()
    return None


def _coerce_bool(value: Any) -> Optional[bool]:
    """Accept the forms a checkbox value takes once stored."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    return None


def _coerce_role(value: Any) -> Optional[str]:
    # An empty selection means "no role": users outside mapped groups are denied
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return None


# persisted key -> (record field, coercion)
_PERSISTED_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "org_display_name": ("org_display_name", _coerce_str),
    "org_domain_hint": ("org_domain_hint", _coerce_str),
    "tenant_domain": ("tenant_domain", _coerce_str),
    "client_id": ("client_id", _coerce_str),
    "client_secret": ("client_secret", _coerce_str),
    "override_user_registration": ("override_user_registration", _coerce_bool),
}

# Either key switches group -> role mapping on; group_map_enabled is what the
# admin form writes, enable_group_to_role is the older name.
_MAPPING_ENABLED_KEYS = ("group_map_enabled", "enable_group_to_role")


def build_role_map(
    persisted_group_map: Any,
    custom_rules: Mapping[str, str],
) -> dict[str, str]:
    """
    Combine the per-role form fields with the custom rules.

    Order: standard roles by priority, then any other persisted roles, then
    roles only present in the custom rules (in rule order). Custom rules win
    when they name a role that also has a form field.
    """
    stored: dict[str, str] = {}
    if isinstance(persisted_group_map, Mapping):
        for role, group in persisted_group_map.items():
            if isinstance(role, str) and isinstance(group, str):
                stored[role] = group.strip()
    elif persisted_group_map is not None:
        logger.debug(f"Ignoring group_map of type {type(persisted_group_map).__name__}")

    role_map = {role: stored.get(role, "") for role in STANDARD_ROLES}
    for role, group in stored.items():
        role_map.setdefault(role, group)
    for role, group in custom_rules.items():
        role_map[role] = group
    return role_map


def merge_settings(
    defaults: SettingsRecord,
    persisted: Optional[Mapping[str, Any]],
    custom_rule_text: Optional[str] = None,
) -> SettingsRecord:
    """
    Overlay persisted options and custom role rules on the defaults.

    Args:
        defaults: Compiled-in defaults
        persisted: Mapping stored under the settings option (may be None)
        custom_rule_text: Custom role rules; defaults to persisted["custom_roles"]

    Returns:
        A new SettingsRecord
    """
    if not isinstance(persisted, Mapping):
        if persisted is not None:
            logger.warning(f"Stored settings are a {type(persisted).__name__}, not a mapping; using defaults")
        persisted = {}

    updates: dict[str, Any] = {}
    for key, (field, coerce) in _PERSISTED_FIELDS.items():
        if key not in persisted:
            continue
        value = coerce(persisted[key])
        if value is None:
            logger.debug(f"Ignoring stored value for {key}: unexpected {type(persisted[key]).__name__}")
            continue
        updates[field] = value

    if "default_wp_role" in persisted:
        updates["default_role"] = _coerce_role(persisted["default_wp_role"])

    enabled_flags = [
        _coerce_bool(persisted[key]) for key in _MAPPING_ENABLED_KEYS if key in persisted
    ]
    enabled_flags = [flag for flag in enabled_flags if flag is not None]
    if enabled_flags:
        updates["group_role_mapping_enabled"] = any(enabled_flags)

    if custom_rule_text is None:
        stored_rules = persisted.get("custom_roles")
        custom_rule_text = stored_rules if isinstance(stored_rules, str) else ""

    role_map = build_role_map(persisted.get("group_map"), parse_custom_roles(custom_rule_text))
    updates["group_map"] = role_map
    updates["custom_roles"] = custom_rule_text
    updates["group_to_role_map"] = invert_role_map(role_map)

    return defaults.model_copy(update=updates)
