"""
Custom role mapping grammar.

Administrators can map additional roles with one ``<role> <group>`` rule per
line. Parsing is deliberately permissive: a malformed line is dropped so a
partly wrong text box never breaks the whole settings load.
"""

import logging
from typing import Iterator, Mapping, Optional

from aadsso.core.sso.records import RoleMappingRule

logger = logging.getLogger("aadsso.sso.role_mapping")


def iter_role_rules(text: Optional[str]) -> Iterator[RoleMappingRule]:
    """Yield a rule for every line that splits into a role and a group."""
    if not text or not isinstance(text, str):
        return

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split(None, 1)
        if len(tokens) < 2:
            logger.debug(f"Ignoring custom role line {line_no}: expected '<role> <group>', got {line!r}")
            continue

        role, group = tokens[0], tokens[1].strip()
        yield RoleMappingRule(role=role, group=group)


def parse_custom_roles(text: Optional[str]) -> dict[str, str]:
    """
    Parse custom role rules into a role -> group mapping.

    Later rules for the same role replace earlier ones.
    """
    role_map: dict[str, str] = {}
    for rule in iter_role_rules(text):
        role_map[rule.role] = rule.group
    return role_map


def serialize_custom_roles(role_map: Mapping[str, str]) -> str:
    """Render a role -> group mapping back into the rule text format."""
    return "".join(f"{role} {group}\n" for role, group in role_map.items() if group)


def invert_role_map(role_map: Mapping[str, str]) -> dict[str, str]:
    """
    Build the group -> role lookup from a role -> group mapping.

    Roles are taken in the order given, which must already be priority order.
    Unassigned roles (empty group) are skipped. When two roles point at the
    same group the earlier one keeps it.
    """
    group_to_role: dict[str, str] = {}
    for role, group in role_map.items():
        if not group:
            continue
        if group in group_to_role:
            logger.warning(
                f"Group {group} is mapped to both '{group_to_role[group]}' and '{role}'; "
                f"keeping '{group_to_role[group]}'"
            )
            continue
        group_to_role[group] = role
    return group_to_role
