"""
Tests for aadsso/core/sso/records.py - the resolved settings record.
"""
import pytest
from pydantic import ValidationError

from aadsso.core.sso.records import (
    DOCUMENT_OVERRIDABLE_FIELDS,
    STANDARD_ROLES,
    DirectoryGroup,
    SettingsRecord,
    StandardRole,
)


class TestSettingsRecord:
    """Test record defaults and helpers."""

    def test_defaults(self):
        record = SettingsRecord()

        assert record.client_type == "confidential"
        assert record.openid_configuration_endpoint.endswith("/.well-known/openid-configuration")
        assert record.group_map == {role: "" for role in STANDARD_ROLES}
        assert record.group_to_role_map == {}
        assert record.default_role is None
        assert record.is_configured() is False

    def test_record_is_immutable(self):
        record = SettingsRecord()

        with pytest.raises(ValidationError):
            record.client_id = "changed"

    def test_role_for_groups_uses_first_matching_entry(self):
        record = SettingsRecord(group_to_role_map={"G-A": "administrator", "G-E": "editor"})

        assert record.role_for_groups(["G-E", "G-A"]) == "administrator"
        assert record.role_for_groups(["G-E"]) == "editor"

    def test_role_for_groups_falls_back_to_default_role(self):
        assert SettingsRecord(default_role="subscriber").role_for_groups(["G-X"]) == "subscriber"
        assert SettingsRecord().role_for_groups([]) is None

    def test_is_configured_needs_client_and_endpoints(self):
        record = SettingsRecord(
            client_id="abc",
            authorization_endpoint="https://idp/authorize",
            token_endpoint="https://idp/token",
        )

        assert record.is_configured() is True
        assert record.model_copy(update={"token_endpoint": ""}).is_configured() is False

    def test_role_map_is_not_document_overridable(self):
        assert "group_to_role_map" not in DOCUMENT_OVERRIDABLE_FIELDS
        assert "token_endpoint" in DOCUMENT_OVERRIDABLE_FIELDS

    def test_standard_roles_in_priority_order(self):
        assert STANDARD_ROLES[0] == StandardRole.ADMINISTRATOR.value
        assert STANDARD_ROLES[-1] == StandardRole.SUBSCRIBER.value


class TestDirectoryGroup:
    def test_accepts_graph_field_names(self):
        group = DirectoryGroup.model_validate({"objectId": "abc", "displayName": "Admins"})

        assert group.object_id == "abc"
        assert group.display_name == "Admins"
