"""
Field Permission Policy Tests
"""

from pathlib import Path

import pytest
import yaml

from bizledger.api.errors import PermissionDenied
from bizledger.api.permissions import DEFAULT_FIELD_PERMISSIONS, FieldPolicy, enforce_write


@pytest.fixture
def policy() -> FieldPolicy:
    return FieldPolicy({
        "bills": {"admin": ["vendor", "amount", "status"], "user": ["description"]},
        "cards": {"admin": ["card_number"], "user": []},
    })


class TestFieldPolicy:
    """Tests for the policy lookups."""

    def test_editable_fields(self, policy):
        assert policy.editable_fields("admin", "bills") == ["vendor", "amount", "status"]
        assert policy.editable_fields("user", "cards") == []
        assert policy.editable_fields("auditor", "bills") == []
        assert policy.editable_fields("admin", "unknown") == []

    def test_is_resource_editable(self, policy):
        assert policy.is_resource_editable("admin", "cards") is True
        assert policy.is_resource_editable("user", "cards") is False

    def test_filter_to_editable(self, policy):
        patch = {"vendor": "Shell", "amount": 10, "created_by": "x"}

        assert policy.filter_to_editable("admin", "bills", patch) == {"vendor": "Shell", "amount": 10}
        assert policy.filter_to_editable("user", "cards", patch) == {}

    def test_filter_then_validate_disallowed_only(self, policy):
        patch = {"vendor": "Shell", "status": "paid"}

        assert policy.filter_to_editable("user", "bills", patch) == {}
        check = policy.validate("user", "bills", patch.keys())
        assert check.allowed is False
        assert check.denied_fields == ["vendor", "status"]

    def test_validate_allowed(self, policy):
        check = policy.validate("admin", "bills", ["amount"])

        assert check.to_dict() == {"allowed": True, "deniedFields": []}

    def test_describe(self, policy):
        assert policy.describe("user", "bills") == {
            "editable": ["description"],
            "editingEnabled": True,
            "userRole": "user",
        }


class TestEnforceWrite:
    """Tests for validate-then-filter on writes."""

    def test_read_only_resource(self, policy):
        with pytest.raises(PermissionDenied, match="user users cannot edit cards"):
            enforce_write(policy, "user", "cards", {"card_number": "1"})

    def test_denied_fields_listed(self, policy):
        with pytest.raises(PermissionDenied) as exc_info:
            enforce_write(policy, "user", "bills", {"description": "x", "amount": 5})

        assert exc_info.value.denied_fields == ["amount"]
        assert exc_info.value.details == {"deniedFields": ["amount"], "allowedFields": ["description"]}

    def test_allowed_patch_passes(self, policy):
        assert enforce_write(policy, "admin", "bills", {"amount": 5}) == {"amount": 5}


class TestPolicyLoading:
    """Tests for loading field_permissions.yaml."""

    def test_shipped_config_matches_defaults(self, config_dir):
        policy = FieldPolicy.load(config_dir)

        assert policy.table == DEFAULT_FIELD_PERMISSIONS

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        assert FieldPolicy.load(tmp_path).table == DEFAULT_FIELD_PERMISSIONS

    def test_custom_file(self, tmp_path: Path):
        config = {"resources": {"reminders": {"admin": ["title"], "user": None}}}
        with open(tmp_path / "field_permissions.yaml", "w") as f:
            yaml.dump(config, f)

        policy = FieldPolicy.load(tmp_path)

        assert policy.editable_fields("admin", "reminders") == ["title"]
        assert policy.is_resource_editable("user", "reminders") is False

    def test_only_petty_expenses_writable_by_users(self):
        writable = [r for r, roles in DEFAULT_FIELD_PERMISSIONS.items() if roles["user"]]

        assert writable == ["petty_expenses"]
