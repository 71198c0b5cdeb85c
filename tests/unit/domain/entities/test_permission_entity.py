"""Unit tests for PermissionString and Role entities."""

import pytest

from warden.domain.entities import PermissionString, Role
from warden.domain.entities.permission import parse_permissions
from warden.domain.exceptions import InvalidPermissionFormat


class TestPermissionString:
    """Test suite for PermissionString parsing."""

    def test_parse_module_action(self):
        """Test a plain module:action string."""
        permission = PermissionString.parse("goods:read")
        assert permission.module == "goods"
        assert permission.action == "read"
        assert str(permission) == "goods:read"

    def test_parse_super_wildcard(self):
        """Test the literal '*'."""
        permission = PermissionString.parse("*")
        assert permission.is_super_wildcard is True
        assert str(permission) == "*"

    def test_parse_module_wildcard(self):
        """Test 'module:*'."""
        permission = PermissionString.parse("goods:*")
        assert permission.is_module_wildcard is True
        assert permission.is_super_wildcard is False

    def test_parse_qualified_permission(self):
        """Test a three-segment permission keeps the qualifier in the action."""
        permission = PermissionString.parse("goods:read:cost")
        assert permission.module == "goods"
        assert permission.action == "read:cost"
        assert permission.module_wildcard == PermissionString("goods", "*")

    def test_parse_mapping(self):
        """Test structured permission objects are normalized."""
        assert PermissionString.parse({"module": "goods", "action": "read"}) == PermissionString(
            "goods", "read"
        )
        assert PermissionString.parse({"resource": "orders", "action": "*"}) == PermissionString(
            "orders", "*"
        )

    @pytest.mark.parametrize(
        "value",
        ["report", "", ":read", "goods:", "goods::cost", "goods:read:", 42, None, {"module": "goods"}],
    )
    def test_malformed_permissions_rejected(self, value):
        """Test malformed permission shapes raise InvalidPermissionFormat."""
        with pytest.raises(InvalidPermissionFormat):
            PermissionString.parse(value)

    def test_invalid_permission_is_value_error(self):
        """Test the error can be caught as a ValueError."""
        with pytest.raises(ValueError):
            PermissionString.parse("report")

    def test_parse_permissions_deduplicates_in_order(self):
        """Test list normalization keeps first occurrences in order."""
        parsed = parse_permissions(["goods:read", {"module": "goods", "action": "read"}, "*"])
        assert [str(p) for p in parsed] == ["goods:read", "*"]

    def test_parse_permissions_single_value(self):
        """Test a single string is treated as a one-element list."""
        assert parse_permissions("goods:read") == (PermissionString("goods", "read"),)
        assert parse_permissions(None) == ()


class TestRole:
    """Test suite for the Role entity."""

    def test_permissions_normalized_on_construction(self):
        """Test raw strings become PermissionString values."""
        role = Role(id=1, name="CASHIER", permissions=["goods:read", "orders:*"])
        assert role.permissions == (PermissionString("goods", "read"), PermissionString("orders", "*"))
        assert role.permission_strings == ["goods:read", "orders:*"]

    def test_malformed_permission_rejected_at_definition(self):
        """Test a role cannot be defined with a malformed permission."""
        with pytest.raises(InvalidPermissionFormat):
            Role(id=1, name="BROKEN", permissions=["report"])

    def test_name_required(self):
        """Test an empty role name is rejected."""
        with pytest.raises(ValueError):
            Role(id=1, name="  ")

    def test_negative_level_rejected(self):
        """Test levels start at 0."""
        with pytest.raises(ValueError):
            Role(id=1, name="X", level=-1)

    def test_with_permissions_returns_copy(self):
        """Test replacing the permission list keeps the original intact."""
        role = Role(id=1, name="VIEWER", permissions=["goods:read"])
        updated = role.with_permissions(["goods:*"])
        assert updated.permission_strings == ["goods:*"]
        assert role.permission_strings == ["goods:read"]
        assert updated.name == role.name
