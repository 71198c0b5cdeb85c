"""Unit tests for FieldPermissionEntry and FieldPermissions."""

import pytest

from warden.domain.entities import FieldPermissionEntry, FieldPermissions


class TestFieldPermissionEntry:
    """Test suite for FieldPermissionEntry."""

    def test_write_without_read_is_corrected(self):
        """Test canWrite without canRead is forced to no write on construction."""
        entry = FieldPermissionEntry(role_id=1, resource="goods", field="cost", can_read=False, can_write=True)
        assert entry.can_read is False
        assert entry.can_write is False

    def test_write_without_read_is_corrected_on_update(self):
        """Test the invariant holds through the update path too."""
        entry = FieldPermissionEntry(role_id=1, resource="goods", field="cost", can_read=True, can_write=True)
        updated = entry.update(can_read=False)
        assert updated.can_read is False
        assert updated.can_write is False
        assert entry.can_write is True

    @pytest.mark.parametrize("can_read", [True, False])
    @pytest.mark.parametrize("can_write", [True, False])
    def test_write_implies_read(self, can_read, can_write):
        """Test can_write => can_read for every flag combination."""
        entry = FieldPermissionEntry(
            role_id=1, resource="goods", field="cost", can_read=can_read, can_write=can_write
        )
        assert not entry.can_write or entry.can_read

    def test_wildcard_entry(self):
        """Test the '*' field is recognized."""
        assert FieldPermissionEntry(role_id=1, resource="goods", field="*").is_wildcard is True

    def test_resource_and_field_required(self):
        """Test empty names are rejected."""
        with pytest.raises(ValueError):
            FieldPermissionEntry(role_id=1, resource="", field="cost")
        with pytest.raises(ValueError):
            FieldPermissionEntry(role_id=1, resource="goods", field="")


class TestFieldPermissions:
    """Test suite for the effective FieldPermissions value."""

    def test_allow_all(self):
        """Test allow-all grants every field."""
        permissions = FieldPermissions.allow_all()
        assert permissions.can_read_all is True
        assert permissions.can_write_all is True
        assert permissions.can_read("anything") is True

    def test_deny_all(self):
        """Test deny-all grants nothing."""
        permissions = FieldPermissions.deny_all()
        assert permissions.can_read("name") is False
        assert permissions.can_write("name") is False

    def test_wildcard_with_exclusions(self):
        """Test a wildcard set honours its exclusions."""
        permissions = FieldPermissions(
            frozenset({"*"}), frozenset(), read_excluded=frozenset({"cost"})
        )
        assert permissions.can_read("name") is True
        assert permissions.can_read("cost") is False
        assert permissions.can_read_all is False

    def test_union_of_explicit_sets(self):
        """Test two explicit sets union field by field."""
        a = FieldPermissions(frozenset({"name"}), frozenset({"name"}))
        b = FieldPermissions(frozenset({"code"}), frozenset())
        combined = a.union(b)
        assert combined.readable == frozenset({"name", "code"})
        assert combined.writable == frozenset({"name"})

    def test_union_with_allow_all_is_allow_all(self):
        """Test an unrestricted side makes the union unrestricted."""
        restricted = FieldPermissions(frozenset({"name"}), frozenset())
        combined = restricted.union(FieldPermissions.allow_all())
        assert combined.can_read_all is True
        assert combined.can_write_all is True

    def test_union_wildcard_exclusion_reopened_by_other_role(self):
        """Test a field hidden by one wildcard role is readable if another grants it."""
        hides_cost = FieldPermissions(
            frozenset({"*"}), frozenset(), read_excluded=frozenset({"cost"})
        )
        grants_cost = FieldPermissions(frozenset({"cost"}), frozenset())
        combined = hides_cost.union(grants_cost)
        assert combined.can_read("cost") is True
        assert combined.can_read_all is True

    def test_union_two_wildcards_keep_common_exclusions(self):
        """Test only fields hidden by both wildcard roles stay hidden."""
        a = FieldPermissions(frozenset({"*"}), frozenset(), read_excluded=frozenset({"cost", "margin"}))
        b = FieldPermissions(frozenset({"*"}), frozenset(), read_excluded=frozenset({"cost"}))
        combined = a.union(b)
        assert combined.read_excluded == frozenset({"cost"})
        assert combined.can_read("margin") is True
        assert combined.can_read("cost") is False

    def test_to_dict(self):
        """Test JSON-friendly rendering."""
        permissions = FieldPermissions(frozenset({"name", "code"}), frozenset({"name"}))
        assert permissions.to_dict() == {"readable": ["code", "name"], "writable": ["name"]}
