"""Unit tests for PermissionCache service."""

import time

from warden.domain.services import PermissionCache
from warden.domain.services.permission_cache import FIELDS, ROLES, RULES


class TestPermissionCache:
    """Test suite for PermissionCache."""

    def test_cache_initialization(self):
        """Test cache initializes with correct TTL."""
        cache = PermissionCache(ttl_seconds=300)
        assert cache.ttl_seconds == 300
        assert cache.size() == 0

    def test_cache_set_and_get(self):
        """Test storing and retrieving from cache."""
        cache = PermissionCache()
        cache.set(FIELDS, 3, "goods", ("entry",))

        assert cache.get(FIELDS, 3, "goods") == ("entry",)
        assert cache.get(FIELDS, "3", "goods") == ("entry",)

    def test_cache_miss(self):
        """Test cache returns None for non-existent keys."""
        cache = PermissionCache()
        assert cache.get(RULES, 3, "orders") is None

    def test_zero_ttl_never_expires(self):
        """Test entries without TTL live until invalidated."""
        cache = PermissionCache(ttl_seconds=0)
        cache.set(ROLES, "u1", "", ("role",))
        assert cache._cache[(ROLES, "u1", "")].expires_at is None

    def test_cache_expiration(self):
        """Test cache entries expire after TTL."""
        cache = PermissionCache(ttl_seconds=1)
        cache.set(ROLES, "u1", "", ("role",))

        assert cache.get(ROLES, "u1") is not None

        time.sleep(1.1)

        assert cache.get(ROLES, "u1") is None

    def test_invalidate_user(self):
        """Test invalidating every role lookup of a user."""
        cache = PermissionCache()
        cache.set(ROLES, "u1", "", ("a",))
        cache.set(ROLES, "u1|ADMIN,VIEWER", "", ("b",))
        cache.set(ROLES, "u10", "", ("c",))
        cache.set(FIELDS, 1, "goods", ())

        cache.invalidate_user("u1")

        assert cache.get(ROLES, "u1") is None
        assert cache.get(ROLES, "u1|ADMIN,VIEWER") is None
        assert cache.get(ROLES, "u10") == ("c",)
        assert cache.get(FIELDS, 1, "goods") == ()

    def test_invalidate_role(self):
        """Test invalidating a role drops its entries and all role lookups."""
        cache = PermissionCache()
        cache.set(ROLES, "u1", "", ("a",))
        cache.set(FIELDS, 1, "goods", ("f",))
        cache.set(RULES, 1, "orders", ("r",))
        cache.set(FIELDS, 2, "goods", ("g",))

        cache.invalidate_role(1)

        assert cache.get(ROLES, "u1") is None
        assert cache.get(FIELDS, 1, "goods") is None
        assert cache.get(RULES, 1, "orders") is None
        assert cache.get(FIELDS, 2, "goods") == ("g",)

    def test_invalidate_resource(self):
        """Test invalidating all field and rule entries of a resource."""
        cache = PermissionCache()
        cache.set(FIELDS, 1, "goods", ("f",))
        cache.set(RULES, 2, "goods", ("r",))
        cache.set(FIELDS, 1, "orders", ("o",))

        cache.invalidate_resource("goods")

        assert cache.get(FIELDS, 1, "goods") is None
        assert cache.get(RULES, 2, "goods") is None
        assert cache.get(FIELDS, 1, "orders") == ("o",)

    def test_invalidate_all(self):
        """Test clearing entire cache."""
        cache = PermissionCache()
        cache.set(ROLES, "u1", "", ())
        cache.set(FIELDS, 1, "goods", ())

        cache.invalidate_all()

        assert cache.size() == 0

    def test_cleanup_expired(self):
        """Test removing expired entries."""
        cache = PermissionCache(ttl_seconds=1)
        cache.set(ROLES, "u1", "", ())
        cache.set(ROLES, "u2", "", ())

        time.sleep(1.1)

        assert cache.cleanup_expired() == 2
        assert cache.size() == 0
