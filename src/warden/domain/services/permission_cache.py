"""Permission cache service with explicit invalidation.

Caches policy lookups (a user's roles, a role's field permission entries
and data permission rules per resource) so one request, or a process when a
TTL is configured, does not repeat the same store lookups.

Every administrative write path must call one of the ``invalidate_*``
methods before it returns; ``PolicyAdminService`` does this for all of its
writes. A cache that misses an invalidation serves stale policy, so never
share a cache with code that writes policy without going through it.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any

ROLES = "roles"
FIELDS = "fields"
RULES = "rules"


@dataclass
class CacheEntry:
    """Cache entry with optional expiry.

    Attributes:
        value: The cached value.
        expires_at: Unix timestamp when this entry expires, None for never.
    """

    value: Any
    expires_at: float | None


class PermissionCache:
    """Thread-safe cache for policy lookups.

    Cache keys are tuples: (kind, scope, resource), where scope is a user id
    for role lookups and a role id for field/rule lookups.
    """

    def __init__(self, ttl_seconds: int = 0):
        """Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for entries in seconds. 0 keeps entries
                until invalidated, which suits a request-scoped instance.
        """
        self.ttl_seconds = ttl_seconds
        self._cache: dict[tuple[str, str, str], CacheEntry] = {}
        self._lock = threading.RLock()

    def _make_key(self, kind: str, scope: Any, resource: str = "") -> tuple[str, str, str]:
        return (kind, str(scope), resource)

    def get(self, kind: str, scope: Any, resource: str = "") -> Any | None:
        """Get a cached value.

        Args:
            kind: One of ROLES, FIELDS, RULES.
            scope: User id (ROLES) or role id (FIELDS, RULES).
            resource: Resource name, empty for ROLES.

        Returns:
            Cached value if found and not expired, None otherwise.
        """
        key = self._make_key(kind, scope, resource)

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.expires_at is not None and time.time() > entry.expires_at:
                del self._cache[key]
                return None

            return entry.value

    def set(self, kind: str, scope: Any, resource: str, value: Any) -> None:
        """Store a value in the cache."""
        key = self._make_key(kind, scope, resource)
        expires_at = time.time() + self.ttl_seconds if self.ttl_seconds > 0 else None

        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

    def invalidate_user(self, user_id: str) -> None:
        """Invalidate the cached role lookup for a user (role assignment changed)."""
        prefix = f"{user_id}|"
        with self._lock:
            keys_to_delete = [
                key for key in self._cache
                if key[0] == ROLES and (key[1] == user_id or key[1].startswith(prefix))
            ]
            for key in keys_to_delete:
                del self._cache[key]

    def invalidate_role(self, role_id: int) -> None:
        """Invalidate everything derived from a role.

        Role lookups of every user are dropped too, since they embed the
        role's name, level and permission list.
        """
        scope = str(role_id)
        with self._lock:
            keys_to_delete = [
                key for key in self._cache
                if key[0] == ROLES or key[1] == scope
            ]
            for key in keys_to_delete:
                del self._cache[key]

    def invalidate_resource(self, resource: str) -> None:
        """Invalidate all field and rule entries for a resource."""
        with self._lock:
            keys_to_delete = [key for key in self._cache if key[2] == resource]
            for key in keys_to_delete:
                del self._cache[key]

    def invalidate_all(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries from cache.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            current_time = time.time()
            keys_to_delete = [
                key for key, entry in self._cache.items()
                if entry.expires_at is not None and current_time > entry.expires_at
            ]

            for key in keys_to_delete:
                del self._cache[key]

            return len(keys_to_delete)

    def size(self) -> int:
        """Get current cache size."""
        with self._lock:
            return len(self._cache)
