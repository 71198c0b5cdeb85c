"""Policy store interface and the stores built on it.

The authorization engine never touches storage directly. It reads roles,
field permission entries and data permission rules through a PolicyStore,
immediately before each decision.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol

from warden.domain.entities.data_permission_rule import DataPermissionRule
from warden.domain.entities.field_permission import FieldPermissionEntry
from warden.domain.entities.principal import Principal
from warden.domain.entities.role import Role
from warden.domain.services.permission_cache import FIELDS, ROLES, RULES, PermissionCache


class PolicyStore(Protocol):
    """Read side of the policy data consumed by the engine."""

    async def get_roles_for_principal(self, principal: Principal) -> list[Role]:
        """Roles held by the principal. Empty if none can be resolved."""
        ...

    async def get_field_entries(
        self, role_ids: Sequence[int], resource: str
    ) -> list[FieldPermissionEntry]:
        """Field permission entries of the given roles for a resource."""
        ...

    async def get_active_rules(
        self, role_ids: Sequence[int], resource: str
    ) -> list[DataPermissionRule]:
        """Active data permission rules of the given roles for a resource."""
        ...


class InMemoryPolicyStore:
    """PolicyStore over plain in-process collections.

    Suits applications whose policy is static configuration, and tests.
    """

    def __init__(
        self,
        roles: Iterable[Role] = (),
        field_entries: Iterable[FieldPermissionEntry] = (),
        rules: Iterable[DataPermissionRule] = (),
        user_roles: dict[str, list[str]] | None = None,
    ):
        self.roles = {role.name: role for role in roles}
        self.field_entries = list(field_entries)
        self.rules = list(rules)
        self.user_roles = dict(user_roles or {})

    async def get_roles_for_principal(self, principal: Principal) -> list[Role]:
        if principal.roles is not None:
            return list(principal.roles)
        names = principal.role_names or tuple(self.user_roles.get(principal.user_id, ()))
        return [self.roles[name] for name in names if name in self.roles]

    async def get_field_entries(
        self, role_ids: Sequence[int], resource: str
    ) -> list[FieldPermissionEntry]:
        wanted = set(role_ids)
        return [
            entry for entry in self.field_entries
            if entry.role_id in wanted and entry.resource == resource
        ]

    async def get_active_rules(
        self, role_ids: Sequence[int], resource: str
    ) -> list[DataPermissionRule]:
        wanted = set(role_ids)
        return [
            rule for rule in self.rules
            if rule.role_id in wanted and rule.resource == resource and rule.is_active
        ]


class CachingPolicyStore:
    """PolicyStore decorator that memoizes lookups in a PermissionCache.

    Lookups are cached per role, so a user holding roles {A, B} and another
    holding {A} share role A's entries.
    """

    def __init__(self, store: PolicyStore, cache: PermissionCache):
        self.store = store
        self.cache = cache

    async def get_roles_for_principal(self, principal: Principal) -> list[Role]:
        if principal.roles is not None:
            return list(principal.roles)
        # Session-supplied role names make the lookup key more specific than the user
        scope = principal.user_id
        if principal.role_names:
            scope = f"{principal.user_id}|{','.join(principal.role_names)}"
        cached = self.cache.get(ROLES, scope)
        if cached is not None:
            return list(cached)
        roles = await self.store.get_roles_for_principal(principal)
        self.cache.set(ROLES, scope, "", tuple(roles))
        return roles

    async def get_field_entries(
        self, role_ids: Sequence[int], resource: str
    ) -> list[FieldPermissionEntry]:
        return await self._per_role(FIELDS, role_ids, resource, self.store.get_field_entries)

    async def get_active_rules(
        self, role_ids: Sequence[int], resource: str
    ) -> list[DataPermissionRule]:
        return await self._per_role(RULES, role_ids, resource, self.store.get_active_rules)

    async def _per_role(self, kind, role_ids, resource, loader) -> list:
        results: list = []
        missing: list[int] = []
        for role_id in role_ids:
            cached = self.cache.get(kind, role_id, resource)
            if cached is None:
                missing.append(role_id)
            else:
                results.extend(cached)

        if missing:
            loaded = await loader(missing, resource)
            by_role: dict[int, list] = {role_id: [] for role_id in missing}
            for item in loaded:
                by_role.setdefault(item.role_id, []).append(item)
            for role_id, items in by_role.items():
                self.cache.set(kind, role_id, resource, tuple(items))
                results.extend(items)

        return results
