"""Unit tests for the AuthorizationService facade."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from warden.domain.entities import EvaluationContext, FieldPermissionEntry, Principal
from warden.domain.exceptions import InvalidPermissionFormat
from warden.domain.services import (
    AuthorizationService,
    InMemoryPolicyStore,
    PermissionCache,
    PermissionResolver,
)
from warden.domain.services.authorization_service import DENIED_NO_ROLES, DENIED_PERMISSION


@pytest.fixture
def store(admin_role, viewer_role, cashier_role, point_owner_role, cashier_cost_hidden, own_orders_rule):
    """In-memory policy covering the shared scenario roles."""
    return InMemoryPolicyStore(
        roles=[admin_role, viewer_role, cashier_role, point_owner_role],
        field_entries=[
            cashier_cost_hidden,
            FieldPermissionEntry(role_id=3, resource="goods", field="*", can_read=True, can_write=True),
        ],
        rules=[own_orders_rule],
        user_roles={
            "admin": ["ADMIN"],
            "cashier": ["CASHIER"],
            "owner": ["POINT_OWNER"],
            "owner-cashier": ["POINT_OWNER", "CASHIER"],
        },
    )


@pytest.fixture
def service(store, settings):
    return AuthorizationService(store, settings=settings)


@pytest.fixture
def mock_store(cashier_role):
    """Store mock that records which lookups happened."""
    store = MagicMock()
    store.get_roles_for_principal = AsyncMock(return_value=[cashier_role])
    store.get_field_entries = AsyncMock(return_value=[])
    store.get_active_rules = AsyncMock(return_value=[])
    return store


class TestAuthorize:
    """Test suite for authorize()."""

    @pytest.mark.asyncio
    async def test_denied_action_skips_field_and_rule_lookups(self, mock_store, settings):
        """Test a coarse denial stops before field and scope evaluation."""
        service = AuthorizationService(mock_store, settings=settings)

        decision = await service.authorize(Principal(user_id="cashier"), "goods", "delete")

        assert decision.allowed is False
        assert decision.reason == DENIED_PERMISSION
        assert decision.row_filter is None
        assert decision.field_permissions.readable == frozenset()
        mock_store.get_field_entries.assert_not_called()
        mock_store.get_active_rules.assert_not_called()

    @pytest.mark.asyncio
    async def test_granted_action_loads_policy_for_held_roles(self, mock_store, settings, cashier_role):
        """Test lookups are made with the held role ids and resource."""
        service = AuthorizationService(mock_store, settings=settings)

        decision = await service.authorize(Principal(user_id="cashier"), "orders", "update")

        assert decision.allowed is True
        assert decision.roles == ("CASHIER",)
        mock_store.get_field_entries.assert_awaited_once_with([cashier_role.id], "orders")
        mock_store.get_active_rules.assert_awaited_once_with([cashier_role.id], "orders")

    @pytest.mark.asyncio
    async def test_no_roles_is_a_denial(self, service):
        """Test an unknown user is denied with the missing role reason."""
        decision = await service.authorize(Principal(user_id="nobody"), "goods", "read")

        assert decision.allowed is False
        assert decision.reason == DENIED_NO_ROLES

    @pytest.mark.asyncio
    async def test_cashier_reads_goods_without_cost(self, service):
        """Test field permissions flow into the decision."""
        decision = await service.authorize(Principal(user_id="cashier"), "goods", "read")

        assert decision.allowed is True
        assert decision.row_filter is None
        record = {"id": "g1", "name": "Tea", "cost": 3}
        assert decision.filter_read(record) == {"id": "g1", "name": "Tea"}
        assert decision.filter_write({"name": "Tea", "cost": 4}) == {"name": "Tea"}

    @pytest.mark.asyncio
    async def test_owner_gets_row_filter(self, service):
        """Test data scope rules flow into the decision."""
        decision = await service.authorize(Principal(user_id="owner"), "orders", "read")

        assert decision.allowed is True
        assert decision.row_filter is not None
        assert decision.row_filter.matches({"ownerId": "owner"}) is True
        assert decision.row_filter.matches({"ownerId": "someone"}) is False

    @pytest.mark.asyncio
    async def test_second_role_lifts_row_filter(self, service):
        """Test an unrestricted second role removes the row filter."""
        decision = await service.authorize(Principal(user_id="owner-cashier"), "orders", "read")

        assert decision.allowed is True
        assert decision.row_filter is None

    @pytest.mark.asyncio
    async def test_explicit_context_is_used(self, service):
        """Test a supplied evaluation context replaces the default."""
        context = EvaluationContext(current_user_id="other")
        decision = await service.authorize(Principal(user_id="owner"), "orders", "read", context)

        assert decision.row_filter.matches({"ownerId": "other"}) is True

    @pytest.mark.asyncio
    async def test_session_role_names_take_precedence(self, service):
        """Test role names carried by the principal override assignments."""
        decision = await service.authorize(
            Principal(user_id="cashier", role_names=("VIEWER",)), "orders", "update"
        )
        assert decision.allowed is False

    @pytest.mark.asyncio
    async def test_malformed_action_raises_in_debug_build(self, service):
        """Test a malformed permission surfaces in debug builds."""
        with pytest.raises(InvalidPermissionFormat):
            await service.authorize(Principal(user_id="admin"), "", "read")

    @pytest.mark.asyncio
    async def test_to_dict(self, service):
        """Test the decision renders to plain JSON types."""
        decision = await service.authorize(Principal(user_id="owner"), "orders", "read")
        result = decision.to_dict()

        assert result["allowed"] is True
        assert result["roles"] == ["POINT_OWNER"]
        assert result["row_filter"] == {"field": "ownerId", "operator": "equals", "value": "owner"}
        assert result["field_permissions"] == {"readable": ["*"], "writable": ["*"]}


class TestCoarseHelpers:
    """has_permission and is_admin."""

    @pytest.mark.asyncio
    async def test_has_permission(self, service):
        """Test coarse checks without field or scope evaluation."""
        assert await service.has_permission(Principal(user_id="cashier"), "orders:delete") is True
        assert await service.has_permission(Principal(user_id="cashier"), "goods:delete") is False
        assert await service.has_permission(Principal(user_id="nobody"), "goods:read") is False

    @pytest.mark.asyncio
    async def test_is_admin(self, service):
        """Test administrative detection through the store."""
        assert await service.is_admin(Principal(user_id="admin")) is True
        assert await service.is_admin(Principal(user_id="cashier")) is False
        assert await service.is_admin(Principal(user_id="nobody")) is False

    @pytest.mark.asyncio
    async def test_custom_resolver(self, store, settings):
        """Test a supplied resolver is used."""
        resolver = PermissionResolver(admin_role_names=["CASHIER"], admin_max_level=-1)
        service = AuthorizationService(store, resolver=resolver, settings=settings)

        assert await service.is_admin(Principal(user_id="cashier")) is True
        assert await service.is_admin(Principal(user_id="admin")) is False


class TestCaching:
    """The facade over a PermissionCache."""

    @pytest.mark.asyncio
    async def test_repeated_decisions_hit_the_cache(self, mock_store, settings):
        """Test a shared cache avoids repeated store lookups."""
        cache = PermissionCache()
        service = AuthorizationService(mock_store, cache=cache, settings=settings)
        principal = Principal(user_id="cashier")

        await service.authorize(principal, "orders", "read")
        await service.authorize(principal, "orders", "read")

        assert mock_store.get_roles_for_principal.await_count == 1
        assert mock_store.get_field_entries.await_count == 1
        assert mock_store.get_active_rules.await_count == 1

    @pytest.mark.asyncio
    async def test_invalidation_forces_reload(self, mock_store, settings):
        """Test invalidating a role reloads its policy."""
        cache = PermissionCache()
        service = AuthorizationService(mock_store, cache=cache, settings=settings)
        principal = Principal(user_id="cashier")

        await service.authorize(principal, "orders", "read")
        cache.invalidate_role(3)
        await service.authorize(principal, "orders", "read")

        assert mock_store.get_roles_for_principal.await_count == 2
        assert mock_store.get_field_entries.await_count == 2
