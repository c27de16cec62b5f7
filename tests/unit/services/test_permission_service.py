"""
Unit tests for PermissionService.

Tests cover:
- Owner supremacy regardless of grants and the shared flag
- Grants gated by the shared flag
- require_access / require_owner error mapping
- Store failures surfacing as EvaluationUnavailableError
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from checkbook.core.exceptions import (
    AccountNotAccessibleError,
    EvaluationUnavailableError,
    ForbiddenError,
    InsufficientPermissionsError,
)
from checkbook.models.enums import Capability, PermissionLevel
from checkbook.services.permission_service import PermissionService


@pytest.mark.asyncio
class TestEffectivePermission:
    """Test effective permission evaluation against the store."""

    async def test_owner_has_full_access(self, db_session, private_account, owner):
        """Test the owner holds FULL_ACCESS without a grant, even unshared."""
        service = PermissionService(db_session)

        assert (
            await service.get_effective_permission(private_account.id, owner.id)
            is PermissionLevel.FULL_ACCESS
        )
        assert await service.is_owner(private_account.id, owner.id)
        assert await service.can_manage_permissions(private_account.id, owner.id)
        assert await service.can_modify_account(private_account.id, owner.id)

    async def test_grantee_level_on_shared_account(
        self, db_session, alice_view_grant, shared_account, alice
    ):
        """Test a grantee exercises exactly their grant level."""
        service = PermissionService(db_session)

        assert (
            await service.get_effective_permission(shared_account.id, alice.id)
            is PermissionLevel.VIEW_ONLY
        )
        assert await service.can_view(shared_account.id, alice.id)
        assert not await service.can_manage_transactions(shared_account.id, alice.id)
        assert not await service.can_manage_permissions(shared_account.id, alice.id)
        assert await service.can_perform_action(shared_account.id, alice.id, "read")
        assert not await service.can_perform_action(shared_account.id, alice.id, "delete")

    async def test_grant_on_unshared_account_is_inactive(
        self, db_session, grant_factory, private_account, alice
    ):
        """Test a retained grant gives no access while the account is unshared."""
        # Setup
        await grant_factory(private_account, alice, PermissionLevel.FULL_ACCESS)
        service = PermissionService(db_session)

        # Execute
        level = await service.get_effective_permission(private_account.id, alice.id)
        any_access = await service.has_any_access(private_account.id, alice.id)

        # Verify
        assert level is None
        assert not any_access

    async def test_missing_account(self, db_session, alice):
        """Test a missing account evaluates to no access."""
        service = PermissionService(db_session)
        missing = uuid.uuid4()

        assert await service.get_effective_permission(missing, alice.id) is None
        assert not await service.is_owner(missing, alice.id)
        assert not await service.has_capability(missing, alice.id, Capability.VIEW)


@pytest.mark.asyncio
class TestRequireAccess:
    async def test_returns_account_when_allowed(
        self, db_session, grant_factory, shared_account, alice
    ):
        """Test require_access returns the account when the level suffices."""
        await grant_factory(shared_account, alice, PermissionLevel.TRANSACTION_ONLY)
        service = PermissionService(db_session)

        account = await service.require_access(
            shared_account.id, alice.id, Capability.TRANSACTION
        )

        assert account.id == shared_account.id

    async def test_no_access_is_concealed(self, db_session, shared_account, bob):
        """Test a user without access cannot tell the account exists."""
        service = PermissionService(db_session)

        with pytest.raises(AccountNotAccessibleError) as existing:
            await service.require_access(shared_account.id, bob.id)
        with pytest.raises(AccountNotAccessibleError) as missing:
            await service.require_access(uuid.uuid4(), bob.id)

        assert existing.value.status_code == missing.value.status_code == 404
        assert existing.value.message == missing.value.message

    async def test_insufficient_level(
        self, db_session, alice_view_grant, shared_account, alice
    ):
        """Test an under-privileged grantee gets the required and current level."""
        service = PermissionService(db_session)

        with pytest.raises(InsufficientPermissionsError) as exc_info:
            await service.require_access(shared_account.id, alice.id, Capability.FULL)

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {
            "required": "FULL_ACCESS",
            "current": "VIEW_ONLY",
        }


@pytest.mark.asyncio
class TestRequireOwner:
    async def test_owner_passes(self, db_session, private_account, owner):
        service = PermissionService(db_session)

        account = await service.require_owner(private_account.id, owner.id)

        assert account.id == private_account.id

    async def test_grantee_is_forbidden(
        self, db_session, grant_factory, shared_account, alice
    ):
        """Test even a FULL_ACCESS grantee is not the owner."""
        await grant_factory(shared_account, alice, PermissionLevel.FULL_ACCESS)
        service = PermissionService(db_session)

        with pytest.raises(ForbiddenError) as exc_info:
            await service.require_owner(shared_account.id, alice.id)

        assert not isinstance(exc_info.value, AccountNotAccessibleError)
        assert exc_info.value.message == "Only the account owner can manage permissions"

    async def test_stranger_gets_not_accessible(self, db_session, shared_account, bob):
        """Test a user without access gets the concealing error, not a 403."""
        service = PermissionService(db_session)

        with pytest.raises(AccountNotAccessibleError):
            await service.require_owner(shared_account.id, bob.id)


@pytest.mark.asyncio
class TestStoreFailure:
    async def test_store_failure_is_not_a_deny(self, db_session, shared_account, alice):
        """Test a failing permission store raises instead of returning no access."""
        # Setup
        service = PermissionService(db_session)
        error = OperationalError("SELECT", {}, Exception("connection lost"))

        # Execute / Verify
        with patch.object(service.permission_repo, "get_level", side_effect=error):
            with pytest.raises(EvaluationUnavailableError) as exc_info:
                await service.has_any_access(shared_account.id, alice.id)

        assert exc_info.value.status_code == 503
