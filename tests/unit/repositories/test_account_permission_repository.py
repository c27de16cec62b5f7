"""
Unit tests for AccountPermissionRepository (the permission store).

Tests:
- Lookup of a grant and its level
- Plain insert and duplicate detection
- Idempotent upsert with last-writer-wins
- Removal
- Listing by account and by user
"""

import pytest

from checkbook.core.exceptions import DuplicateGrantError
from checkbook.models.account_permission import AccountPermission
from checkbook.models.enums import PermissionLevel
from checkbook.repositories.account_permission_repository import (
    AccountPermissionRepository,
)


@pytest.mark.asyncio
class TestAccountPermissionRepository:
    """Test suite for AccountPermissionRepository."""

    async def test_get_missing_grant(self, db_session, shared_account, alice):
        """Test that a user without a grant has no level."""
        repo = AccountPermissionRepository(db_session)

        assert await repo.get(shared_account.id, alice.id) is None
        assert await repo.get_level(shared_account.id, alice.id) is None

    async def test_add_and_get(self, db_session, shared_account, owner, alice):
        """Test adding a grant and reading it back."""
        # Setup
        repo = AccountPermissionRepository(db_session)

        # Execute
        grant = await repo.add(
            AccountPermission(
                account_id=shared_account.id,
                user_id=alice.id,
                permission_level=PermissionLevel.TRANSACTION_ONLY,
                created_by=owner.id,
            )
        )
        await db_session.commit()

        # Verify
        assert grant.id is not None
        assert grant.created_at is not None
        assert await repo.get_level(shared_account.id, alice.id) is PermissionLevel.TRANSACTION_ONLY

    async def test_add_duplicate_raises(self, db_session, alice_view_grant, shared_account, alice):
        """Test a second plain insert for the same pair is rejected."""
        repo = AccountPermissionRepository(db_session)

        with pytest.raises(DuplicateGrantError):
            await repo.add(
                AccountPermission(
                    account_id=shared_account.id,
                    user_id=alice.id,
                    permission_level=PermissionLevel.FULL_ACCESS,
                )
            )

        # Session is still usable and the original grant is untouched
        assert await repo.get_level(shared_account.id, alice.id) is PermissionLevel.VIEW_ONLY

    async def test_upsert_creates(self, db_session, shared_account, owner, alice):
        """Test upsert inserts when no grant exists."""
        repo = AccountPermissionRepository(db_session)

        grant = await repo.upsert(
            shared_account.id, alice.id, PermissionLevel.VIEW_ONLY, created_by=owner.id
        )
        await db_session.commit()

        assert grant.permission_level is PermissionLevel.VIEW_ONLY
        assert grant.created_by == owner.id
        assert grant.user.username == "alice"
        assert await repo.count_for_account(shared_account.id) == 1

    async def test_upsert_is_idempotent(self, db_session, shared_account, owner, alice):
        """Test that upserting the same level twice leaves one grant."""
        # Setup
        repo = AccountPermissionRepository(db_session)

        # Execute
        first = await repo.upsert(shared_account.id, alice.id, PermissionLevel.FULL_ACCESS, owner.id)
        second = await repo.upsert(shared_account.id, alice.id, PermissionLevel.FULL_ACCESS, owner.id)
        await db_session.commit()

        # Verify
        assert first.id == second.id
        assert await repo.count_for_account(shared_account.id) == 1
        assert await repo.get_level(shared_account.id, alice.id) is PermissionLevel.FULL_ACCESS

    async def test_upsert_last_writer_wins(self, db_session, alice_view_grant, shared_account, alice):
        """Test that upsert overwrites the level of an existing grant."""
        repo = AccountPermissionRepository(db_session)

        await repo.upsert(shared_account.id, alice.id, PermissionLevel.TRANSACTION_ONLY)
        await repo.upsert(shared_account.id, alice.id, PermissionLevel.FULL_ACCESS)
        await db_session.commit()

        grant = await repo.get(shared_account.id, alice.id)
        assert grant.id == alice_view_grant.id
        assert grant.permission_level is PermissionLevel.FULL_ACCESS
        assert await repo.count_for_account(shared_account.id) == 1

    async def test_remove(self, db_session, alice_view_grant, shared_account, alice):
        """Test removing a grant reports whether one existed."""
        repo = AccountPermissionRepository(db_session)

        assert await repo.remove(shared_account.id, alice.id) is True
        assert await repo.remove(shared_account.id, alice.id) is False
        assert await repo.get(shared_account.id, alice.id) is None

    async def test_list_for_account_and_user(
        self, db_session, grant_factory, account_factory, shared_account, owner, alice, bob
    ):
        """Test listing grants by account and by user."""
        # Setup
        second_account = await account_factory(owner, name="Savings")
        await grant_factory(shared_account, alice, PermissionLevel.VIEW_ONLY)
        await grant_factory(shared_account, bob, PermissionLevel.FULL_ACCESS)
        await grant_factory(second_account, alice, PermissionLevel.TRANSACTION_ONLY)
        repo = AccountPermissionRepository(db_session)

        # Execute
        on_account = await repo.list_for_account(shared_account.id)
        for_alice = await repo.list_for_user(alice.id)

        # Verify
        assert {g.user_id for g in on_account} == {alice.id, bob.id}
        assert {g.account_id for g in for_alice} == {shared_account.id, second_account.id}

    async def test_remove_all_for_account(
        self, db_session, grant_factory, shared_account, alice, bob
    ):
        """Test removing every grant on an account."""
        await grant_factory(shared_account, alice, PermissionLevel.VIEW_ONLY)
        await grant_factory(shared_account, bob, PermissionLevel.VIEW_ONLY)
        repo = AccountPermissionRepository(db_session)

        assert await repo.remove_all_for_account(shared_account.id) == 2
        assert await repo.count_for_account(shared_account.id) == 0
