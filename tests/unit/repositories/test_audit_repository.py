"""
Unit tests for AuditLogRepository.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from checkbook.models.audit_log import AuditLog
from checkbook.models.enums import AuditAction
from checkbook.repositories.audit_repository import AuditLogRepository


def make_entry(account_id, user_id, action, created_at):
    return AuditLog(
        account_id=account_id,
        user_id=user_id,
        action_type=action,
        action_details={"note": action.value},
        created_at=created_at,
    )


@pytest.mark.asyncio
class TestAuditLogRepository:
    """Test suite for AuditLogRepository."""

    async def test_search_filters_and_order(self, db_session):
        """Test filtering by account, action, actor and date range, newest first."""
        # Setup
        repo = AuditLogRepository(db_session)
        account_id, other_account_id = uuid.uuid4(), uuid.uuid4()
        actor, other_actor = uuid.uuid4(), uuid.uuid4()
        base = datetime(2024, 6, 1, tzinfo=UTC)
        first = await repo.add(make_entry(account_id, actor, AuditAction.PERMISSION_GRANTED, base))
        second = await repo.add(
            make_entry(account_id, other_actor, AuditAction.PERMISSION_REQUESTED, base + timedelta(hours=1))
        )
        third = await repo.add(
            make_entry(account_id, actor, AuditAction.PERMISSION_REVOKED, base + timedelta(hours=2))
        )
        await repo.add(make_entry(other_account_id, actor, AuditAction.ACCOUNT_VIEWED, base))
        await db_session.commit()

        # Execute
        all_logs, total = await repo.search(account_id=account_id)
        by_actor, _ = await repo.search(account_id=account_id, user_id=actor)
        by_action, _ = await repo.search(
            account_id=account_id, action_type=AuditAction.PERMISSION_REQUESTED
        )
        in_range, _ = await repo.search(
            account_id=account_id,
            start_date=base + timedelta(minutes=30),
            end_date=base + timedelta(minutes=90),
        )

        # Verify
        assert [log.id for log in all_logs] == [third.id, second.id, first.id]
        assert total == 3
        assert [log.id for log in by_actor] == [third.id, first.id]
        assert [log.id for log in by_action] == [second.id]
        assert [log.id for log in in_range] == [second.id]

    async def test_get_recent_and_count_in_range(self, db_session):
        """Test recent entries are limited and range counts are inclusive."""
        repo = AuditLogRepository(db_session)
        account_id, actor = uuid.uuid4(), uuid.uuid4()
        base = datetime(2024, 6, 1, tzinfo=UTC)
        for i in range(5):
            await repo.add(
                make_entry(account_id, actor, AuditAction.ACCOUNT_VIEWED, base + timedelta(days=i))
            )
        await db_session.commit()

        recent = await repo.get_recent(account_id, limit=2)
        assert len(recent) == 2
        assert recent[0].created_at > recent[1].created_at
        assert await repo.count_in_range(account_id, base, base + timedelta(days=2)) == 3

    async def test_delete_older_than(self, db_session):
        """Test the retention sweep deletes only entries before the cutoff."""
        repo = AuditLogRepository(db_session)
        account_id, actor = uuid.uuid4(), uuid.uuid4()
        now = datetime.now(UTC)
        await repo.add(make_entry(account_id, actor, AuditAction.ACCOUNT_VIEWED, now - timedelta(days=10)))
        kept = await repo.add(make_entry(account_id, actor, AuditAction.ACCOUNT_VIEWED, now))
        await db_session.commit()

        deleted = await repo.delete_older_than(now - timedelta(days=1))
        await db_session.commit()

        assert deleted == 1
        logs, total = await repo.search(account_id=account_id)
        assert total == 1
        assert logs[0].id == kept.id

    async def test_failed_add_rolls_back_only_its_savepoint(self, db_session):
        """Test a rejected entry leaves earlier work in the transaction intact."""
        # Setup
        repo = AuditLogRepository(db_session)
        account_id, actor = uuid.uuid4(), uuid.uuid4()
        now = datetime.now(UTC)
        kept = await repo.add(make_entry(account_id, actor, AuditAction.ACCOUNT_VIEWED, now))

        # Execute
        with pytest.raises(IntegrityError):
            await repo.add(make_entry(account_id, None, AuditAction.ACCOUNT_MODIFIED, now))
        await db_session.commit()

        # Verify
        logs, total = await repo.search(account_id=account_id)
        assert total == 1
        assert logs[0].id == kept.id
