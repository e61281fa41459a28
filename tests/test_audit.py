from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from billboard.models.audit_log import AuditLog
from billboard.services.audit import AuditAction, log_audit
from tests.factories import mock_db


class TestLogAudit:
    @pytest.mark.asyncio
    async def test_writes_row_in_savepoint(self):
        db = mock_db()

        await log_audit(db, action=AuditAction.CREATE, entity_type="campaign", entity_id=5, user_id=1)

        db.begin_nested.assert_called_once()
        row = db.add.call_args.args[0]
        assert isinstance(row, AuditLog)
        assert row.action == "CREATE"
        assert row.status == "success"
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_insert_keeps_session(self):
        """Only the savepoint is undone; the caller's objects stay loaded."""
        db = mock_db()
        db.add.side_effect = OperationalError("INSERT INTO audit_logs", {}, Exception("db down"))

        await log_audit(db, action=AuditAction.LOGIN, entity_type="user_profile", user_id=1)

        exit_args = db.begin_nested.return_value.__aexit__.await_args.args
        assert isinstance(exit_args[1], OperationalError)
        db.rollback.assert_not_awaited()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_commit_swallowed(self):
        db = mock_db()
        db.commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("gone")))

        await log_audit(db, action=AuditAction.LOGOUT, entity_type="user_profile", success=False)
