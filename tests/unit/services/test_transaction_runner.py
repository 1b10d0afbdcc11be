"""Unit tests for TransactionRunner

Tests cover:
- Commit on ok results, rollback on error results
- Bounded retries of concurrency conflicts
- Deadline enforcement
- Storage failures reported as UNAVAILABLE
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from sqlalchemy.exc import IntegrityError, OperationalError

from libs.result import Error, Return
from src.app.services.transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner


@pytest.fixture
def fast_policy():
    return RetryPolicy(attempts=3, backoff_seconds=0, timeout_seconds=5)


@pytest.mark.asyncio
class TestTransactionRunner:

    async def test_commits_ok_result(self, mock_uow, fast_policy):
        operation = AsyncMock(return_value=Return.ok("done"))

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_ok()
        assert result.value == "done"
        mock_uow.commit.assert_called_once()
        mock_uow.rollback.assert_not_called()

    async def test_rolls_back_error_result(self, mock_uow, fast_policy):
        operation = AsyncMock(return_value=Return.err(Error(code="VALIDATION_ERROR", message="bad")))

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_retries_conflict_then_succeeds(self, mock_uow, fast_policy):
        operation = AsyncMock(side_effect=[ConcurrencyConflict("lost race"), Return.ok(1)])

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_ok()
        assert operation.await_count == 2
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_called_once()

    async def test_retries_integrity_error(self, mock_uow, fast_policy):
        duplicate = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        operation = AsyncMock(side_effect=[duplicate, Return.ok(1)])

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_ok()
        assert operation.await_count == 2

    async def test_conflict_after_exhausting_attempts(self, mock_uow, fast_policy):
        operation = AsyncMock(side_effect=ConcurrencyConflict("lost race"))

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_err()
        assert result.error.code == "CONFLICT"
        assert operation.await_count == 3
        mock_uow.commit.assert_not_called()

    async def test_lock_timeout_is_retried(self, mock_uow, fast_policy):
        locked = OperationalError("UPDATE", {}, Exception("database is locked"))
        operation = AsyncMock(side_effect=[locked, Return.ok(1)])

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_ok()

    async def test_storage_failure_is_unavailable(self, mock_uow, fast_policy):
        down = OperationalError("SELECT", {}, Exception("connection refused"))
        operation = AsyncMock(side_effect=down)

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "FAILED", "failed")

        assert result.is_err()
        assert result.error.code == "UNAVAILABLE"
        assert operation.await_count == 1
        mock_uow.rollback.assert_called_once()

    async def test_deadline_exceeded_rolls_back(self, mock_uow):
        async def slow_operation():
            await asyncio.sleep(1)
            return Return.ok(1)

        policy = RetryPolicy(attempts=3, backoff_seconds=0, timeout_seconds=0.05)
        result = await TransactionRunner(mock_uow, policy).run(slow_operation, "FAILED", "failed")

        assert result.is_err()
        assert result.error.code == "UNAVAILABLE"
        assert result.error.reason == "deadline_exceeded"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()

    async def test_unexpected_exception_uses_failure_code(self, mock_uow, fast_policy):
        operation = AsyncMock(side_effect=RuntimeError("boom"))

        result = await TransactionRunner(mock_uow, fast_policy).run(operation, "CREATE_ORDER_FAILED", "failed")

        assert result.is_err()
        assert result.error.code == "CREATE_ORDER_FAILED"
        assert result.error.reason == "boom"
        mock_uow.rollback.assert_called_once()
