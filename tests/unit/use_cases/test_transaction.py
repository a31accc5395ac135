"""Unit tests for the transaction runner"""

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import IntegrityError, OperationalError

from libs.result import Error, Return
from src.app.use_cases.invoicing.transaction import is_concurrency_conflict, run_in_transaction


class PgError(Exception):
    def __init__(self, sqlstate):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


@pytest.mark.parametrize("sqlstate", ["55P03", "40P01", "40001"])
def test_conflict_sqlstates(sqlstate):
    assert is_concurrency_conflict(OperationalError("SELECT", {}, PgError(sqlstate)))


def test_constraint_violation_is_not_a_conflict():
    assert not is_concurrency_conflict(IntegrityError("INSERT", {}, PgError("23505")))


@pytest.mark.asyncio
class TestRunInTransaction:

    async def test_ok_commits(self, mock_uow):
        result = await run_in_transaction(
            mock_uow, AsyncMock(return_value=Return.ok(1)), "X_FAILED", "failed"
        )

        assert result.value == 1
        mock_uow.commit.assert_awaited_once()
        mock_uow.rollback.assert_not_called()

    async def test_err_rolls_back(self, mock_uow):
        error = Error(code="INVOICE_NOT_FOUND", message="missing")

        result = await run_in_transaction(
            mock_uow, AsyncMock(return_value=Return.err(error)), "X_FAILED", "failed"
        )

        assert result.error == error
        mock_uow.rollback.assert_awaited_once()
        mock_uow.commit.assert_not_called()

    async def test_commit_failure_is_reported(self, mock_uow):
        mock_uow.commit = AsyncMock(side_effect=IntegrityError("COMMIT", {}, PgError("23505")))

        result = await run_in_transaction(
            mock_uow, AsyncMock(return_value=Return.ok(1)), "X_FAILED", "failed"
        )

        assert result.error.code == "X_FAILED"
        mock_uow.rollback.assert_awaited_once()
