"""Transaction runner shared by the write use cases

Runs one logical operation inside the unit of work: commits when the
operation returns an ok Result, rolls back otherwise. A caller supplied
deadline bounds the whole transaction; on timeout everything is rolled
back, so no partial totals or partial position sets remain.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from sqlalchemy.exc import DBAPIError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
CONFLICT_SQLSTATES = {"55P03", "40P01", "40001"}


def is_concurrency_conflict(error: DBAPIError) -> bool:
    """True for lock wait timeouts, deadlocks and serialization failures"""
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in CONFLICT_SQLSTATES:
        return True
    # SQLite reports lock contention only through the message
    return "database is locked" in str(orig if orig is not None else error).lower()


async def _commit_or_rollback(uow: UnitOfWork, operation: Callable[[], Awaitable[Result]]) -> Result:
    result = await operation()
    if result.is_ok():
        await uow.commit()
    else:
        await uow.rollback()
    return result


async def run_in_transaction(
    uow: UnitOfWork,
    operation: Callable[[], Awaitable[Result]],
    failure_code: str,
    failure_message: str,
    timeout: Optional[float] = None,
) -> Result:
    """
    Execute an operation as one atomic transaction

    Args:
        uow: Unit of work shared with the repositories used by operation
        operation: Coroutine factory returning a Result
        failure_code: Error code for unexpected failures
        failure_message: Error message for unexpected failures
        timeout: Deadline in seconds, None for no deadline

    Returns:
        The operation's Result, or an error Result with code
        TRANSACTION_TIMEOUT, CONCURRENCY_CONFLICT or failure_code
    """
    try:
        return await asyncio.wait_for(_commit_or_rollback(uow, operation), timeout=timeout)

    except asyncio.TimeoutError:
        await uow.rollback()
        logger.error(f"{failure_code}: transaction exceeded deadline of {timeout}s, rolled back")
        return Return.err(
            Error(
                code="TRANSACTION_TIMEOUT",
                message="The operation did not complete in time and was rolled back",
                reason=f"timeout={timeout}s",
            )
        )

    except DBAPIError as e:
        await uow.rollback()
        if is_concurrency_conflict(e):
            logger.warning(f"{failure_code}: concurrency conflict: {e.orig}")
            return Return.err(
                Error(
                    code="CONCURRENCY_CONFLICT",
                    message="The invoice is being modified concurrently, please retry",
                    reason=str(e.orig),
                )
            )
        logger.error(f"{failure_code}: database error: {e}")
        return Return.err(Error(code=failure_code, message=failure_message, reason=str(e)))

    except Exception as e:
        await uow.rollback()
        logger.error(f"{failure_code}: {e}")
        return Return.err(Error(code=failure_code, message=failure_message, reason=str(e)))
