"""Transaction runner

Runs one engine operation as one storage transaction: commit when the
operation returns an ok Result, roll back otherwise. Concurrency conflicts
are retried a bounded number of times with exponential backoff, and the
whole run is bounded by the caller's deadline.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from libs.result import Result, Return, Error
from src.app.errors import CONFLICT, UNAVAILABLE
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOCK_ERROR_MARKERS = ("locked", "deadlock", "could not serialize", "lock timeout", "busy")


class ConcurrencyConflict(Exception):
    """Raised inside an operation when a compare-and-swap update lost a race"""


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounds for one storage-bound operation

    Attributes:
        attempts: Maximum number of transaction attempts on conflicts
        backoff_seconds: Base delay, doubled after every failed attempt
        timeout_seconds: Deadline for the whole operation (None = no deadline)
    """

    attempts: int = 3
    backoff_seconds: float = 0.05
    timeout_seconds: Optional[float] = 10.0


def is_lock_error(exc: OperationalError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _LOCK_ERROR_MARKERS)


class TransactionRunner:

    def __init__(self, uow: UnitOfWork, policy: Optional[RetryPolicy] = None):
        self.uow = uow
        self.policy = policy or RetryPolicy()

    async def run(
        self,
        operation: Callable[[], Awaitable[Result[T]]],
        failure_code: str,
        failure_message: str,
    ) -> Result[T]:
        """
        Execute operation inside a transaction

        Args:
            operation: Coroutine factory performing the reads and writes; called
                again from scratch on every retry
            failure_code: Error code reported for unexpected failures
            failure_message: Error message reported for unexpected failures

        Returns:
            The operation's Result, or CONFLICT / UNAVAILABLE / failure_code
        """
        loop = asyncio.get_running_loop()
        deadline = None
        if self.policy.timeout_seconds is not None:
            deadline = loop.time() + self.policy.timeout_seconds

        last_error: Optional[BaseException] = None

        for attempt in range(1, self.policy.attempts + 1):
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return self._deadline_exceeded()

            try:
                return await asyncio.wait_for(self._attempt(operation), remaining)

            except asyncio.TimeoutError:
                await self._rollback()
                return self._deadline_exceeded()

            except asyncio.CancelledError:
                await self._rollback()
                raise

            except (ConcurrencyConflict, IntegrityError, StaleDataError) as e:
                await self._rollback()
                last_error = e
                logger.warning(f"Concurrency conflict on attempt {attempt}/{self.policy.attempts}: {e}")

            except OperationalError as e:
                await self._rollback()
                if not is_lock_error(e):
                    logger.error(f"Storage unavailable: {e}")
                    return self._unavailable(str(e))
                last_error = e
                logger.warning(f"Lock contention on attempt {attempt}/{self.policy.attempts}: {e}")

            except DBAPIError as e:
                await self._rollback()
                logger.error(f"Storage unavailable: {e}")
                return self._unavailable(str(e))

            except Exception as e:
                await self._rollback()
                logger.exception(f"{failure_message}: {e}")
                return Return.err(Error(code=failure_code, message=failure_message, reason=str(e)))

            if attempt < self.policy.attempts:
                await asyncio.sleep(self.policy.backoff_seconds * (2 ** (attempt - 1)))

        return Return.err(
            Error(
                code=CONFLICT,
                message="The record was modified concurrently, please retry",
                reason=str(last_error) if last_error else None,
                details={"attempts": self.policy.attempts},
            )
        )

    async def _attempt(self, operation: Callable[[], Awaitable[Result[T]]]) -> Result[T]:
        result = await operation()
        if result.is_ok():
            await self.uow.commit()
        else:
            await self.uow.rollback()
        return result

    async def _rollback(self) -> None:
        try:
            await self.uow.rollback()
        except Exception as e:
            logger.error(f"Rollback failed: {e}")

    def _deadline_exceeded(self) -> Result:
        logger.warning(f"Operation exceeded its {self.policy.timeout_seconds}s deadline, rolled back")
        return Return.err(
            Error(
                code=UNAVAILABLE,
                message="The operation did not complete before its deadline, please retry",
                reason="deadline_exceeded",
                details={"timeout_seconds": self.policy.timeout_seconds},
            )
        )

    def _unavailable(self, reason: str) -> Result:
        return Return.err(
            Error(
                code=UNAVAILABLE,
                message="Storage is unavailable, please retry",
                reason=reason,
            )
        )
