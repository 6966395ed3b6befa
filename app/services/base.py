from __future__ import annotations

import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import StoreError, StoreTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def bounded(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Run a store coroutine under the service timeout.

    Timeouts surface as StoreTimeoutError and driver failures as StoreError;
    service errors (not found, conflicts) pass through untouched.
    """

    @functools.wraps(func)
    async def wrapper(self: "SessionService", *args, **kwargs) -> T:
        try:
            return await asyncio.wait_for(func(self, *args, **kwargs), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error("Store operation %s timed out after %.1fs", func.__qualname__, self.timeout_seconds)
            raise StoreTimeoutError(func.__qualname__, self.timeout_seconds) from e
        except SQLAlchemyError as e:
            logger.exception("Store operation %s failed", func.__qualname__)
            raise StoreError(f"Database error in {func.__qualname__}: {e}") from e

    return wrapper


class SessionService:
    """Shared plumbing for services that talk to the database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout_seconds: float = 10.0):
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        # commit on success, roll back on any exception
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session
