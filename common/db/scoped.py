"""
Operation-scoped database sessions.

Store reads hold a connection only for the query itself, never while the
billing services compute. Two entry points:

    # one statement, own session
    async with get_session(readonly=True) as session:
        total = await session.scalar(query)

    # several statements, one commit
    async with transaction():
        await usage_repo.create(download)
        await usage_repo.create(share)

Engine and factories live in common/db/session.py; the ContextVar that lets
get_session() join a transaction() block lives in common/db/context.py.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from common.core.telemetry import get_logger
from common.db.session import AsyncSessionLocal, AsyncSessionLocalReadonly
from common.db.context import (
    get_current_session,
    set_current_session,
    reset_current_session,
)

logger = get_logger(__name__)


@asynccontextmanager
async def _open_session(
    kind: str, readonly: bool
) -> AsyncGenerator[AsyncSession, None]:
    """Open a fresh session; commit on clean exit (writes only), roll back on error."""
    # Resolved per call so tests can swap the module-level factories
    factory = AsyncSessionLocalReadonly if readonly else AsyncSessionLocal

    started = time.perf_counter()
    async with factory() as session:
        logger.debug(
            f"{kind} session acquired in {(time.perf_counter() - started) * 1000:.2f}ms",
            extra={"readonly": readonly},
        )
        try:
            yield session
            if not readonly:
                await session.commit()
        except Exception as e:
            logger.error(f"{kind} rolled back: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def transaction(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block of statements on one session.

    Repository calls inside the block pick the session up through the
    context and do not commit on their own; the block commits once at the
    end, or rolls back and re-raises.
    """
    async with _open_session("Transaction", readonly) as session:
        token = set_current_session(session, readonly=readonly)
        try:
            yield session
        finally:
            reset_current_session(token, readonly=readonly)


@asynccontextmanager
async def get_session(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """Session for a single operation, joining an enclosing transaction() if any."""
    current = get_current_session(readonly=readonly)
    if current is not None:
        yield current
        return

    async with _open_session("Operation", readonly) as session:
        yield session
