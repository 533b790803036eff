"""
Session tracking for scoped database access.

`transaction()` publishes its session here so that repository calls made
inside the block reuse it instead of opening their own. Read and write
sessions are tracked separately so a read replica factory can be used for
store lookups.

    async with transaction():
        await usage_repo.create(event)
        await usage_repo.sum_usage(...)  # same session, same commit
"""

from contextvars import ContextVar, Token
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession


_write_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "billing_db_write_session", default=None
)
_read_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "billing_db_read_session", default=None
)


def _var(readonly: bool) -> ContextVar[Optional[AsyncSession]]:
    return _read_session if readonly else _write_session


def get_current_session(readonly: bool = False) -> Optional[AsyncSession]:
    """Session of the enclosing transaction() block, or None outside one."""
    return _var(readonly).get()


def set_current_session(session: AsyncSession, readonly: bool = False) -> Token:
    """Publish a session for the current task; returns the reset token."""
    return _var(readonly).set(session)


def reset_current_session(token: Token, readonly: bool = False) -> None:
    _var(readonly).reset(token)


def in_transaction(readonly: bool = False) -> bool:
    return get_current_session(readonly=readonly) is not None
