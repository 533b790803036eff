from typing import Any, Dict
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from common.core.config import Settings, settings
from common.core.telemetry import get_logger

logger = get_logger(__name__)


def _asyncpg_url(url: str) -> str:
    return url.replace("postgresql://", "postgresql+asyncpg://", 1)


def _engine_options(app_settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = dict(
        echo=app_settings.debug,
        pool_pre_ping=True,
        pool_recycle=3600,
        # Unique statement names so asyncpg works behind pgbouncer
        connect_args={"prepared_statement_name_func": lambda: f"__asyncpg_{uuid4()}__"},
    )
    if app_settings.db_use_nullpool:
        logger.info("Billing store connections are not pooled")
        options["poolclass"] = NullPool
    else:
        logger.info(
            f"Billing store pool: size={app_settings.db_pool_size}, "
            f"overflow={app_settings.db_pool_overflow}"
        )
        options.update(
            pool_size=app_settings.db_pool_size,
            max_overflow=app_settings.db_pool_overflow,
        )
    return options


engine = create_async_engine(
    _asyncpg_url(settings.database_url), **_engine_options(settings)
)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Usage and subscription lookups use this factory so it can point at a replica
AsyncSessionLocalReadonly = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)
