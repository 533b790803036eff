from contextlib import asynccontextmanager
from typing import AsyncGenerator, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.telemetry import trace_span
from common.db.scoped import get_session

EntityType = TypeVar("EntityType")
DomainModelType = TypeVar("DomainModelType")
CreateModelType = TypeVar("CreateModelType", bound=BaseModel)


class BaseRepository(Generic[EntityType, DomainModelType]):
    """
    Maps one ORM entity to its pydantic domain model.

    A repository built with `db_session` runs every query on that session and
    leaves commit/rollback to whoever owns it. Without one, each call goes
    through get_session(), which joins an enclosing transaction() block or
    opens a short-lived session of its own. Store lookups are read-only and
    ask for the readonly factory.
    """

    def __init__(
        self,
        entity_class: Type[EntityType],
        domain_class: Type[DomainModelType],
        db_session: Optional[AsyncSession] = None,
    ):
        self.entity_class = entity_class
        self.domain_class = domain_class
        self._session = db_session

    @asynccontextmanager
    async def _get_session(
        self, readonly: bool = False
    ) -> AsyncGenerator[AsyncSession, None]:
        if self._session is None:
            async with get_session(readonly=readonly) as session:
                yield session
            return
        yield self._session

    def _entity_to_domain(self, entity: EntityType) -> DomainModelType:
        return self.domain_class.model_validate(entity)

    def _entities_to_domain(self, entities: Iterable[EntityType]) -> List[DomainModelType]:
        return list(map(self._entity_to_domain, entities))

    @trace_span
    async def get(self, id: int) -> Optional[DomainModelType]:
        """Fetch one row by primary key."""
        async with self._get_session(readonly=True) as session:
            entity = await session.scalar(
                select(self.entity_class).where(self.entity_class.id == id)
            )
            if entity is None:
                return None
            return self._entity_to_domain(entity)

    @trace_span
    async def create(self, create_model: CreateModelType) -> DomainModelType:
        """Insert a row built from a create model and return it with server defaults."""
        entity = self.entity_class(**create_model.model_dump(exclude_none=True))
        async with self._get_session() as session:
            session.add(entity)
            await session.flush()
            await session.refresh(entity)
            return self._entity_to_domain(entity)
