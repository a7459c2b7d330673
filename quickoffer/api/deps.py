"""FastAPI dependency injection."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from quickoffer.config import settings
from quickoffer.data.parcl_labs import ParclLabsClient
from quickoffer.data.reference import ReferenceDataService
from quickoffer.data.repository import PropertyRepository, ReferenceRepository
from quickoffer.data.resolver import EstimateResolver

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncSession:
    async with async_session() as session:
        yield session


def get_reference_service() -> ReferenceDataService:
    return ReferenceDataService(ReferenceRepository(async_session))


def get_resolver(
    db: AsyncSession = Depends(get_db),
    reference: ReferenceDataService = Depends(get_reference_service),
) -> EstimateResolver:
    return EstimateResolver(
        ParclLabsClient(),
        reference=reference,
        property_repository=PropertyRepository(db),
    )
