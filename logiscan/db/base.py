from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from logiscan.core.config import settings

DB_URL = settings.DB_URL

engine = create_async_engine(DB_URL, future=True, echo=settings.DB_ECHO)
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in dev/tests)
JSONType = JSON().with_variant(JSONB, "postgresql")


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def init_models(bind=None):
    # import for side effect: registers every table on Base.metadata
    import logiscan.db.models.all  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
