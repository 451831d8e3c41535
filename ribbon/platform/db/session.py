from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ribbon.platform.config import settings
from ribbon.platform.db.base import Base


def build_engine(database_url: str) -> AsyncEngine:
    options = {"echo": False, "future": True, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # one fresh connection per checkout
        options["poolclass"] = NullPool
    else:
        options.update(pool_recycle=1800, pool_size=20, max_overflow=30, pool_timeout=30)
    return create_async_engine(database_url, **options)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create missing tables. Migrations remain the source of truth in production."""
    import ribbon.features.links.models.link  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    async with SessionLocal() as session:
        yield session
