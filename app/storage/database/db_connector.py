from pydantic import SecretStr
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from app.core.settings import settings


def build_engine(database_url: str | SecretStr) -> AsyncEngine:
    """
    Create the async engine for the remote document store.

    PostgreSQL goes through asyncpg without pooling; SQLite goes through
    aiosqlite, and in-memory databases share one connection so every session
    sees the same data.
    """
    raw = database_url.get_secret_value() if isinstance(database_url, SecretStr) else database_url
    u = make_url(raw)

    if u.drivername.startswith("sqlite"):
        if u.drivername == "sqlite":
            u = u.set(drivername="sqlite+aiosqlite")
        in_memory = u.database in (None, "", ":memory:")
        return create_async_engine(
            u.render_as_string(hide_password=False),
            echo=bool(getattr(settings, "DEBUG", False)),
            poolclass=StaticPool if in_memory else NullPool,
            connect_args={"check_same_thread": False},
        )

    if u.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
        u = u.set(drivername="postgresql+asyncpg")

    return create_async_engine(
        u.render_as_string(hide_password=False),
        echo=bool(getattr(settings, "DEBUG", False)),
        poolclass=NullPool,
        pool_pre_ping=True,
        execution_options={"isolation_level": "READ COMMITTED"},
        connect_args={"statement_cache_size": 0},
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
