from sqlalchemy.engine.url import make_url, URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from app.core.settings import settings


def asyncpg_url(raw: str) -> str:
    """
    Rebuild a postgres URL for the asyncpg driver.

    Query options (sslmode, channel_binding, ...) are dropped because asyncpg
    rejects them; TLS is driven by ``DB_SSL`` instead.
    """
    u = make_url(raw)
    return URL.create(
        drivername="postgresql+asyncpg",
        username=u.username,
        password=u.password,
        host=u.host,
        port=u.port,
        database=u.database,
    ).render_as_string(hide_password=False)


def build_engine() -> AsyncEngine:
    return create_async_engine(
        asyncpg_url(settings.DATABASE_URL.get_secret_value()),
        echo=settings.DEBUG,
        poolclass=NullPool,
        pool_pre_ping=True,
        execution_options={"isolation_level": "READ COMMITTED"},
        connect_args={
            "ssl": settings.DB_SSL,
            # pgbouncer en modo transacción no soporta prepared statements
            "statement_cache_size": 0,
        },
    )


engine = build_engine()

async_session = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)


async def create_tables() -> None:
    from app.v1_0.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
