"""
Configuración de la base de datos local con SQLAlchemy 2.0 async (aiosqlite).

No hay engine global: el contenedor de dependencias construye el engine y
la session factory al arrancar el proceso y los inyecta en los DAOs.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


# ── Base declarativa ─────────────────────────────────
class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime que SQLite guarda como UTC naive y devuelve como UTC aware.
    Mantiene comparaciones de igualdad estables para el guard de versión.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


# ── Engine async ─────────────────────────────────────
def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Crea el engine async. En SQLite activa `PRAGMA foreign_keys` en cada
    conexión para que el ON DELETE CASCADE se aplique.
    """
    engine = create_async_engine(database_url, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# ── Session factory ──────────────────────────────────
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Crea las tablas que falten (primer arranque del dispositivo)."""
    # Registrar los modelos en Base.metadata
    import finca.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
