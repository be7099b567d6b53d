"""Motor async, sesión por petición y base declarativa de los modelos."""
import logging

from sqlalchemy import BigInteger, Integer
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

logger = logging.getLogger(__name__)

# En SQLite solo INTEGER PRIMARY KEY es autoincremental
BigIntId = BigInteger().with_variant(Integer, "sqlite")


def _opciones_motor(url: str) -> dict:
    """Pool acotado para PostgreSQL; SQLite usa el pool por defecto del dialecto."""
    opciones = {"echo": settings.debug}
    if make_url(url).get_backend_name() == "postgresql":
        opciones.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return opciones


engine = create_async_engine(settings.database_url_async, **_opciones_motor(settings.database_url_async))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base de usuarios, cursos, asistencias y evaluaciones."""


async def get_db():
    """Una sesión por petición: commit si la ruta termina bien, rollback si falla."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Crea las tablas que falten."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tablas verificadas: %s", ", ".join(sorted(Base.metadata.tables)))
