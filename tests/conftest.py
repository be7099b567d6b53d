"""Fixtures comunes: base SQLite en memoria por test, cliente HTTP y usuarios de prueba."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from dataclasses import dataclass, field
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import hash_password, token_para_usuario
from app.main import app
from app.models import Curso, Usuario
from app.permisos import Rol

PASSWORD = "secreto123"
# Un solo hash para todos los usuarios de prueba
PASSWORD_HASH = hash_password(PASSWORD)

USUARIOS_PRUEBA = {
    "admin": Rol.ADMIN,
    "instructor": Rol.INSTRUCTOR,
    "otro_instructor": Rol.INSTRUCTOR,
    "aprendiz": Rol.APRENDIZ,
    "aprendiz2": Rol.APRENDIZ,
    "aprendiz3": Rol.APRENDIZ,
}


@dataclass
class Escenario:
    """Usuarios creados por nombre y un curso del instructor con ``aprendiz`` inscrito."""

    ids: dict[str, int] = field(default_factory=dict)
    curso_id: int = 0

    def headers(self, nombre: str) -> dict[str, str]:
        token = token_para_usuario(self.ids[nombre], f"{nombre}@test.co", USUARIOS_PRUEBA[nombre].value)
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def sesiones():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
async def client(sesiones):
    async def _get_db():
        async with sesiones() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def escenario(sesiones) -> Escenario:
    resultado = Escenario()
    async with sesiones() as session:
        usuarios = {}
        for i, (nombre, rol) in enumerate(USUARIOS_PRUEBA.items()):
            usuario = Usuario(
                nombre=nombre,
                apellido="Prueba",
                numero_documento=f"10{i:02d}",
                email=f"{nombre}@test.co",
                password_hash=PASSWORD_HASH,
                rol=rol,
            )
            session.add(usuario)
            usuarios[nombre] = usuario
        await session.flush()
        curso = Curso(
            nombre="Programación de Software",
            codigo="F-100",
            descripcion="Ficha de prueba",
            instructor_id=usuarios["instructor"].id,
            fecha_inicio=date(2026, 2, 1),
            fecha_fin=date(2026, 12, 1),
            estudiantes=[usuarios["aprendiz"]],
        )
        session.add(curso)
        await session.flush()
        resultado.ids = {nombre: u.id for nombre, u in usuarios.items()}
        resultado.curso_id = curso.id
        await session.commit()
    return resultado


@pytest.fixture
def password() -> str:
    """Contraseña en texto de todos los usuarios del escenario."""
    return PASSWORD
