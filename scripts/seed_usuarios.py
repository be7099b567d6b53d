"""Crea un admin, un instructor y dos aprendices de prueba, y una ficha con ambos aprendices.

Contraseña de todos: 123456. Si un usuario ya existe solo se actualiza su contraseña.
"""
import asyncio
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import hash_password
from app.models import Curso, Usuario
from app.permisos import Rol

PASSWORD_PLAIN = "123456"

USUARIOS = [
    {"nombre": "Admin", "apellido": "Sistema", "numero_documento": "1000", "email": "admin@sena.edu.co", "rol": Rol.ADMIN},
    {"nombre": "Ana", "apellido": "Instructora", "numero_documento": "1001", "email": "instructor@sena.edu.co", "rol": Rol.INSTRUCTOR},
    {"nombre": "Luis", "apellido": "Aprendiz", "numero_documento": "1002", "email": "aprendiz1@sena.edu.co", "rol": Rol.APRENDIZ},
    {"nombre": "Sara", "apellido": "Aprendiz", "numero_documento": "1003", "email": "aprendiz2@sena.edu.co", "rol": Rol.APRENDIZ},
]

CODIGO_FICHA = "2558101"


async def seed_usuarios():
    await init_db()
    password_hash = hash_password(PASSWORD_PLAIN)
    async with AsyncSessionLocal() as session:
        creados: dict[Rol, list[Usuario]] = {}
        for datos in USUARIOS:
            result = await session.execute(select(Usuario).where(Usuario.email == datos["email"]))
            usuario = result.scalar_one_or_none()
            if not usuario:
                usuario = Usuario(password_hash=password_hash, **datos)
                session.add(usuario)
                await session.flush()
                print(f"  + Usuario creado: {datos['email']} ({datos['rol'].value}, id={usuario.id})")
            else:
                usuario.password_hash = password_hash
                print(f"  = Usuario existente, contraseña actualizada: {datos['email']}")
            creados.setdefault(usuario.rol, []).append(usuario)

        result = await session.execute(select(Curso).where(Curso.codigo == CODIGO_FICHA))
        if result.scalar_one_or_none() is None:
            curso = Curso(
                nombre="Análisis y Desarrollo de Software",
                codigo=CODIGO_FICHA,
                descripcion="Ficha de prueba",
                instructor_id=creados[Rol.INSTRUCTOR][0].id,
                fecha_inicio=date(2026, 1, 20),
                fecha_fin=date(2027, 12, 15),
                estudiantes=creados.get(Rol.APRENDIZ, []),
            )
            session.add(curso)
            await session.flush()
            print(f"  + Curso creado: {curso.codigo} (id={curso.id})")

        await session.commit()

    print("Listo. Contraseña de todos los usuarios: " + PASSWORD_PLAIN)
    for u in USUARIOS:
        print(f"  - {u['email']} ({u['rol'].value})")


if __name__ == "__main__":
    asyncio.run(seed_usuarios())
