"""Servicio de asistencias: un registro por curso, aprendiz y fecha."""
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflicto
from app.models.asistencia import Asistencia
from app.models.curso import Curso
from app.permisos import Actor, NO_ENCONTRADO, Rol, VistaAsistencia

logger = logging.getLogger(__name__)

MENSAJE_DUPLICADO = "Ya existe un registro de asistencia para este aprendiz en esa fecha"


async def obtener_asistencia(asistencia_id: int, db: AsyncSession) -> Asistencia | None:
    return await db.get(Asistencia, asistencia_id)


def vista_asistencia(asistencia: Asistencia | None) -> VistaAsistencia | object:
    return asistencia.vista() if asistencia is not None else NO_ENCONTRADO


async def listar_asistencias(
    actor: Actor,
    db: AsyncSession,
    curso_id: int | None = None,
    estudiante_id: int | None = None,
    fecha: date | None = None,
) -> list[Asistencia]:
    """Asistencias visibles para el actor, con filtros opcionales.

    Admin ve todo, el instructor las de sus cursos y el aprendiz solo las propias.
    """
    q = select(Asistencia).order_by(Asistencia.fecha.desc(), Asistencia.id)
    if actor.rol == Rol.INSTRUCTOR:
        q = q.join(Curso, Curso.id == Asistencia.curso_id).where(Curso.instructor_id == actor.id)
    elif actor.rol == Rol.APRENDIZ:
        q = q.where(Asistencia.estudiante_id == actor.id)
    if curso_id is not None:
        q = q.where(Asistencia.curso_id == curso_id)
    if estudiante_id is not None:
        q = q.where(Asistencia.estudiante_id == estudiante_id)
    if fecha is not None:
        q = q.where(Asistencia.fecha == fecha)
    result = await db.execute(q)
    return list(result.scalars().all())


async def estudiantes_con_registro(
    curso_id: int,
    estudiantes_ids: list[int],
    fecha: date,
    db: AsyncSession,
    excluir_id: int | None = None,
) -> set[int]:
    """Aprendices de ``estudiantes_ids`` que ya tienen asistencia en esa fecha y curso."""
    q = select(Asistencia.estudiante_id).where(
        Asistencia.curso_id == curso_id,
        Asistencia.fecha == fecha,
        Asistencia.estudiante_id.in_(set(estudiantes_ids)),
    )
    if excluir_id is not None:
        q = q.where(Asistencia.id != excluir_id)
    result = await db.execute(q)
    return set(result.scalars().all())


async def _flush_unico(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto(MENSAJE_DUPLICADO) from e


async def crear_asistencias(
    curso_id: int,
    fecha: date,
    entradas: list[dict],
    creado_por: int,
    db: AsyncSession,
) -> list[Asistencia]:
    """Crea un registro por entrada (``estudiante_id``, ``estado``, ``notas``).

    Todo o nada: si alguno choca con la restricción única no se guarda ninguno.
    """
    registros = [
        Asistencia(
            curso_id=curso_id,
            estudiante_id=entrada["estudiante_id"],
            fecha=fecha,
            estado=entrada["estado"],
            notas=entrada.get("notas"),
            creado_por=creado_por,
        )
        for entrada in entradas
    ]
    db.add_all(registros)
    await _flush_unico(db)
    logger.info(
        "Asistencia registrada curso=%s fecha=%s registros=%s", curso_id, fecha, len(registros)
    )
    return registros


async def actualizar_asistencia(asistencia: Asistencia, cambios: dict, db: AsyncSession) -> Asistencia:
    for campo, valor in cambios.items():
        setattr(asistencia, campo, valor)
    await _flush_unico(db)
    return asistencia


async def eliminar_asistencia(asistencia: Asistencia, db: AsyncSession) -> None:
    await db.delete(asistencia)
    await db.flush()
