"""Servicio de cursos: consultas por rol, alta, baja en cascada y lista de aprendices."""
import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflicto, EstadoInvalido
from app.models.asistencia import Asistencia
from app.models.curso import Curso, curso_estudiantes
from app.models.evaluacion import Calificacion, Evaluacion
from app.models.user import Usuario
from app.permisos import Actor, NO_ENCONTRADO, Rol, VistaCurso

logger = logging.getLogger(__name__)


def unir_estudiantes(actuales: Iterable[int], nuevos: Iterable[int]) -> list[int]:
    """Unión que conserva el orden: primero los actuales, luego los nuevos sin repetir."""
    resultado = list(dict.fromkeys(actuales))
    vistos = set(resultado)
    for estudiante_id in nuevos:
        if estudiante_id not in vistos:
            vistos.add(estudiante_id)
            resultado.append(estudiante_id)
    return resultado


def quitar_estudiantes_ids(actuales: Iterable[int], quitar: Iterable[int]) -> list[int]:
    """Diferencia de conjuntos; ids que no estaban inscritos se ignoran."""
    fuera = set(quitar)
    return [e for e in dict.fromkeys(actuales) if e not in fuera]


async def obtener_curso(curso_id: int, db: AsyncSession) -> Curso | None:
    return await db.get(Curso, curso_id)


def vista_curso(curso: Curso | None) -> VistaCurso | object:
    return curso.vista() if curso is not None else NO_ENCONTRADO


async def listar_cursos(actor: Actor, db: AsyncSession) -> list[Curso]:
    """Cursos visibles: todos (admin), los propios (instructor) o los inscritos (aprendiz)."""
    q = select(Curso).order_by(Curso.id)
    if actor.rol == Rol.INSTRUCTOR:
        q = q.where(Curso.instructor_id == actor.id)
    elif actor.rol == Rol.APRENDIZ:
        q = q.join(curso_estudiantes, curso_estudiantes.c.curso_id == Curso.id).where(
            curso_estudiantes.c.estudiante_id == actor.id
        )
    result = await db.execute(q)
    return list(result.scalars().unique().all())


async def _codigo_en_uso(codigo: str, db: AsyncSession, excluir_id: int | None = None) -> bool:
    q = select(Curso.id).where(Curso.codigo == codigo)
    if excluir_id is not None:
        q = q.where(Curso.id != excluir_id)
    result = await db.execute(q)
    return result.first() is not None


async def crear_curso(datos: dict, instructor_id: int, db: AsyncSession) -> Curso:
    """Crea el curso con el instructor dueño indicado y sin aprendices."""
    if await _codigo_en_uso(datos["codigo"], db):
        raise Conflicto("Ya existe un curso con ese código de ficha")
    curso = Curso(
        nombre=datos["nombre"],
        codigo=datos["codigo"],
        descripcion=datos["descripcion"],
        fecha_inicio=datos["fecha_inicio"],
        fecha_fin=datos["fecha_fin"],
        instructor_id=instructor_id,
        estudiantes=[],
    )
    db.add(curso)
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto("Ya existe un curso con ese código de ficha") from e
    logger.info("Curso creado id=%s instructor=%s", curso.id, instructor_id)
    return curso


async def actualizar_curso(curso: Curso, cambios: dict, db: AsyncSession) -> Curso:
    """Aplica los campos enviados; ``instructor_id`` nunca forma parte de ``cambios``."""
    if "codigo" in cambios and await _codigo_en_uso(cambios["codigo"], db, excluir_id=curso.id):
        raise Conflicto("Ya existe un curso con ese código de ficha")
    for campo, valor in cambios.items():
        setattr(curso, campo, valor)
    if curso.fecha_fin < curso.fecha_inicio:
        raise EstadoInvalido("fecha_fin no puede ser anterior a fecha_inicio")
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto("Ya existe un curso con ese código de ficha") from e
    return curso


async def eliminar_curso(curso: Curso, db: AsyncSession) -> None:
    """Elimina el curso junto con sus asistencias, evaluaciones y calificaciones."""
    await db.execute(delete(Calificacion).where(Calificacion.curso_id == curso.id))
    await db.execute(delete(Evaluacion).where(Evaluacion.curso_id == curso.id))
    await db.execute(delete(Asistencia).where(Asistencia.curso_id == curso.id))
    # La fila de curso_estudiantes la borra el ORM desde la colección cargada
    await db.delete(curso)
    await db.flush()
    logger.info("Curso eliminado id=%s (con asistencias y evaluaciones)", curso.id)


async def agregar_estudiantes(curso: Curso, usuarios: list[Usuario], db: AsyncSession) -> Curso:
    """Unión con la lista actual. Agregar un aprendiz ya inscrito no cambia nada."""
    por_id = {e.id: e for e in curso.estudiantes}
    por_id.update({u.id: u for u in usuarios})
    ids = unir_estudiantes(curso.estudiantes_ids, [u.id for u in usuarios])
    curso.estudiantes = [por_id[i] for i in ids]
    await db.flush()
    return curso


async def quitar_estudiantes(curso: Curso, estudiantes_ids: list[int], db: AsyncSession) -> Curso:
    """Diferencia con la lista actual. Quitar un aprendiz no inscrito no es error."""
    por_id = {e.id: e for e in curso.estudiantes}
    ids = quitar_estudiantes_ids(curso.estudiantes_ids, estudiantes_ids)
    curso.estudiantes = [por_id[i] for i in ids]
    await db.flush()
    return curso
