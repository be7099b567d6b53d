"""Servicio de evaluaciones y calificaciones.

Una calificación es la entrada de un aprendiz dentro de una evaluación:
puntaje, retroalimentación y evidencia. Hay a lo sumo una por par
(evaluación, aprendiz); calificar o subir evidencia de nuevo la actualiza.
"""
import logging
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflicto, EstadoInvalido
from app.models.asistencia import ESTADOS_ASISTIO, Asistencia
from app.models.curso import Curso, curso_estudiantes
from app.models.evaluacion import Calificacion, Evaluacion
from app.models.user import ahora
from app.permisos import Actor, NO_ENCONTRADO, Rol, VistaEvaluacion

logger = logging.getLogger(__name__)


async def obtener_evaluacion(evaluacion_id: int, db: AsyncSession) -> Evaluacion | None:
    return await db.get(Evaluacion, evaluacion_id)


async def obtener_calificacion(calificacion_id: int, db: AsyncSession) -> Calificacion | None:
    return await db.get(Calificacion, calificacion_id)


def vista_evaluacion(evaluacion: Evaluacion | None) -> VistaEvaluacion | object:
    return evaluacion.vista() if evaluacion is not None else NO_ENCONTRADO


async def listar_evaluaciones(
    actor: Actor, db: AsyncSession, curso_id: int | None = None
) -> list[Evaluacion]:
    """Evaluaciones visibles para el actor.

    El aprendiz ve las de sus cursos y aquellas en las que ya tiene una
    calificación aunque haya salido del curso.
    """
    q = select(Evaluacion).order_by(Evaluacion.fecha_evaluacion.desc(), Evaluacion.id)
    if actor.rol == Rol.INSTRUCTOR:
        q = q.join(Curso, Curso.id == Evaluacion.curso_id).where(Curso.instructor_id == actor.id)
    elif actor.rol == Rol.APRENDIZ:
        inscrito = select(curso_estudiantes.c.curso_id).where(
            curso_estudiantes.c.estudiante_id == actor.id
        )
        calificado = select(Calificacion.evaluacion_id).where(Calificacion.estudiante_id == actor.id)
        q = q.where(or_(Evaluacion.curso_id.in_(inscrito), Evaluacion.id.in_(calificado)))
    if curso_id is not None:
        q = q.where(Evaluacion.curso_id == curso_id)
    result = await db.execute(q)
    return list(result.scalars().unique().all())


def validar_puntaje(puntaje: float, puntaje_maximo: float) -> None:
    if puntaje < 0 or puntaje > puntaje_maximo:
        raise EstadoInvalido(f"La calificación debe estar entre 0 y {puntaje_maximo:g}")


def _nueva_calificacion(evaluacion: Evaluacion, estudiante_id: int) -> Calificacion:
    calificacion = Calificacion(
        estudiante_id=estudiante_id,
        curso_id=evaluacion.curso_id,
        puntaje=0.0,
        retroalimentacion="",
    )
    evaluacion.calificaciones.append(calificacion)
    return calificacion


async def _flush_calificaciones(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto("El estudiante ya tiene una calificación en esta evaluación") from e


def aplicar_calificacion(
    evaluacion: Evaluacion,
    estudiante_id: int,
    puntaje: float | None = None,
    retroalimentacion: str | None = None,
) -> Calificacion:
    """Crea o actualiza en memoria la calificación del aprendiz (sin flush)."""
    if puntaje is not None:
        validar_puntaje(puntaje, evaluacion.puntaje_maximo)
    calificacion = evaluacion.calificacion_de(estudiante_id)
    if calificacion is None:
        calificacion = _nueva_calificacion(evaluacion, estudiante_id)
    if puntaje is not None:
        calificacion.puntaje = puntaje
    if retroalimentacion is not None:
        calificacion.retroalimentacion = retroalimentacion
    calificacion.calificado_en = ahora()
    calificacion.actualizado_en = calificacion.calificado_en
    return calificacion


async def crear_evaluacion(
    datos: dict,
    calificaciones: list[dict],
    creado_por: int,
    db: AsyncSession,
) -> Evaluacion:
    evaluacion = Evaluacion(
        curso_id=datos["curso_id"],
        titulo=datos["titulo"],
        descripcion=datos["descripcion"],
        puntaje_maximo=datos["puntaje_maximo"],
        fecha_evaluacion=datos.get("fecha_evaluacion") or date.today(),
        creado_por=creado_por,
        calificaciones=[],
    )
    db.add(evaluacion)
    for entrada in calificaciones:
        aplicar_calificacion(
            evaluacion,
            entrada["estudiante_id"],
            puntaje=entrada["puntaje"],
            retroalimentacion=entrada.get("retroalimentacion", ""),
        )
    await _flush_calificaciones(db)
    logger.info("Evaluación creada id=%s curso=%s", evaluacion.id, evaluacion.curso_id)
    return evaluacion


async def actualizar_evaluacion(evaluacion: Evaluacion, cambios: dict, db: AsyncSession) -> Evaluacion:
    """Aplica los cambios; bajar el puntaje máximo por debajo de una nota existente es inválido."""
    nuevo_maximo = cambios.get("puntaje_maximo")
    if nuevo_maximo is not None:
        excedidas = [c for c in evaluacion.calificaciones if c.puntaje > nuevo_maximo]
        if excedidas:
            raise EstadoInvalido(
                "El puntaje máximo no puede ser menor que una calificación ya registrada"
            )
    for campo, valor in cambios.items():
        setattr(evaluacion, campo, valor)
    await db.flush()
    return evaluacion


async def eliminar_evaluacion(evaluacion: Evaluacion, db: AsyncSession) -> None:
    # Las calificaciones cargadas se borran por cascada del ORM
    await db.delete(evaluacion)
    await db.flush()
    logger.info("Evaluación eliminada id=%s", evaluacion.id)


async def calificar(
    evaluacion: Evaluacion,
    entradas: list[dict],
    db: AsyncSession,
) -> list[Calificacion]:
    """Upsert de calificaciones por (evaluación, aprendiz).

    Una entrada sin puntaje ni retroalimentación no es una corrección.
    """
    if any(e.get("puntaje") is None and e.get("retroalimentacion") is None for e in entradas):
        raise EstadoInvalido("Debe enviar al menos un campo para actualizar.")
    resultado = [
        aplicar_calificacion(
            evaluacion,
            entrada["estudiante_id"],
            puntaje=entrada.get("puntaje"),
            retroalimentacion=entrada.get("retroalimentacion"),
        )
        for entrada in entradas
    ]
    await _flush_calificaciones(db)
    return resultado


async def subir_evidencia(
    evaluacion: Evaluacion, estudiante_id: int, evidencia: str, db: AsyncSession
) -> Calificacion:
    """Registra la evidencia del aprendiz sin tocar puntaje ni retroalimentación."""
    calificacion = evaluacion.calificacion_de(estudiante_id)
    if calificacion is None:
        calificacion = _nueva_calificacion(evaluacion, estudiante_id)
    calificacion.evidencia = evidencia
    calificacion.entregado_en = ahora()
    calificacion.actualizado_en = calificacion.entregado_en
    await _flush_calificaciones(db)
    logger.info("Evidencia subida evaluacion=%s estudiante=%s", evaluacion.id, estudiante_id)
    return calificacion


async def listar_calificaciones(
    db: AsyncSession,
    estudiante_id: int | None = None,
    curso_id: int | None = None,
    instructor_id: int | None = None,
) -> list[Calificacion]:
    """Calificaciones filtradas; ``instructor_id`` restringe a los cursos de ese instructor."""
    q = select(Calificacion).order_by(Calificacion.curso_id, Calificacion.evaluacion_id, Calificacion.id)
    if estudiante_id is not None:
        q = q.where(Calificacion.estudiante_id == estudiante_id)
    if curso_id is not None:
        q = q.where(Calificacion.curso_id == curso_id)
    if instructor_id is not None:
        q = q.join(Curso, Curso.id == Calificacion.curso_id).where(Curso.instructor_id == instructor_id)
    result = await db.execute(q)
    return list(result.scalars().unique().all())


async def resumen_estudiante(estudiante_id: int, db: AsyncSession, instructor_id: int | None = None) -> dict:
    """Promedio de calificaciones y porcentaje de asistencia (presente o retardo).

    Con ``instructor_id`` solo cuentan los cursos de ese instructor.
    """
    asistencias = select(func.count()).select_from(Asistencia).where(Asistencia.estudiante_id == estudiante_id)
    calificaciones = select(func.count(Calificacion.id), func.avg(Calificacion.puntaje)).where(
        Calificacion.estudiante_id == estudiante_id
    )
    if instructor_id is not None:
        asistencias = asistencias.join(Curso, Curso.id == Asistencia.curso_id).where(
            Curso.instructor_id == instructor_id
        )
        calificaciones = calificaciones.join(Curso, Curso.id == Calificacion.curso_id).where(
            Curso.instructor_id == instructor_id
        )

    total_asistencias = (await db.execute(asistencias)).scalar_one()
    asistio = (await db.execute(asistencias.where(Asistencia.estado.in_(ESTADOS_ASISTIO)))).scalar_one()
    total_calificaciones, promedio = (await db.execute(calificaciones)).one()
    porcentaje = round(asistio / total_asistencias * 100, 2) if total_asistencias else 0.0
    return {
        "estudiante_id": estudiante_id,
        "total_asistencias": total_asistencias,
        "asistencias_presente": asistio,
        "porcentaje_asistencia": porcentaje,
        "total_calificaciones": total_calificaciones,
        "promedio_calificaciones": round(float(promedio), 2) if promedio is not None else 0.0,
    }
