"""Endpoints de evaluaciones: definición, calificación y entrega de evidencias."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import autorizar, get_current_user
from app.core.database import get_db
from app.models import Calificacion, Evaluacion, Usuario
from app.permisos import Accion, Rol, Solicitud
from app.schemas.comun import Respuesta, RespuestaLista, RespuestaMensaje, lista
from app.schemas.evaluacion import (
    CalificacionesRequest,
    CalificacionItem,
    CalificacionUpdate,
    EvaluacionCreate,
    EvaluacionItem,
    EvaluacionUpdate,
    EvidenciaRequest,
)
from app.services import curso_service, evaluacion_service

router = APIRouter(prefix="/evaluaciones", tags=["evaluaciones"])


def calificacion_item(calificacion: Calificacion) -> CalificacionItem:
    evaluacion = calificacion.evaluacion
    return CalificacionItem(
        id=calificacion.id,
        evaluacion_id=calificacion.evaluacion_id,
        curso_id=calificacion.curso_id,
        estudiante_id=calificacion.estudiante_id,
        puntaje=calificacion.puntaje,
        retroalimentacion=calificacion.retroalimentacion,
        evidencia=calificacion.evidencia,
        entregado_en=calificacion.entregado_en,
        calificado_en=calificacion.calificado_en,
        titulo_evaluacion=evaluacion.titulo if evaluacion is not None else None,
        puntaje_maximo=evaluacion.puntaje_maximo if evaluacion is not None else None,
    )


def evaluacion_item(evaluacion: Evaluacion, current_user: Usuario) -> EvaluacionItem:
    """El aprendiz solo recibe su propia calificación dentro de la evaluación."""
    calificaciones = evaluacion.calificaciones
    if current_user.rol is Rol.APRENDIZ:
        calificaciones = [c for c in calificaciones if c.estudiante_id == current_user.id]
    return EvaluacionItem(
        id=evaluacion.id,
        curso_id=evaluacion.curso_id,
        titulo=evaluacion.titulo,
        descripcion=evaluacion.descripcion,
        puntaje_maximo=evaluacion.puntaje_maximo,
        fecha_evaluacion=evaluacion.fecha_evaluacion,
        creado_por=evaluacion.creado_por,
        calificaciones=[calificacion_item(c) for c in calificaciones],
    )


async def _autorizar_curso(
    curso_id: int, accion: Accion, current_user: Usuario, db: AsyncSession, **extra
) -> None:
    curso = await curso_service.obtener_curso(curso_id, db)
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=accion,
            curso=curso_service.vista_curso(curso),
            **extra,
        )
    )


async def _cargar_evaluacion(
    evaluacion_id: int, accion: Accion, current_user: Usuario, db: AsyncSession, **extra
) -> Evaluacion:
    evaluacion = await evaluacion_service.obtener_evaluacion(evaluacion_id, db)
    curso = await curso_service.obtener_curso(evaluacion.curso_id, db) if evaluacion else None
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=accion,
            evaluacion=evaluacion_service.vista_evaluacion(evaluacion),
            curso=curso_service.vista_curso(curso) if evaluacion else None,
            **extra,
        )
    )
    return evaluacion


@router.get(
    "",
    response_model=RespuestaLista[EvaluacionItem],
    summary="Listar evaluaciones",
    description="Evaluaciones visibles para el usuario; opcionalmente filtradas por curso.",
)
async def listar_evaluaciones(
    curso: int | None = Query(default=None, description="Filtrar por curso"),
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if curso is not None:
        await _autorizar_curso(curso, Accion.LEER_EVALUACION, current_user, db)
    evaluaciones = await evaluacion_service.listar_evaluaciones(current_user.a_actor(), db, curso_id=curso)
    return lista([evaluacion_item(e, current_user) for e in evaluaciones])


@router.get(
    "/curso/{curso_id}",
    response_model=RespuestaLista[EvaluacionItem],
    summary="Evaluaciones de un curso",
)
async def evaluaciones_por_curso(
    curso_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _autorizar_curso(curso_id, Accion.LEER_EVALUACION, current_user, db)
    evaluaciones = await evaluacion_service.listar_evaluaciones(
        current_user.a_actor(), db, curso_id=curso_id
    )
    return lista([evaluacion_item(e, current_user) for e in evaluaciones])


@router.get(
    "/{evaluacion_id}",
    response_model=Respuesta[EvaluacionItem],
    summary="Obtener evaluación",
)
async def obtener_evaluacion(
    evaluacion_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(evaluacion_id, Accion.LEER_EVALUACION, current_user, db)
    return Respuesta(data=evaluacion_item(evaluacion, current_user))


@router.post(
    "",
    response_model=Respuesta[EvaluacionItem],
    status_code=status.HTTP_201_CREATED,
    summary="Crear evaluación",
    responses={400: {"description": "Datos inválidos, aprendiz no inscrito o puntaje fuera de rango"}},
)
async def crear_evaluacion(
    body: EvaluacionCreate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Crea una evaluación en un curso propio, opcionalmente con las calificaciones iniciales."""
    await _autorizar_curso(
        body.curso_id,
        Accion.CREAR_EVALUACION,
        current_user,
        db,
        estudiantes=tuple(c.estudiante_id for c in body.calificaciones),
    )
    evaluacion = await evaluacion_service.crear_evaluacion(
        body.model_dump(exclude={"calificaciones"}),
        [c.model_dump() for c in body.calificaciones],
        current_user.id,
        db,
    )
    return Respuesta(data=evaluacion_item(evaluacion, current_user))


@router.put(
    "/{evaluacion_id}",
    response_model=Respuesta[EvaluacionItem],
    summary="Actualizar evaluación",
)
async def actualizar_evaluacion(
    evaluacion_id: int,
    body: EvaluacionUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(evaluacion_id, Accion.ACTUALIZAR_EVALUACION, current_user, db)
    evaluacion = await evaluacion_service.actualizar_evaluacion(
        evaluacion, body.model_dump(exclude_none=True), db
    )
    return Respuesta(data=evaluacion_item(evaluacion, current_user))


@router.delete(
    "/{evaluacion_id}",
    response_model=RespuestaMensaje,
    summary="Eliminar evaluación",
    description="Elimina la evaluación y todas sus calificaciones.",
)
async def eliminar_evaluacion(
    evaluacion_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(evaluacion_id, Accion.ELIMINAR_EVALUACION, current_user, db)
    await evaluacion_service.eliminar_evaluacion(evaluacion, db)
    return RespuestaMensaje(message="Evaluación eliminada correctamente")


@router.post(
    "/{evaluacion_id}/calificaciones",
    response_model=RespuestaLista[CalificacionItem],
    summary="Calificar aprendices",
    description="Crea o actualiza la calificación de cada aprendiz indicado (una por aprendiz y evaluación).",
)
async def calificar(
    evaluacion_id: int,
    body: CalificacionesRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(
        evaluacion_id,
        Accion.CALIFICAR,
        current_user,
        db,
        estudiantes=tuple(c.estudiante_id for c in body.calificaciones),
    )
    calificaciones = await evaluacion_service.calificar(
        evaluacion, [c.model_dump() for c in body.calificaciones], db
    )
    return lista([calificacion_item(c) for c in calificaciones])


@router.put(
    "/{evaluacion_id}/calificaciones/{estudiante_id}",
    response_model=Respuesta[CalificacionItem],
    summary="Calificar a un aprendiz",
)
async def calificar_estudiante(
    evaluacion_id: int,
    estudiante_id: int,
    body: CalificacionUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(
        evaluacion_id, Accion.CALIFICAR, current_user, db, estudiantes=(estudiante_id,)
    )
    calificaciones = await evaluacion_service.calificar(
        evaluacion, [{"estudiante_id": estudiante_id, **body.model_dump(exclude_none=True)}], db
    )
    return Respuesta(data=calificacion_item(calificaciones[0]))


@router.post(
    "/{evaluacion_id}/evidencia",
    response_model=Respuesta[CalificacionItem],
    summary="Subir evidencia",
    description="El aprendiz inscrito entrega su evidencia. No modifica el puntaje ni la retroalimentación.",
)
async def subir_evidencia(
    evaluacion_id: int,
    body: EvidenciaRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    evaluacion = await _cargar_evaluacion(evaluacion_id, Accion.SUBIR_EVIDENCIA, current_user, db)
    calificacion = await evaluacion_service.subir_evidencia(
        evaluacion, current_user.id, body.evidencia, db
    )
    return Respuesta(data=calificacion_item(calificacion))
