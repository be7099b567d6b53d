"""Endpoints de calificaciones: consultas por aprendiz o curso, corrección y resumen."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import autorizar, get_current_user
from app.api.endpoints.evaluaciones import calificacion_item
from app.core.database import get_db
from app.models import Usuario
from app.permisos import Accion, NO_ENCONTRADO, Rol, Solicitud
from app.schemas.comun import Respuesta, RespuestaLista, lista
from app.schemas.evaluacion import CalificacionItem, CalificacionUpdate, ResumenEstudiante
from app.services import curso_service, evaluacion_service, usuario_service

router = APIRouter(prefix="/calificaciones", tags=["calificaciones"])


async def _autorizar_sobre_estudiante(estudiante_id: int, current_user: Usuario, db: AsyncSession) -> None:
    """El aprendiz solo puede consultarse a sí mismo; instructores y admins a cualquiera."""
    estudiante = await usuario_service.obtener_usuario(estudiante_id, db)
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=Accion.LEER_USUARIO,
            usuario=await usuario_service.vista_usuario(estudiante, db),
        )
    )


@router.get(
    "/estudiante/{estudiante_id}",
    response_model=RespuestaLista[CalificacionItem],
    summary="Calificaciones de un aprendiz",
    description="El instructor solo ve las calificaciones de sus cursos.",
)
async def calificaciones_por_estudiante(
    estudiante_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _autorizar_sobre_estudiante(estudiante_id, current_user, db)
    instructor_id = current_user.id if current_user.rol is Rol.INSTRUCTOR else None
    calificaciones = await evaluacion_service.listar_calificaciones(
        db, estudiante_id=estudiante_id, instructor_id=instructor_id
    )
    return lista([calificacion_item(c) for c in calificaciones])


@router.get(
    "/curso/{curso_id}",
    response_model=RespuestaLista[CalificacionItem],
    summary="Calificaciones de un curso",
    description="Instructor dueño y admin ven todas; el aprendiz inscrito solo las propias.",
)
async def calificaciones_por_curso(
    curso_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await curso_service.obtener_curso(curso_id, db)
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=Accion.LEER_EVALUACION,
            curso=curso_service.vista_curso(curso),
        )
    )
    estudiante_id = current_user.id if current_user.rol is Rol.APRENDIZ else None
    calificaciones = await evaluacion_service.listar_calificaciones(
        db, estudiante_id=estudiante_id, curso_id=curso_id
    )
    return lista([calificacion_item(c) for c in calificaciones])


@router.put(
    "/{calificacion_id}",
    response_model=Respuesta[CalificacionItem],
    summary="Corregir calificación",
)
async def actualizar_calificacion(
    calificacion_id: int,
    body: CalificacionUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    calificacion = await evaluacion_service.obtener_calificacion(calificacion_id, db)
    evaluacion = calificacion.evaluacion if calificacion is not None else None
    curso = await curso_service.obtener_curso(evaluacion.curso_id, db) if evaluacion else None
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=Accion.CALIFICAR,
            evaluacion=evaluacion.vista() if evaluacion is not None else NO_ENCONTRADO,
            curso=curso_service.vista_curso(curso) if evaluacion else None,
            estudiantes=(calificacion.estudiante_id,) if calificacion is not None else (),
        )
    )
    calificaciones = await evaluacion_service.calificar(
        evaluacion,
        [{"estudiante_id": calificacion.estudiante_id, **body.model_dump(exclude_none=True)}],
        db,
    )
    return Respuesta(data=calificacion_item(calificaciones[0]))


@router.get(
    "/resumen/{usuario_id}",
    response_model=Respuesta[ResumenEstudiante],
    summary="Resumen académico de un aprendiz",
    description="Promedio de calificaciones y porcentaje de asistencia (presente o retardo sobre el total). El instructor solo ve lo de sus cursos.",
)
async def resumen_estudiante(
    usuario_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _autorizar_sobre_estudiante(usuario_id, current_user, db)
    instructor_id = current_user.id if current_user.rol is Rol.INSTRUCTOR else None
    resumen = await evaluacion_service.resumen_estudiante(usuario_id, db, instructor_id=instructor_id)
    return Respuesta(data=ResumenEstudiante(**resumen))
