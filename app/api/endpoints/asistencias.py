"""Endpoints de asistencia: registro individual, registro del día y consultas."""
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import autorizar, get_current_user
from app.core.database import get_db
from app.core.exceptions import Prohibido
from app.models import Asistencia, Usuario
from app.permisos import Accion, Rol, Solicitud
from app.schemas.asistencia import (
    AsistenciaCreate,
    AsistenciaDiaRequest,
    AsistenciaItem,
    AsistenciaUpdate,
)
from app.schemas.comun import Respuesta, RespuestaLista, RespuestaMensaje, lista
from app.services import asistencia_service, curso_service

router = APIRouter(prefix="/asistencias", tags=["asistencias"])


def asistencia_item(asistencia: Asistencia) -> AsistenciaItem:
    return AsistenciaItem(
        id=asistencia.id,
        curso_id=asistencia.curso_id,
        estudiante_id=asistencia.estudiante_id,
        fecha=asistencia.fecha,
        estado=asistencia.estado,
        notas=asistencia.notas,
        creado_por=asistencia.creado_por,
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


async def _cargar_registro(
    asistencia_id: int, accion: Accion, current_user: Usuario, db: AsyncSession, **extra
) -> Asistencia:
    """Carga el registro y su curso y autoriza; el registro va antes que el curso."""
    asistencia = await asistencia_service.obtener_asistencia(asistencia_id, db)
    curso = await curso_service.obtener_curso(asistencia.curso_id, db) if asistencia else None
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=accion,
            asistencia=asistencia_service.vista_asistencia(asistencia),
            curso=curso_service.vista_curso(curso) if asistencia else None,
            **extra,
        )
    )
    return asistencia


@router.get(
    "",
    response_model=RespuestaLista[AsistenciaItem],
    summary="Listar asistencias",
    description=(
        "Lista las asistencias visibles para el usuario con filtros opcionales. "
        "El aprendiz solo ve las propias."
    ),
)
async def listar_asistencias(
    curso: int | None = Query(default=None, description="Filtrar por curso"),
    estudiante: int | None = Query(default=None, description="Filtrar por aprendiz"),
    fecha: date | None = Query(default=None, description="Filtrar por fecha (YYYY-MM-DD)"),
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    actor = current_user.a_actor()
    estudiantes = (estudiante,) if estudiante is not None else ()
    if curso is not None:
        await _autorizar_curso(curso, Accion.LEER_ASISTENCIA, current_user, db, estudiantes=estudiantes)
    elif actor.rol is Rol.APRENDIZ and estudiante is not None and estudiante != actor.id:
        raise Prohibido("No tiene permiso para ver las asistencias de otro estudiante")
    registros = await asistencia_service.listar_asistencias(
        actor, db, curso_id=curso, estudiante_id=estudiante, fecha=fecha
    )
    return lista([asistencia_item(a) for a in registros])


@router.get(
    "/curso/{curso_id}",
    response_model=RespuestaLista[AsistenciaItem],
    summary="Asistencias de un curso",
)
async def asistencias_por_curso(
    curso_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Instructor dueño y admin ven todo el curso; el aprendiz inscrito solo sus registros."""
    await _autorizar_curso(curso_id, Accion.LEER_ASISTENCIA, current_user, db)
    registros = await asistencia_service.listar_asistencias(current_user.a_actor(), db, curso_id=curso_id)
    return lista([asistencia_item(a) for a in registros])


@router.get(
    "/curso/{curso_id}/estudiante/{estudiante_id}",
    response_model=RespuestaLista[AsistenciaItem],
    summary="Asistencias de un aprendiz en un curso",
)
async def asistencias_por_estudiante(
    curso_id: int,
    estudiante_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _autorizar_curso(
        curso_id, Accion.LEER_ASISTENCIA, current_user, db, estudiantes=(estudiante_id,)
    )
    registros = await asistencia_service.listar_asistencias(
        current_user.a_actor(), db, curso_id=curso_id, estudiante_id=estudiante_id
    )
    return lista([asistencia_item(a) for a in registros])


@router.get(
    "/{asistencia_id}",
    response_model=Respuesta[AsistenciaItem],
    summary="Obtener registro de asistencia",
)
async def obtener_asistencia(
    asistencia_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    asistencia = await _cargar_registro(asistencia_id, Accion.LEER_ASISTENCIA, current_user, db)
    return Respuesta(data=asistencia_item(asistencia))


@router.post(
    "",
    response_model=Respuesta[AsistenciaItem],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar asistencia",
    responses={400: {"description": "Aprendiz no inscrito o registro repetido para esa fecha"}},
)
async def crear_asistencia(
    body: AsistenciaCreate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Registra la asistencia de un aprendiz inscrito. Solo puede haber un registro por aprendiz, curso y fecha."""
    fecha = body.fecha or date.today()
    ocupados = await asistencia_service.estudiantes_con_registro(
        body.curso_id, [body.estudiante_id], fecha, db
    )
    await _autorizar_curso(
        body.curso_id,
        Accion.CREAR_ASISTENCIA,
        current_user,
        db,
        estudiantes=(body.estudiante_id,),
        duplicado=bool(ocupados),
    )
    registros = await asistencia_service.crear_asistencias(
        body.curso_id,
        fecha,
        [{"estudiante_id": body.estudiante_id, "estado": body.estado, "notas": body.notas}],
        current_user.id,
        db,
    )
    return Respuesta(data=asistencia_item(registros[0]))


@router.post(
    "/dia",
    response_model=RespuestaLista[AsistenciaItem],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar la asistencia del día",
    description=(
        "Registra en una sola operación el estado de varios aprendices para una fecha. "
        "Si alguno no está inscrito o ya tiene registro ese día no se guarda ninguno."
    ),
)
async def crear_asistencia_dia(
    body: AsistenciaDiaRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    fecha = body.fecha or date.today()
    ids = [entrada.estudiante_id for entrada in body.asistencias]
    ocupados = await asistencia_service.estudiantes_con_registro(body.curso_id, ids, fecha, db)
    repetidos = len(set(ids)) != len(ids)
    await _autorizar_curso(
        body.curso_id,
        Accion.CREAR_ASISTENCIA,
        current_user,
        db,
        estudiantes=tuple(ids),
        duplicado=bool(ocupados) or repetidos,
    )
    registros = await asistencia_service.crear_asistencias(
        body.curso_id,
        fecha,
        [entrada.model_dump() for entrada in body.asistencias],
        current_user.id,
        db,
    )
    return lista([asistencia_item(a) for a in registros])


@router.put(
    "/{asistencia_id}",
    response_model=Respuesta[AsistenciaItem],
    summary="Actualizar registro de asistencia",
)
async def actualizar_asistencia(
    asistencia_id: int,
    body: AsistenciaUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Corrige estado, notas, fecha o aprendiz. No puede chocar con otro registro del mismo día."""
    cambios = body.model_dump(exclude_none=True)
    asistencia = await asistencia_service.obtener_asistencia(asistencia_id, db)
    estudiantes: tuple[int, ...] = ()
    duplicado = False
    if asistencia is not None:
        estudiante_id = cambios.get("estudiante_id", asistencia.estudiante_id)
        fecha = cambios.get("fecha", asistencia.fecha)
        estudiantes = (estudiante_id,)
        if (estudiante_id, fecha) != (asistencia.estudiante_id, asistencia.fecha):
            duplicado = bool(
                await asistencia_service.estudiantes_con_registro(
                    asistencia.curso_id, [estudiante_id], fecha, db, excluir_id=asistencia.id
                )
            )
    asistencia = await _cargar_registro(
        asistencia_id,
        Accion.ACTUALIZAR_ASISTENCIA,
        current_user,
        db,
        estudiantes=estudiantes,
        duplicado=duplicado,
    )
    asistencia = await asistencia_service.actualizar_asistencia(asistencia, cambios, db)
    return Respuesta(data=asistencia_item(asistencia))


@router.delete(
    "/{asistencia_id}",
    response_model=RespuestaMensaje,
    summary="Eliminar registro de asistencia",
)
async def eliminar_asistencia(
    asistencia_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    asistencia = await _cargar_registro(asistencia_id, Accion.ELIMINAR_ASISTENCIA, current_user, db)
    await asistencia_service.eliminar_asistencia(asistencia, db)
    return RespuestaMensaje(message="Registro de asistencia eliminado correctamente")
