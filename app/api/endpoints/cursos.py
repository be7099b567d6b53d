"""Endpoints de cursos (fichas) y de su lista de aprendices."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import autorizar, get_current_user
from app.core.database import get_db
from app.models import Curso, Usuario
from app.permisos import Accion, NO_ENCONTRADO, Solicitud
from app.schemas.comun import Respuesta, RespuestaLista, RespuestaMensaje, lista
from app.schemas.curso import CursoCreate, CursoItem, CursoUpdate, EstudiantesRequest
from app.services import curso_service, usuario_service

router = APIRouter(prefix="/cursos", tags=["cursos"])


def curso_item(curso: Curso) -> CursoItem:
    return CursoItem(
        id=curso.id,
        nombre=curso.nombre,
        codigo=curso.codigo,
        descripcion=curso.descripcion,
        instructor_id=curso.instructor_id,
        estudiantes=curso.estudiantes_ids,
        fecha_inicio=curso.fecha_inicio,
        fecha_fin=curso.fecha_fin,
    )


async def _cargar_y_autorizar(
    curso_id: int, accion: Accion, current_user: Usuario, db: AsyncSession, **extra
) -> Curso:
    curso = await curso_service.obtener_curso(curso_id, db)
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=accion,
            curso=curso_service.vista_curso(curso),
            **extra,
        )
    )
    return curso


@router.get(
    "",
    response_model=RespuestaLista[CursoItem],
    summary="Listar cursos",
    description="Admin ve todos los cursos, el instructor los suyos y el aprendiz aquellos en los que está inscrito.",
)
async def listar_cursos(
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cursos = await curso_service.listar_cursos(current_user.a_actor(), db)
    return lista([curso_item(c) for c in cursos])


@router.get(
    "/{curso_id}",
    response_model=Respuesta[CursoItem],
    summary="Obtener curso",
    responses={403: {"description": "No es su instructor ni está inscrito"}, 404: {"description": "Curso no encontrado"}},
)
async def obtener_curso(
    curso_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await _cargar_y_autorizar(curso_id, Accion.LEER_CURSO, current_user, db)
    return Respuesta(data=curso_item(curso))


@router.post(
    "",
    response_model=Respuesta[CursoItem],
    status_code=status.HTTP_201_CREATED,
    summary="Crear curso",
    responses={400: {"description": "Datos inválidos, código repetido o instructor inexistente"}},
)
async def crear_curso(
    body: CursoCreate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea un curso sin aprendices. Si lo crea un instructor, queda como su dueño;
    un admin debe indicar `instructor_id`.
    """
    actor = current_user.a_actor()
    instructor_asignado = None
    instructor_id = actor.id
    if actor.es_admin:
        instructor_id = body.instructor_id
        instructor = (
            await usuario_service.obtener_usuario(instructor_id, db) if instructor_id is not None else None
        )
        instructor_asignado = instructor.vista() if instructor is not None else NO_ENCONTRADO
    autorizar(
        Solicitud(actor=actor, accion=Accion.CREAR_CURSO, instructor_asignado=instructor_asignado)
    )
    curso = await curso_service.crear_curso(
        body.model_dump(exclude={"instructor_id"}), instructor_id, db
    )
    return Respuesta(data=curso_item(curso))


@router.put(
    "/{curso_id}",
    response_model=Respuesta[CursoItem],
    summary="Actualizar curso",
    description="Solo el instructor dueño (o un admin). El instructor del curso no se puede cambiar.",
)
async def actualizar_curso(
    curso_id: int,
    body: CursoUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await _cargar_y_autorizar(curso_id, Accion.ACTUALIZAR_CURSO, current_user, db)
    curso = await curso_service.actualizar_curso(curso, body.model_dump(exclude_none=True), db)
    return Respuesta(data=curso_item(curso))


@router.delete(
    "/{curso_id}",
    response_model=RespuestaMensaje,
    summary="Eliminar curso",
    description="Elimina el curso con sus asistencias, evaluaciones y calificaciones.",
)
async def eliminar_curso(
    curso_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await _cargar_y_autorizar(curso_id, Accion.ELIMINAR_CURSO, current_user, db)
    await curso_service.eliminar_curso(curso, db)
    return RespuestaMensaje(message="Curso eliminado correctamente")


@router.post(
    "/{curso_id}/estudiantes",
    response_model=Respuesta[CursoItem],
    summary="Agregar aprendices",
    description=(
        "Agrega aprendices al curso (unión: los ya inscritos se ignoran). "
        "Si algún ID no existe o no es aprendiz no se agrega ninguno."
    ),
)
async def agregar_estudiantes(
    curso_id: int,
    body: EstudiantesRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    encontrados = await usuario_service.usuarios_por_id(body.estudiantes, db)
    candidatos = {
        estudiante_id: encontrados[estudiante_id].rol if estudiante_id in encontrados else None
        for estudiante_id in body.estudiantes
    }
    curso = await _cargar_y_autorizar(
        curso_id, Accion.AGREGAR_ESTUDIANTES, current_user, db, candidatos=candidatos
    )
    nuevos = [encontrados[i] for i in dict.fromkeys(body.estudiantes)]
    curso = await curso_service.agregar_estudiantes(curso, nuevos, db)
    return Respuesta(data=curso_item(curso))


@router.delete(
    "/{curso_id}/estudiantes",
    response_model=Respuesta[CursoItem],
    summary="Quitar aprendices",
    description="Quita aprendices del curso. IDs que no estaban inscritos se ignoran.",
)
async def quitar_estudiantes(
    curso_id: int,
    body: EstudiantesRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await _cargar_y_autorizar(curso_id, Accion.QUITAR_ESTUDIANTES, current_user, db)
    curso = await curso_service.quitar_estudiantes(curso, body.estudiantes, db)
    return Respuesta(data=curso_item(curso))


@router.delete(
    "/{curso_id}/estudiantes/{estudiante_id}",
    response_model=Respuesta[CursoItem],
    summary="Quitar un aprendiz",
)
async def quitar_estudiante(
    curso_id: int,
    estudiante_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    curso = await _cargar_y_autorizar(curso_id, Accion.QUITAR_ESTUDIANTES, current_user, db)
    curso = await curso_service.quitar_estudiantes(curso, [estudiante_id], db)
    return Respuesta(data=curso_item(curso))
