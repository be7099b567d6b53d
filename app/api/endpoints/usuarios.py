"""Endpoints de gestión de usuarios."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import autorizar, get_current_user, usuario_item
from app.core.database import get_db
from app.models import Usuario
from app.permisos import Accion, Rol, Solicitud
from app.schemas.comun import Respuesta, RespuestaLista, RespuestaMensaje, lista
from app.schemas.usuario import UsuarioItem, UsuarioUpdate
from app.services import usuario_service

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


async def _cargar_y_autorizar(
    usuario_id: int,
    accion: Accion,
    current_user: Usuario,
    db: AsyncSession,
    nuevo_rol: Rol | None = None,
) -> Usuario:
    objetivo = await usuario_service.obtener_usuario(usuario_id, db)
    autorizar(
        Solicitud(
            actor=current_user.a_actor(),
            accion=accion,
            usuario=await usuario_service.vista_usuario(objetivo, db),
            nuevo_rol=nuevo_rol,
        )
    )
    return objetivo


@router.get(
    "",
    response_model=RespuestaLista[UsuarioItem],
    summary="Listar usuarios",
    description="Lista todos los usuarios. Requiere rol instructor o admin.",
)
async def listar_usuarios(
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    autorizar(Solicitud(actor=current_user.a_actor(), accion=Accion.LISTAR_USUARIOS))
    usuarios = await usuario_service.listar_usuarios(db)
    return lista([usuario_item(u) for u in usuarios])


@router.get(
    "/rol/{rol}",
    response_model=RespuestaLista[UsuarioItem],
    summary="Listar usuarios por rol",
    description="Lista los usuarios de un rol (instructor, aprendiz o admin). Requiere rol instructor o admin.",
)
async def listar_por_rol(
    rol: Rol,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    autorizar(Solicitud(actor=current_user.a_actor(), accion=Accion.LISTAR_USUARIOS))
    usuarios = await usuario_service.listar_usuarios(db, rol=rol)
    return lista([usuario_item(u) for u in usuarios])


@router.get(
    "/{usuario_id}",
    response_model=Respuesta[UsuarioItem],
    summary="Obtener usuario",
    responses={403: {"description": "Sin permiso sobre este usuario"}, 404: {"description": "Usuario no encontrado"}},
)
async def obtener_usuario(
    usuario_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Un usuario siempre puede verse a sí mismo; a otros solo instructores y admins."""
    usuario = await _cargar_y_autorizar(usuario_id, Accion.LEER_USUARIO, current_user, db)
    return Respuesta(data=usuario_item(usuario))


@router.put(
    "/{usuario_id}",
    response_model=Respuesta[UsuarioItem],
    summary="Actualizar usuario",
    description="Actualiza los campos enviados. La contraseña no se cambia por esta ruta.",
)
async def actualizar_usuario(
    usuario_id: int,
    body: UsuarioUpdate,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    usuario = await _cargar_y_autorizar(
        usuario_id, Accion.ACTUALIZAR_USUARIO, current_user, db, nuevo_rol=body.rol
    )
    cambios = body.model_dump(exclude_none=True)
    usuario = await usuario_service.actualizar_usuario(usuario, cambios, db)
    return Respuesta(data=usuario_item(usuario))


@router.delete(
    "/{usuario_id}",
    response_model=RespuestaMensaje,
    summary="Eliminar usuario",
    responses={400: {"description": "El usuario es instructor de uno o más cursos"}},
)
async def eliminar_usuario(
    usuario_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Elimina al usuario y lo retira de los cursos donde estaba inscrito."""
    usuario = await _cargar_y_autorizar(usuario_id, Accion.ELIMINAR_USUARIO, current_user, db)
    await usuario_service.eliminar_usuario(usuario, db)
    return RespuestaMensaje(message="Usuario eliminado correctamente")
