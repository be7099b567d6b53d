"""Router v1: recursos del dominio y perfil del usuario autenticado."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints import asistencias, auth, calificaciones, cursos, evaluaciones, usuarios
from app.api.endpoints.auth import get_current_user, usuario_item
from app.core.config import settings
from app.core.database import get_db
from app.models import Usuario
from app.schemas.comun import Respuesta, RespuestaMensaje
from app.schemas.usuario import CambiarContrasenaRequest, PerfilUpdateRequest, UsuarioItem
from app.services import usuario_service

NO_AUTENTICADO = {401: {"description": "Token no enviado, inválido o expirado"}}

router = APIRouter()
for modulo in (auth, usuarios, cursos, asistencias, evaluaciones, calificaciones):
    router.include_router(modulo.router)


@router.get(
    "/me",
    response_model=Respuesta[UsuarioItem],
    tags=["api"],
    summary="Usuario autenticado",
    responses=NO_AUTENTICADO,
)
async def get_me(current_user: Usuario = Depends(get_current_user)):
    """Datos del dueño del token (`Authorization: Bearer <access_token>`)."""
    return Respuesta(data=usuario_item(current_user))


@router.patch(
    "/me",
    response_model=Respuesta[UsuarioItem],
    tags=["api"],
    summary="Actualizar nombre y apellido propios",
    responses={400: {"description": "No se envió ningún campo"}, **NO_AUTENTICADO},
)
async def update_me(
    body: PerfilUpdateRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    usuario = await usuario_service.actualizar_perfil(current_user, body.model_dump(exclude_none=True), db)
    return Respuesta(data=usuario_item(usuario))


@router.post(
    "/me/cambiar-contrasena",
    response_model=RespuestaMensaje,
    tags=["api"],
    summary="Cambiar la contraseña propia",
    responses={400: {"description": "Contraseña actual incorrecta"}, **NO_AUTENTICADO},
)
async def cambiar_contrasena(
    body: CambiarContrasenaRequest,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pide la contraseña actual antes de reemplazarla."""
    await usuario_service.cambiar_contrasena(current_user, body.contrasena_actual, body.contrasena_nueva, db)
    return RespuestaMensaje(message="Contraseña actualizada correctamente")


@router.get("/", tags=["api"], summary="Raíz de la API")
async def api_root():
    return {"message": settings.app_name, "docs": "/docs", "redoc": "/redoc"}
