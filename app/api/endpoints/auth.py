"""Endpoints de autenticación (registro, login) y dependencias para proteger rutas."""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import NoAutenticado, Prohibido, exigir
from app.core.security import token_para_usuario, usuario_id_desde_token, verify_password
from app.models import EstadoUsuario, Usuario
from app.permisos import Rol, Solicitud, evaluar
from app.schemas.auth import LoginRequest, RegistroRequest, TokenResponse
from app.schemas.comun import Respuesta
from app.schemas.usuario import UsuarioItem
from app.services import usuario_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


def usuario_item(usuario: Usuario) -> UsuarioItem:
    return UsuarioItem(
        id=usuario.id,
        nombre=usuario.nombre,
        apellido=usuario.apellido,
        numero_documento=usuario.numero_documento,
        email=usuario.email,
        rol=usuario.rol,
        estado=usuario.estado,
    )


def _sesion(usuario: Usuario) -> TokenResponse:
    token = token_para_usuario(usuario.id, usuario.email, usuario.rol.value)
    return TokenResponse(access_token=token, usuario=usuario_item(usuario))


@router.post(
    "/registro",
    response_model=Respuesta[TokenResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar usuario",
    responses={
        201: {"description": "Usuario creado; se devuelve el access_token"},
        400: {"description": "Datos inválidos o el usuario ya existe"},
    },
)
async def registro(data: RegistroRequest, db: AsyncSession = Depends(get_db)):
    """
    Registro público de **instructores** y **aprendices**.
    El rol admin no se puede solicitar aquí; se asigna desde la gestión de usuarios.
    """
    usuario = await usuario_service.crear_usuario(
        nombre=data.nombre,
        apellido=data.apellido,
        numero_documento=data.numero_documento,
        email=data.email,
        password=data.password,
        rol=Rol(data.rol),
        db=db,
    )
    return Respuesta(data=_sesion(usuario))


@router.post(
    "/login",
    response_model=Respuesta[TokenResponse],
    summary="Iniciar sesión",
    response_description="Token JWT para usar en el header Authorization",
    responses={
        200: {"description": "Login correcto, se devuelve el access_token"},
        401: {"description": "Correo o contraseña incorrectos"},
        403: {"description": "Usuario inactivo"},
    },
)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Autenticación con **correo** y **contraseña**.
    Usa el token en el header `Authorization: Bearer <access_token>` para acceder a rutas protegidas.
    """
    usuario = await usuario_service.obtener_por_email(data.email, db)
    if usuario is None or not verify_password(data.password, usuario.password_hash or ""):
        logger.info("Login fallido para %s", data.email)
        raise NoAutenticado("Credenciales inválidas")
    if usuario.estado != EstadoUsuario.ACTIVO:
        raise Prohibido("Usuario inactivo. Contacte al administrador.")
    return Respuesta(data=_sesion(usuario))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Usuario:
    """Dependencia: exige un JWT válido y devuelve el usuario actual. Usar en endpoints protegidos."""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise NoAutenticado("Token de autenticación no proporcionado")
    usuario_id = usuario_id_desde_token(credentials.credentials)
    if usuario_id is None:
        raise NoAutenticado("Token inválido o expirado")
    usuario = await usuario_service.obtener_usuario(usuario_id, db)
    if usuario is None:
        raise NoAutenticado("Usuario no encontrado")
    if usuario.estado != EstadoUsuario.ACTIVO:
        raise Prohibido("Usuario inactivo. Contacte al administrador.")
    return usuario


def autorizar(solicitud: Solicitud) -> None:
    """Evalúa la solicitud y lanza la excepción HTTP que corresponda si se deniega."""
    decision = evaluar(solicitud)
    if not decision.permitido:
        logger.info(
            "Acceso denegado usuario=%s accion=%s motivo=%s",
            solicitud.actor.id,
            solicitud.accion.value,
            decision.motivo.value,
        )
    exigir(decision)
