"""Esquemas para registro, login y JWT."""
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from app.schemas.usuario import UsuarioItem


class LoginRequest(BaseModel):
    """Body del endpoint de login."""

    email: EmailStr = Field(description="Correo electrónico del usuario", examples=["instructor@sena.edu.co"])
    password: str = Field(description="Contraseña en texto plano", min_length=1, examples=["123456"])


class RegistroRequest(BaseModel):
    """Body del registro público. Solo se aceptan los roles instructor y aprendiz."""

    nombre: str = Field(description="Nombre del usuario", min_length=1, max_length=100)
    apellido: str = Field(description="Apellido del usuario", min_length=1, max_length=100)
    numero_documento: str = Field(description="Número de documento (único)", min_length=1, max_length=30)
    email: EmailStr = Field(description="Correo electrónico (único)")
    password: str = Field(description="Contraseña en texto plano", min_length=6)
    rol: Literal["instructor", "aprendiz"] = Field(
        default="aprendiz", description="Rol solicitado: instructor o aprendiz"
    )


class TokenResponse(BaseModel):
    """Respuesta con access_token JWT y datos del usuario."""

    access_token: str = Field(description="Token JWT para enviar en header Authorization: Bearer <token>")
    token_type: str = Field(default="bearer", description="Tipo de token (siempre 'bearer')")
    usuario: UsuarioItem = Field(description="Usuario autenticado")
