"""Esquemas para listado, consulta y actualización de usuarios."""
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.permisos import Rol


class UsuarioItem(BaseModel):
    """Usuario tal como se expone en la API (sin hash de contraseña)."""

    id: int = Field(description="ID del usuario")
    nombre: str = Field(description="Nombre del usuario")
    apellido: str | None = Field(default=None, description="Apellido del usuario")
    numero_documento: str | None = Field(default=None, description="Número de documento")
    email: str = Field(description="Correo electrónico")
    rol: Rol = Field(description="Rol: instructor, aprendiz o admin")
    estado: str = Field(description="Estado: activo o inactivo")


class UsuarioUpdate(BaseModel):
    """Body para actualizar un usuario. Todos los campos son opcionales."""

    nombre: str | None = Field(default=None, min_length=1, max_length=100, description="Nombre. Si no se envía, no se modifica.")
    apellido: str | None = Field(default=None, min_length=1, max_length=100, description="Apellido.")
    numero_documento: str | None = Field(default=None, min_length=1, max_length=30, description="Número de documento (único).")
    email: EmailStr | None = Field(default=None, description="Correo electrónico (único).")
    rol: Rol | None = Field(default=None, description="Nuevo rol. Solo un admin puede asignar el rol admin.")
    estado: str | None = Field(default=None, description="Estado: activo o inactivo.")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        if v is not None and v not in ("activo", "inactivo"):
            raise ValueError("estado debe ser 'activo' o 'inactivo'")
        return v


class PerfilUpdateRequest(BaseModel):
    """Body para que el usuario actualice su propio perfil."""

    nombre: str | None = Field(default=None, description="Nombre del usuario", min_length=1, max_length=100)
    apellido: str | None = Field(default=None, description="Apellido del usuario", min_length=1, max_length=100)


class CambiarContrasenaRequest(BaseModel):
    """Body para cambiar la contraseña del usuario autenticado."""

    contrasena_actual: str = Field(description="Contraseña actual")
    contrasena_nueva: str = Field(description="Nueva contraseña", min_length=6)
