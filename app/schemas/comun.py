"""Sobre común de respuesta: {success, data} o {success, count, data}."""
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Respuesta(BaseModel, Generic[T]):
    """Respuesta exitosa con un solo recurso."""

    success: bool = Field(default=True, description="Siempre true en respuestas exitosas")
    data: T


class RespuestaLista(BaseModel, Generic[T]):
    """Respuesta exitosa con una lista de recursos y su cantidad."""

    success: bool = Field(default=True, description="Siempre true en respuestas exitosas")
    count: int = Field(description="Cantidad de elementos en data")
    data: list[T]


class RespuestaMensaje(BaseModel):
    """Respuesta exitosa sin recurso (eliminaciones, cambios de contraseña)."""

    success: bool = Field(default=True)
    message: str = Field(description="Mensaje legible para el cliente")


class RespuestaError(BaseModel):
    """Forma de todas las respuestas de error."""

    success: bool = Field(default=False)
    error: str | list[str] = Field(description="Mensaje de error o lista de errores de validación")


def lista(items: list) -> RespuestaLista:
    return RespuestaLista(count=len(items), data=items)
