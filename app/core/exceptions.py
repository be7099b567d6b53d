"""Excepciones HTTP de la API y conversión de decisiones de autorización."""
from typing import Any

from fastapi import HTTPException, status

from app.permisos import Decision, Motivo


class ErrorAPI(HTTPException):
    """Excepción base: status code fijo y mensaje por defecto."""

    status_code_por_defecto = status.HTTP_500_INTERNAL_SERVER_ERROR
    mensaje_por_defecto = "Error del servidor"

    def __init__(self, detail: Any = None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=self.status_code_por_defecto,
            detail=detail or self.mensaje_por_defecto,
            headers=headers,
        )


class NoAutenticado(ErrorAPI):
    status_code_por_defecto = status.HTTP_401_UNAUTHORIZED
    mensaje_por_defecto = "No está autorizado para acceder a esta ruta"

    def __init__(self, detail: Any = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Prohibido(ErrorAPI):
    status_code_por_defecto = status.HTTP_403_FORBIDDEN
    mensaje_por_defecto = "No tiene permiso para realizar esta acción"


class NoEncontrado(ErrorAPI):
    status_code_por_defecto = status.HTTP_404_NOT_FOUND
    mensaje_por_defecto = "Recurso no encontrado"


class EstadoInvalido(ErrorAPI):
    status_code_por_defecto = status.HTTP_400_BAD_REQUEST
    mensaje_por_defecto = "La operación no es válida en el estado actual"


class Conflicto(ErrorAPI):
    status_code_por_defecto = status.HTTP_400_BAD_REQUEST
    mensaje_por_defecto = "El registro ya existe"


_EXCEPCION_POR_MOTIVO: dict[Motivo, type[ErrorAPI]] = {
    Motivo.PROHIBIDO: Prohibido,
    Motivo.NO_ENCONTRADO: NoEncontrado,
    Motivo.ESTADO_INVALIDO: EstadoInvalido,
    Motivo.CONFLICTO: Conflicto,
}


def exigir(decision: Decision) -> None:
    """Lanza la excepción que corresponde a una decisión denegada; no hace nada si se permite."""
    if decision.permitido:
        return
    raise _EXCEPCION_POR_MOTIVO[decision.motivo](decision.mensaje)
