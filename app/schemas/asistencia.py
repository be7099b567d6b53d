"""Esquemas para asistencias (registro individual y registro del día)."""
from datetime import date

from pydantic import BaseModel, Field, field_validator

from app.models.asistencia import ESTADOS_ASISTENCIA


def _validar_estado(v: str | None) -> str | None:
    if v is not None and v not in ESTADOS_ASISTENCIA:
        raise ValueError(f"estado debe ser uno de: {', '.join(ESTADOS_ASISTENCIA)}")
    return v


class AsistenciaCreate(BaseModel):
    """Body para registrar la asistencia de un aprendiz en un curso."""

    curso_id: int = Field(description="ID del curso")
    estudiante_id: int = Field(description="ID del aprendiz (debe estar inscrito)")
    fecha: date | None = Field(default=None, description="Fecha del registro. Si no se envía, hoy.")
    estado: str = Field(description="Estado: presente, ausente, excusa o retardo")
    notas: str | None = Field(default=None, max_length=500, description="Notas opcionales")

    @field_validator("estado")
    @classmethod
    def validar_estado(cls, v: str | None) -> str | None:
        return _validar_estado(v)


class AsistenciaUpdate(BaseModel):
    """Body para corregir un registro de asistencia. El curso no se puede cambiar."""

    estudiante_id: int | None = Field(default=None, description="Aprendiz del registro")
    fecha: date | None = Field(default=None, description="Fecha del registro")
    estado: str | None = Field(default=None, description="Estado: presente, ausente, excusa o retardo")
    notas: str | None = Field(default=None, max_length=500, description="Notas")

    @field_validator("estado")
    @classmethod
    def validar_estado(cls, v: str | None) -> str | None:
        return _validar_estado(v)


class AsistenciaDiaEntrada(BaseModel):
    """Estado de un aprendiz dentro del registro del día."""

    estudiante_id: int = Field(description="ID del aprendiz")
    estado: str = Field(description="Estado: presente, ausente, excusa o retardo")
    notas: str | None = Field(default=None, max_length=500, description="Notas opcionales")

    @field_validator("estado")
    @classmethod
    def validar_estado(cls, v: str | None) -> str | None:
        return _validar_estado(v)


class AsistenciaDiaRequest(BaseModel):
    """Body para registrar la asistencia de varios aprendices en una fecha (todo o nada)."""

    curso_id: int = Field(description="ID del curso")
    fecha: date | None = Field(default=None, description="Fecha del registro. Si no se envía, hoy.")
    asistencias: list[AsistenciaDiaEntrada] = Field(description="Estados por aprendiz", min_length=1)


class AsistenciaItem(BaseModel):
    """Registro de asistencia tal como se expone en la API."""

    id: int = Field(description="ID del registro")
    curso_id: int = Field(description="ID del curso")
    estudiante_id: int = Field(description="ID del aprendiz")
    fecha: date = Field(description="Fecha del registro")
    estado: str = Field(description="Estado de la asistencia")
    notas: str | None = Field(default=None, description="Notas")
    creado_por: int = Field(description="ID de quien registró la asistencia")
