"""Esquemas para evaluaciones, calificaciones y resumen académico."""
from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.evaluacion import PUNTAJE_MAXIMO_POR_DEFECTO


class CalificacionEntrada(BaseModel):
    """Calificación de un aprendiz dentro de una evaluación."""

    estudiante_id: int = Field(description="ID del aprendiz (debe estar inscrito)")
    puntaje: float = Field(description="Puntaje obtenido, entre 0 y el puntaje máximo", ge=0)
    retroalimentacion: str = Field(default="", max_length=1000, description="Retroalimentación del instructor")


class EvaluacionCreate(BaseModel):
    """Body para crear una evaluación, opcionalmente con calificaciones iniciales."""

    curso_id: int = Field(description="ID del curso")
    titulo: str = Field(description="Título", min_length=1, max_length=100)
    descripcion: str = Field(description="Descripción", min_length=1, max_length=500)
    puntaje_maximo: float = Field(default=PUNTAJE_MAXIMO_POR_DEFECTO, gt=0, description="Puntaje máximo")
    fecha_evaluacion: date | None = Field(default=None, description="Fecha de la evaluación. Si no se envía, hoy.")
    calificaciones: list[CalificacionEntrada] = Field(
        default_factory=list, description="Calificaciones iniciales (opcional)"
    )


class EvaluacionUpdate(BaseModel):
    """Body para actualizar una evaluación. El curso no se puede cambiar."""

    titulo: str | None = Field(default=None, min_length=1, max_length=100)
    descripcion: str | None = Field(default=None, min_length=1, max_length=500)
    puntaje_maximo: float | None = Field(default=None, gt=0)
    fecha_evaluacion: date | None = Field(default=None)


class CalificacionUpdate(BaseModel):
    """Body para crear o corregir la calificación de un aprendiz."""

    puntaje: float | None = Field(default=None, ge=0, description="Puntaje obtenido")
    retroalimentacion: str | None = Field(default=None, max_length=1000, description="Retroalimentación")


class CalificacionesRequest(BaseModel):
    """Body para calificar varios aprendices de una evaluación."""

    calificaciones: list[CalificacionEntrada] = Field(min_length=1)


class EvidenciaRequest(BaseModel):
    """Body con la evidencia que entrega un aprendiz (texto o URL)."""

    evidencia: str = Field(description="Enlace o texto de la evidencia", min_length=1, max_length=2000)


class CalificacionItem(BaseModel):
    """Calificación tal como se expone en la API."""

    id: int
    evaluacion_id: int
    curso_id: int
    estudiante_id: int
    puntaje: float
    retroalimentacion: str
    evidencia: str | None = None
    entregado_en: datetime | None = None
    calificado_en: datetime | None = None
    titulo_evaluacion: str | None = Field(default=None, description="Título de la evaluación")
    puntaje_maximo: float | None = Field(default=None, description="Puntaje máximo de la evaluación")


class EvaluacionItem(BaseModel):
    """Evaluación con sus calificaciones."""

    id: int
    curso_id: int
    titulo: str
    descripcion: str
    puntaje_maximo: float
    fecha_evaluacion: date
    creado_por: int
    calificaciones: list[CalificacionItem] = Field(default_factory=list)


class ResumenEstudiante(BaseModel):
    """Resumen académico de un aprendiz."""

    estudiante_id: int
    total_asistencias: int = Field(description="Cantidad de registros de asistencia")
    asistencias_presente: int = Field(description="Registros en estado presente o retardo")
    porcentaje_asistencia: float = Field(description="asistencias_presente / total_asistencias * 100")
    total_calificaciones: int
    promedio_calificaciones: float = Field(description="Promedio de puntajes; 0 si no hay calificaciones")
