"""Modelo Asistencia (registro diario por curso y aprendiz)."""
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Identity, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId
from app.models.user import ahora
from app.permisos import VistaAsistencia


class EstadoAsistencia:
    """Valores permitidos para estado de asistencia."""
    PRESENTE = "presente"
    AUSENTE = "ausente"
    EXCUSA = "excusa"
    RETARDO = "retardo"


ESTADOS_ASISTENCIA = (
    EstadoAsistencia.PRESENTE,
    EstadoAsistencia.AUSENTE,
    EstadoAsistencia.EXCUSA,
    EstadoAsistencia.RETARDO,
)

# Cuentan como asistencia en el resumen del estudiante
ESTADOS_ASISTIO = (EstadoAsistencia.PRESENTE, EstadoAsistencia.RETARDO)


class Asistencia(Base):
    """Asistencia: presente/ausente/excusa/retardo por fecha, curso y aprendiz."""

    __tablename__ = "asistencias"
    __table_args__ = (
        UniqueConstraint(
            "curso_id", "estudiante_id", "fecha", name="uq_asistencias_curso_estudiante_fecha"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    curso_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("cursos.id"), nullable=False)
    estudiante_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    fecha: Mapped[date] = mapped_column(Date, nullable=False)
    estado: Mapped[str] = mapped_column(String(20), nullable=False)
    notas: Mapped[str | None] = mapped_column(Text, nullable=True)
    creado_por: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    creado_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=ahora)

    def vista(self) -> VistaAsistencia:
        return VistaAsistencia(
            id=self.id, curso_id=self.curso_id, estudiante_id=self.estudiante_id
        )
