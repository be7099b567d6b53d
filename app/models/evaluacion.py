"""Modelos Evaluacion (por curso) y Calificacion (una por aprendiz y evaluación)."""
from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Identity,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId
from app.models.user import ahora
from app.permisos import VistaEvaluacion

PUNTAJE_MAXIMO_POR_DEFECTO = 5.0


class Evaluacion(Base):
    """Evaluación definida por el instructor del curso."""

    __tablename__ = "evaluaciones"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    curso_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("cursos.id"), nullable=False)
    titulo: Mapped[str] = mapped_column(Text, nullable=False)
    descripcion: Mapped[str] = mapped_column(Text, nullable=False)
    puntaje_maximo: Mapped[float] = mapped_column(
        Float, nullable=False, default=PUNTAJE_MAXIMO_POR_DEFECTO
    )
    fecha_evaluacion: Mapped[date] = mapped_column(Date, nullable=False)
    creado_por: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    creado_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=ahora)

    calificaciones: Mapped[list["Calificacion"]] = relationship(
        "Calificacion",
        back_populates="evaluacion",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Calificacion.id",
    )

    def calificacion_de(self, estudiante_id: int) -> "Calificacion | None":
        for calificacion in self.calificaciones:
            if calificacion.estudiante_id == estudiante_id:
                return calificacion
        return None

    def vista(self) -> VistaEvaluacion:
        return VistaEvaluacion(
            id=self.id,
            curso_id=self.curso_id,
            calificados=frozenset(c.estudiante_id for c in self.calificaciones),
        )


class Calificacion(Base):
    """Entrada de calificación de un aprendiz: puntaje, retroalimentación y evidencia.

    ``curso_id`` es copia del curso de la evaluación para consultar por curso
    sin unir tablas; siempre se escribe desde la evaluación.
    """

    __tablename__ = "calificaciones"
    __table_args__ = (
        UniqueConstraint(
            "evaluacion_id", "estudiante_id", name="uq_calificaciones_evaluacion_estudiante"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    evaluacion_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("evaluaciones.id"), nullable=False
    )
    estudiante_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    curso_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("cursos.id"), nullable=False)
    puntaje: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    retroalimentacion: Mapped[str] = mapped_column(Text, nullable=False, default="")
    evidencia: Mapped[str | None] = mapped_column(Text, nullable=True)
    entregado_en: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    calificado_en: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actualizado_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=ahora)

    evaluacion: Mapped["Evaluacion"] = relationship(
        "Evaluacion", back_populates="calificaciones", lazy="joined"
    )
