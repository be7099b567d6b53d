"""Modelo Curso y tabla de inscripción de aprendices."""
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, DateTime, ForeignKey, Identity, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId
from app.models.user import ahora
from app.permisos import VistaCurso

if TYPE_CHECKING:
    from app.models.user import Usuario


curso_estudiantes = Table(
    "curso_estudiantes",
    Base.metadata,
    Column("curso_id", BigIntId, ForeignKey("cursos.id", ondelete="CASCADE"), primary_key=True),
    Column("estudiante_id", BigIntId, ForeignKey("usuarios.id", ondelete="CASCADE"), primary_key=True),
)


class Curso(Base):
    """Curso (ficha): un instructor dueño y un conjunto de aprendices inscritos."""

    __tablename__ = "cursos"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    codigo: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    descripcion: Mapped[str] = mapped_column(Text, nullable=False)
    instructor_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    creado_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=ahora)

    # selectin: la sesión es asíncrona y no admite carga perezosa
    estudiantes: Mapped[list["Usuario"]] = relationship(
        "Usuario", secondary=curso_estudiantes, lazy="selectin", order_by="Usuario.id"
    )

    @property
    def estudiantes_ids(self) -> list[int]:
        return [e.id for e in self.estudiantes]

    def vista(self) -> VistaCurso:
        return VistaCurso(
            id=self.id,
            instructor_id=self.instructor_id,
            estudiantes=frozenset(self.estudiantes_ids),
        )
