"""Modelo Usuario (instructores, aprendices y administradores)."""
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId
from app.permisos import Actor, Rol, VistaUsuario


def ahora() -> datetime:
    return datetime.now(timezone.utc)


class EstadoUsuario:
    """Valores permitidos para estado del usuario."""
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class Usuario(Base):
    """Usuario del sistema; el rol decide qué puede hacer."""

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    apellido: Mapped[str | None] = mapped_column(Text, nullable=True)
    numero_documento: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    rol: Mapped[Rol] = mapped_column(
        Enum(
            Rol,
            name="rol_usuario",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [m.value for m in enum],
        ),
        nullable=False,
        default=Rol.APRENDIZ,
    )
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoUsuario.ACTIVO, server_default=text("'activo'")
    )
    creado_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=ahora)

    def a_actor(self) -> Actor:
        return Actor(id=self.id, rol=self.rol)

    def vista(self, cursos_a_cargo: int = 0, cursos_inscritos: int = 0) -> VistaUsuario:
        return VistaUsuario(
            id=self.id, rol=self.rol, cursos_a_cargo=cursos_a_cargo, cursos_inscritos=cursos_inscritos
        )
