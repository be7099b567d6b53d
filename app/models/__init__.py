"""Modelos SQLAlchemy (tablas de la base de datos)."""
from app.models.user import EstadoUsuario, Usuario
from app.models.curso import Curso, curso_estudiantes
from app.models.asistencia import Asistencia, EstadoAsistencia, ESTADOS_ASISTENCIA
from app.models.evaluacion import Calificacion, Evaluacion

__all__ = [
    "Usuario",
    "EstadoUsuario",
    "Curso",
    "curso_estudiantes",
    "Asistencia",
    "EstadoAsistencia",
    "ESTADOS_ASISTENCIA",
    "Evaluacion",
    "Calificacion",
]
