"""Autorización centralizada por rol, propiedad del curso e inscripción."""
from app.permisos.acciones import Accion
from app.permisos.decision import PERMITIR, Decision, Motivo
from app.permisos.motor import evaluar
from app.permisos.principal import (
    NO_ENCONTRADO,
    Actor,
    Rol,
    Solicitud,
    VistaAsistencia,
    VistaCurso,
    VistaEvaluacion,
    VistaUsuario,
)

__all__ = [
    "Accion",
    "Actor",
    "Decision",
    "Motivo",
    "NO_ENCONTRADO",
    "PERMITIR",
    "Rol",
    "Solicitud",
    "VistaAsistencia",
    "VistaCurso",
    "VistaEvaluacion",
    "VistaUsuario",
    "evaluar",
]
