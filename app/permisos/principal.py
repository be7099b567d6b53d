"""Actor autenticado y vistas inmutables de las entidades que se autorizan."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Mapping, Union

if TYPE_CHECKING:
    from app.permisos.acciones import Accion


class Rol(str, Enum):
    """Roles del sistema. Cerrado: cualquier otro valor es inválido."""

    INSTRUCTOR = "instructor"
    APRENDIZ = "aprendiz"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Identidad resuelta desde el token; no cambia durante el request."""

    id: int
    rol: Rol

    @property
    def es_admin(self) -> bool:
        return self.rol is Rol.ADMIN


class _NoEncontrado:
    """Marca una referencia que se intentó cargar y no existe."""

    _instancia = None

    def __new__(cls):
        if cls._instancia is None:
            cls._instancia = super().__new__(cls)
        return cls._instancia

    def __repr__(self) -> str:
        return "NO_ENCONTRADO"

    def __bool__(self) -> bool:
        return False


NO_ENCONTRADO = _NoEncontrado()


@dataclass(frozen=True)
class VistaCurso:
    id: int
    instructor_id: int
    estudiantes: frozenset[int] = frozenset()


@dataclass(frozen=True)
class VistaAsistencia:
    id: int
    curso_id: int
    estudiante_id: int


@dataclass(frozen=True)
class VistaEvaluacion:
    id: int
    curso_id: int
    # Estudiantes que ya tienen una entrada de calificación en la evaluación
    calificados: frozenset[int] = frozenset()


@dataclass(frozen=True)
class VistaUsuario:
    id: int
    rol: Rol
    cursos_a_cargo: int = 0
    cursos_inscritos: int = 0


Referencia = Union[VistaCurso, VistaAsistencia, VistaEvaluacion, VistaUsuario, _NoEncontrado, None]


@dataclass(frozen=True)
class Solicitud:
    """Entrada completa del motor de autorización.

    Las referencias valen ``None`` cuando la acción no las usa y
    ``NO_ENCONTRADO`` cuando el handler las buscó y no existen.

    - ``estudiantes``: estudiantes nombrados por la operación (registro de
      asistencia, calificaciones, consulta de un estudiante concreto).
    - ``candidatos``: usuarios a inscribir en un curso, con su rol o ``None``
      si no existen.
    - ``instructor_asignado``: instructor indicado por un admin al crear un curso.
    - ``nuevo_rol``: rol solicitado al actualizar un usuario.
    - ``duplicado``: ya existe un registro con la misma clave única.
    """

    actor: Actor
    accion: Accion
    curso: Referencia = None
    asistencia: Referencia = None
    evaluacion: Referencia = None
    usuario: Referencia = None
    estudiantes: tuple[int, ...] = ()
    candidatos: Mapping[int, Rol | None] = field(default_factory=dict)
    instructor_asignado: Referencia = None
    nuevo_rol: Rol | None = None
    duplicado: bool = False
