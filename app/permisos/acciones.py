"""Acciones autorizables, roles permitidos y referencias que cada una necesita."""
from enum import Enum

from app.permisos.principal import Rol


class Accion(str, Enum):
    CREAR_CURSO = "crear_curso"
    LEER_CURSO = "leer_curso"
    ACTUALIZAR_CURSO = "actualizar_curso"
    ELIMINAR_CURSO = "eliminar_curso"
    AGREGAR_ESTUDIANTES = "agregar_estudiantes"
    QUITAR_ESTUDIANTES = "quitar_estudiantes"

    CREAR_ASISTENCIA = "crear_asistencia"
    LEER_ASISTENCIA = "leer_asistencia"
    ACTUALIZAR_ASISTENCIA = "actualizar_asistencia"
    ELIMINAR_ASISTENCIA = "eliminar_asistencia"

    CREAR_EVALUACION = "crear_evaluacion"
    LEER_EVALUACION = "leer_evaluacion"
    ACTUALIZAR_EVALUACION = "actualizar_evaluacion"
    ELIMINAR_EVALUACION = "eliminar_evaluacion"
    SUBIR_EVIDENCIA = "subir_evidencia"
    CALIFICAR = "calificar"

    LISTAR_USUARIOS = "listar_usuarios"
    LEER_USUARIO = "leer_usuario"
    ACTUALIZAR_USUARIO = "actualizar_usuario"
    ELIMINAR_USUARIO = "eliminar_usuario"


TODOS = frozenset(Rol)
GESTORES = frozenset({Rol.INSTRUCTOR, Rol.ADMIN})

ROLES_PERMITIDOS: dict[Accion, frozenset[Rol]] = {
    Accion.CREAR_CURSO: GESTORES,
    Accion.LEER_CURSO: TODOS,
    Accion.ACTUALIZAR_CURSO: GESTORES,
    Accion.ELIMINAR_CURSO: GESTORES,
    Accion.AGREGAR_ESTUDIANTES: GESTORES,
    Accion.QUITAR_ESTUDIANTES: GESTORES,
    Accion.CREAR_ASISTENCIA: GESTORES,
    Accion.LEER_ASISTENCIA: TODOS,
    Accion.ACTUALIZAR_ASISTENCIA: GESTORES,
    Accion.ELIMINAR_ASISTENCIA: GESTORES,
    Accion.CREAR_EVALUACION: GESTORES,
    Accion.LEER_EVALUACION: TODOS,
    Accion.ACTUALIZAR_EVALUACION: GESTORES,
    Accion.ELIMINAR_EVALUACION: GESTORES,
    Accion.SUBIR_EVIDENCIA: frozenset({Rol.APRENDIZ}),
    Accion.CALIFICAR: GESTORES,
    Accion.LISTAR_USUARIOS: GESTORES,
    Accion.LEER_USUARIO: TODOS,
    Accion.ACTUALIZAR_USUARIO: TODOS,
    Accion.ELIMINAR_USUARIO: TODOS,
}

# Referencias obligatorias, en el orden en que se comprueba su existencia.
# El registro hijo va antes que su curso: si no existe, el curso no se puede cargar.
REFERENCIAS: dict[Accion, tuple[str, ...]] = {
    Accion.CREAR_CURSO: (),
    Accion.LEER_CURSO: ("curso",),
    Accion.ACTUALIZAR_CURSO: ("curso",),
    Accion.ELIMINAR_CURSO: ("curso",),
    Accion.AGREGAR_ESTUDIANTES: ("curso",),
    Accion.QUITAR_ESTUDIANTES: ("curso",),
    Accion.CREAR_ASISTENCIA: ("curso",),
    Accion.LEER_ASISTENCIA: ("curso",),
    Accion.ACTUALIZAR_ASISTENCIA: ("asistencia", "curso"),
    Accion.ELIMINAR_ASISTENCIA: ("asistencia", "curso"),
    Accion.CREAR_EVALUACION: ("curso",),
    Accion.LEER_EVALUACION: ("curso",),
    Accion.ACTUALIZAR_EVALUACION: ("evaluacion", "curso"),
    Accion.ELIMINAR_EVALUACION: ("evaluacion", "curso"),
    Accion.SUBIR_EVIDENCIA: ("evaluacion", "curso"),
    Accion.CALIFICAR: ("evaluacion", "curso"),
    Accion.LISTAR_USUARIOS: (),
    Accion.LEER_USUARIO: ("usuario",),
    Accion.ACTUALIZAR_USUARIO: ("usuario",),
    Accion.ELIMINAR_USUARIO: ("usuario",),
}

# Lecturas que aceptan un registro concreto opcional además del curso
OPCIONALES: dict[Accion, tuple[str, ...]] = {
    Accion.LEER_ASISTENCIA: ("asistencia",),
    Accion.LEER_EVALUACION: ("evaluacion",),
}
