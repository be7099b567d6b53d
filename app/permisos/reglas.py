"""Reglas de autorización, agrupadas por etapa.

Cada regla devuelve una ``Decision`` denegada o ``None`` para seguir con la
siguiente. Ninguna hace I/O: todo lo que necesitan viene en la ``Solicitud``.
"""
from app.permisos.acciones import OPCIONALES, REFERENCIAS, ROLES_PERMITIDOS, Accion
from app.permisos.decision import Decision
from app.permisos.principal import (
    NO_ENCONTRADO,
    Rol,
    Solicitud,
    VistaCurso,
    VistaUsuario,
)

MENSAJES_NO_ENCONTRADO = {
    "curso": "Curso no encontrado",
    "asistencia": "Registro de asistencia no encontrado",
    "evaluacion": "No se encontró la evaluación",
    "usuario": "Usuario no encontrado",
}

ACCIONES_DE_USUARIO = frozenset(
    {Accion.LEER_USUARIO, Accion.ACTUALIZAR_USUARIO, Accion.ELIMINAR_USUARIO}
)


# Etapa 1: rol

def regla_rol(solicitud: Solicitud) -> Decision | None:
    actor = solicitud.actor
    if actor.rol not in ROLES_PERMITIDOS[solicitud.accion]:
        return Decision.prohibido(
            f"El rol {actor.rol.value} no está autorizado para realizar esta acción"
        )
    return None


# Etapa 2: existencia de las referencias

def regla_existencia(solicitud: Solicitud) -> Decision | None:
    accion = solicitud.accion
    requeridas = REFERENCIAS[accion]
    for nombre in OPCIONALES.get(accion, ()) + requeridas:
        valor = getattr(solicitud, nombre)
        if valor is NO_ENCONTRADO:
            return Decision.no_encontrado(MENSAJES_NO_ENCONTRADO[nombre])
        if valor is None and nombre in requeridas:
            raise ValueError(f"{accion.value} requiere la referencia '{nombre}'")
    return None


# Etapa 3: propiedad (instructor) y pertenencia (aprendiz)

def _es_duenio(solicitud: Solicitud, curso: VistaCurso) -> bool:
    return curso.instructor_id == solicitud.actor.id


def _inscrito(solicitud: Solicitud, curso: VistaCurso) -> bool:
    return solicitud.actor.id in curso.estudiantes


def regla_propiedad_curso(solicitud: Solicitud) -> Decision | None:
    curso = solicitud.curso
    if not isinstance(curso, VistaCurso) or solicitud.actor.rol is not Rol.INSTRUCTOR:
        return None
    if not _es_duenio(solicitud, curso):
        return Decision.prohibido("No tiene permiso sobre este curso: no es su instructor")
    return None


def regla_pertenencia_aprendiz(solicitud: Solicitud) -> Decision | None:
    curso = solicitud.curso
    if not isinstance(curso, VistaCurso) or solicitud.actor.rol is not Rol.APRENDIZ:
        return None

    accion = solicitud.accion
    actor_id = solicitud.actor.id

    if accion is Accion.LEER_CURSO:
        if not _inscrito(solicitud, curso):
            return Decision.prohibido("No tiene permiso para acceder a este curso")

    elif accion is Accion.LEER_ASISTENCIA:
        asistencia = solicitud.asistencia
        if asistencia is None and not _inscrito(solicitud, curso):
            return Decision.prohibido("No tiene permiso para acceder a este curso")
        if asistencia is not None and asistencia.estudiante_id != actor_id:
            return Decision.prohibido("No tiene permiso para ver esta asistencia")
        if any(estudiante != actor_id for estudiante in solicitud.estudiantes):
            return Decision.prohibido(
                "No tiene permiso para ver las asistencias de otro estudiante"
            )

    elif accion is Accion.LEER_EVALUACION:
        evaluacion = solicitud.evaluacion
        calificado = evaluacion is not None and actor_id in evaluacion.calificados
        if not (_inscrito(solicitud, curso) or calificado):
            return Decision.prohibido("No tiene permiso para ver esta evaluación")
        if any(estudiante != actor_id for estudiante in solicitud.estudiantes):
            return Decision.prohibido(
                "No tiene permiso para ver las calificaciones de otro estudiante"
            )

    elif accion is Accion.SUBIR_EVIDENCIA:
        if not _inscrito(solicitud, curso):
            return Decision.prohibido("No estás inscrito en este curso")

    return None


def regla_usuario(solicitud: Solicitud) -> Decision | None:
    """Sobre usuarios: uno mismo siempre; a otros solo instructor/admin; sin escalar rol."""
    if solicitud.accion not in ACCIONES_DE_USUARIO:
        return None
    actor = solicitud.actor
    objetivo = solicitud.usuario
    if actor.es_admin:
        return None

    es_uno_mismo = objetivo.id == actor.id
    if not es_uno_mismo and actor.rol is not Rol.INSTRUCTOR:
        return Decision.prohibido("No tiene permiso sobre este usuario")
    if not es_uno_mismo and objetivo.rol is Rol.ADMIN and solicitud.accion is not Accion.LEER_USUARIO:
        return Decision.prohibido("Solo un administrador puede modificar a otro administrador")

    nuevo_rol = solicitud.nuevo_rol
    if solicitud.accion is Accion.ACTUALIZAR_USUARIO and nuevo_rol is not None and nuevo_rol is not objetivo.rol:
        if actor.rol is Rol.APRENDIZ:
            return Decision.prohibido("No tiene permiso para cambiar su rol")
        if nuevo_rol is Rol.ADMIN:
            return Decision.prohibido("Solo un administrador puede asignar el rol admin")
    return None


# Etapa 4: precondiciones de estado y unicidad

def _no_inscritos(solicitud: Solicitud) -> list[int]:
    curso = solicitud.curso
    return [e for e in solicitud.estudiantes if e not in curso.estudiantes]


def _cambia_rol(solicitud: Solicitud) -> bool:
    return solicitud.nuevo_rol is not None and solicitud.nuevo_rol is not solicitud.usuario.rol


def regla_estado(solicitud: Solicitud) -> Decision | None:
    accion = solicitud.accion

    if accion is Accion.CREAR_CURSO and solicitud.actor.es_admin:
        instructor = solicitud.instructor_asignado
        if not isinstance(instructor, VistaUsuario) or instructor.rol is not Rol.INSTRUCTOR:
            return Decision.estado_invalido("Debe indicar un instructor existente para el curso")

    elif accion is Accion.AGREGAR_ESTUDIANTES:
        if not solicitud.candidatos:
            return Decision.estado_invalido("Por favor proporcione una lista de IDs de estudiantes")
        if any(rol is not Rol.APRENDIZ for rol in solicitud.candidatos.values()):
            return Decision.estado_invalido("Uno o más estudiantes no existen o no son aprendices")

    elif accion is Accion.CREAR_ASISTENCIA and not solicitud.estudiantes:
        return Decision.estado_invalido("Debe indicar al menos un estudiante")

    elif accion is Accion.ELIMINAR_USUARIO and solicitud.usuario.cursos_a_cargo > 0:
        return Decision.estado_invalido(
            "No se puede eliminar el usuario porque es instructor de uno o más cursos"
        )

    elif accion is Accion.ACTUALIZAR_USUARIO and _cambia_rol(solicitud):
        if solicitud.usuario.cursos_a_cargo > 0:
            return Decision.estado_invalido(
                "No se puede cambiar el rol de un instructor con cursos a cargo"
            )
        if solicitud.usuario.cursos_inscritos > 0:
            return Decision.estado_invalido(
                "No se puede cambiar el rol de un aprendiz inscrito en uno o más cursos"
            )

    if accion in (
        Accion.CREAR_ASISTENCIA,
        Accion.ACTUALIZAR_ASISTENCIA,
        Accion.CREAR_EVALUACION,
        Accion.CALIFICAR,
    ):
        faltantes = _no_inscritos(solicitud)
        if faltantes:
            return Decision.estado_invalido(
                f"Estudiantes no inscritos en este curso (IDs): {sorted(set(faltantes))}"
            )

    if solicitud.duplicado and accion in (Accion.CREAR_ASISTENCIA, Accion.ACTUALIZAR_ASISTENCIA):
        return Decision.conflicto(
            "Ya existe un registro de asistencia para este estudiante en esta fecha y curso"
        )
    return None
