"""Motor de autorización: reglas, precedencia y totalidad sin base de datos."""
import itertools

import pytest

from app.permisos import (
    NO_ENCONTRADO,
    Accion,
    Actor,
    Motivo,
    Rol,
    Solicitud,
    VistaAsistencia,
    VistaCurso,
    VistaEvaluacion,
    VistaUsuario,
    evaluar,
)

INSTRUCTOR = Actor(id=1, rol=Rol.INSTRUCTOR)
OTRO_INSTRUCTOR = Actor(id=2, rol=Rol.INSTRUCTOR)
APRENDIZ = Actor(id=10, rol=Rol.APRENDIZ)
APRENDIZ_AJENO = Actor(id=11, rol=Rol.APRENDIZ)
ADMIN = Actor(id=99, rol=Rol.ADMIN)

CURSO = VistaCurso(id=5, instructor_id=1, estudiantes=frozenset({10}))
ASISTENCIA = VistaAsistencia(id=7, curso_id=5, estudiante_id=10)
EVALUACION = VistaEvaluacion(id=8, curso_id=5, calificados=frozenset({10}))

MUTACIONES = [
    Accion.CREAR_CURSO,
    Accion.ACTUALIZAR_CURSO,
    Accion.ELIMINAR_CURSO,
    Accion.AGREGAR_ESTUDIANTES,
    Accion.QUITAR_ESTUDIANTES,
    Accion.CREAR_ASISTENCIA,
    Accion.ACTUALIZAR_ASISTENCIA,
    Accion.ELIMINAR_ASISTENCIA,
    Accion.CREAR_EVALUACION,
    Accion.ACTUALIZAR_EVALUACION,
    Accion.ELIMINAR_EVALUACION,
    Accion.CALIFICAR,
]

# Solicitudes válidas del instructor dueño sobre su curso
SOBRE_CURSO = {
    Accion.LEER_CURSO: {"curso": CURSO},
    Accion.ACTUALIZAR_CURSO: {"curso": CURSO},
    Accion.ELIMINAR_CURSO: {"curso": CURSO},
    Accion.AGREGAR_ESTUDIANTES: {"curso": CURSO, "candidatos": {11: Rol.APRENDIZ}},
    Accion.QUITAR_ESTUDIANTES: {"curso": CURSO},
    Accion.CREAR_ASISTENCIA: {"curso": CURSO, "estudiantes": (10,)},
    Accion.LEER_ASISTENCIA: {"curso": CURSO},
    Accion.ACTUALIZAR_ASISTENCIA: {"asistencia": ASISTENCIA, "curso": CURSO},
    Accion.ELIMINAR_ASISTENCIA: {"asistencia": ASISTENCIA, "curso": CURSO},
    Accion.CREAR_EVALUACION: {"curso": CURSO},
    Accion.LEER_EVALUACION: {"evaluacion": EVALUACION, "curso": CURSO},
    Accion.ACTUALIZAR_EVALUACION: {"evaluacion": EVALUACION, "curso": CURSO},
    Accion.ELIMINAR_EVALUACION: {"evaluacion": EVALUACION, "curso": CURSO},
    Accion.CALIFICAR: {"evaluacion": EVALUACION, "curso": CURSO, "estudiantes": (10,)},
}


def _solicitud(actor, accion, **referencias):
    return Solicitud(actor=actor, accion=accion, **referencias)


@pytest.mark.parametrize("accion", MUTACIONES)
def test_aprendiz_no_puede_mutar(accion):
    # El rol se evalúa antes que las referencias: no hace falta cargarlas
    decision = evaluar(_solicitud(APRENDIZ, accion))
    assert not decision.permitido
    assert decision.motivo is Motivo.PROHIBIDO


@pytest.mark.parametrize("accion,referencias", SOBRE_CURSO.items(), ids=lambda v: getattr(v, "value", ""))
def test_instructor_dueno_permitido(accion, referencias):
    assert evaluar(_solicitud(INSTRUCTOR, accion, **referencias)).permitido


@pytest.mark.parametrize("accion,referencias", SOBRE_CURSO.items(), ids=lambda v: getattr(v, "value", ""))
def test_instructor_ajeno_prohibido(accion, referencias):
    decision = evaluar(_solicitud(OTRO_INSTRUCTOR, accion, **referencias))
    assert decision.motivo is Motivo.PROHIBIDO


@pytest.mark.parametrize("accion,referencias", SOBRE_CURSO.items(), ids=lambda v: getattr(v, "value", ""))
def test_admin_omite_propiedad(accion, referencias):
    assert evaluar(_solicitud(ADMIN, accion, **referencias)).permitido


def test_rol_antes_que_existencia():
    decision = evaluar(_solicitud(APRENDIZ, Accion.ACTUALIZAR_CURSO, curso=NO_ENCONTRADO))
    assert decision.motivo is Motivo.PROHIBIDO


def test_existencia_antes_que_propiedad():
    decision = evaluar(_solicitud(OTRO_INSTRUCTOR, Accion.ACTUALIZAR_CURSO, curso=NO_ENCONTRADO))
    assert decision.motivo is Motivo.NO_ENCONTRADO
    assert decision.mensaje == "Curso no encontrado"


def test_registro_hijo_inexistente_es_no_encontrado():
    decision = evaluar(
        _solicitud(INSTRUCTOR, Accion.ACTUALIZAR_ASISTENCIA, asistencia=NO_ENCONTRADO)
    )
    assert decision.motivo is Motivo.NO_ENCONTRADO


def test_propiedad_antes_que_conflicto():
    decision = evaluar(
        _solicitud(
            OTRO_INSTRUCTOR, Accion.CREAR_ASISTENCIA, curso=CURSO, estudiantes=(10,), duplicado=True
        )
    )
    assert decision.motivo is Motivo.PROHIBIDO


def test_duplicado_es_conflicto():
    decision = evaluar(
        _solicitud(INSTRUCTOR, Accion.CREAR_ASISTENCIA, curso=CURSO, estudiantes=(10,), duplicado=True)
    )
    assert decision.motivo is Motivo.CONFLICTO


def test_referencia_obligatoria_ausente_es_error_de_programacion():
    with pytest.raises(ValueError):
        evaluar(_solicitud(INSTRUCTOR, Accion.ACTUALIZAR_CURSO))


@pytest.mark.parametrize(
    "accion,extra",
    [
        (Accion.CREAR_ASISTENCIA, {"estudiantes": (11,)}),
        (Accion.ACTUALIZAR_ASISTENCIA, {"asistencia": ASISTENCIA, "estudiantes": (11,)}),
        (Accion.CREAR_EVALUACION, {"estudiantes": (10, 11)}),
        (Accion.CALIFICAR, {"evaluacion": EVALUACION, "estudiantes": (11,)}),
    ],
)
def test_estudiante_no_inscrito_es_estado_invalido(accion, extra):
    decision = evaluar(_solicitud(INSTRUCTOR, accion, curso=CURSO, **extra))
    assert decision.motivo is Motivo.ESTADO_INVALIDO
    assert "11" in decision.mensaje


def test_crear_asistencia_sin_estudiantes():
    decision = evaluar(_solicitud(INSTRUCTOR, Accion.CREAR_ASISTENCIA, curso=CURSO))
    assert decision.motivo is Motivo.ESTADO_INVALIDO


@pytest.mark.parametrize(
    "candidatos",
    [{}, {11: None}, {11: Rol.APRENDIZ, 2: Rol.INSTRUCTOR}, {99: Rol.ADMIN}],
)
def test_agregar_estudiantes_exige_aprendices_existentes(candidatos):
    decision = evaluar(
        _solicitud(INSTRUCTOR, Accion.AGREGAR_ESTUDIANTES, curso=CURSO, candidatos=candidatos)
    )
    assert decision.motivo is Motivo.ESTADO_INVALIDO


@pytest.mark.parametrize(
    "actor,estudiantes,permitido",
    [
        (APRENDIZ, (), True),
        (APRENDIZ, (10,), True),
        (APRENDIZ, (11,), False),
        (APRENDIZ_AJENO, (), False),
    ],
)
def test_aprendiz_lee_asistencias_del_curso(actor, estudiantes, permitido):
    decision = evaluar(
        _solicitud(actor, Accion.LEER_ASISTENCIA, curso=CURSO, estudiantes=estudiantes)
    )
    assert decision.permitido is permitido


def test_aprendiz_solo_lee_su_registro():
    ajeno = VistaAsistencia(id=9, curso_id=5, estudiante_id=12)
    assert evaluar(
        _solicitud(APRENDIZ, Accion.LEER_ASISTENCIA, asistencia=ASISTENCIA, curso=CURSO)
    ).permitido
    decision = evaluar(_solicitud(APRENDIZ, Accion.LEER_ASISTENCIA, asistencia=ajeno, curso=CURSO))
    assert decision.motivo is Motivo.PROHIBIDO


@pytest.mark.parametrize("actor,permitido", [(APRENDIZ, True), (APRENDIZ_AJENO, False)])
def test_aprendiz_lee_curso_solo_si_inscrito(actor, permitido):
    assert evaluar(_solicitud(actor, Accion.LEER_CURSO, curso=CURSO)).permitido is permitido


def test_aprendiz_calificado_lee_evaluacion_aunque_haya_salido():
    sin_aprendiz = VistaCurso(id=5, instructor_id=1, estudiantes=frozenset())
    decision = evaluar(
        _solicitud(APRENDIZ, Accion.LEER_EVALUACION, evaluacion=EVALUACION, curso=sin_aprendiz)
    )
    assert decision.permitido
    decision = evaluar(_solicitud(APRENDIZ, Accion.LEER_EVALUACION, curso=sin_aprendiz))
    assert decision.motivo is Motivo.PROHIBIDO


@pytest.mark.parametrize(
    "actor,motivo",
    [(APRENDIZ, None), (APRENDIZ_AJENO, Motivo.PROHIBIDO), (INSTRUCTOR, Motivo.PROHIBIDO), (ADMIN, Motivo.PROHIBIDO)],
)
def test_subir_evidencia(actor, motivo):
    decision = evaluar(
        _solicitud(actor, Accion.SUBIR_EVIDENCIA, evaluacion=EVALUACION, curso=CURSO)
    )
    assert decision.motivo is motivo


@pytest.mark.parametrize(
    "actor,asignado,motivo",
    [
        (INSTRUCTOR, None, None),
        (ADMIN, None, Motivo.ESTADO_INVALIDO),
        (ADMIN, NO_ENCONTRADO, Motivo.ESTADO_INVALIDO),
        (ADMIN, VistaUsuario(id=10, rol=Rol.APRENDIZ), Motivo.ESTADO_INVALIDO),
        (ADMIN, VistaUsuario(id=1, rol=Rol.INSTRUCTOR), None),
        (APRENDIZ, None, Motivo.PROHIBIDO),
    ],
)
def test_crear_curso(actor, asignado, motivo):
    decision = evaluar(_solicitud(actor, Accion.CREAR_CURSO, instructor_asignado=asignado))
    assert decision.motivo is motivo


@pytest.mark.parametrize(
    "actor,accion,objetivo,nuevo_rol,motivo",
    [
        (APRENDIZ, Accion.LEER_USUARIO, VistaUsuario(10, Rol.APRENDIZ), None, None),
        (APRENDIZ, Accion.LEER_USUARIO, VistaUsuario(11, Rol.APRENDIZ), None, Motivo.PROHIBIDO),
        (APRENDIZ, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ), Rol.INSTRUCTOR, Motivo.PROHIBIDO),
        (APRENDIZ, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ), Rol.APRENDIZ, None),
        (INSTRUCTOR, Accion.LEER_USUARIO, VistaUsuario(10, Rol.APRENDIZ), None, None),
        (INSTRUCTOR, Accion.LEER_USUARIO, VistaUsuario(99, Rol.ADMIN), None, None),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(99, Rol.ADMIN), None, Motivo.PROHIBIDO),
        (INSTRUCTOR, Accion.ELIMINAR_USUARIO, VistaUsuario(99, Rol.ADMIN), None, Motivo.PROHIBIDO),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ), Rol.ADMIN, Motivo.PROHIBIDO),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(1, Rol.INSTRUCTOR), Rol.ADMIN, Motivo.PROHIBIDO),
        (ADMIN, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ), Rol.ADMIN, None),
        (ADMIN, Accion.ELIMINAR_USUARIO, VistaUsuario(1, Rol.INSTRUCTOR, cursos_a_cargo=2), None, Motivo.ESTADO_INVALIDO),
        (ADMIN, Accion.ELIMINAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ), None, None),
        (ADMIN, Accion.LEER_USUARIO, NO_ENCONTRADO, None, Motivo.NO_ENCONTRADO),
        (OTRO_INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(1, Rol.INSTRUCTOR, cursos_a_cargo=1), Rol.APRENDIZ, Motivo.ESTADO_INVALIDO),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(1, Rol.INSTRUCTOR, cursos_a_cargo=1), Rol.APRENDIZ, Motivo.ESTADO_INVALIDO),
        (ADMIN, Accion.ACTUALIZAR_USUARIO, VistaUsuario(1, Rol.INSTRUCTOR, cursos_a_cargo=1), Rol.ADMIN, Motivo.ESTADO_INVALIDO),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ, cursos_inscritos=1), Rol.INSTRUCTOR, Motivo.ESTADO_INVALIDO),
        (ADMIN, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ, cursos_inscritos=2), Rol.ADMIN, Motivo.ESTADO_INVALIDO),
        (ADMIN, Accion.ACTUALIZAR_USUARIO, VistaUsuario(10, Rol.APRENDIZ, cursos_inscritos=2), Rol.APRENDIZ, None),
        (INSTRUCTOR, Accion.ACTUALIZAR_USUARIO, VistaUsuario(2, Rol.INSTRUCTOR), Rol.APRENDIZ, None),
    ],
)
def test_reglas_de_usuario(actor, accion, objetivo, nuevo_rol, motivo):
    decision = evaluar(_solicitud(actor, accion, usuario=objetivo, nuevo_rol=nuevo_rol))
    assert decision.motivo is motivo


@pytest.mark.parametrize("actor,permitido", [(APRENDIZ, False), (INSTRUCTOR, True), (ADMIN, True)])
def test_listar_usuarios(actor, permitido):
    assert evaluar(_solicitud(actor, Accion.LISTAR_USUARIOS)).permitido is permitido


@pytest.mark.parametrize(
    "actor,accion",
    list(itertools.product([INSTRUCTOR, OTRO_INSTRUCTOR, APRENDIZ, APRENDIZ_AJENO, ADMIN], list(Accion))),
)
def test_toda_solicitud_completa_tiene_una_sola_decision(actor, accion):
    solicitud = _solicitud(
        actor,
        accion,
        curso=CURSO,
        asistencia=ASISTENCIA,
        evaluacion=EVALUACION,
        usuario=VistaUsuario(10, Rol.APRENDIZ),
        estudiantes=(10,),
        candidatos={11: Rol.APRENDIZ},
        instructor_asignado=VistaUsuario(1, Rol.INSTRUCTOR),
    )
    decision = evaluar(solicitud)
    assert decision.permitido is (decision.motivo is None)
    assert evaluar(solicitud) == decision
