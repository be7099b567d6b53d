"""Motor de autorización: evalúa las reglas en orden de precedencia fijo."""
from app.permisos.decision import PERMITIR, Decision
from app.permisos.principal import Solicitud
from app.permisos.reglas import (
    regla_estado,
    regla_existencia,
    regla_pertenencia_aprendiz,
    regla_propiedad_curso,
    regla_rol,
    regla_usuario,
)

# rol -> existencia -> propiedad/pertenencia -> estado/unicidad
ETAPAS = (
    (regla_rol,),
    (regla_existencia,),
    (regla_propiedad_curso, regla_pertenencia_aprendiz, regla_usuario),
    (regla_estado,),
)


def evaluar(solicitud: Solicitud) -> Decision:
    """Decide si el actor puede ejecutar la acción sobre las referencias dadas.

    Función pura: no consulta la base de datos ni lanza excepciones por reglas
    de negocio. La primera regla que deniega determina el motivo.
    """
    for etapa in ETAPAS:
        for regla in etapa:
            decision = regla(solicitud)
            if decision is not None:
                return decision
    return PERMITIR
