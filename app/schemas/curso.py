"""Esquemas para cursos (fichas) y su lista de aprendices."""
from datetime import date

from pydantic import BaseModel, Field, model_validator


class CursoCreate(BaseModel):
    """Body para crear un curso.

    Un instructor queda como dueño del curso que crea; un admin debe indicar
    ``instructor_id``.
    """

    nombre: str = Field(description="Nombre del curso", min_length=1, max_length=100)
    codigo: str = Field(description="Código de ficha (único)", min_length=1, max_length=30)
    descripcion: str = Field(description="Descripción del curso", min_length=1, max_length=500)
    fecha_inicio: date = Field(description="Fecha de inicio (YYYY-MM-DD)")
    fecha_fin: date = Field(description="Fecha de fin (YYYY-MM-DD)")
    instructor_id: int | None = Field(
        default=None, description="Instructor dueño. Obligatorio cuando crea un admin; ignorado si crea un instructor."
    )

    @model_validator(mode="after")
    def fechas_ordenadas(self) -> "CursoCreate":
        if self.fecha_fin < self.fecha_inicio:
            raise ValueError("fecha_fin no puede ser anterior a fecha_inicio")
        return self


class CursoUpdate(BaseModel):
    """Body para actualizar un curso. El instructor dueño no se puede cambiar."""

    nombre: str | None = Field(default=None, min_length=1, max_length=100, description="Nombre del curso")
    codigo: str | None = Field(default=None, min_length=1, max_length=30, description="Código de ficha (único)")
    descripcion: str | None = Field(default=None, min_length=1, max_length=500, description="Descripción")
    fecha_inicio: date | None = Field(default=None, description="Fecha de inicio")
    fecha_fin: date | None = Field(default=None, description="Fecha de fin")


class EstudiantesRequest(BaseModel):
    """Body para agregar o quitar aprendices de un curso."""

    estudiantes: list[int] = Field(description="IDs de los aprendices", min_length=1)


class CursoItem(BaseModel):
    """Curso tal como se expone en la API."""

    id: int = Field(description="ID del curso")
    nombre: str = Field(description="Nombre del curso")
    codigo: str = Field(description="Código de ficha")
    descripcion: str = Field(description="Descripción")
    instructor_id: int = Field(description="ID del instructor dueño")
    estudiantes: list[int] = Field(default_factory=list, description="IDs de los aprendices inscritos")
    fecha_inicio: date = Field(description="Fecha de inicio")
    fecha_fin: date = Field(description="Fecha de fin")
