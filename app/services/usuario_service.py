"""Servicio de usuarios: consultas, alta, actualización y baja."""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflicto, EstadoInvalido
from app.core.security import hash_password, verify_password
from app.models.asistencia import Asistencia
from app.models.curso import Curso, curso_estudiantes
from app.models.evaluacion import Calificacion
from app.models.user import EstadoUsuario, Usuario
from app.permisos import NO_ENCONTRADO, Rol, VistaUsuario

logger = logging.getLogger(__name__)


async def obtener_usuario(usuario_id: int, db: AsyncSession) -> Usuario | None:
    return await db.get(Usuario, usuario_id)


async def obtener_por_email(email: str, db: AsyncSession) -> Usuario | None:
    result = await db.execute(select(Usuario).where(func.lower(Usuario.email) == email.lower()))
    return result.scalar_one_or_none()


async def listar_usuarios(db: AsyncSession, rol: Rol | None = None) -> list[Usuario]:
    q = select(Usuario).order_by(Usuario.id)
    if rol is not None:
        q = q.where(Usuario.rol == rol)
    result = await db.execute(q)
    return list(result.scalars().all())


async def usuarios_por_id(ids: list[int], db: AsyncSession) -> dict[int, Usuario]:
    """Usuarios existentes entre ``ids``, indexados por id."""
    if not ids:
        return {}
    result = await db.execute(select(Usuario).where(Usuario.id.in_(set(ids))))
    return {u.id: u for u in result.scalars().all()}


async def contar_cursos_a_cargo(usuario_id: int, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(Curso).where(Curso.instructor_id == usuario_id)
    )
    return result.scalar_one()


async def contar_cursos_inscritos(usuario_id: int, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(curso_estudiantes).where(curso_estudiantes.c.estudiante_id == usuario_id)
    )
    return result.scalar_one()


async def vista_usuario(usuario: Usuario | None, db: AsyncSession) -> VistaUsuario | object:
    """Vista para el motor de autorización, o NO_ENCONTRADO si el usuario no existe."""
    if usuario is None:
        return NO_ENCONTRADO
    return usuario.vista(
        cursos_a_cargo=await contar_cursos_a_cargo(usuario.id, db),
        cursos_inscritos=await contar_cursos_inscritos(usuario.id, db),
    )


async def crear_usuario(
    nombre: str,
    apellido: str,
    numero_documento: str,
    email: str,
    password: str,
    rol: Rol,
    db: AsyncSession,
) -> Usuario:
    """Registra un usuario activo. Correo o documento repetidos son conflicto."""
    if await obtener_por_email(email, db) is not None:
        raise Conflicto("El usuario ya existe")
    usuario = Usuario(
        nombre=nombre.strip(),
        apellido=apellido.strip(),
        numero_documento=numero_documento.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        rol=rol,
        estado=EstadoUsuario.ACTIVO,
    )
    db.add(usuario)
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto("El usuario ya existe") from e
    logger.info("Usuario registrado id=%s rol=%s", usuario.id, usuario.rol.value)
    return usuario


async def actualizar_usuario(usuario: Usuario, cambios: dict, db: AsyncSession) -> Usuario:
    """Aplica los campos enviados. La autorización del cambio de rol ya se resolvió antes."""
    if "email" in cambios:
        cambios["email"] = cambios["email"].strip().lower()
        otro = await obtener_por_email(cambios["email"], db)
        if otro is not None and otro.id != usuario.id:
            raise Conflicto("Ya existe un usuario con ese correo")
    for campo, valor in cambios.items():
        setattr(usuario, campo, valor)
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflicto("Ya existe un usuario con ese correo o documento") from e
    return usuario


async def eliminar_usuario(usuario: Usuario, db: AsyncSession) -> None:
    """Elimina al usuario, lo retira de las fichas y borra sus asistencias y calificaciones."""
    await db.execute(delete(curso_estudiantes).where(curso_estudiantes.c.estudiante_id == usuario.id))
    await db.execute(delete(Asistencia).where(Asistencia.estudiante_id == usuario.id))
    await db.execute(delete(Calificacion).where(Calificacion.estudiante_id == usuario.id))
    await db.delete(usuario)
    try:
        await db.flush()
    except IntegrityError as e:
        raise EstadoInvalido("El usuario tiene registros asociados y no se puede eliminar") from e
    logger.info("Usuario eliminado id=%s", usuario.id)


async def actualizar_perfil(usuario: Usuario, cambios: dict, db: AsyncSession) -> Usuario:
    """Nombre y apellido propios; el rol y el estado no se tocan por esta vía."""
    if not cambios:
        raise EstadoInvalido("Debe enviar al menos un campo para actualizar.")
    for campo, valor in cambios.items():
        setattr(usuario, campo, valor.strip())
    await db.flush()
    return usuario


async def cambiar_contrasena(usuario: Usuario, actual: str, nueva: str, db: AsyncSession) -> None:
    if not verify_password(actual, usuario.password_hash or ""):
        raise EstadoInvalido("La contraseña actual es incorrecta.")
    usuario.password_hash = hash_password(nueva)
    await db.flush()
    logger.info("Contraseña cambiada usuario id=%s", usuario.id)
