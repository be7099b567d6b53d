"""Contraseñas con bcrypt y tokens de sesión JWT."""
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.core.config import settings


def hash_password(plain_password: str) -> str:
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False también cuando el hash guardado está vacío o mal formado."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def token_para_usuario(usuario_id: int, email: str, rol: str) -> str:
    """JWT firmado con el id del usuario en ``sub``; email y rol solo informativos.

    La autorización nunca se fía del rol del token: se vuelve a leer el
    usuario de la base en cada petición.
    """
    emitido = datetime.now(timezone.utc)
    claims = {
        "sub": str(usuario_id),
        "email": email,
        "rol": rol,
        "iat": emitido,
        "exp": emitido + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def usuario_id_desde_token(token: str) -> int | None:
    """Id del usuario de un token válido y vigente; None si no se puede confiar en él."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return int(claims["sub"])
    except (jwt.PyJWTError, TypeError, ValueError):
        return None
