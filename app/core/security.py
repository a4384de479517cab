import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.enums import Role
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Actor autenticado: solo lo que necesitan las políticas de rutas."""

    id: UUID
    role: Role
    is_active: bool
    email: str | None = None


def create_access_token(sub: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Crea un token JWT de acceso."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": sub, "role": role, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_token(token: str) -> dict:
    """Decodifica un token JWT y devuelve el payload."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def resolve_identity(db: Session, credential: str | None) -> Identity | None:
    """Resuelve un token Bearer a un usuario activo.

    Devuelve None si no es un usuario conocido, activo y con rol válido:
    token ausente, mal formado o expirado, sub desconocido o cuenta
    desactivada se ven igual para quien llama.
    """
    if not credential:
        return None
    try:
        payload = decode_token(credential)
    except ValueError:
        return None

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None

    try:
        role = Role(user.role)
    except ValueError:
        logger.warning("User %s has unknown role %r", user.id, user.role)
        return None

    return Identity(id=user.id, role=role, is_active=user.is_active, email=user.email)
