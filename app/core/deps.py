"""Control de acceso: autentica al usuario y luego aplica la política de la ruta."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import ForbiddenError, UnauthenticatedError
from app.core.security import Identity, resolve_identity
from app.models.enums import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutePolicy:
    """Roles permitidos para una (ruta, verbo). ADMIN no se asume."""

    allowed_roles: frozenset[Role]

    def __post_init__(self) -> None:
        if not self.allowed_roles:
            raise ValueError("A route policy needs at least one allowed role")

    @classmethod
    def of(cls, *roles: Role) -> "RoutePolicy":
        return cls(frozenset(roles))

    def allows(self, role: Role) -> bool:
        return role in self.allowed_roles


@dataclass(frozen=True)
class AuthFailure:
    kind: Literal["unauthenticated", "forbidden"]
    detail: str


def authenticate_and_authorize(
    credential: str | None,
    policy: RoutePolicy | None,
    resolver: Callable[[str | None], Identity | None],
) -> Identity | AuthFailure:
    """Decisión pura por request sobre (credencial, política).

    ``policy`` es None en rutas de lectura: basta un usuario autenticado y
    activo.
    """
    if not credential:
        return AuthFailure("unauthenticated", "Not authenticated")
    identity = resolver(credential)
    if identity is None or not identity.is_active:
        return AuthFailure("unauthenticated", "Invalid or inactive credentials")
    if policy is not None and not policy.allows(identity.role):
        return AuthFailure("forbidden", f"Role {identity.role.value} is not allowed to perform this action")
    return identity


def get_credential(request: Request) -> str | None:
    token = request.cookies.get("access_token")
    if not token and request.headers.get("authorization"):
        auth = request.headers["authorization"]
        if auth.startswith("Bearer "):
            token = auth[7:].strip()
    return token or None


def _enforce(request: Request, db: Session, policy: RoutePolicy | None) -> Identity:
    result = authenticate_and_authorize(
        get_credential(request),
        policy,
        lambda credential: resolve_identity(db, credential),
    )
    if isinstance(result, AuthFailure):
        logger.info("%s %s rejected: %s", request.method, request.url.path, result.detail)
        if result.kind == "forbidden":
            raise ForbiddenError(result.detail)
        raise UnauthenticatedError(result.detail)
    return result


def require_identity(request: Request, db: Session = Depends(get_db)) -> Identity:
    return _enforce(request, db, None)


def require_roles(roles: RoutePolicy | Iterable[Role]):
    """Crea una dependencia que exige ``roles`` en la ruta que protege."""
    policy = roles if isinstance(roles, RoutePolicy) else RoutePolicy(frozenset(roles))

    def dependency(request: Request, db: Session = Depends(get_db)) -> Identity:
        return _enforce(request, db, policy)

    return dependency
