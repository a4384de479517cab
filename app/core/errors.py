"""Errores de la API compartidos por servicios y capa HTTP.

Los servicios los lanzan; ``app.main`` los devuelve como JSON
``{"detail", "field"}``. Solo ``InternalError`` se reporta sin detalle.
"""

from fastapi import status


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, field: str | None = None):
        self.detail = detail or self.default_detail
        self.field = field
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        body = {"detail": self.detail}
        if self.field:
            body["field"] = self.field
        return body


class UnauthenticatedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class InternalError(ApiError):
    def to_dict(self) -> dict:
        return {"detail": self.default_detail}
