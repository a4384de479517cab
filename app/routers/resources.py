"""Fábrica de routers: los mismos cinco endpoints para cada recurso del catálogo.

Las anotaciones deben ser clases reales (sin evaluación diferida) para que
FastAPI lea el schema del body de cada recurso en las funciones generadas.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.deps import require_identity, require_roles
from app.core.security import Identity
from app.services.query_builder import QueryRequest
from app.services.resource_service import Resource, ResourceService
from app.services.store import SqlStore


def build_router(resource: Resource) -> APIRouter:
    tags = list(resource.tags) or [resource.path.strip("/")]
    router = APIRouter(prefix=resource.path, tags=tags)
    CreateSchema = resource.create_schema
    UpdateSchema = resource.update_schema
    OutSchema = resource.out_schema

    def service(db: Session) -> ResourceService:
        return ResourceService(resource, SqlStore(db))

    @router.get("")
    def list_items(
        request: Request,
        db: Session = Depends(get_db),
        _: Identity = Depends(require_identity),
    ):
        """Listado paginado: page, limit, search, sort_by, sort_order, start_date,
        end_date y los filtros del recurso. limit se limita a MAX_PAGE_LIMIT (100
        por defecto); el envelope devuelve el limit efectivo.
        """
        page = service(db).list(QueryRequest.from_params(request.query_params))
        return {
            "items": [OutSchema.model_validate(item) for item in page.items],
            "total": page.total,
            "page": page.page,
            "limit": page.limit,
            "total_pages": page.total_pages,
        }

    @router.get("/{item_id}", response_model=OutSchema)
    def get_item(
        item_id: UUID,
        db: Session = Depends(get_db),
        _: Identity = Depends(require_identity),
    ):
        return service(db).get(item_id)

    @router.post("", response_model=OutSchema, status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: CreateSchema,
        db: Session = Depends(get_db),
        current_user: Identity = Depends(require_roles(resource.policies["create"])),
    ):
        return service(db).create(payload.model_dump(), current_user)

    @router.patch("/{item_id}", response_model=OutSchema)
    def update_item(
        item_id: UUID,
        payload: UpdateSchema,
        db: Session = Depends(get_db),
        current_user: Identity = Depends(require_roles(resource.policies["update"])),
    ):
        return service(db).update(item_id, payload.model_dump(exclude_unset=True), current_user)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(
        item_id: UUID,
        db: Session = Depends(get_db),
        _: Identity = Depends(require_roles(resource.policies["delete"])),
    ):
        service(db).delete(item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
