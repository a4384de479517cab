"""One generic CRUD service for every clinical resource.

A ``Resource`` bundles what used to be repeated per entity: the list
descriptor, the route policies, the reference dependencies and the
uniqueness/consistency checks. ``ResourceService`` applies them around the
data-access calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from app.core.deps import RoutePolicy
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import Identity
from app.services.query_builder import AllOf, Equals, Page, QueryRequest, ResourceDescriptor, build_query
from app.services.references import ReferenceDependency, ensure_references
from app.services.store import SqlStore, check_path, row_to_dict

logger = logging.getLogger(__name__)

MUTATING_VERBS = ("create", "update", "delete")

Check = Callable[[Mapping[str, Any]], None]
# (store, changes, merged record, identity, existing row or None) -> changes to write
Prepare = Callable[[SqlStore, dict, Mapping[str, Any], Optional[Identity], Any], dict]


@dataclass(frozen=True)
class Resource:
    path: str
    model: type
    label: str
    descriptor: ResourceDescriptor
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    out_schema: type[BaseModel]
    policies: Mapping[str, RoutePolicy]
    dependencies: tuple[ReferenceDependency, ...] = ()
    unique_fields: tuple[str, ...] = ()
    checks: tuple[Check, ...] = ()
    prepare: Prepare | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        missing = [verb for verb in MUTATING_VERBS if verb not in self.policies]
        if missing:
            raise ValueError(f"{self.label}: no route policy for {', '.join(missing)}")
        for path in self.descriptor.search_fields:
            check_path(self.model, path)
        for filter_field in self.descriptor.filters:
            check_path(self.model, filter_field.column)
        for attribute in self.descriptor.sort_fields.values():
            check_path(self.model, attribute)
        if self.descriptor.date_field:
            check_path(self.model, self.descriptor.date_field)


def list_records(store: SqlStore, model: type, descriptor: ResourceDescriptor, request: QueryRequest) -> Page:
    """Paginated items plus the total for the same filter, independent of the page window."""
    query = build_query(descriptor, request)
    items = store.find_many(model, query.predicate, query.pagination, query.ordering)
    total = store.count(model, query.predicate)
    return Page(items=items, total=total, page=request.page, limit=request.limit)


# ---------------------------------------------------------------------------
# Consistency checks shared by resources
# ---------------------------------------------------------------------------

def _comparable(a, b):
    if isinstance(a, datetime) and isinstance(b, datetime) and (a.tzinfo is None) != (b.tzinfo is None):
        return a.replace(tzinfo=None), b.replace(tzinfo=None)
    return a, b


def ends_after(start_field: str, end_field: str) -> Check:
    def check(record: Mapping[str, Any]) -> None:
        start, end = record.get(start_field), record.get(end_field)
        if start is None or end is None:
            return
        start, end = _comparable(start, end)
        if end <= start:
            raise ValidationError(f"{end_field} must be after {start_field}", field=end_field)

    return check


def ordered(low_field: str, high_field: str) -> Check:
    def check(record: Mapping[str, Any]) -> None:
        low, high = record.get(low_field), record.get(high_field)
        if low is not None and high is not None and low > high:
            raise ValidationError(f"{low_field} must not exceed {high_field}", field=low_field)

    return check


class ResourceService:
    def __init__(self, resource: Resource, store: SqlStore):
        self.resource = resource
        self.store = store

    @property
    def model(self) -> type:
        return self.resource.model

    def list(self, request: QueryRequest) -> Page:
        return list_records(self.store, self.model, self.resource.descriptor, request)

    def get(self, id) -> Any:
        row = self.store.find_by_id(self.model, id)
        if row is None:
            raise NotFoundError(f"{self.resource.label} not found")
        return row

    def create(self, payload: Mapping[str, Any], identity: Identity | None = None) -> Any:
        data = dict(payload)
        self._check(data, data)
        self._check_unique(data)
        if self.resource.prepare is not None:
            data = self.resource.prepare(self.store, data, data, identity, None)
        row = self._write(lambda: self.store.create(self.model, data))
        logger.info("%s %s created", self.resource.label, row.id)
        return row

    def update(self, id, payload: Mapping[str, Any], identity: Identity | None = None) -> Any:
        existing = self.get(id)
        changes = dict(payload)
        self._reject_nulls(changes)
        merged = {**row_to_dict(existing), **changes}
        self._check(changes, merged)
        self._check_unique(changes, exclude_id=existing.id)
        if self.resource.prepare is not None:
            changes = self.resource.prepare(self.store, changes, merged, identity, existing)
        return self._write(lambda: self.store.update(self.model, id, changes))

    def delete(self, id) -> None:
        self.get(id)
        self._write(lambda: self.store.delete(self.model, id))
        logger.info("%s %s deleted", self.resource.label, id)

    def _check(self, changes: Mapping[str, Any], merged: Mapping[str, Any]) -> None:
        for check in self.resource.checks:
            check(merged)
        ensure_references(self.store, self.resource.dependencies, changes, context=merged)

    def _reject_nulls(self, changes: Mapping[str, Any]) -> None:
        """An explicit null on a partial update may only clear nullable columns."""
        columns = inspect(self.model).columns
        for name, value in changes.items():
            if value is None and name in columns and not columns[name].nullable:
                raise ValidationError(f"{name} cannot be null", field=name)

    def _check_unique(self, changes: Mapping[str, Any], exclude_id=None) -> None:
        for name in self.resource.unique_fields:
            value = changes.get(name)
            if value is None:
                continue
            clashes = self.store.find_all(self.model, AllOf((Equals(name, value),)))
            if any(row.id != exclude_id for row in clashes):
                raise ConflictError(f"{self.resource.label} with {name} '{value}' already exists", field=name)

    def _write(self, operation: Callable[[], Any]) -> Any:
        try:
            return operation()
        except IntegrityError as exc:
            logger.warning("%s write rejected by the database: %s", self.resource.label, exc.orig)
            raise ConflictError(f"{self.resource.label} conflicts with existing data") from exc
