"""SQLAlchemy implementation of the data-access interface.

The query builder produces plain predicate objects; this module is the only
place that turns them into SQL. Attribute names always come from static
resource descriptors, never from request input.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from sqlalchemy import and_, false, func, inspect, or_, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.services.query_builder import (
    AllOf,
    AnyOf,
    Between,
    Contains,
    Equals,
    OneOf,
    Ordering,
    Pagination,
    Predicate,
)

logger = logging.getLogger(__name__)


def _on_path(model: type, path: str, build: Callable[[Any], Any]):
    """Apply ``build`` to ``model.path``; ``relation.column`` goes through EXISTS."""
    if "." in path:
        relation_name, column_name = path.split(".", 1)
        relation = getattr(model, relation_name)
        target = relation.property.mapper.class_
        return relation.has(build(getattr(target, column_name)))
    return build(getattr(model, path))


def check_path(model: type, path: str) -> None:
    """Fail at startup if a descriptor names something the model does not map."""
    mapper = inspect(model)
    if "." in path:
        relation_name, column_name = path.split(".", 1)
        if relation_name not in mapper.relationships:
            raise ValueError(f"{model.__name__} has no relationship {relation_name!r}")
        check_path(mapper.relationships[relation_name].mapper.class_, column_name)
    elif path not in mapper.column_attrs:
        raise ValueError(f"{model.__name__} has no column {path!r}")


def compile_predicate(model: type, predicate: Predicate):
    if isinstance(predicate, AllOf):
        return and_(true(), *(compile_predicate(model, term) for term in predicate.terms))
    if isinstance(predicate, AnyOf):
        return or_(false(), *(compile_predicate(model, term) for term in predicate.terms))
    if isinstance(predicate, Equals):
        return _on_path(model, predicate.field, lambda col: col == predicate.value)
    if isinstance(predicate, OneOf):
        return _on_path(model, predicate.field, lambda col: col.in_(predicate.values))
    if isinstance(predicate, Contains):
        return _on_path(model, predicate.field, lambda col: col.icontains(predicate.value, autoescape=True))
    if isinstance(predicate, Between):
        def bounds(col):
            clauses = []
            if predicate.start is not None:
                clauses.append(col >= predicate.start)
            if predicate.end is not None:
                clauses.append(col <= predicate.end)
            return and_(true(), *clauses)

        return _on_path(model, predicate.field, bounds)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def row_to_dict(row: Any) -> dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class SqlStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, model: type, id: Any):
        return self.db.get(model, id)

    def find_many(self, model: type, predicate: Predicate, pagination: Pagination, ordering: Ordering) -> list:
        column = getattr(model, ordering.field)
        order = column.asc() if ordering.direction == "asc" else column.desc()
        stmt = (
            select(model)
            .where(compile_predicate(model, predicate))
            .order_by(order, model.id.asc())
            .offset(pagination.skip)
            .limit(pagination.take)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count(self, model: type, predicate: Predicate) -> int:
        stmt = select(func.count()).select_from(model).where(compile_predicate(model, predicate))
        return self.db.execute(stmt).scalar() or 0

    def find_all(self, model: type, predicate: Predicate | None = None) -> list:
        stmt = select(model)
        if predicate is not None:
            stmt = stmt.where(compile_predicate(model, predicate))
        return list(self.db.execute(stmt).scalars().all())

    def create(self, model: type, data: Mapping[str, Any]):
        row = model(**data)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return row

    def update(self, model: type, id: Any, data: Mapping[str, Any]):
        row = self.db.get(model, id)
        if row is None:
            return None
        for key, value in data.items():
            setattr(row, key, value)
        self._commit()
        self.db.refresh(row)
        return row

    def delete(self, model: type, id: Any) -> bool:
        row = self.db.get(model, id)
        if row is None:
            return False
        self.db.delete(row)
        self._commit()
        return True

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
