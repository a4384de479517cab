"""Pre-write referential checks.

Each resource declares the foreign ids it carries as ``ReferenceDependency``
entries. Before a write, every dependency whose field is present in the
payload is looked up; the first one that is missing or fails its constraint
decides the result. The database's own foreign keys stay authoritative:
this is the friendly-message fast path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Union

from app.core.errors import NotFoundError, ValidationError
from app.models.enums import CLINICIAN_ROLES

logger = logging.getLogger(__name__)

Constraint = Callable[[Any, Mapping[str, Any]], bool]


@dataclass(frozen=True)
class ReferenceDependency:
    field: str
    model: type
    label: str
    constraint: Constraint | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ReferencesOk:
    pass


@dataclass(frozen=True)
class MissingReference:
    field: str
    label: str

    @property
    def message(self) -> str:
        return f"{self.label} not found"


@dataclass(frozen=True)
class InvalidReference:
    field: str
    reason: str


ValidationResult = Union[ReferencesOk, MissingReference, InvalidReference]


def active_clinician(row: Any, context: Mapping[str, Any]) -> bool:
    return row.role in CLINICIAN_ROLES and bool(row.is_active)


def is_active(row: Any, context: Mapping[str, Any]) -> bool:
    return bool(row.is_active)


def same_patient(row: Any, context: Mapping[str, Any]) -> bool:
    patient_id = context.get("patient_id")
    return patient_id is None or row.patient_id == patient_id


def validate_references(
    store,
    dependencies: Sequence[ReferenceDependency],
    payload: Mapping[str, Any],
    context: Mapping[str, Any] | None = None,
) -> ValidationResult:
    """Check the dependencies present in ``payload``, stopping at the first failure.

    ``context`` is what constraints see besides the referenced row; on
    update it holds the stored record merged with the partial payload so
    cross-field constraints (same patient) still have both sides.
    """
    merged = {**(context or {}), **payload}
    for dependency in dependencies:
        value = payload.get(dependency.field)
        if value is None:
            continue
        row = store.find_by_id(dependency.model, value)
        if row is None:
            return MissingReference(dependency.field, dependency.label)
        if dependency.constraint is not None and not dependency.constraint(row, merged):
            return InvalidReference(dependency.field, dependency.reason or f"Invalid {dependency.label.lower()}")
    return ReferencesOk()


def ensure_references(store, dependencies, payload, context=None) -> None:
    """Raise the API error matching a failed ``validate_references``."""
    result = validate_references(store, dependencies, payload, context)
    if isinstance(result, MissingReference):
        logger.info("Missing reference %s=%s", result.field, payload.get(result.field))
        raise NotFoundError(result.message, field=result.field)
    if isinstance(result, InvalidReference):
        logger.info("Invalid reference %s: %s", result.field, result.reason)
        raise ValidationError(result.reason, field=result.field)
