"""Generic list-query builder shared by every resource.

A ``ResourceDescriptor`` declares, once per entity, which fields can be
searched, filtered and sorted. ``build_query`` turns a ``QueryRequest`` into
a store-agnostic predicate plus pagination and ordering; ``app.services.store``
compiles that predicate to SQL.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping, Sequence, Union
from uuid import UUID

from app.core.config import settings
from app.core.errors import ValidationError

SortOrder = Literal["asc", "desc"]

RESERVED_PARAMS = frozenset({"page", "limit", "search", "sort_by", "sort_order", "start_date", "end_date"})


# ---------------------------------------------------------------------------
# Filter value parsers
# ---------------------------------------------------------------------------

def parse_uuid(value: str) -> UUID:
    return UUID(value)


def parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def parse_text(value: str) -> str:
    return value


def enum_parser(enum_cls: type[enum.Enum]) -> Callable[[str], enum.Enum]:
    """Exhaustive parser: unknown members are rejected instead of cast."""

    def parse(value: str) -> enum.Enum:
        try:
            return enum_cls(value.upper())
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            raise ValueError(f"expected one of {allowed}") from None

    return parse


# ---------------------------------------------------------------------------
# Descriptor and request
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterField:
    """Exact-match filter. ``multi`` filters accept ``A,B`` and match any."""

    name: str
    parse: Callable[[str], Any] = parse_text
    attribute: str | None = None
    multi: bool = False
    default: tuple = ()

    @property
    def column(self) -> str:
        return self.attribute or self.name


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    search_fields: tuple[str, ...] = ()
    filters: tuple[FilterField, ...] = ()
    date_field: str | None = None
    # public sort name -> model attribute
    sort_fields: Mapping[str, str] = field(default_factory=dict)
    default_sort: str = "created_at"
    default_order: SortOrder = "desc"

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort_fields", MappingProxyType(dict(self.sort_fields)))
        if self.default_sort not in self.sort_fields:
            raise ValueError(f"{self.name}: default sort {self.default_sort!r} is not an allowed sort field")
        if self.default_order not in ("asc", "desc"):
            raise ValueError(f"{self.name}: default order must be 'asc' or 'desc'")


def sortable(*names: str, **aliases: str) -> dict[str, str]:
    """Sort allowlist where public names equal attribute names, plus aliases."""
    fields = {name: name for name in names}
    fields.update(aliases)
    return fields


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


@dataclass(frozen=True)
class QueryRequest:
    page: int = 1
    limit: int = 10
    search: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    start_date: str | None = None
    end_date: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None

    def __post_init__(self) -> None:
        limit = _positive_int(self.limit, settings.DEFAULT_PAGE_LIMIT)
        object.__setattr__(self, "page", _positive_int(self.page, 1))
        object.__setattr__(self, "limit", min(limit, settings.MAX_PAGE_LIMIT))
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "QueryRequest":
        """Build a request from raw query-string parameters."""
        return cls(
            page=params.get("page", 1),
            limit=params.get("limit", settings.DEFAULT_PAGE_LIMIT),
            search=params.get("search"),
            filters={k: v for k, v in params.items() if k not in RESERVED_PARAMS},
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
            sort_by=params.get("sort_by"),
            sort_order=params.get("sort_order"),
        )


# ---------------------------------------------------------------------------
# Predicate tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class OneOf:
    field: str
    values: tuple


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match. ``field`` may be ``relation.column``."""

    field: str
    value: str


@dataclass(frozen=True)
class Between:
    field: str
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class AnyOf:
    terms: tuple


@dataclass(frozen=True)
class AllOf:
    terms: tuple


Predicate = Union[Equals, OneOf, Contains, Between, AnyOf, AllOf]


@dataclass(frozen=True)
class Pagination:
    skip: int
    take: int


@dataclass(frozen=True)
class Ordering:
    field: str
    direction: SortOrder


@dataclass(frozen=True)
class BuiltQuery:
    predicate: AllOf
    pagination: Pagination
    ordering: Ordering


@dataclass
class Page:
    items: Sequence[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def _filter_term(filter_field: FilterField, raw: Any) -> Predicate:
    try:
        if filter_field.multi:
            values = tuple(filter_field.parse(part.strip()) for part in str(raw).split(",") if part.strip())
            return OneOf(filter_field.column, values)
        return Equals(filter_field.column, filter_field.parse(str(raw).strip()))
    except ValueError as exc:
        raise ValidationError(f"Invalid value for {filter_field.name}: {exc}", field=filter_field.name) from None


def parse_date_bound(value: str, name: str, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime. A bare end date covers the whole day."""
    text = value.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date for {name}: {value!r}", field=name) from None


def _is_after(start: datetime, end: datetime) -> bool:
    if (start.tzinfo is None) != (end.tzinfo is None):
        start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
    return start > end


def _date_term(descriptor: ResourceDescriptor, request: QueryRequest) -> Between | None:
    start = parse_date_bound(request.start_date, "start_date") if request.start_date else None
    end = parse_date_bound(request.end_date, "end_date", end_of_day=True) if request.end_date else None
    if start is None and end is None:
        return None
    if start is not None and end is not None and _is_after(start, end):
        raise ValidationError("start_date must not be after end_date", field="start_date")
    if descriptor.date_field is None:
        return None
    return Between(descriptor.date_field, start, end)


def resolve_ordering(descriptor: ResourceDescriptor, request: QueryRequest) -> Ordering:
    sort_by = request.sort_by if request.sort_by in descriptor.sort_fields else descriptor.default_sort
    if request.sort_order in (None, ""):
        direction = descriptor.default_order
    elif request.sort_order in ("asc", "desc"):
        direction = request.sort_order
    else:
        raise ValidationError("sort_order must be 'asc' or 'desc'", field="sort_order")
    return Ordering(descriptor.sort_fields[sort_by], direction)


def build_query(descriptor: ResourceDescriptor, request: QueryRequest) -> BuiltQuery:
    terms: list[Predicate] = []

    for filter_field in descriptor.filters:
        raw = request.filters.get(filter_field.name)
        if raw is None or str(raw).strip() == "":
            if filter_field.default:
                terms.append(OneOf(filter_field.column, tuple(filter_field.default)))
            continue
        terms.append(_filter_term(filter_field, raw))

    search = (request.search or "").strip()
    if search and descriptor.search_fields:
        terms.append(AnyOf(tuple(Contains(path, search) for path in descriptor.search_fields)))

    date_term = _date_term(descriptor, request)
    if date_term is not None:
        terms.append(date_term)

    return BuiltQuery(
        predicate=AllOf(tuple(terms)),
        pagination=Pagination(skip=request.skip, take=request.limit),
        ordering=resolve_ordering(descriptor, request),
    )
