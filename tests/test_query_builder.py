"""Tests for the generic list-query builder."""

from datetime import datetime, time
from uuid import uuid4

import pytest

from app.core.errors import ValidationError
from app.models.enums import DialysisStatus, Role
from app.services.query_builder import (
    AllOf,
    AnyOf,
    Between,
    Contains,
    Equals,
    FilterField,
    OneOf,
    QueryRequest,
    ResourceDescriptor,
    build_query,
    enum_parser,
    parse_bool,
    parse_uuid,
    sortable,
)

SESSIONS = ResourceDescriptor(
    name="sessions",
    search_fields=("patient.last_name", "notes"),
    filters=(
        FilterField("status", enum_parser(DialysisStatus), multi=True),
        FilterField("patient_id", parse_uuid),
        FilterField("archived", parse_bool, attribute="is_archived"),
    ),
    date_field="start_time",
    sort_fields=sortable("start_time", "status", started="start_time"),
    default_sort="start_time",
    default_order="desc",
)


def test_pagination_defaults():
    query = build_query(SESSIONS, QueryRequest())
    assert query.pagination.skip == 0
    assert query.pagination.take == 10


def test_skip_is_page_minus_one_times_limit():
    query = build_query(SESSIONS, QueryRequest(page=3, limit=25))
    assert query.pagination.skip == 50
    assert query.pagination.take == 25


@pytest.mark.parametrize("page", [0, -4, "abc", "", None, "2.5"])
def test_invalid_page_falls_back_to_first_page(page):
    request = QueryRequest(page=page)
    assert request.page == 1
    assert build_query(SESSIONS, request).pagination.skip == 0


@pytest.mark.parametrize("limit", [0, -1, "ten", None])
def test_invalid_limit_falls_back_to_default(limit):
    assert QueryRequest(limit=limit).limit == 10


def test_numeric_strings_are_accepted():
    request = QueryRequest.from_params({"page": "2", "limit": "5"})
    assert (request.page, request.limit) == (2, 5)


def test_limit_is_capped():
    assert QueryRequest(limit=10_000).limit == 100


def test_unknown_sort_field_uses_default():
    query = build_query(SESSIONS, QueryRequest(sort_by="password_hash"))
    assert query.ordering.field == "start_time"
    assert query.ordering.direction == "desc"


def test_sort_alias_maps_to_attribute():
    query = build_query(SESSIONS, QueryRequest(sort_by="started", sort_order="asc"))
    assert query.ordering.field == "start_time"
    assert query.ordering.direction == "asc"


def test_invalid_sort_order_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_query(SESSIONS, QueryRequest(sort_order="sideways"))
    assert exc_info.value.field == "sort_order"


def test_search_ors_every_search_field():
    query = build_query(SESSIONS, QueryRequest(search="  smith "))
    assert query.predicate == AllOf(
        (AnyOf((Contains("patient.last_name", "smith"), Contains("notes", "smith"))),)
    )


def test_blank_search_is_ignored():
    assert build_query(SESSIONS, QueryRequest(search="   ")).predicate == AllOf(())


def test_search_without_search_fields_is_noop():
    descriptor = ResourceDescriptor(name="plain", sort_fields=sortable("created_at"))
    assert build_query(descriptor, QueryRequest(search="smith")).predicate == AllOf(())


def test_exact_filters_are_parsed():
    patient_id = uuid4()
    request = QueryRequest(filters={"patient_id": str(patient_id), "archived": "false", "ignored": "x"})
    terms = build_query(SESSIONS, request).predicate.terms
    assert Equals("patient_id", patient_id) in terms
    assert Equals("is_archived", False) in terms
    assert len(terms) == 2


def test_multi_filter_builds_one_of():
    request = QueryRequest(filters={"status": "scheduled,IN_PROGRESS"})
    terms = build_query(SESSIONS, request).predicate.terms
    assert terms == (OneOf("status", (DialysisStatus.SCHEDULED, DialysisStatus.IN_PROGRESS)),)


def test_unknown_enum_value_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_query(SESSIONS, QueryRequest(filters={"status": "DONE"}))
    assert exc_info.value.field == "status"


def test_malformed_uuid_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_query(SESSIONS, QueryRequest(filters={"patient_id": "not-a-uuid"}))
    assert exc_info.value.field == "patient_id"


def test_default_filter_applies_when_absent():
    providers = ResourceDescriptor(
        name="providers",
        filters=(FilterField("role", enum_parser(Role), multi=True, default=(Role.DOCTOR, Role.NURSE)),),
        sort_fields=sortable("last_name"),
        default_sort="last_name",
    )
    assert build_query(providers, QueryRequest()).predicate.terms == (
        OneOf("role", (Role.DOCTOR, Role.NURSE)),
    )
    assert build_query(providers, QueryRequest(filters={"role": "ADMIN"})).predicate.terms == (
        OneOf("role", (Role.ADMIN,)),
    )


def test_date_range_bounds_are_independent():
    only_start = build_query(SESSIONS, QueryRequest(start_date="2024-03-01"))
    assert only_start.predicate.terms == (Between("start_time", datetime(2024, 3, 1), None),)

    only_end = build_query(SESSIONS, QueryRequest(end_date="2024-03-31T12:00:00"))
    assert only_end.predicate.terms == (Between("start_time", None, datetime(2024, 3, 31, 12)),)


def test_date_only_end_covers_whole_day():
    query = build_query(SESSIONS, QueryRequest(end_date="2024-03-31"))
    (between,) = query.predicate.terms
    assert between.end == datetime.combine(datetime(2024, 3, 31).date(), time.max)


def test_unparseable_date_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        build_query(SESSIONS, QueryRequest(start_date="31/03/2024"))
    assert exc_info.value.field == "start_date"


def test_inverted_date_range_is_rejected():
    with pytest.raises(ValidationError):
        build_query(SESSIONS, QueryRequest(start_date="2024-04-01", end_date="2024-03-01"))


def test_descriptor_default_sort_must_be_allowed():
    with pytest.raises(ValueError):
        ResourceDescriptor(name="broken", sort_fields=sortable("name"), default_sort="created_at")


def test_same_request_builds_same_query():
    request = QueryRequest(page=2, search="smith", filters={"status": "COMPLETED"})
    assert build_query(SESSIONS, request) == build_query(SESSIONS, request)
