"""Reference range resolution for lab tests.

A test can carry several ranges keyed by gender and an age bracket in
months. Resolution keeps the ranges that apply to the patient's gender
(or to everyone), picks the one whose bracket contains the patient's age,
and otherwise falls back to the range marked as default.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional
from uuid import UUID

from app.models.enums import Gender, LabResultFlag
from app.models.lab import ReferenceRange
from app.services.query_builder import AllOf, AnyOf, Equals


def age_in_months(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole months between birth and today. Day of month is ignored."""
    today = today or date.today()
    if isinstance(date_of_birth, datetime):
        date_of_birth = date_of_birth.date()
    return (today.year - date_of_birth.year) * 12 + (today.month - date_of_birth.month)


def covers_age(reference_range: ReferenceRange, age: int) -> bool:
    if reference_range.age_min is not None and age < reference_range.age_min:
        return False
    if reference_range.age_max is not None and age > reference_range.age_max:
        return False
    return True


def _specificity(reference_range: ReferenceRange) -> tuple:
    # gender-specific first, then bounded on both sides, then narrowest bracket
    bounds = (reference_range.age_min is not None) + (reference_range.age_max is not None)
    width = (
        reference_range.age_max - reference_range.age_min
        if bounds == 2
        else float("inf")
    )
    return (reference_range.gender is None, -bounds, width, str(reference_range.id))


def select_reference_range(
    ranges: Iterable[ReferenceRange],
    gender: Gender | None,
    age: int,
) -> ReferenceRange | None:
    candidates = [r for r in ranges if r.gender is None or r.gender == gender]
    matching = [r for r in candidates if covers_age(r, age)]
    if matching:
        return min(matching, key=_specificity)
    defaults = [r for r in candidates if r.is_default]
    if defaults:
        return min(defaults, key=_specificity)
    return None


def resolve_reference_range(
    store,
    test_id: UUID,
    gender: Gender | None,
    date_of_birth: date,
    today: Optional[date] = None,
) -> ReferenceRange | None:
    """Applicable range for a patient, or None. Never fabricates a range."""
    age = age_in_months(date_of_birth, today)
    gender_terms = [Equals("gender", None)]
    if gender is not None:
        gender_terms.append(Equals("gender", gender))
    ranges = store.find_all(
        ReferenceRange,
        AllOf((Equals("test_id", test_id), AnyOf(tuple(gender_terms)))),
    )
    return select_reference_range(ranges, gender, age)


def flag_value(value: float | None, reference_range: ReferenceRange | None) -> LabResultFlag:
    if value is None or reference_range is None:
        return LabResultFlag.NORMAL
    if reference_range.critical_low is not None and value < reference_range.critical_low:
        return LabResultFlag.CRITICAL_LOW
    if reference_range.critical_high is not None and value > reference_range.critical_high:
        return LabResultFlag.CRITICAL_HIGH
    if reference_range.low_value is not None and value < reference_range.low_value:
        return LabResultFlag.LOW
    if reference_range.high_value is not None and value > reference_range.high_value:
        return LabResultFlag.HIGH
    return LabResultFlag.NORMAL
