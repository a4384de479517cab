"""Tests for pre-write referential validation."""

from datetime import datetime
from uuid import uuid4

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models.encounter import Encounter
from app.models.enums import Role
from app.models.patient import Patient
from app.models.user import User
from app.services.references import (
    InvalidReference,
    MissingReference,
    ReferenceDependency,
    ReferencesOk,
    active_clinician,
    ensure_references,
    same_patient,
    validate_references,
)
from app.services.store import SqlStore

DEPENDENCIES = (
    ReferenceDependency("patient_id", Patient, "Patient"),
    ReferenceDependency(
        "provider_id",
        User,
        "Provider",
        constraint=active_clinician,
        reason="Provider must be an active clinician",
    ),
)


class CountingStore:
    """Store double that records every lookup."""

    def __init__(self, rows):
        self.rows = rows
        self.lookups = []

    def find_by_id(self, model, id):
        self.lookups.append((model, id))
        return self.rows.get(id)


def test_all_references_present(db_session, make_patient, make_user):
    patient, doctor = make_patient(), make_user(Role.DOCTOR)
    result = validate_references(
        SqlStore(db_session), DEPENDENCIES, {"patient_id": patient.id, "provider_id": doctor.id}
    )
    assert result == ReferencesOk()


def test_receptionist_provider_is_invalid(db_session, make_patient, make_user):
    patient, receptionist = make_patient(), make_user(Role.RECEPTIONIST)
    result = validate_references(
        SqlStore(db_session), DEPENDENCIES, {"patient_id": patient.id, "provider_id": receptionist.id}
    )
    assert result == InvalidReference("provider_id", "Provider must be an active clinician")


def test_inactive_clinician_is_invalid(db_session, make_patient, make_user):
    patient, nurse = make_patient(), make_user(Role.NURSE, is_active=False)
    result = validate_references(
        SqlStore(db_session), DEPENDENCIES, {"patient_id": patient.id, "provider_id": nurse.id}
    )
    assert isinstance(result, InvalidReference)


def test_first_missing_reference_stops_validation():
    missing_patient, provider_id = uuid4(), uuid4()
    store = CountingStore({provider_id: object()})
    result = validate_references(store, DEPENDENCIES, {"patient_id": missing_patient, "provider_id": provider_id})
    assert result == MissingReference("patient_id", "Patient")
    assert store.lookups == [(Patient, missing_patient)]


def test_absent_fields_are_not_checked():
    store = CountingStore({})
    assert validate_references(store, DEPENDENCIES, {"notes": "partial update"}) == ReferencesOk()
    assert validate_references(store, DEPENDENCIES, {"patient_id": None}) == ReferencesOk()
    assert store.lookups == []


def test_same_patient_constraint_uses_merged_context(db_session, make_patient, make_user):
    owner, other = make_patient(), make_patient()
    doctor = make_user(Role.DOCTOR)
    encounter = Encounter(patient_id=owner.id, provider_id=doctor.id, start_at=datetime(2024, 1, 5, 9))
    db_session.add(encounter)
    db_session.commit()

    dependency = ReferenceDependency(
        "encounter_id", Encounter, "Encounter", constraint=same_patient, reason="Encounter must belong to the same patient"
    )
    store = SqlStore(db_session)

    ok = validate_references(store, (dependency,), {"encounter_id": encounter.id}, context={"patient_id": owner.id})
    assert ok == ReferencesOk()

    wrong = validate_references(store, (dependency,), {"encounter_id": encounter.id}, context={"patient_id": other.id})
    assert wrong == InvalidReference("encounter_id", "Encounter must belong to the same patient")


def test_ensure_references_raises_api_errors():
    store = CountingStore({})
    with pytest.raises(NotFoundError) as exc_info:
        ensure_references(store, DEPENDENCIES, {"patient_id": uuid4()})
    assert exc_info.value.field == "patient_id"
    assert exc_info.value.detail == "Patient not found"


def test_ensure_references_reports_invalid_reference(db_session, make_user):
    receptionist = make_user(Role.RECEPTIONIST)
    with pytest.raises(ValidationError) as exc_info:
        ensure_references(SqlStore(db_session), DEPENDENCIES, {"provider_id": receptionist.id})
    assert exc_info.value.to_dict() == {
        "detail": "Provider must be an active clinician",
        "field": "provider_id",
    }
