from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.deps import require_identity
from app.core.errors import NotFoundError, ValidationError
from app.core.security import Identity
from app.models.enums import Gender
from app.models.lab import LabTest
from app.models.patient import Patient
from app.schemas.lab import ReferenceRangeOut
from app.services.reference_ranges import resolve_reference_range
from app.services.store import SqlStore

router = APIRouter(prefix="/lab-tests", tags=["reference-ranges"])


@router.get("/{test_id}/reference-range", response_model=ReferenceRangeOut)
def get_applicable_reference_range(
    test_id: UUID,
    patient_id: UUID | None = Query(None),
    gender: Gender | None = Query(None),
    date_of_birth: date | None = Query(None),
    db: Session = Depends(get_db),
    _: Identity = Depends(require_identity),
):
    """Rango de referencia aplicable a un paciente (por id, o por sexo y fecha de nacimiento)."""
    store = SqlStore(db)
    if store.find_by_id(LabTest, test_id) is None:
        raise NotFoundError("Lab test not found", field="test_id")

    if patient_id is not None:
        patient = store.find_by_id(Patient, patient_id)
        if patient is None:
            raise NotFoundError("Patient not found", field="patient_id")
        gender, date_of_birth = patient.gender, patient.date_of_birth
    elif date_of_birth is None:
        raise ValidationError("Provide patient_id or date_of_birth", field="date_of_birth")

    reference_range = resolve_reference_range(store, test_id, gender, date_of_birth)
    if reference_range is None:
        raise NotFoundError("No applicable reference range")
    return reference_range
