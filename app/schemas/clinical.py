"""Schemas for patient-care records: dialysis, nephrology, encounters, medication orders."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import (
    CkdStage,
    DialysisStatus,
    EncounterStatus,
    MedicationOrderStatus,
    MedicationRoute,
    VisitStatus,
)


class DialysisSessionCreate(BaseModel):
    patient_id: UUID
    provider_id: UUID
    status: DialysisStatus = DialysisStatus.SCHEDULED
    start_time: datetime
    end_time: datetime
    machine_number: str | None = None
    access_type: str | None = None
    dialyzer: str | None = None
    blood_flow_rate: int | None = Field(None, ge=0)
    dialysate_flow_rate: int | None = Field(None, ge=0)
    ultrafiltration_volume: float | None = Field(None, ge=0)
    weight_pre: float | None = Field(None, gt=0)
    weight_post: float | None = Field(None, gt=0)
    notes: str | None = None


class DialysisSessionUpdate(BaseModel):
    patient_id: UUID | None = None
    provider_id: UUID | None = None
    status: DialysisStatus | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    machine_number: str | None = None
    access_type: str | None = None
    dialyzer: str | None = None
    blood_flow_rate: int | None = Field(None, ge=0)
    dialysate_flow_rate: int | None = Field(None, ge=0)
    ultrafiltration_volume: float | None = Field(None, ge=0)
    weight_pre: float | None = Field(None, gt=0)
    weight_post: float | None = Field(None, gt=0)
    notes: str | None = None


class DialysisSessionOut(DialysisSessionCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class NephrologyVisitCreate(BaseModel):
    patient_id: UUID
    provider_id: UUID
    status: VisitStatus = VisitStatus.SCHEDULED
    visit_date: datetime
    ckd_stage: CkdStage | None = None
    egfr: float | None = Field(None, ge=0)
    chief_complaint: str | None = None
    notes: str | None = None


class NephrologyVisitUpdate(BaseModel):
    patient_id: UUID | None = None
    provider_id: UUID | None = None
    status: VisitStatus | None = None
    visit_date: datetime | None = None
    ckd_stage: CkdStage | None = None
    egfr: float | None = Field(None, ge=0)
    chief_complaint: str | None = None
    notes: str | None = None


class NephrologyVisitOut(NephrologyVisitCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class EncounterCreate(BaseModel):
    patient_id: UUID
    provider_id: UUID
    status: EncounterStatus = EncounterStatus.PLANNED
    encounter_type: str | None = None
    start_at: datetime
    end_at: datetime | None = None
    reason: str | None = None
    notes: str | None = None


class EncounterUpdate(BaseModel):
    patient_id: UUID | None = None
    provider_id: UUID | None = None
    status: EncounterStatus | None = None
    encounter_type: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    reason: str | None = None
    notes: str | None = None


class EncounterOut(EncounterCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class MedicationOrderCreate(BaseModel):
    patient_id: UUID
    provider_id: UUID
    encounter_id: UUID | None = None
    medication_name: str = Field(min_length=1, max_length=255)
    dose: str = Field(min_length=1, max_length=100)
    route: MedicationRoute
    frequency: str = Field(min_length=1, max_length=100)
    status: MedicationOrderStatus = MedicationOrderStatus.ACTIVE
    start_date: datetime
    end_date: datetime | None = None
    instructions: str | None = None


class MedicationOrderUpdate(BaseModel):
    patient_id: UUID | None = None
    provider_id: UUID | None = None
    encounter_id: UUID | None = None
    medication_name: str | None = Field(None, min_length=1, max_length=255)
    dose: str | None = Field(None, min_length=1, max_length=100)
    route: MedicationRoute | None = None
    frequency: str | None = Field(None, min_length=1, max_length=100)
    status: MedicationOrderStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    instructions: str | None = None


class MedicationOrderOut(MedicationOrderCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
