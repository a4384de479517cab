from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import Gender, LabResultFlag, LabResultStatus


class LabTestCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    category: str | None = None
    unit: str | None = None
    is_active: bool = True


class LabTestUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)
    category: str | None = None
    unit: str | None = None
    is_active: bool | None = None


class LabTestOut(LabTestCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class TestPanelCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    is_active: bool = True


class TestPanelUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None


class TestPanelOut(TestPanelCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class ReferenceRangeCreate(BaseModel):
    test_id: UUID
    gender: Gender | None = None
    age_min: int | None = Field(None, ge=0)
    age_max: int | None = Field(None, ge=0)
    low_value: float | None = None
    high_value: float | None = None
    critical_low: float | None = None
    critical_high: float | None = None
    is_default: bool = False
    reference_text: str | None = None


class ReferenceRangeUpdate(BaseModel):
    test_id: UUID | None = None
    gender: Gender | None = None
    age_min: int | None = Field(None, ge=0)
    age_max: int | None = Field(None, ge=0)
    low_value: float | None = None
    high_value: float | None = None
    critical_low: float | None = None
    critical_high: float | None = None
    is_default: bool | None = None
    reference_text: str | None = None


class ReferenceRangeOut(ReferenceRangeCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class LabResultCreate(BaseModel):
    patient_id: UUID
    test_id: UUID
    value: str = Field(min_length=1, max_length=100)
    numeric_value: float | None = None
    unit: str | None = None
    status: LabResultStatus = LabResultStatus.PRELIMINARY
    comments: str | None = None


class LabResultUpdate(BaseModel):
    value: str | None = Field(None, min_length=1, max_length=100)
    numeric_value: float | None = None
    unit: str | None = None
    status: LabResultStatus | None = None
    comments: str | None = None


class LabResultOut(LabResultCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    technician_id: UUID | None
    flag: LabResultFlag
    resulted_at: datetime
    created_at: datetime
    updated_at: datetime
