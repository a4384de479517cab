from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ClaimStatus


class ClaimCreate(BaseModel):
    claim_number: str = Field(min_length=1, max_length=50)
    patient_id: UUID
    payer_name: str = Field(min_length=1, max_length=255)
    status: ClaimStatus = ClaimStatus.DRAFT
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    submitted_at: datetime | None = None
    denial_reason: str | None = None


class ClaimUpdate(BaseModel):
    claim_number: str | None = Field(None, min_length=1, max_length=50)
    patient_id: UUID | None = None
    payer_name: str | None = Field(None, min_length=1, max_length=255)
    status: ClaimStatus | None = None
    amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    submitted_at: datetime | None = None
    denial_reason: str | None = None


class ClaimOut(ClaimCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
