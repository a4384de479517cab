from sqlalchemy import Column, DateTime, Enum, ForeignKey, Numeric, String, Text, Uuid

from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import ClaimStatus


class Claim(BaseModel):
    __tablename__ = "claims"

    claim_number = Column(String(50), unique=True, index=True, nullable=False)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    payer_name = Column(String(255), nullable=False)
    status = Column(Enum(ClaimStatus, native_enum=False, length=20), nullable=False, default=ClaimStatus.DRAFT)
    amount = Column(Numeric(12, 2), nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    denial_reason = Column(Text, nullable=True)

    patient = relationship("Patient")
