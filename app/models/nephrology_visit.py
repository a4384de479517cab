from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import CkdStage, VisitStatus


class NephrologyVisit(BaseModel):
    __tablename__ = "nephrology_visits"

    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(VisitStatus, native_enum=False, length=30), nullable=False, default=VisitStatus.SCHEDULED)
    visit_date = Column(DateTime(timezone=True), nullable=False, index=True)
    ckd_stage = Column(Enum(CkdStage, native_enum=False, length=20), nullable=True)
    egfr = Column(Float, nullable=True)
    chief_complaint = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient")
    provider = relationship("User")
