from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import EncounterStatus


class Encounter(BaseModel):
    __tablename__ = "encounters"

    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(EncounterStatus, native_enum=False, length=30), nullable=False, default=EncounterStatus.PLANNED)
    encounter_type = Column(String(50), nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at = Column(DateTime(timezone=True), nullable=True)
    reason = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient")
    provider = relationship("User")
