from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import DialysisStatus


class DialysisSession(BaseModel):
    __tablename__ = "dialysis_sessions"

    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(DialysisStatus, native_enum=False, length=30),
        nullable=False,
        default=DialysisStatus.SCHEDULED,
    )
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    machine_number = Column(String(50), nullable=True)
    access_type = Column(String(50), nullable=True)
    dialyzer = Column(String(100), nullable=True)
    blood_flow_rate = Column(Integer, nullable=True)
    dialysate_flow_rate = Column(Integer, nullable=True)
    ultrafiltration_volume = Column(Float, nullable=True)
    weight_pre = Column(Float, nullable=True)
    weight_post = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient")
    provider = relationship("User")
