from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import MedicationOrderStatus, MedicationRoute


class MedicationOrder(BaseModel):
    __tablename__ = "medication_orders"

    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    encounter_id = Column(Uuid(as_uuid=True), ForeignKey("encounters.id", ondelete="SET NULL"), nullable=True, index=True)
    medication_name = Column(String(255), nullable=False)
    dose = Column(String(100), nullable=False)
    route = Column(Enum(MedicationRoute, native_enum=False, length=30), nullable=False)
    frequency = Column(String(100), nullable=False)
    status = Column(
        Enum(MedicationOrderStatus, native_enum=False, length=30),
        nullable=False,
        default=MedicationOrderStatus.ACTIVE,
    )
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    instructions = Column(Text, nullable=True)

    patient = relationship("Patient")
    provider = relationship("User")
    encounter = relationship("Encounter")
