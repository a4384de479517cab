"""Laboratory catalogue and results: tests, panels, reference ranges, results."""

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import Gender, LabResultFlag, LabResultStatus


class LabTest(BaseModel):
    __tablename__ = "lab_tests"

    code = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    unit = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    reference_ranges = relationship("ReferenceRange", back_populates="test", cascade="all, delete-orphan")


class TestPanel(BaseModel):
    __tablename__ = "test_panels"

    code = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))


class ReferenceRange(BaseModel):
    __tablename__ = "reference_ranges"

    test_id = Column(Uuid(as_uuid=True), ForeignKey("lab_tests.id", ondelete="CASCADE"), nullable=False, index=True)
    # null gender = applies to everyone
    gender = Column(Enum(Gender, native_enum=False, length=20), nullable=True)
    # ages in months, inclusive; null = unbounded
    age_min = Column(Integer, nullable=True)
    age_max = Column(Integer, nullable=True)
    low_value = Column(Float, nullable=True)
    high_value = Column(Float, nullable=True)
    critical_low = Column(Float, nullable=True)
    critical_high = Column(Float, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    reference_text = Column(String(255), nullable=True)

    test = relationship("LabTest", back_populates="reference_ranges")


class LabResult(BaseModel):
    __tablename__ = "lab_results"

    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    test_id = Column(Uuid(as_uuid=True), ForeignKey("lab_tests.id"), nullable=False, index=True)
    technician_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    value = Column(String(100), nullable=False)
    numeric_value = Column(Float, nullable=True)
    unit = Column(String(50), nullable=True)
    flag = Column(Enum(LabResultFlag, native_enum=False, length=20), nullable=False, default=LabResultFlag.NORMAL)
    status = Column(
        Enum(LabResultStatus, native_enum=False, length=20),
        nullable=False,
        default=LabResultStatus.PRELIMINARY,
    )
    resulted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    comments = Column(Text, nullable=True)

    patient = relationship("Patient")
    test = relationship("LabTest")
