from sqlalchemy import Boolean, Column, Date, Enum, String, text

from app.models.base import BaseModel
from app.models.enums import Gender


class Patient(BaseModel):
    __tablename__ = "patients"

    mrn = Column(String(50), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(Enum(Gender, native_enum=False, length=20), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
