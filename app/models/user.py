from sqlalchemy import Boolean, Column, Enum, String, text

from app.models.base import BaseModel
from app.models.enums import Role


class User(BaseModel):
    """Staff account. Doctors and nurses double as providers."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(Enum(Role, native_enum=False, length=30), nullable=False, default=Role.RECEPTIONIST)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    phone = Column(String(50), nullable=True)
    specialty = Column(String(100), nullable=True)
    license_number = Column(String(100), nullable=True)
