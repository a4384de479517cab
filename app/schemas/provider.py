from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import Role


class ProviderCreate(BaseModel):
    """Staff account creation. Passwords are managed outside this API."""
    email: str = Field(min_length=3, max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Role
    is_active: bool = True
    phone: str | None = None
    specialty: str | None = None
    license_number: str | None = None


class ProviderUpdate(BaseModel):
    email: str | None = Field(None, min_length=3, max_length=255)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    role: Role | None = None
    is_active: bool | None = None
    phone: str | None = None
    specialty: str | None = None
    license_number: str | None = None


class ProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool
    phone: str | None
    specialty: str | None
    license_number: str | None
    created_at: datetime
    updated_at: datetime
