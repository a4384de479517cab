import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func

from app.core.db import Base


class BaseModel(Base):
    """
    Base model: UUID id and the timestamps shared by every resource.
    """
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
