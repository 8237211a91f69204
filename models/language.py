from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID

from database import Base


class Language(Base):
    __tablename__ = "languages"

    code = Column(String(8), primary_key=True)
    name = Column(String(64), nullable=False)
    native_name = Column(String(64), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    last_edited_by = Column(UUID(as_uuid=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
