import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from database import Base


class Organization(Base):
    """Broker offices, selling companies' owners and partner institutions."""

    __tablename__ = "organizations"
    __table_args__ = {"extend_existing": True}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(160), nullable=False)
    type = Column(String(32), nullable=True, comment="bank, insurance, law_firm, financial, broker, seller")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
