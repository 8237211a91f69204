import uuid

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from database import Base


class FinancingNeed(Base):
    """Snapshot of an onboarding conversation's collected answers."""

    __tablename__ = "financing_needs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text, nullable=True)
    requirements = Column(JSON, nullable=False, default=dict)
    amount = Column(Float, nullable=True)
    currency = Column(String(3), nullable=True, default="EUR")
    purpose = Column(String(255), nullable=True)
    time_horizon = Column(String(64), nullable=True)
    urgency = Column(String(16), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class CalculatorLead(Base):
    __tablename__ = "calculator_leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    locale = Column(String(8), nullable=False, default="fi")
    source_page = Column(String(128), nullable=True)
    calculator_type = Column(String(32), nullable=False)
    business_id = Column(String(32), nullable=True)
    company_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(40), nullable=True)
    inputs = Column(JSON, nullable=False, default=dict)
    result = Column(JSON, nullable=False, default=dict)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
