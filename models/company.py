import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID

from database import Base
from models._metadata_proxy import JSONMetadataProxy


class Company(Base):
    """Business identity with registry address fields and enrichment metadata."""

    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    business_id = Column(String(32), index=True, nullable=True, comment="Y-tunnus / organisationsnummer")
    main_business_line = Column(String(255), nullable=True)
    registration_date = Column(String(32), nullable=True)
    website = Column(String(255), nullable=True)
    street = Column(String(255), nullable=True)
    post_code = Column(String(16), nullable=True)
    city = Column(String(120), nullable=True)
    country_code = Column(String(2), nullable=True, default="FI")
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    enrichment_status = Column(String(32), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    metadata = JSONMetadataProxy("metadata_json")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class FinancialMetric(Base):
    """One fiscal year of headline figures for a company."""

    __tablename__ = "financial_metrics"
    __table_args__ = (UniqueConstraint("company_id", "fiscal_year", name="uq_financial_metrics_company_year"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    fiscal_year = Column(Integer, nullable=False)
    revenue = Column(Float, nullable=True)
    operating_profit = Column(Float, nullable=True)
    net_profit = Column(Float, nullable=True)
    total_assets = Column(Float, nullable=True)
    equity = Column(Float, nullable=True)
    employees = Column(Integer, nullable=True)
    source = Column(String(32), nullable=True, comment="registry, document, manual")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
