"""Schemas for company records, registry search and financial metrics."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CompanySchema(BaseModel):
    id: uuid.UUID
    name: str
    businessId: Optional[str] = None
    industry: Optional[str] = None
    registrationDate: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    postCode: Optional[str] = None
    city: Optional[str] = None
    countryCode: Optional[str] = None
    organizationId: Optional[uuid.UUID] = None
    enrichmentStatus: Optional[str] = None
    createdAt: Optional[datetime] = None


class CompanyListResponse(BaseModel):
    data: List[CompanySchema]


class CompanyUpsertRequest(BaseModel):
    name: str = Field(..., min_length=1)
    businessId: Optional[str] = None
    industry: Optional[str] = None
    registrationDate: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    postCode: Optional[str] = None
    city: Optional[str] = None
    countryCode: Optional[str] = "FI"


class CompanyResponse(BaseModel):
    data: CompanySchema
    created: bool = False


class RegistryAddressSchema(BaseModel):
    street: str = ""
    postCode: str = ""
    city: str = ""


class RegistryCompanySchema(BaseModel):
    """One public-registry hit; ``type`` and ``address`` fill the manual form."""

    name: str
    businessId: str
    registrationDate: Optional[str] = None
    type: Optional[str] = None
    address: Optional[RegistryAddressSchema] = None
    mainBusinessLine: Optional[str] = None
    website: Optional[str] = None


class CompanySearchResponse(BaseModel):
    data: List[RegistryCompanySchema]


class FinancialMetricSchema(BaseModel):
    id: uuid.UUID
    companyId: uuid.UUID
    fiscalYear: int
    revenue: Optional[float] = None
    operatingProfit: Optional[float] = None
    netProfit: Optional[float] = None
    totalAssets: Optional[float] = None
    equity: Optional[float] = None
    employees: Optional[int] = None
    source: Optional[str] = None


class ChartDatasetSchema(BaseModel):
    label: str
    data: List[Optional[float]]
    style: Dict[str, Any] = Field(default_factory=dict)


class ChartSchema(BaseModel):
    labels: List[str]
    datasets: List[ChartDatasetSchema]


class FinancialMetricListResponse(BaseModel):
    data: List[FinancialMetricSchema]
    chart: Optional[ChartSchema] = None
