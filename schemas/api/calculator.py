"""Schemas for the public calculators."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class FactoringInputs(BaseModel):
    monthlyInvoices: float = Field(..., ge=0, description="Average monthly B2B invoicing.")
    avgDays: float = Field(..., ge=0, description="Average customer payment time in days.")


class FactoringResultSchema(BaseModel):
    advancePct: int
    advance: int
    feesLow: int
    feesMid: int
    feesHigh: int
    freedWorkingCapital: int
    daysImproved: float


class CompanyPayload(BaseModel):
    name: Optional[str] = None
    business_id: Optional[str] = None
    mainBusinessLine: Optional[str] = None
    registrationDate: Optional[str] = None
    address: Optional[str] = None
    postCode: Optional[str] = None
    city: Optional[str] = None


class CalculatorSaveRequest(BaseModel):
    locale: str = "fi"
    sourcePage: Optional[str] = None
    calculatorType: Literal["factoring"] = "factoring"
    businessId: Optional[str] = None
    companyName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    inputs: FactoringInputs
    result: Optional[Dict[str, Any]] = Field(default=None, description="Client-side result; recomputed on save.")
    createCompany: bool = False
    companyPayload: Optional[CompanyPayload] = None


class CalculatorSaveResponse(BaseModel):
    success: bool = True
    id: uuid.UUID
    result: FactoringResultSchema
    companyId: Optional[uuid.UUID] = None


class CalcChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class CalcChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    context: Optional[Union[Dict[str, Any], str]] = Field(default=None, description="Current inputs and result.")
    history: List[CalcChatTurn] = Field(default_factory=list)
    locale: str = "fi"


class CalcChatResponse(BaseModel):
    text: str
