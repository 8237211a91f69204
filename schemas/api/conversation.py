"""Wire schemas for the onboarding advisor conversation."""

from __future__ import annotations

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

OptionType = Literal["single", "multi", "text_input"]
AnalysisType = Literal["quick", "comprehensive"]


class ConversationTurnSchema(BaseModel):
    role: Literal["user", "assistant", "cfo"]
    content: str
    timestamp: Optional[int] = Field(default=None, description="Epoch milliseconds.")


class OptionSchema(BaseModel):
    label: str
    value: str


class CollectedAnswerSchema(BaseModel):
    key: str
    value: str


class CollectedSchema(BaseModel):
    summary: str = ""
    answers: List[CollectedAnswerSchema] = Field(default_factory=list)


class RecommendationItemSchema(BaseModel):
    type: str
    title: str
    summary: str = ""
    amount: Optional[float] = None
    termMonths: Optional[int] = None
    guaranteesRequired: Optional[bool] = None
    costNotes: Optional[str] = None


class RecommendationSchema(BaseModel):
    items: List[RecommendationItemSchema] = Field(default_factory=list)
    comparison: Optional[str] = None


class ConversationRequest(BaseModel):
    locale: str = "fi"
    companyId: Optional[uuid.UUID] = None
    userMessage: str = ""
    selectedValues: List[str] = Field(default_factory=list)
    history: List[ConversationTurnSchema] = Field(default_factory=list)
    avoidQuestions: List[str] = Field(default_factory=list)
    provider: Optional[str] = None
    model: Optional[str] = None
    analysisType: Optional[AnalysisType] = None
    isRecommendationFollowUp: bool = False
    currentRecommendations: Optional[RecommendationSchema] = None


class ConversationResponse(BaseModel):
    nextQuestion: str = ""
    optionType: OptionType = "text_input"
    options: List[OptionSchema] = Field(default_factory=list)
    cfoGuidance: Optional[str] = None
    category: Optional[str] = None
    done: bool = False
    collected: Optional[CollectedSchema] = None
    recommendation: Optional[RecommendationSchema] = None
    updatedRecommendations: Optional[RecommendationSchema] = None
