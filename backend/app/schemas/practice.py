"""
K12 Tutor - Practice Schemas
Pydantic schemas for the practice feed, answer submission and diagnostics
"""
import uuid
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from app.models.catalog import Subject
from app.schemas.catalog import QuestionPublic
from app.schemas.common import UTCDateTime
from app.schemas.plan import StudyPlanResponse


class PracticeMode(str, Enum):
    NORMAL = "normal"
    WRONG = "wrong"
    REVIEW = "review"


# ============================================================================
# Practice
# ============================================================================

class PracticeNextRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    subject: Subject = Subject.MATH
    grade: Annotated[int, Field(ge=1, le=12)] | None = None
    knowledge_point_id: uuid.UUID | None = None
    mode: PracticeMode = PracticeMode.NORMAL


class PracticeNextResponse(BaseModel):
    mode: PracticeMode
    question: QuestionPublic


class PracticeSubmitRequest(BaseModel):
    question_id: uuid.UUID
    answer: Annotated[str, Field(max_length=500)]
    reason: Annotated[str, Field(max_length=200)] | None = None


class ReviewState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stage: int
    next_review_at: UTCDateTime


class PracticeSubmitResponse(BaseModel):
    correct: bool
    answer: str
    explanation: str
    review: ReviewState


class ExplanationRequest(BaseModel):
    question_id: uuid.UUID


class ExplanationResponse(BaseModel):
    text: str
    visual: str
    analogy: str
    provider: str


# ============================================================================
# Diagnostic
# ============================================================================

class DiagnosticStartRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    subject: Subject = Subject.MATH
    grade: Annotated[int, Field(ge=1, le=12)] | None = None
    count: Annotated[int, Field(ge=1, le=50)] = 10


class DiagnosticStartResponse(BaseModel):
    subject: Subject
    grade: int
    questions: list[QuestionPublic]


class DiagnosticAnswerIn(BaseModel):
    question_id: uuid.UUID
    answer: Annotated[str, Field(max_length=500)]
    reason: Annotated[str, Field(max_length=200)] | None = None


class DiagnosticSubmitRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    subject: Subject
    grade: Annotated[int, Field(ge=1, le=12)]
    answers: Annotated[list[DiagnosticAnswerIn], Field(min_length=1)]


class KnowledgePointBreakdown(BaseModel):
    knowledge_point_id: uuid.UUID
    title: str
    total: int
    correct: int
    accuracy: int


class WrongReasonCount(BaseModel):
    reason: str
    count: int


class DiagnosticSubmitResponse(BaseModel):
    total: int
    correct: int
    accuracy: int
    plan: StudyPlanResponse
    breakdown: list[KnowledgePointBreakdown]
    wrong_reasons: list[WrongReasonCount]
