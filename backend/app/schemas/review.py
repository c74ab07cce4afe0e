"""
K12 Tutor - Review Schemas
Due spaced-repetition reviews and the wrong-answer book
"""
import uuid

from pydantic import BaseModel, ConfigDict

from app.schemas.catalog import QuestionPublic, QuestionResponse
from app.schemas.common import UTCDateTime


class DueReviewItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question: QuestionPublic
    stage: int
    next_review_at: UTCDateTime


class DueReviewResponse(BaseModel):
    total: int
    items: list[DueReviewItem]


class WrongBookItem(BaseModel):
    """A question whose latest attempt was wrong, shown with its solution."""
    question: QuestionResponse
    last_answer: str
    last_reason: str | None = None
    last_attempt_at: UTCDateTime
    review_stage: int | None = None


class WrongBookResponse(BaseModel):
    total: int
    items: list[WrongBookItem]


class MemoryReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    question_id: uuid.UUID
    stage: int
    next_review_at: UTCDateTime
    last_reviewed_at: UTCDateTime | None = None
