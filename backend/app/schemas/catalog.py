"""
K12 Tutor - Catalog Schemas
Pydantic schemas for knowledge points and the question bank
"""
import uuid
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.catalog import DifficultyLevel, Subject
from app.schemas.common import UTCDateTime

Grade = Annotated[int, Field(ge=1, le=12)]


def reject_explicit_nulls(model: BaseModel) -> None:
    """Partial updates may omit a field but never clear it."""
    nulls = sorted(name for name in model.model_fields_set if getattr(model, name) is None)
    if nulls:
        raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")


# ============================================================================
# Knowledge Points
# ============================================================================

class KnowledgePointBase(BaseModel):
    subject: Subject
    grade: Grade
    title: Annotated[str, Field(min_length=1, max_length=200)]
    chapter: str = ""
    unit: str = ""
    display_order: int = 0


class KnowledgePointCreate(KnowledgePointBase):
    model_config = ConfigDict(use_enum_values=True)


class KnowledgePointUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    model_config = ConfigDict(use_enum_values=True)

    subject: Subject | None = None
    grade: Grade | None = None
    title: Annotated[str, Field(min_length=1, max_length=200)] | None = None
    chapter: str | None = None
    unit: str | None = None
    display_order: int | None = None

    @model_validator(mode="after")
    def no_nulls(self) -> "KnowledgePointUpdate":
        reject_explicit_nulls(self)
        return self


class KnowledgePointResponse(KnowledgePointBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: UTCDateTime | None = None


# ============================================================================
# Questions
# ============================================================================

class QuestionBase(BaseModel):
    knowledge_point_id: uuid.UUID
    stem: Annotated[str, Field(min_length=1)]
    options: list[str] = Field(default_factory=list)
    answer: Annotated[str, Field(min_length=1, max_length=500)]
    explanation: str = ""
    difficulty: DifficultyLevel = DifficultyLevel.MEDIUM


class QuestionCreate(QuestionBase):
    """Subject and grade default to the knowledge point's when omitted."""
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    subject: Subject | None = None
    grade: Grade | None = None

    @model_validator(mode="after")
    def answer_in_options(self) -> "QuestionCreate":
        if self.options and self.answer not in self.options:
            raise ValueError("Answer must be one of the options")
        return self

    def to_model_data(self) -> dict:
        return self.model_dump(exclude_none=True)


class QuestionUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    model_config = ConfigDict(use_enum_values=True)

    knowledge_point_id: uuid.UUID | None = None
    subject: Subject | None = None
    grade: Grade | None = None
    stem: Annotated[str, Field(min_length=1)] | None = None
    options: list[str] | None = None
    answer: Annotated[str, Field(min_length=1, max_length=500)] | None = None
    explanation: str | None = None
    difficulty: DifficultyLevel | None = None

    @model_validator(mode="after")
    def no_nulls(self) -> "QuestionUpdate":
        reject_explicit_nulls(self)
        return self


class QuestionResponse(QuestionBase):
    """Full question, answer included. Admin views only."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    subject: Subject
    grade: int


class QuestionPublic(BaseModel):
    """A question as shown to a student before answering."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    subject: Subject
    grade: int
    knowledge_point_id: uuid.UUID
    stem: str
    options: list[str]
    difficulty: DifficultyLevel


# ============================================================================
# Bulk Import
# ============================================================================

class QuestionImportRequest(BaseModel):
    questions: Annotated[list[QuestionCreate], Field(min_length=1, max_length=1000)]


class SkippedImport(BaseModel):
    index: int
    reason: str


class QuestionImportResponse(BaseModel):
    created: int
    skipped: list[SkippedImport]
    questions: list[QuestionResponse]
