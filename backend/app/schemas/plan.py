"""
K12 Tutor - Study Plan Schemas
"""
import uuid

from pydantic import BaseModel, ConfigDict

from app.models.catalog import Subject
from app.schemas.common import UTCDateTime


class StudyPlanItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    knowledge_point_id: uuid.UUID
    title: str = ""
    target_count: int
    due_date: UTCDateTime
    subject: Subject | None = None


class StudyPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    subject: Subject
    created_at: UTCDateTime
    items: list[StudyPlanItemResponse]


class StudyPlanOverview(BaseModel):
    """Plans for several subjects plus their items flattened in subject order."""
    plans: list[StudyPlanResponse]
    items: list[StudyPlanItemResponse]


class PlanRefreshRequest(BaseModel):
    """Omit the subject to refresh every subject the student studies."""
    subject: Subject | None = None
