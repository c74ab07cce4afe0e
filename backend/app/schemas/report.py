"""
K12 Tutor - Report Schemas
Weekly reports and teacher heatmaps
"""
import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict

from app.models.catalog import Subject
from app.schemas.user import StudentSummary


class AccuracyStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    correct: int
    accuracy: int


class DailyAccuracyResponse(AccuracyStatsResponse):
    date: date


class WeakPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    subject: Subject
    ratio: int
    total: int


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str


class WeeklyReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student: StudentSummary
    stats: AccuracyStatsResponse
    previous_stats: AccuracyStatsResponse
    trend: list[DailyAccuracyResponse]
    weak_points: list[WeakPointResponse]
    suggestions: list[str]
    streak: int
    badges: list[BadgeResponse] = []


class HeatmapCell(BaseModel):
    knowledge_point_id: uuid.UUID
    title: str
    subject: Subject
    grade: int
    correct: int
    total: int
    ratio: int


class HeatmapResponse(BaseModel):
    students: int
    items: list[HeatmapCell]
