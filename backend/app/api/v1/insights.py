"""
K12 Tutor - Teacher Insights API
Cohort-wide mastery per knowledge point
"""
from typing import Optional

from fastapi import APIRouter, Query

from app.api.deps import CurrentStaff, DbSession
from app.models.catalog import Subject
from app.schemas.report import HeatmapCell, HeatmapResponse
from app.services.auth import AuthService
from app.services.mastery import MasteryService

router = APIRouter(prefix="/insights", tags=["Insights"])


@router.get("/heatmap", response_model=HeatmapResponse)
async def get_heatmap(
    db: DbSession,
    current_user: CurrentStaff,
    subject: Optional[Subject] = None,
    grade: Optional[int] = Query(None, ge=1, le=12),
) -> HeatmapResponse:
    """Mastery of every attempted knowledge point across students, weakest first."""
    students = await AuthService(db).get_students(grade=grade)
    rows = await MasteryService(db).get_knowledge_point_heatmap(
        [s.id for s in students],
        subject=subject.value if subject else None,
        grade=grade,
    )
    return HeatmapResponse(
        students=len(students),
        items=[
            HeatmapCell(
                knowledge_point_id=kp.id,
                title=kp.title,
                subject=kp.subject,
                grade=kp.grade,
                correct=stat.correct,
                total=stat.total,
                ratio=stat.percent,
            )
            for kp, stat in rows
        ],
    )
